"""Pluggable digest algorithms.

Exactly one algorithm is active for a whole scan: the fast default (MD5) or,
with ``--paranoid``, SHA3-256. Both come from :mod:`hashlib`.

Example:
    >>> from twinscan.scanning.digest import select_digest
    >>> algorithm = select_digest(paranoid=False)
    >>> algorithm.name
    'md5'
    >>> len(algorithm.digest(b"AAAA"))
    16
"""

import hashlib

DEFAULT_DIGEST = "md5"
PARANOID_DIGEST = "sha3_256"


class DigestAlgorithm:
    """A deterministic function from bytes to a fixed-size digest.

    Args:
        name: Any algorithm name accepted by :func:`hashlib.new`.

    Raises:
        ValueError: If hashlib does not know the algorithm.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        # Fails early for unknown names
        self._digest_size = hashlib.new(name).digest_size

    @property
    def name(self) -> str:
        return self._name

    @property
    def digest_size(self) -> int:
        """Digest length in bytes."""
        return self._digest_size

    def new(self):
        """Return a fresh incremental hasher (``update()`` / ``digest()``)."""
        return hashlib.new(self._name)

    def digest(self, data: bytes) -> bytes:
        """Digest a complete byte string."""
        hasher = self.new()
        hasher.update(data)
        return hasher.digest()

    def __repr__(self) -> str:
        return f"DigestAlgorithm({self._name!r})"


def select_digest(paranoid: bool = False) -> DigestAlgorithm:
    """Pick the digest algorithm for a run.

    Args:
        paranoid: Use the cryptographically stronger SHA3-256 instead of MD5.

    Returns:
        The DigestAlgorithm to hold for the rest of the run.
    """
    return DigestAlgorithm(PARANOID_DIGEST if paranoid else DEFAULT_DIGEST)
