"""Partial and full file digests computed through a FileSystem.

This module provides the FileHasher class. It never caches: remembering which
digests a file already has is the catalog's job, which is what guarantees a
file is fully read at most once.

Example:
    >>> from twinscan.scanning import FileHasher
    >>> from twinscan.scanning.digest import select_digest
    >>> from twinscan.vfs import RealFileSystem
    >>> hasher = FileHasher(RealFileSystem(), select_digest())
    >>> hasher.full_digest(Path("/path/to/file.txt")).hex()
"""

from pathlib import PurePath
from typing import Dict

from twinscan.vfs import FileSystem

from .digest import DigestAlgorithm

# Number of leading bytes covered by a partial digest
PARTIAL_DIGEST_BYTES = 32

# Buffer size for chunked file reading (8KB)
CHUNK_SIZE = 8192


class FileHasher:
    """Computes partial and full digests of files with one fixed algorithm.

    Each call opens the file, reads what it needs and closes it again before
    returning; no file handle outlives a call. Full digests stream the file in
    ``chunk_size`` pieces so memory use does not depend on file size.

    Read failures are not swallowed: the OSError propagates so the caller can
    decide what the failure means for that file.

    Attributes:
        _partial_count: Number of partial digests computed.
        _full_count: Number of full digests computed.

    Example:
        >>> hasher = FileHasher(fs, select_digest(paranoid=True))
        >>> hasher.partial_digest(Path("a.bin")) == hasher.partial_digest(Path("b.bin"))
        >>> stats = hasher.get_stats()
        >>> print(f"Partial: {stats['partial']}, Full: {stats['full']}")
    """

    def __init__(
        self,
        filesystem: FileSystem,
        algorithm: DigestAlgorithm,
        partial_size: int = PARTIAL_DIGEST_BYTES,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        """Initialize the FileHasher.

        Args:
            filesystem: FileSystem used to open files.
            algorithm: Digest algorithm, held for the hasher's lifetime.
            partial_size: Leading bytes covered by a partial digest.
            chunk_size: Read size used while streaming full digests.

        Raises:
            ValueError: If partial_size or chunk_size is not positive.
        """
        if partial_size <= 0:
            raise ValueError(f"partial_size must be positive, got {partial_size}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self._filesystem = filesystem
        self._algorithm = algorithm
        self._partial_size = partial_size
        self._chunk_size = chunk_size
        self._partial_count: int = 0
        self._full_count: int = 0

    @property
    def algorithm(self) -> DigestAlgorithm:
        return self._algorithm

    @property
    def partial_size(self) -> int:
        return self._partial_size

    def partial_digest(self, path: PurePath) -> bytes:
        """Digest the first ``partial_size`` bytes of a file.

        Files shorter than ``partial_size`` are digested whole.

        Args:
            path: File to read.

        Returns:
            The digest bytes.

        Raises:
            OSError: If the file cannot be opened or read.
        """
        hasher = self._algorithm.new()
        remaining = self._partial_size
        with self._filesystem.open_file(path) as f:
            while remaining > 0:
                chunk = f.read(remaining)
                if not chunk:
                    break
                hasher.update(chunk)
                remaining -= len(chunk)

        self._partial_count += 1
        return hasher.digest()

    def full_digest(self, path: PurePath) -> bytes:
        """Digest the entire content of a file, reading it in chunks.

        Args:
            path: File to read.

        Returns:
            The digest bytes.

        Raises:
            OSError: If the file cannot be opened or a read fails mid-stream.
        """
        hasher = self._algorithm.new()
        with self._filesystem.open_file(path) as f:
            while True:
                chunk = f.read(self._chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)

        self._full_count += 1
        return hasher.digest()

    def get_stats(self) -> Dict[str, int]:
        """Get digest counters for reporting.

        Returns:
            Dictionary containing:
            - 'partial': Number of partial digests computed
            - 'full': Number of full digests computed
        """
        return {
            "partial": self._partial_count,
            "full": self._full_count,
        }

    def reset_stats(self) -> None:
        """Reset the digest counters."""
        self._partial_count = 0
        self._full_count = 0
