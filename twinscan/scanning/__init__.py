"""File scanning package for twinscan.

This package provides traversal and hashing utilities. It contains:

- DirWalker: Walks directory trees under exclusion rules and yields a
  FileHandle for every regular file.
- FileHasher: Computes partial (first K bytes) and full content digests
  through a FileSystem.
- DigestAlgorithm / select_digest: The pluggable digest algorithm, MD5 by
  default or SHA3-256 in paranoid mode.

Example:
    >>> from twinscan.scanning import DirWalker, FileHasher, select_digest
    >>> from twinscan.vfs import RealFileSystem
    >>>
    >>> fs = RealFileSystem()
    >>> walker = DirWalker(fs, [Path("/data")])
    >>> hasher = FileHasher(fs, select_digest(paranoid=False))
    >>> for handle in walker.walk():
    ...     print(handle.path, hasher.partial_digest(handle.path).hex())
"""

from .digest import DigestAlgorithm, select_digest
from .dir_walker import DirWalker
from .file_hasher import FileHasher

__all__ = ["DigestAlgorithm", "DirWalker", "FileHasher", "select_digest"]
