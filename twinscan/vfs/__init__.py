"""Filesystem abstraction package for twinscan.

Traversal and hashing code talks to a FileSystem instead of ``os`` directly:

- FileSystem: Abstract interface (list, stat, read, link, unlink).
- RealFileSystem: Implementation backed by the operating system.
- MemoryFileSystem: In-memory double used by the test suite.

Example:
    >>> from twinscan.vfs import MemoryFileSystem
    >>> fs = MemoryFileSystem()
    >>> fs.add_file("/data/a.txt", b"hello")
    >>> list(fs.list_dir("/data"))
    [PurePosixPath('/data/a.txt')]
"""

from .base import FileSystem
from .memory_fs import MemoryFileSystem
from .real_fs import RealFileSystem

__all__ = ["FileSystem", "MemoryFileSystem", "RealFileSystem"]
