"""
FileType enum for classifying filesystem objects.

The walker relies on this classification to decide what to do with each
directory entry:
1. FILE - Regular file, candidate for deduplication
2. DIR - Directory, traversed unless excluded
3. SYMLINK - Symbolic link, never followed
4. OTHER - Sockets, FIFOs, block and character devices
"""

import stat
from enum import Enum


class FileType(Enum):
    """Kinds of filesystem objects exposed through the FileSystem interface."""
    FILE = "file"          # Regular file
    DIR = "dir"            # Directory
    SYMLINK = "symlink"    # Symbolic link (only visible through lstat)
    OTHER = "other"        # fifo, socket, device, ...

    @classmethod
    def from_mode(cls, mode: int) -> "FileType":
        """Map an ``st_mode`` value to a FileType."""
        if stat.S_ISREG(mode):
            return cls.FILE
        if stat.S_ISDIR(mode):
            return cls.DIR
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        return cls.OTHER
