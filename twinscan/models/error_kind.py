"""
ErrorKind enum for the failures a scan can run into.

None of these abort a scan. Each one is attached to a ScanIssue so that the
affected directory or file can be reported while the rest of the run carries on.
"""

import errno
from enum import Enum


class ErrorKind(Enum):
    """Categories of per-path failures recorded during a scan."""
    NOT_FOUND = "not_found"                        # Path vanished or never existed
    PERMISSION_DENIED = "permission_denied"        # EACCES / EPERM
    CROSS_DEVICE_LINK = "cross_device_link"        # Hard link across devices (EXDEV)
    BROKEN_SYMLINK = "broken_symlink"              # Link whose target is missing
    READ_FAILURE = "read_failure"                  # I/O error while hashing
    METADATA_UNAVAILABLE = "metadata_unavailable"  # stat failed or returned the wrong type

    @classmethod
    def from_os_error(cls, error: OSError, default: "ErrorKind") -> "ErrorKind":
        """Classify an OSError, falling back to ``default`` for anything unrecognised.

        Args:
            error: The exception raised by a FileSystem operation.
            default: Kind to use when the error does not map to a specific kind.

        Returns:
            The matching ErrorKind.
        """
        if isinstance(error, FileNotFoundError):
            return cls.NOT_FOUND
        if isinstance(error, PermissionError):
            return cls.PERMISSION_DENIED
        if error.errno == errno.EXDEV:
            return cls.CROSS_DEVICE_LINK
        return default
