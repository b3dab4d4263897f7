"""Filesystem interface shared by the real and in-memory implementations.

The DirWalker, FileHasher and FileCatalog only ever touch the disk through a
FileSystem. Implementations report failures with the same built-in OSError
subclasses the operating system raises, so callers handle a RealFileSystem
and a MemoryFileSystem identically:

- FileNotFoundError: path (or symlink target) missing
- PermissionError: path not accessible
- NotADirectoryError / IsADirectoryError: wrong kind of object
- FileExistsError: hard link destination already present
- OSError(errno.EXDEV): hard link across devices
- OSError(errno.EINVAL): read_link on a non-link, open_file on a special file
"""

from abc import ABC, abstractmethod
from pathlib import PurePath
from typing import BinaryIO, Iterator, Union

from twinscan.models import FileMetadata

PathLike = Union[str, PurePath]


class FileSystem(ABC):
    """Operations the scanner requires from a filesystem."""

    @abstractmethod
    def list_dir(self, path: PathLike) -> Iterator[PurePath]:
        """List the immediate children of a directory.

        Failures to open the directory are raised by this call itself, not
        deferred to the first iteration. Recursion is left to the caller.

        Args:
            path: Directory to list.

        Returns:
            Iterator over ``path / name`` for each child, in enumeration order.

        Raises:
            FileNotFoundError: If ``path`` does not exist.
            NotADirectoryError: If ``path`` is not a directory.
            PermissionError: If ``path`` cannot be listed.
        """

    @abstractmethod
    def stat(self, path: PathLike) -> FileMetadata:
        """Get metadata for ``path``, following symlinks."""

    @abstractmethod
    def lstat(self, path: PathLike) -> FileMetadata:
        """Get metadata for ``path`` itself, without following a final symlink."""

    @abstractmethod
    def read_link(self, path: PathLike) -> PurePath:
        """Return the target of a symlink.

        Raises:
            OSError: With ``errno.EINVAL`` if ``path`` is not a symlink.
        """

    @abstractmethod
    def open_file(self, path: PathLike) -> BinaryIO:
        """Open a regular file (symlinks followed) for binary reading.

        The caller owns the returned stream and must close it.

        Raises:
            IsADirectoryError: If ``path`` resolves to a directory.
            OSError: With ``errno.EINVAL`` for any other non-regular file.
        """

    @abstractmethod
    def remove_file(self, path: PathLike) -> None:
        """Delete a file (or the symlink itself).

        Raises:
            FileNotFoundError: If ``path`` is missing.
            IsADirectoryError: If ``path`` is a directory.
            PermissionError: If the entry cannot be removed.
        """

    @abstractmethod
    def make_hard_link(self, new_path: PathLike, existing_path: PathLike) -> None:
        """Create ``new_path`` as a hard link to ``existing_path``.

        Raises:
            FileNotFoundError: If ``existing_path`` is missing.
            FileExistsError: If ``new_path`` already exists.
            OSError: With ``errno.EXDEV`` if both paths live on different devices.
        """
