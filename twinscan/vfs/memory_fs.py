"""In-memory FileSystem for deterministic, I/O-free tests.

MemoryFileSystem keeps a tree of nodes addressed by POSIX paths. Hard links
are modelled by storing the same node under several names, so they share one
PhysicalIdentity exactly as on a real disk. Directories added with an explicit
``device`` behave like mount points: everything created beneath them inherits
that device, and hard links across devices fail with EXDEV.

Example:
    >>> fs = MemoryFileSystem()
    >>> fs.add_file("/a/x", b"AAAA")
    >>> fs.make_hard_link("/a/y", "/a/x")
    >>> fs.stat("/a/x").identity == fs.stat("/a/y").identity
    True
"""

import errno
import io
import os
import posixpath
from collections import Counter
from pathlib import PurePosixPath
from typing import BinaryIO, Dict, Iterator, Optional, Union

from twinscan.models import FileMetadata, FileType, PhysicalIdentity

from .base import FileSystem, PathLike

# Same limit Linux applies before giving up with ELOOP
_MAX_SYMLINK_DEPTH = 40


def _os_error(error_class, code: int, path) -> OSError:
    return error_class(code, os.strerror(code), str(path))


class _Node:
    """A file, directory, symlink or special file."""

    def __init__(
        self,
        file_type: FileType,
        inode: int,
        device: int,
        content: bytes = b"",
        target: Optional[PurePosixPath] = None,
        mtime: float = 0.0,
    ) -> None:
        self.file_type = file_type
        self.inode = inode
        self.device = device
        self.content = content
        self.target = target
        self.mtime = mtime
        self.children: Dict[str, "_Node"] = {}
        self.accessible = True
        self.fail_after: Optional[int] = None

    def metadata(self) -> FileMetadata:
        if self.file_type is FileType.FILE:
            size = len(self.content)
        elif self.file_type is FileType.SYMLINK:
            size = len(str(self.target))
        else:
            size = 0
        return FileMetadata(
            size=size,
            mtime=self.mtime,
            file_type=self.file_type,
            identity=PhysicalIdentity(self.device, self.inode),
        )


class _FailingStream(io.RawIOBase):
    """Binary stream that serves ``content`` up to ``fail_after`` bytes, then fails with EIO."""

    def __init__(self, content: bytes, fail_after: int) -> None:
        super().__init__()
        self._content = content
        self._fail_after = fail_after
        self._position = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._position >= self._fail_after:
            raise OSError(errno.EIO, os.strerror(errno.EIO))
        end = min(self._position + len(buffer), self._fail_after, len(self._content))
        data = self._content[self._position:end]
        buffer[: len(data)] = data
        self._position = end
        return len(data)


class MemoryFileSystem(FileSystem):
    """FileSystem double with the same observable behaviour as RealFileSystem.

    Besides the FileSystem operations it offers builder helpers (add_dir,
    add_file, add_symlink, add_special, alias_dir), fault injection
    (deny_access, fail_reads) and per-path open counters (open_count).

    Args:
        device: Device id of the root directory.
    """

    def __init__(self, device: int = 1) -> None:
        self._next_inode = 1
        self._root = self._new_node(FileType.DIR, device)
        self._open_counts: Counter = Counter()

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def add_dir(self, path: PathLike, device: Optional[int] = None) -> PurePosixPath:
        """Create a directory and any missing parents.

        Args:
            path: Directory to create.
            device: Optional device id, turning the directory into a mount point.

        Returns:
            The normalized path.
        """
        normalized = self._normalize(path)
        self._make_dirs(normalized, device)
        return normalized

    def add_file(
        self,
        path: PathLike,
        content: Union[bytes, str] = b"",
        mtime: float = 0.0,
        device: Optional[int] = None,
    ) -> PurePosixPath:
        """Create a regular file, creating missing parent directories."""
        if isinstance(content, str):
            content = content.encode("utf-8")
        normalized = self._normalize(path)
        parent = self._make_dirs(normalized.parent)
        node = self._new_node(
            FileType.FILE,
            device if device is not None else parent.device,
            content=bytes(content),
            mtime=mtime,
        )
        self._attach(parent, normalized, node)
        return normalized

    def add_symlink(self, path: PathLike, target: PathLike) -> PurePosixPath:
        """Create a symlink. Relative targets resolve against the link's directory."""
        normalized = self._normalize(path)
        parent = self._make_dirs(normalized.parent)
        node = self._new_node(FileType.SYMLINK, parent.device, target=PurePosixPath(target))
        self._attach(parent, normalized, node)
        return normalized

    def add_special(self, path: PathLike) -> PurePosixPath:
        """Create a non-regular, non-directory object (think FIFO or socket)."""
        normalized = self._normalize(path)
        parent = self._make_dirs(normalized.parent)
        self._attach(parent, normalized, self._new_node(FileType.OTHER, parent.device))
        return normalized

    def alias_dir(self, new_path: PathLike, existing_path: PathLike) -> PurePosixPath:
        """Make ``new_path`` another name for an existing directory.

        Real systems rarely allow directory hard links; this exists to reproduce
        the cycles they create.
        """
        node = self._lookup(existing_path, follow_final=False)
        if node.file_type is not FileType.DIR:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, existing_path)
        normalized = self._normalize(new_path)
        self._attach(self._make_dirs(normalized.parent), normalized, node)
        return normalized

    def deny_access(self, path: PathLike) -> None:
        """Make ``path`` unreadable: listing, opening and entering it fail."""
        self._lookup(path, follow_final=False).accessible = False

    def fail_reads(self, path: PathLike, after: int = 0) -> None:
        """Make reads of the file at ``path`` fail with EIO.

        Args:
            path: File to break.
            after: Byte offset up to which reads still succeed. Every open
                stream fails once it reaches this offset.
        """
        self._lookup(path).fail_after = after

    def open_count(self, path: PathLike) -> int:
        """Number of successful open_file calls made with ``path``."""
        return self._open_counts[self._normalize(path)]

    # ------------------------------------------------------------------
    # FileSystem operations
    # ------------------------------------------------------------------

    def list_dir(self, path: PathLike) -> Iterator[PurePosixPath]:
        node = self._lookup(path)
        if node.file_type is not FileType.DIR:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        if not node.accessible:
            raise _os_error(PermissionError, errno.EACCES, path)
        base = self._normalize(path)
        return iter([base / name for name in node.children])

    def stat(self, path: PathLike) -> FileMetadata:
        return self._lookup(path).metadata()

    def lstat(self, path: PathLike) -> FileMetadata:
        return self._lookup(path, follow_final=False).metadata()

    def read_link(self, path: PathLike) -> PurePosixPath:
        node = self._lookup(path, follow_final=False)
        if node.file_type is not FileType.SYMLINK:
            raise _os_error(OSError, errno.EINVAL, path)
        return node.target

    def open_file(self, path: PathLike) -> BinaryIO:
        node = self._lookup(path)
        if node.file_type is FileType.DIR:
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        if node.file_type is not FileType.FILE:
            raise _os_error(OSError, errno.EINVAL, path)
        if not node.accessible:
            raise _os_error(PermissionError, errno.EACCES, path)

        self._open_counts[self._normalize(path)] += 1
        if node.fail_after is not None:
            return io.BufferedReader(_FailingStream(node.content, node.fail_after))
        return io.BytesIO(node.content)

    def remove_file(self, path: PathLike) -> None:
        normalized = self._normalize(path)
        parent = self._lookup(normalized.parent)
        if parent.file_type is not FileType.DIR:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        node = parent.children.get(normalized.name)
        if node is None:
            raise _os_error(FileNotFoundError, errno.ENOENT, path)
        if node.file_type is FileType.DIR:
            raise _os_error(IsADirectoryError, errno.EISDIR, path)
        if not parent.accessible:
            raise _os_error(PermissionError, errno.EACCES, path)
        del parent.children[normalized.name]

    def make_hard_link(self, new_path: PathLike, existing_path: PathLike) -> None:
        node = self._lookup(existing_path, follow_final=False)
        if node.file_type is FileType.DIR:
            raise _os_error(PermissionError, errno.EPERM, existing_path)

        normalized = self._normalize(new_path)
        parent = self._lookup(normalized.parent)
        if parent.file_type is not FileType.DIR:
            raise _os_error(NotADirectoryError, errno.ENOTDIR, new_path)
        if normalized.name in parent.children:
            raise _os_error(FileExistsError, errno.EEXIST, new_path)
        if not parent.accessible:
            raise _os_error(PermissionError, errno.EACCES, new_path)
        if parent.device != node.device:
            raise _os_error(OSError, errno.EXDEV, new_path)
        parent.children[normalized.name] = node

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize(path: PathLike) -> PurePosixPath:
        return PurePosixPath(posixpath.normpath(posixpath.join("/", str(path))))

    def _new_node(self, file_type: FileType, device: int, **kwargs) -> _Node:
        node = _Node(file_type, self._next_inode, device, **kwargs)
        self._next_inode += 1
        return node

    @staticmethod
    def _attach(parent: _Node, path: PurePosixPath, node: _Node) -> None:
        if path.name in parent.children:
            raise _os_error(FileExistsError, errno.EEXIST, path)
        parent.children[path.name] = node

    def _make_dirs(self, path: PurePosixPath, device: Optional[int] = None) -> _Node:
        node = self._root
        parts = path.parts[1:]
        for index, name in enumerate(parts):
            child = node.children.get(name)
            if child is None:
                is_final = index == len(parts) - 1
                child_device = device if is_final and device is not None else node.device
                child = self._new_node(FileType.DIR, child_device)
                node.children[name] = child
            elif child.file_type is not FileType.DIR:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
            node = child
        return node

    def _lookup(self, path: PathLike, follow_final: bool = True, _depth: int = 0) -> _Node:
        normalized = self._normalize(path)
        parts = normalized.parts[1:]
        node = self._root
        for index, name in enumerate(parts):
            if node.file_type is not FileType.DIR:
                raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
            if not node.accessible:
                raise _os_error(PermissionError, errno.EACCES, path)
            child = node.children.get(name)
            if child is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, path)

            is_final = index == len(parts) - 1
            if child.file_type is FileType.SYMLINK and (follow_final or not is_final):
                if _depth >= _MAX_SYMLINK_DEPTH:
                    raise _os_error(OSError, errno.ELOOP, path)
                link_dir = PurePosixPath("/", *parts[:index])
                child = self._lookup(link_dir / child.target, True, _depth + 1)
            node = child
        return node
