"""FileSystem implementation backed by the operating system."""

import errno
import os
from pathlib import Path
from typing import BinaryIO, Iterator

from twinscan.models import FileMetadata, FileType, PhysicalIdentity

from .base import FileSystem, PathLike


def _to_metadata(stat_result: os.stat_result) -> FileMetadata:
    return FileMetadata(
        size=stat_result.st_size,
        mtime=stat_result.st_mtime,
        file_type=FileType.from_mode(stat_result.st_mode),
        identity=PhysicalIdentity(stat_result.st_dev, stat_result.st_ino),
    )


class RealFileSystem(FileSystem):
    """Thin adapter over ``os`` calls. Paths are returned as ``pathlib.Path``."""

    def list_dir(self, path: PathLike) -> Iterator[Path]:
        # scandir raises here, before the generator starts
        entries = os.scandir(path)
        return self._iter_entries(Path(path), entries)

    @staticmethod
    def _iter_entries(parent: Path, entries) -> Iterator[Path]:
        with entries:
            for entry in entries:
                yield parent / entry.name

    def stat(self, path: PathLike) -> FileMetadata:
        return _to_metadata(os.stat(path))

    def lstat(self, path: PathLike) -> FileMetadata:
        return _to_metadata(os.lstat(path))

    def read_link(self, path: PathLike) -> Path:
        return Path(os.readlink(path))

    def open_file(self, path: PathLike) -> BinaryIO:
        file_type = FileType.from_mode(os.stat(path).st_mode)
        if file_type is FileType.DIR:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
        if file_type is not FileType.FILE:
            raise OSError(errno.EINVAL, "Not a regular file", str(path))
        return open(path, "rb")

    def remove_file(self, path: PathLike) -> None:
        if FileType.from_mode(os.lstat(path).st_mode) is FileType.DIR:
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), str(path))
        os.unlink(path)

    def make_hard_link(self, new_path: PathLike, existing_path: PathLike) -> None:
        os.link(existing_path, new_path)
