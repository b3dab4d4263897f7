"""Directory traversal under exclusion rules.

This module provides the DirWalker class, which enumerates every regular file
beneath a list of roots using only the FileSystem interface.

Example:
    >>> from twinscan.scanning import DirWalker
    >>> from twinscan.vfs import RealFileSystem
    >>> walker = DirWalker(
    ...     RealFileSystem(),
    ...     [Path("/data")],
    ...     excluded_dirs=[Path("/data/tmp")],
    ...     excluded_patterns=[r"\\.swp$"],
    ... )
    >>> for handle in walker.walk():
    ...     print(handle.path, handle.size)
"""

import logging
import os
import re
from pathlib import PurePath
from typing import Dict, Iterable, Iterator, List, Optional, Pattern, Set, Tuple

from twinscan.models import (
    ErrorKind,
    FileHandle,
    FileMetadata,
    FileType,
    PhysicalIdentity,
    ScanIssue,
)
from twinscan.observers import ScanObserver
from twinscan.vfs import FileSystem

logger = logging.getLogger(__name__)


def _normalize(path) -> str:
    return os.path.normpath(os.fspath(path))


class DirWalker:
    """Walks directory trees and yields a FileHandle for every regular file.

    Each directory entry is classified with ``lstat`` so symlinks are seen as
    symlinks and never followed. Directories are entered at most once per walk,
    keyed by their (device, inode) identity, which protects against directory
    hard-link cycles and overlapping roots.

    Errors never stop the walk: a directory that cannot be listed, or an entry
    that cannot be inspected, is recorded as a ScanIssue and the walk moves on
    to its siblings and to the remaining roots.

    Attributes:
        _errors: ScanIssues recorded during walks.
        _stats: Counters for directories, files, exclusions, symlinks, specials.

    Example:
        >>> walker = DirWalker(fs, ["/a", "/b"], excluded_dirs=["/a/tmp"])
        >>> handles = walker.walk_all()
        >>> print(walker.get_stats())
    """

    def __init__(
        self,
        filesystem: FileSystem,
        roots: Iterable,
        excluded_dirs: Iterable = (),
        excluded_patterns: Iterable[str] = (),
        observer: Optional[ScanObserver] = None,
    ) -> None:
        """Initialize the DirWalker.

        Args:
            filesystem: FileSystem to traverse.
            roots: Files or directories to walk, in order.
            excluded_dirs: Exact paths skipped together with everything below them.
            excluded_patterns: Regular expressions searched in the base filename
                of every regular file; matching files are skipped.
            observer: Optional ScanObserver notified of walk errors.

        Raises:
            ValueError: If an excluded pattern is not a valid regular expression.
        """
        self._filesystem = filesystem
        self._roots: List[PurePath] = [
            PurePath(root) if isinstance(root, str) else root for root in roots
        ]
        self._excluded_dirs: Set[str] = {_normalize(path) for path in excluded_dirs}
        self._patterns: List[Pattern[str]] = []
        for pattern in excluded_patterns:
            try:
                self._patterns.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"Invalid exclude pattern {pattern!r}: {e}") from e
        self._observer = observer if observer is not None else ScanObserver()
        self._errors: List[ScanIssue] = []
        self._stats: Dict[str, int] = self._empty_stats()

    def walk(self) -> Iterator[FileHandle]:
        """Lazily yield every regular file beneath the roots.

        Order follows filesystem enumeration order within each directory,
        depth first, with roots visited in the order they were given.

        Yields:
            FileHandle for each regular file that survives the exclusion rules.
        """
        visited_dirs: Set[PhysicalIdentity] = set()
        for root in self._roots:
            yield from self._walk_root(root, visited_dirs)

    def walk_all(self) -> List[FileHandle]:
        """Walk all roots and return the handles as a list."""
        return list(self.walk())

    def _walk_root(
        self, root: PurePath, visited_dirs: Set[PhysicalIdentity]
    ) -> Iterator[FileHandle]:
        if self._is_excluded_path(root):
            self._stats["excluded"] += 1
            logger.debug(f"Root is excluded: {root}")
            return

        # Roots are named explicitly, so a symlinked root is followed
        try:
            metadata = self._filesystem.stat(root)
        except OSError as e:
            kind = ErrorKind.from_os_error(e, ErrorKind.METADATA_UNAVAILABLE)
            if kind is ErrorKind.NOT_FOUND and self._is_symlink(root):
                kind = ErrorKind.BROKEN_SYMLINK
            self._report(root, kind, e)
            return

        if metadata.file_type is FileType.FILE:
            handle = self._accept_file(root, metadata)
            if handle is not None:
                yield handle
            return

        if metadata.file_type is not FileType.DIR:
            self._stats["special"] += 1
            return

        stack: List[Tuple[PurePath, Iterator[PurePath]]] = []
        self._enter_dir(root, metadata, visited_dirs, stack)

        while stack:
            dir_path, children = stack[-1]
            try:
                child = next(children)
            except StopIteration:
                stack.pop()
                continue
            except OSError as e:
                # Listing broke off halfway; keep what was already yielded
                self._report(dir_path, ErrorKind.from_os_error(e, ErrorKind.METADATA_UNAVAILABLE), e)
                stack.pop()
                continue

            try:
                child_metadata = self._filesystem.lstat(child)
            except OSError as e:
                self._report(child, ErrorKind.from_os_error(e, ErrorKind.METADATA_UNAVAILABLE), e)
                continue

            if child_metadata.file_type is FileType.DIR:
                if self._is_excluded_path(child):
                    self._stats["excluded"] += 1
                    logger.debug(f"Skipping excluded folder: {child}")
                    continue
                self._enter_dir(child, child_metadata, visited_dirs, stack)
            elif child_metadata.file_type is FileType.FILE:
                handle = self._accept_file(child, child_metadata)
                if handle is not None:
                    yield handle
            elif child_metadata.file_type is FileType.SYMLINK:
                self._stats["symlinks"] += 1
            else:
                self._stats["special"] += 1

    def _enter_dir(
        self,
        path: PurePath,
        metadata: FileMetadata,
        visited_dirs: Set[PhysicalIdentity],
        stack: List[Tuple[PurePath, Iterator[PurePath]]],
    ) -> None:
        if metadata.identity in visited_dirs:
            logger.debug(f"Directory {path} already visited as {metadata.identity}")
            return
        visited_dirs.add(metadata.identity)

        try:
            children = self._filesystem.list_dir(path)
        except OSError as e:
            self._report(path, ErrorKind.from_os_error(e, ErrorKind.METADATA_UNAVAILABLE), e)
            return

        self._stats["directories"] += 1
        stack.append((path, children))

    def _accept_file(self, path: PurePath, metadata: FileMetadata) -> Optional[FileHandle]:
        if self._is_excluded_path(path) or self._matches_pattern(path):
            self._stats["excluded"] += 1
            logger.debug(f"Skipping excluded file: {path}")
            return None
        self._stats["files"] += 1
        return FileHandle.from_metadata(path, metadata)

    def _is_excluded_path(self, path) -> bool:
        return bool(self._excluded_dirs) and _normalize(path) in self._excluded_dirs

    def _matches_pattern(self, path) -> bool:
        name = os.path.basename(_normalize(path))
        return any(pattern.search(name) for pattern in self._patterns)

    def _is_symlink(self, path) -> bool:
        try:
            return self._filesystem.lstat(path).file_type is FileType.SYMLINK
        except OSError:
            return False

    def _report(self, path: PurePath, kind: ErrorKind, error: OSError) -> None:
        issue = ScanIssue(
            path=path,
            kind=kind,
            message=error.strerror or str(error),
        )
        self._errors.append(issue)
        self._observer.on_walk_error(issue)

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            "directories": 0,
            "files": 0,
            "excluded": 0,
            "symlinks": 0,
            "special": 0,
        }

    def get_stats(self) -> Dict[str, int]:
        """Get traversal counters.

        Returns:
            Dictionary containing:
            - 'directories': Directories listed
            - 'files': Regular files yielded
            - 'excluded': Folders and files dropped by exclusion rules
            - 'symlinks': Symlinks skipped
            - 'special': Other non-regular entries skipped
        """
        return dict(self._stats)

    def get_errors(self) -> List[ScanIssue]:
        """Get the issues recorded while walking.

        Returns:
            List of ScanIssue objects, in the order they occurred.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the recorded issues and counters."""
        self._errors.clear()
        self._stats = self._empty_stats()
