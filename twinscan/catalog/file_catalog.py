"""Progressive duplicate resolution.

This module provides the FileCatalog class. Files are narrowed down in four
steps, each cheaper than the next:

1. Physical identity - hard links to a known (device, inode) are recorded as
   aliases and never read.
2. Size - a file is only compared with files of exactly the same length.
3. Partial digest - the first K bytes, computed only once a size bucket holds
   two or more files.
4. Full digest - the whole content, computed only for entries whose partial
   digest collides with another entry of the same size.

Example:
    >>> catalog = FileCatalog(fs, FileHasher(fs, select_digest()))
    >>> for handle in walker.walk():
    ...     catalog.insert(handle)
    >>> for duplicate_set in catalog.enumerate_duplicate_sets():
    ...     print(duplicate_set.paths)
"""

import logging
from typing import Dict, List, Optional

from twinscan.models import (
    CatalogEntry,
    DuplicateSet,
    ErrorKind,
    FileHandle,
    FileType,
    PhysicalIdentity,
    ScanIssue,
)
from twinscan.observers import ScanObserver
from twinscan.scanning import FileHasher
from twinscan.vfs import FileSystem

logger = logging.getLogger(__name__)


class FileCatalog:
    """Catalog of physical files, grouped by size and content digests.

    The catalog assumes a single writer: ``insert`` calls must not run
    concurrently.

    Attributes:
        _entries: CatalogEntry per PhysicalIdentity, in insertion order.
        _buckets: Size bucket -> entries of that size, in insertion order.
        _partial_groups: Size -> partial digest -> entries sharing both,
            in insertion order. Only entries with a partial digest appear.
        _skipped: ScanIssues for files left out of comparison.
    """

    def __init__(
        self,
        filesystem: FileSystem,
        hasher: FileHasher,
        observer: Optional[ScanObserver] = None,
    ) -> None:
        """Initialize an empty FileCatalog.

        Args:
            filesystem: FileSystem used to stat inserted handles.
            hasher: FileHasher holding the digest algorithm for the whole run.
            observer: Optional ScanObserver notified of skips and insertions.
        """
        self._filesystem = filesystem
        self._hasher = hasher
        self._observer = observer if observer is not None else ScanObserver()
        self._entries: Dict[PhysicalIdentity, CatalogEntry] = {}
        self._buckets: Dict[int, List[CatalogEntry]] = {}
        self._partial_groups: Dict[int, Dict[bytes, List[CatalogEntry]]] = {}
        self._skipped: List[ScanIssue] = []
        self._files_seen: int = 0
        self._aliases: int = 0

    def __len__(self) -> int:
        return len(self._entries)

    def insert(self, handle: FileHandle) -> Optional[CatalogEntry]:
        """Add a file to the catalog, computing digests only when needed.

        Args:
            handle: FileHandle produced by the walker.

        Returns:
            The CatalogEntry the handle now belongs to, or None if the file
            had to be skipped because its metadata could not be read.
        """
        self._files_seen += 1

        try:
            metadata = self._filesystem.stat(handle.path)
        except OSError as e:
            kind = ErrorKind.from_os_error(e, ErrorKind.METADATA_UNAVAILABLE)
            self._skip(handle, kind, e.strerror or str(e))
            return None

        if metadata.file_type is not FileType.FILE:
            self._skip(
                handle,
                ErrorKind.METADATA_UNAVAILABLE,
                f"no longer a regular file ({metadata.file_type.value})",
            )
            return None

        entry = self._entries.get(metadata.identity)
        if entry is not None:
            if entry.add_path(handle.path):
                self._aliases += 1
            self._observer.on_file_cataloged(handle, entry)
            return entry

        entry = CatalogEntry(
            identity=metadata.identity,
            size=metadata.size,
            paths=[handle.path],
        )
        self._entries[metadata.identity] = entry
        bucket = self._buckets.setdefault(metadata.size, [])
        bucket.append(entry)

        # The first entry of a size waits for a second one before being read
        if len(bucket) == 2:
            self._add_to_partial_group(bucket[0])
        if len(bucket) >= 2:
            self._add_to_partial_group(entry)

        self._observer.on_file_cataloged(handle, entry)
        return entry

    def enumerate_duplicate_sets(self) -> List[DuplicateSet]:
        """Derive the duplicate sets from the digests computed so far.

        Buckets and groups keep the order in which their first member was
        inserted, so an unchanged tree always produces the same result.

        Returns:
            List of DuplicateSet objects, each with at least two distinct
            physical files.
        """
        duplicate_sets: List[DuplicateSet] = []
        for size in self._buckets:
            for partial_group in self._partial_groups.get(size, {}).values():
                if len(partial_group) < 2:
                    continue
                groups: Dict[bytes, List[CatalogEntry]] = {}
                for entry in partial_group:
                    if entry.failed or entry.full_digest is None:
                        continue
                    groups.setdefault(entry.full_digest, []).append(entry)

                for full_digest, members in groups.items():
                    if len(members) >= 2:
                        duplicate_sets.append(
                            DuplicateSet(size=size, digest=full_digest, entries=list(members))
                        )
        return duplicate_sets

    def entries(self) -> List[CatalogEntry]:
        """All catalog entries, in insertion order."""
        return list(self._entries.values())

    def get_skipped(self) -> List[ScanIssue]:
        """Get the files left out of comparison.

        Returns:
            List of ScanIssue objects, in the order they occurred.
        """
        return self._skipped.copy()

    def get_stats(self) -> Dict[str, int]:
        """Get catalog counters.

        Returns:
            Dictionary containing:
            - 'files_seen': Handles passed to insert()
            - 'entries': Distinct physical identities
            - 'aliases': Extra paths recorded for known identities
            - 'skipped': Handles or entries excluded from comparison
            - 'partial_digests': Partial digests computed
            - 'full_digests': Full digests computed
        """
        hasher_stats = self._hasher.get_stats()
        return {
            "files_seen": self._files_seen,
            "entries": len(self._entries),
            "aliases": self._aliases,
            "skipped": len(self._skipped),
            "partial_digests": hasher_stats["partial"],
            "full_digests": hasher_stats["full"],
        }

    def _add_to_partial_group(self, entry: CatalogEntry) -> None:
        """Partial-hash one entry and full-hash its group once it has company.

        Only the new entry is read, plus the group's first member when the
        group reaches two, so each insert costs a bounded number of reads
        however large the size bucket grows.
        """
        self._compute_digest(entry, full=False)
        if entry.failed:
            return

        groups = self._partial_groups.setdefault(entry.size, {})
        group = groups.setdefault(entry.partial_digest, [])
        group.append(entry)
        if len(group) == 2:
            self._compute_digest(group[0], full=True)
        if len(group) >= 2:
            self._compute_digest(entry, full=True)

    def _compute_digest(self, entry: CatalogEntry, full: bool) -> None:
        if entry.failed:
            return
        path = entry.primary_path
        try:
            if full:
                entry.full_digest = self._hasher.full_digest(path)
            else:
                entry.partial_digest = self._hasher.partial_digest(path)
        except OSError as e:
            entry.failed = True
            kind = ErrorKind.from_os_error(e, ErrorKind.READ_FAILURE)
            stage = "full" if full else "partial"
            issue = ScanIssue(
                path=path,
                kind=kind,
                message=f"{stage} digest failed: {e.strerror or e}",
            )
            self._skipped.append(issue)
            self._observer.on_file_skipped(issue)

    def _skip(self, handle: FileHandle, kind: ErrorKind, message: str) -> None:
        issue = ScanIssue(path=handle.path, kind=kind, message=message)
        self._skipped.append(issue)
        logger.debug(f"Excluded from comparison: {issue}")
        self._observer.on_file_skipped(issue)
