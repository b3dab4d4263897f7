"""
Core data models for twinscan.

This module contains the following dataclasses:
- PhysicalIdentity: (device, inode) pair naming one physical file
- FileMetadata: The subset of stat() results the scanner relies on
- FileHandle: A regular file discovered by the walker
- CatalogEntry: One physical file inside the catalog, with all of its paths
- DuplicateSet: Two or more physical files with identical content
- ScanIssue: A path that could not be listed, inspected or read
- ScanSummary: Summary of a complete scan returned by DedupeOrchestrator
"""

from dataclasses import dataclass, field
from pathlib import PurePath
from typing import List, Optional

from .error_kind import ErrorKind
from .file_type import FileType


@dataclass(frozen=True)
class PhysicalIdentity:
    """Identifies one physical file no matter how many paths point at it."""
    device: int                       # st_dev
    inode: int                        # st_ino

    def __str__(self) -> str:
        return f"{self.device:X}:{self.inode:X}"


@dataclass(frozen=True)
class FileMetadata:
    """Metadata exposed by every FileSystem implementation."""
    size: int                         # Length in bytes
    mtime: float                      # Modification time (seconds since epoch)
    file_type: FileType               # File / Dir / Symlink / Other
    identity: PhysicalIdentity        # (device, inode)


@dataclass(frozen=True)
class FileHandle:
    """A regular file produced by the DirWalker."""
    path: PurePath                    # Path as reached during traversal
    identity: PhysicalIdentity        # (device, inode) at discovery time
    size: int                         # Length in bytes
    file_type: FileType               # Always FILE for walker output
    mtime: float                      # Modification time

    @classmethod
    def from_metadata(cls, path: PurePath, metadata: FileMetadata) -> "FileHandle":
        return cls(
            path=path,
            identity=metadata.identity,
            size=metadata.size,
            file_type=metadata.file_type,
            mtime=metadata.mtime,
        )


@dataclass
class CatalogEntry:
    """One physical file tracked by the FileCatalog.

    Digests are filled in lazily, only once another entry of the same size
    (and, for the full digest, the same partial digest) shows up.
    """
    identity: PhysicalIdentity        # Key in the catalog
    size: int                         # Size bucket key
    paths: List[PurePath] = field(default_factory=list)  # All aliasing paths
    partial_digest: Optional[bytes] = None  # Digest of the first K bytes
    full_digest: Optional[bytes] = None     # Digest of the whole content
    failed: bool = False              # A read failed; never grouped again

    def add_path(self, path: PurePath) -> bool:
        """Record another path for this identity.

        Returns:
            True if the path was new, False if it was already recorded.
        """
        if path in self.paths:
            return False
        self.paths.append(path)
        return True

    @property
    def primary_path(self) -> PurePath:
        return self.paths[0]


@dataclass
class DuplicateSet:
    """Two or more distinct physical files sharing size and digests."""
    size: int                         # Common size in bytes
    digest: bytes                     # Common full digest
    entries: List[CatalogEntry]       # >= 2 entries with distinct identities

    @property
    def paths(self) -> List[PurePath]:
        """Every path of every entry, aliases included."""
        return [path for entry in self.entries for path in entry.paths]

    @property
    def reclaimable_bytes(self) -> int:
        """Bytes freed if every entry but one were replaced by a hard link."""
        return self.size * (len(self.entries) - 1)


@dataclass
class ScanIssue:
    """A path that was reported and left out, without aborting the scan."""
    path: PurePath                    # Offending path
    kind: ErrorKind                   # Failure category
    message: str                      # Human readable detail

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.path} - {self.message}"


@dataclass
class ScanSummary:
    """Summary of the scan workflow results returned by DedupeOrchestrator."""
    roots: List[PurePath] = field(default_factory=list)        # Roots in given order
    excluded_dirs: List[PurePath] = field(default_factory=list)
    excluded_patterns: List[str] = field(default_factory=list)
    digest_name: str = ""             # Active digest algorithm
    files_seen: int = 0               # Handles inserted into the catalog
    unique_files: int = 0             # Distinct physical identities
    aliases: int = 0                  # Extra paths absorbed by hard links
    partial_digests: int = 0          # Partial digests computed
    full_digests: int = 0             # Full digests computed
    duplicate_sets: List[DuplicateSet] = field(default_factory=list)
    walk_errors: List[ScanIssue] = field(default_factory=list)
    skipped: List[ScanIssue] = field(default_factory=list)
    duration_seconds: float = 0.0     # Total workflow duration
    interrupted: bool = False         # Whether the user interrupted the scan

    @property
    def reclaimable_bytes(self) -> int:
        return sum(dup.reclaimable_bytes for dup in self.duplicate_sets)

    @property
    def errors(self) -> List[ScanIssue]:
        return self.walk_errors + self.skipped
