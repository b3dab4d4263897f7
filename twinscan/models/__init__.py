"""
Models package for twinscan.

This package provides convenient imports for all data models:
- FileType: Enum classifying filesystem objects
- ErrorKind: Enum of per-path failure categories
- PhysicalIdentity: (device, inode) pair
- FileMetadata: stat() subset used by the scanner
- FileHandle: File produced by the walker
- CatalogEntry: Physical file tracked by the catalog
- DuplicateSet: Group of identical physical files
- ScanIssue: Reported, non-fatal failure
- ScanSummary: Scan workflow summary
"""

from .error_kind import ErrorKind
from .file_type import FileType
from .data_models import (
    PhysicalIdentity,
    FileMetadata,
    FileHandle,
    CatalogEntry,
    DuplicateSet,
    ScanIssue,
    ScanSummary,
)

__all__ = [
    "ErrorKind",
    "FileType",
    "PhysicalIdentity",
    "FileMetadata",
    "FileHandle",
    "CatalogEntry",
    "DuplicateSet",
    "ScanIssue",
    "ScanSummary",
]
