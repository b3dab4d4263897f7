"""twinscan - Duplicate File Finder.

A Python application for finding byte-identical files across directory trees
by narrowing candidates through hard-link identity, size, partial content
digests and full content digests.
"""

__version__ = "0.1.0"

from .models import (
    ErrorKind,
    FileType,
    PhysicalIdentity,
    FileMetadata,
    FileHandle,
    CatalogEntry,
    DuplicateSet,
    ScanIssue,
    ScanSummary,
)

__all__ = [
    "__version__",
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


def main() -> None:
    """Entry point for the twinscan CLI application.

    Imports and runs the Typer app from the twinscan.cli module.
    """
    from twinscan.cli import app
    app()
