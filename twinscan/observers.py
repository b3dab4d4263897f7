"""Observers receiving progress and failure notifications from a scan.

The walker and the catalog never configure logging themselves. They report
through a ScanObserver handed to them; LoggingObserver forwards everything to
the standard :mod:`logging` module, and the CLI decides where that goes.
"""

import logging
from typing import Callable, Optional

from twinscan.models import CatalogEntry, FileHandle, ScanIssue

logger = logging.getLogger(__name__)


class ScanObserver:
    """Base observer. Every hook is a no-op; override the ones you need."""

    def on_walk_error(self, issue: ScanIssue) -> None:
        """A directory or entry could not be listed or inspected."""

    def on_file_skipped(self, issue: ScanIssue) -> None:
        """A file was left out of duplicate comparison."""

    def on_file_cataloged(self, handle: FileHandle, entry: CatalogEntry) -> None:
        """A handle was inserted into the catalog."""


class LoggingObserver(ScanObserver):
    """Writes scan events to a :class:`logging.Logger`.

    Args:
        target: Logger to write to. Defaults to this module's logger.
        progress_callback: Optional callable receiving the number of files
            cataloged so far, for progress displays.
    """

    def __init__(
        self,
        target: Optional[logging.Logger] = None,
        progress_callback: Optional[Callable[[int], None]] = None,
    ) -> None:
        self._logger = target if target is not None else logger
        self._progress_callback = progress_callback
        self._cataloged = 0

    def on_walk_error(self, issue: ScanIssue) -> None:
        self._logger.warning(f"Walk error: {issue}")

    def on_file_skipped(self, issue: ScanIssue) -> None:
        self._logger.warning(f"Skipped: {issue}")

    def on_file_cataloged(self, handle: FileHandle, entry: CatalogEntry) -> None:
        self._cataloged += 1
        if handle.path != entry.primary_path:
            self._logger.debug(f"Alias of {entry.identity}: {handle.path}")
        else:
            self._logger.debug(f"Cataloged {handle.path} ({handle.size} bytes)")
        if self._progress_callback is not None:
            self._progress_callback(self._cataloged)
