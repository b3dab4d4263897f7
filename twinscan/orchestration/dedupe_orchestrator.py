"""DedupeOrchestrator for running a complete duplicate scan.

This module provides the DedupeOrchestrator class that wires DirWalker,
FileHasher, FileCatalog, ReportTUI and ScanLogger together: walk the roots,
feed every file to the catalog, then display and optionally log the result.

Example:
    from twinscan.orchestration import DedupeOrchestrator
    from pathlib import Path

    orchestrator = DedupeOrchestrator(
        roots=[Path("/data/photos"), Path("/backup/photos")],
        excluded_dirs=[Path("/data/photos/.cache")],
        paranoid=True,
    )
    summary = orchestrator.run()
    for duplicate_set in summary.duplicate_sets:
        print(duplicate_set.paths)
"""

import sys
import time
from pathlib import Path, PurePath
from typing import Iterable, List, Optional

from rich.markup import escape

from twinscan.catalog import FileCatalog
from twinscan.models import ScanSummary
from twinscan.observers import LoggingObserver, ScanObserver
from twinscan.orchestration.scan_logger import ScanLogger
from twinscan.scanning import DirWalker, FileHasher, select_digest
from twinscan.ui import ReportTUI
from twinscan.vfs import FileSystem, RealFileSystem


class DedupeOrchestrator:
    """Runs the scan workflow: walk, catalog, report.

    The digest algorithm is chosen once, here, and held for the whole run.
    Every run builds a fresh walker and catalog, so calling ``run`` twice on
    an unchanged tree yields the same duplicate sets.

    Attributes:
        roots: Paths to scan, in order.
        excluded_dirs: Exact paths excluded from traversal.
        excluded_patterns: Filename regular expressions excluded from traversal.
        paranoid: Whether SHA3-256 replaces MD5.
        log_file_path: Optional path for a report file.
        verbose: Whether to print every issue instead of the first ten.
    """

    def __init__(
        self,
        roots: Iterable[PurePath],
        excluded_dirs: Iterable[PurePath] = (),
        excluded_patterns: Iterable[str] = (),
        paranoid: bool = False,
        log_file_path: Optional[Path] = None,
        verbose: bool = False,
        filesystem: Optional[FileSystem] = None,
        tui: Optional[ReportTUI] = None,
        observer: Optional[ScanObserver] = None,
    ) -> None:
        """Initialize the DedupeOrchestrator.

        Args:
            roots: Files or directories to scan (at least one).
            excluded_dirs: Exact paths to skip, together with their contents.
            excluded_patterns: Regular expressions matched against base filenames.
            paranoid: Use SHA3-256 instead of MD5 for the whole run.
            log_file_path: Optional path for the scan report file.
            verbose: Display every issue rather than the first ten.
            filesystem: FileSystem to scan. Defaults to RealFileSystem.
            tui: ReportTUI used for output. Defaults to a new ReportTUI.
            observer: ScanObserver for walk and catalog events. Defaults to a
                LoggingObserver that also drives the progress display.

        Raises:
            ValueError: If no roots are given.
        """
        self.roots: List[PurePath] = list(roots)
        if not self.roots:
            raise ValueError("At least one path to scan is required")

        self.excluded_dirs: List[PurePath] = list(excluded_dirs)
        self.excluded_patterns: List[str] = list(excluded_patterns)
        self.paranoid = paranoid
        self.log_file_path = log_file_path
        self.verbose = verbose

        self._filesystem = filesystem if filesystem is not None else RealFileSystem()
        self._algorithm = select_digest(paranoid)
        self._tui = tui or ReportTUI()
        self._observer = observer

    @property
    def digest_name(self) -> str:
        return self._algorithm.name

    def run(self) -> ScanSummary:
        """Execute the scan workflow.

        1. Walk - enumerate files under the roots, honouring exclusions
        2. Catalog - insert each file, computing digests only when needed
        3. Report - display duplicate sets and the summary, write the log file

        A KeyboardInterrupt during the walk stops the scan early; the
        duplicate sets found so far are still reported.

        Returns:
            ScanSummary with the duplicate sets, issues and counters.

        Raises:
            ValueError: If an exclude pattern is not a valid regular
                expression. Nothing is displayed in that case.
        """
        progress, callback = self._tui.create_progress_callback()
        observer = self._observer or LoggingObserver(progress_callback=callback)

        # DirWalker compiles the exclude patterns, so a bad one fails here
        walker = DirWalker(
            self._filesystem,
            self.roots,
            excluded_dirs=self.excluded_dirs,
            excluded_patterns=self.excluded_patterns,
            observer=observer,
        )
        catalog = FileCatalog(
            self._filesystem,
            FileHasher(self._filesystem, self._algorithm),
            observer=observer,
        )

        start_time = time.time()
        summary = ScanSummary(
            roots=list(self.roots),
            excluded_dirs=list(self.excluded_dirs),
            excluded_patterns=list(self.excluded_patterns),
            digest_name=self.digest_name,
        )

        try:
            with progress:
                for handle in walker.walk():
                    catalog.insert(handle)
        except KeyboardInterrupt:
            summary.interrupted = True
            self._tui.console.print(
                "\n[yellow]Scan interrupted by user - reporting partial results.[/yellow]"
            )

        stats = catalog.get_stats()
        summary.files_seen = stats["files_seen"]
        summary.unique_files = stats["entries"]
        summary.aliases = stats["aliases"]
        summary.partial_digests = stats["partial_digests"]
        summary.full_digests = stats["full_digests"]
        summary.duplicate_sets = catalog.enumerate_duplicate_sets()
        summary.walk_errors = walker.get_errors()
        summary.skipped = catalog.get_skipped()
        summary.duration_seconds = time.time() - start_time

        self._tui.display_duplicate_sets(summary.duplicate_sets)
        self._tui.display_scan_summary(summary)

        if self.verbose and len(summary.errors) > 10:
            self._tui.console.print("[yellow]All issues:[/yellow]")
            for issue in summary.errors:
                self._tui.console.print(f"  [dim]- {escape(str(issue))}[/dim]")

        if self.log_file_path is not None:
            self._write_log(summary)

        return summary

    def _write_log(self, summary: ScanSummary) -> None:
        """Write the report file. Failure to do so is reported, not raised."""
        try:
            with ScanLogger(self.log_file_path, digest_name=self.digest_name) as report:
                report.log_header()
                report.log_scan_phase(summary)
                report.log_duplicate_sets(summary.duplicate_sets)
                report.log_issues(summary.errors)
                report.log_summary(summary)

                if self.verbose:
                    self._tui.console.print(f"[dim]Log file: {escape(str(report.get_log_path()))}[/dim]")
        except OSError as e:
            print(f"Warning: Could not create log file: {e}", file=sys.stderr)
