"""ScanLogger for writing scan results to a structured report file.

The report is plain text, split into sections by a 65-character separator:
header, scan phase, duplicate sets, issues and summary.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from twinscan.models import DuplicateSet, ScanIssue, ScanSummary


class ScanLogger:
    """Writer for scan report files.

    Usage:
        with ScanLogger(log_file_path, digest_name="md5") as report:
            report.log_header()
            report.log_scan_phase(summary)
            report.log_duplicate_sets(summary.duplicate_sets)
            report.log_issues(summary.errors)
            report.log_summary(summary)

    Attributes:
        SEPARATOR: The 65-character separator line used between sections.
    """

    SEPARATOR = "=" * 65

    def __init__(
        self,
        log_file_path: Optional[Path] = None,
        digest_name: str = "",
    ) -> None:
        """Initialize the ScanLogger.

        Args:
            log_file_path: Optional path for the report file. If not provided,
                generates a timestamped filename in the current directory.
            digest_name: Name of the digest algorithm used for the scan.

        Raises:
            OSError: If the report file location is not writable.
        """
        self._digest_name = digest_name
        self._start_timestamp = datetime.now()
        self._file_handle: Optional[TextIO] = None

        if log_file_path is None:
            timestamp_str = self._start_timestamp.strftime("%Y-%m-%d_%H-%M-%S")
            self._log_file_path = Path.cwd() / f"scan_log_{timestamp_str}.log"
        else:
            self._log_file_path = Path(log_file_path)

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the report file's parent directory exists and is writable.

        Raises:
            OSError: If the parent directory doesn't exist or is not writable.
        """
        parent = self._log_file_path.parent
        if not parent.exists():
            raise OSError(f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OSError(f"Parent path is not a directory: {parent}")
        try:
            test_file = parent / f".twinscan_test_{id(self)}"
            test_file.touch()
            test_file.unlink()
        except PermissionError:
            raise OSError(f"Permission denied: cannot write to {parent}")

    def __enter__(self) -> "ScanLogger":
        """Open the report file.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        try:
            self._file_handle = open(self._log_file_path, "w", encoding="utf-8")
        except OSError as e:
            raise OSError(f"Cannot open log file for writing: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the report file, even if an exception occurred."""
        if self._file_handle is not None:
            try:
                self._file_handle.close()
            except OSError as e:
                print(f"Warning: Error closing log file: {e}", file=sys.stderr)
            finally:
                self._file_handle = None

    def get_log_path(self) -> Path:
        return self._log_file_path

    def log_header(self) -> None:
        """Write the title, timestamp and digest mode."""
        self._write_separator()
        self._write_line("twinscan - Duplicate File Scan")
        self._write_separator()
        self._write_line(f"Timestamp: {self._format_timestamp(self._start_timestamp)}")
        self._write_line(f"Digest: {self._digest_name}")
        self._write_line("")

    def log_scan_phase(self, summary: ScanSummary) -> None:
        """Write roots, exclusion rules and traversal counters.

        Args:
            summary: ScanSummary of the finished scan.
        """
        self._write_separator()
        self._write_line("SCAN PHASE")
        self._write_separator()
        self._write_line("Roots:")
        for root in summary.roots:
            self._write_line(f"- {root}", indent=2)
        if summary.excluded_dirs:
            self._write_line("Excluded paths:")
            for path in summary.excluded_dirs:
                self._write_line(f"- {path}", indent=2)
        if summary.excluded_patterns:
            self._write_line("Excluded patterns:")
            for pattern in summary.excluded_patterns:
                self._write_line(f"- {pattern}", indent=2)
        self._write_line(f"Files seen: {summary.files_seen:,}")
        self._write_line(f"Unique files: {summary.unique_files:,}")
        self._write_line(f"Hard-link aliases: {summary.aliases:,}")
        self._write_line(f"Partial digests computed: {summary.partial_digests:,}")
        self._write_line(f"Full digests computed: {summary.full_digests:,}")
        self._write_line("")

    def log_duplicate_sets(self, duplicate_sets: List[DuplicateSet]) -> None:
        """Write every duplicate set, with hard-link aliases indented under their file.

        Args:
            duplicate_sets: Duplicate sets found by the scan.
        """
        self._write_separator()
        self._write_line("DUPLICATE SETS")
        self._write_separator()
        if not duplicate_sets:
            self._write_line("No duplicate files found.")
            self._write_line("")
            return

        for i, duplicate_set in enumerate(duplicate_sets, start=1):
            self._write_line(
                f"Set {i}: {len(duplicate_set.entries)} files, "
                f"{duplicate_set.size:,} bytes each, digest {duplicate_set.digest.hex()}"
            )
            for entry in duplicate_set.entries:
                self._write_line(f"- {entry.primary_path}", indent=2)
                for alias in entry.paths[1:]:
                    self._write_line(f"= {alias}", indent=4)
            self._write_line("")

    def log_issues(self, issues: List[ScanIssue]) -> None:
        """Write walk errors and skipped files. Nothing is written when there are none."""
        if not issues:
            return
        self._write_separator()
        self._write_line("ISSUES")
        self._write_separator()
        for issue in issues:
            self._write_line(f"! {issue}", indent=2)
        self._write_line("")

    def log_summary(self, summary: ScanSummary) -> None:
        """Write the summary section.

        Args:
            summary: The ScanSummary with aggregated statistics.
        """
        self._write_separator()
        self._write_line("SUMMARY")
        self._write_separator()
        self._write_line(f"Duplicate sets: {len(summary.duplicate_sets)}")
        self._write_line(f"Reclaimable bytes: {summary.reclaimable_bytes:,}")
        self._write_line(f"Total issues: {len(summary.errors)}")
        if summary.interrupted:
            self._write_line("Scan interrupted by user")
        self._write_line(f"Duration: {self._format_duration(summary.duration_seconds)}")
        self._write_line("")
        self._write_line(f"Log file: {self._log_file_path}")
        self._write_separator()

    def _format_duration(self, seconds: float) -> str:
        """Format duration like "5m 23s", "1h 5m 30s", or "45s"."""
        total_seconds = int(seconds)

        if total_seconds < 60:
            return f"{total_seconds}s"

        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        secs = total_seconds % 60

        if hours > 0:
            return f"{hours}h {minutes}m {secs}s"
        else:
            return f"{minutes}m {secs}s"

    def _format_timestamp(self, dt: datetime) -> str:
        return dt.strftime("%Y-%m-%d %H:%M:%S")

    def _write_separator(self) -> None:
        self._write_line(self.SEPARATOR)

    def _write_line(self, text: str, indent: int = 0) -> None:
        """Write a line to the report file with optional indentation."""
        if self._file_handle is None:
            print(
                f"Warning: Attempted to write to closed log file: {text}",
                file=sys.stderr,
            )
            return

        try:
            self._file_handle.write(" " * indent + text + "\n")
        except OSError as e:
            print(f"Warning: Error writing to log file: {e}", file=sys.stderr)
