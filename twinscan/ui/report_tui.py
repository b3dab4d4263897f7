"""Terminal output for twinscan scan results.

This module provides the ReportTUI class, a Rich-based display for scan
progress, duplicate sets and the final summary.

Example:
    from twinscan.ui import ReportTUI

    tui = ReportTUI()
    progress, callback = tui.create_progress_callback()
    with progress:
        summary = run_scan(progress_callback=callback)
    tui.display_duplicate_sets(summary.duplicate_sets)
    tui.display_scan_summary(summary)
"""

from typing import Callable, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from twinscan.models import DuplicateSet, ScanIssue, ScanSummary


class ReportTUI:
    """Rich-based terminal display for scan results.

    Args:
        console: Optional Rich Console instance for output. If None, creates
            a new Console. Pass a custom Console for testing (e.g., with
            StringIO file for output capture).

    Attributes:
        console: The Rich Console instance used for all output.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def display_scan_summary(self, summary: ScanSummary) -> None:
        """Display the statistics of a finished scan.

        Args:
            summary: ScanSummary returned by the orchestrator.
        """
        title = "Scan Summary"
        if summary.interrupted:
            title += " [yellow][INTERRUPTED][/yellow]"

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Roots", f"{len(summary.roots):,}")
        table.add_row("Files seen", f"{summary.files_seen:,}")
        table.add_row("Unique files", f"{summary.unique_files:,}")
        table.add_row("Hard-link aliases", f"{summary.aliases:,}")
        table.add_row("Partial digests", f"{summary.partial_digests:,}")
        table.add_row("Full digests", f"{summary.full_digests:,}")
        table.add_row("Duplicate sets", f"{len(summary.duplicate_sets):,}")
        table.add_row("Reclaimable", self._format_size(summary.reclaimable_bytes))
        table.add_row("Digest", summary.digest_name)
        table.add_row("Duration", self._format_duration(summary.duration_seconds))

        border_style = "yellow" if summary.interrupted else "green"
        self.console.print(Panel(table, title=title, border_style=border_style))

        if summary.errors:
            self._display_errors(summary.errors)

    def display_duplicate_sets(self, duplicate_sets: List[DuplicateSet]) -> None:
        """Display every duplicate set with its paths.

        Paths that are hard links of the same physical file are listed under
        that file and marked with an arrow.

        Args:
            duplicate_sets: Duplicate sets to display.
        """
        if not duplicate_sets:
            self.console.print("[yellow]No duplicate files found.[/yellow]")
            return

        table = Table(title="Duplicate Sets")
        table.add_column("Set #", justify="right", style="cyan", no_wrap=True)
        table.add_column("Size", justify="right")
        table.add_column("Digest", style="magenta", no_wrap=True)
        table.add_column("Paths", style="white")

        for idx, duplicate_set in enumerate(duplicate_sets, start=1):
            lines: List[str] = []
            for entry in duplicate_set.entries:
                lines.append(escape(self._truncate_name(str(entry.primary_path))))
                for alias in entry.paths[1:]:
                    lines.append(f"  [dim]-> {escape(self._truncate_name(str(alias)))}[/dim]")
            table.add_row(
                str(idx),
                self._format_size(duplicate_set.size),
                duplicate_set.digest.hex()[:16],
                "\n".join(lines),
            )

        self.console.print(table)

    def create_progress_callback(self) -> Tuple[Progress, Callable[[int], None]]:
        """Create a progress display and a callback counting cataloged files.

        The caller must use the returned Progress as a context manager.

        Returns:
            tuple[Progress, Callable[[int], None]]: The Progress instance and a
            callback that accepts the number of files cataloged so far.

        Example:
            progress, callback = tui.create_progress_callback()
            with progress:
                for count, handle in enumerate(handles, start=1):
                    catalog.insert(handle)
                    callback(count)
        """
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        task_id = progress.add_task("Cataloging files...", total=None)

        def callback(completed: int) -> None:
            progress.update(
                task_id,
                completed=completed,
                description=f"Cataloging files... {completed:,}",
            )

        return progress, callback

    def _display_errors(self, errors: List[ScanIssue]) -> None:
        """Display a panel listing scan issues, capped at ten entries.

        Args:
            errors: ScanIssues to display.
        """
        max_display = 10
        displayed_errors = errors[:max_display]
        remaining = len(errors) - max_display

        error_text = "\n".join(f"- {escape(str(e))}" for e in displayed_errors)
        if remaining > 0:
            error_text += f"\n\n... and {remaining} more issues"

        error_panel = Panel(
            error_text,
            title=f"Issues ({len(errors)})",
            border_style="red",
        )
        self.console.print(error_panel)

    def _format_size(self, bytes_size: int) -> str:
        """Convert bytes to human-readable format.

        Args:
            bytes_size: Size in bytes.

        Returns:
            Human-readable size string (e.g., "10.5 MB", "1.2 GB").
        """
        if bytes_size < 1024:
            return f"{bytes_size} B"
        elif bytes_size < 1024 * 1024:
            return f"{bytes_size / 1024:.1f} KB"
        elif bytes_size < 1024 * 1024 * 1024:
            return f"{bytes_size / (1024 * 1024):.1f} MB"
        else:
            return f"{bytes_size / (1024 * 1024 * 1024):.1f} GB"

    def _format_duration(self, seconds: float) -> str:
        """Convert seconds to human-readable duration (e.g., "5m 23s")."""
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"

    def _truncate_name(self, name: str, max_length: int = 80) -> str:
        """Shorten long paths, keeping the end, which is the informative part."""
        if len(name) > max_length:
            return "..." + name[-(max_length - 3):]
        return name
