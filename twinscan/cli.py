"""
twinscan - CLI Interface.

A command-line interface for finding byte-identical files across directory
trees. Files are narrowed down by hard-link identity, size, a digest of their
first bytes and finally a digest of their full content, so most files are
never read at all.

Usage Examples:
    # Scan one tree
    python -m twinscan /data/photos

    # Scan several trees, skipping a cache folder and editor swap files
    python -m twinscan /data /backup --skip /data/.cache --skip-re '\\.swp$'

    # Use SHA3-256 instead of MD5 and keep a report
    python -m twinscan /data --paranoid --log-file scan.log --verbose
"""

import logging
import os
import re
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from twinscan.orchestration import DedupeOrchestrator
from twinscan.ui import ReportTUI

__version__ = "0.1.0"

# Initialize Typer app
app = typer.Typer(
    name="twinscan",
    help="Find duplicate files across directory trees.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for consistent output formatting
console = Console()


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"twinscan v{__version__}")
        raise typer.Exit()


def validate_patterns(values: Optional[List[str]]) -> Optional[List[str]]:
    """
    Validate that every --skip-re value is a valid regular expression.

    Args:
        values: Patterns given on the command line.

    Returns:
        The validated patterns.

    Raises:
        typer.BadParameter: If a pattern does not compile.
    """
    for pattern in values or []:
        try:
            re.compile(pattern)
        except re.error as e:
            raise typer.BadParameter(f"Invalid regular expression {pattern!r}: {e}")
    return values


def configure_logging(verbose: bool) -> None:
    """Route log records to the console. Debug output only with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _absolute(path: Path) -> Path:
    # abspath normalizes without resolving symlinks
    return Path(os.path.abspath(path))


@app.command()
def main(
    paths: List[Path] = typer.Argument(
        ...,
        help="Files or directories to deduplicate.",
        exists=False,  # Missing roots are reported by the walker
    ),
    skip: Optional[List[Path]] = typer.Option(
        None,
        "--skip",
        "-x",
        help="A folder or file path to omit (repeatable).",
    ),
    skip_re: Optional[List[str]] = typer.Option(
        None,
        "--skip-re",
        "-o",
        help="Skip files whose name matches this regular expression (repeatable).",
        callback=validate_patterns,
    ),
    paranoid: bool = typer.Option(
        False,
        "--paranoid",
        "-p",
        help="Use SHA3-256 instead of MD5 to compare file contents.",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        "-l",
        help="Path for a scan report file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Scan PATHS for duplicate files.

    Reports every set of byte-identical files, with hard links to the same
    file listed together. Nothing on disk is modified.
    """
    configure_logging(verbose)

    try:
        orchestrator = DedupeOrchestrator(
            roots=[_absolute(path) for path in paths],
            excluded_dirs=[_absolute(path) for path in skip or []],
            excluded_patterns=skip_re or [],
            paranoid=paranoid,
            log_file_path=log_file,
            verbose=verbose,
            tui=ReportTUI(console=console),
        )

        summary = orchestrator.run()

        if log_file:
            console.print(f"[dim]Log written to: {escape(str(log_file))}[/dim]")

        # Return appropriate exit code
        if summary.interrupted:
            raise typer.Exit(130)
        elif summary.errors:
            raise typer.Exit(1)

    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
