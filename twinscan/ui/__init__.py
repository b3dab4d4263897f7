"""Terminal display package for twinscan."""

from .report_tui import ReportTUI

__all__ = ["ReportTUI"]
