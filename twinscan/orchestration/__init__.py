"""Workflow orchestration package for twinscan.

This package contains orchestration components for running scans:
- ScanLogger: Structured scan report written to a log file.
- DedupeOrchestrator: Central coordinator for the walk, catalog and report steps.
"""

from twinscan.orchestration.scan_logger import ScanLogger
from twinscan.orchestration.dedupe_orchestrator import DedupeOrchestrator

__all__ = ["ScanLogger", "DedupeOrchestrator"]
