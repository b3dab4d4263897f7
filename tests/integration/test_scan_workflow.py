"""
Integration tests for the complete scan workflow.

Tests cover:
- DedupeOrchestrator over the in-memory scenario tree and a real tree
- Report file creation and failure handling
- Interrupted scans reporting partial results
- Argument validation
"""

from pathlib import Path, PurePosixPath

import pytest

from twinscan.models import CatalogEntry, FileHandle
from twinscan.observers import ScanObserver
from twinscan.orchestration import DedupeOrchestrator
from twinscan.ui import ReportTUI
from twinscan.vfs import MemoryFileSystem


class InterruptingObserver(ScanObserver):
    """Raises KeyboardInterrupt once a given number of files is cataloged."""

    def __init__(self, after: int) -> None:
        self.after = after
        self.count = 0

    def on_file_cataloged(self, handle: FileHandle, entry: CatalogEntry) -> None:
        self.count += 1
        if self.count == self.after:
            raise KeyboardInterrupt


def _memory_orchestrator(fs: MemoryFileSystem, tui: ReportTUI, **kwargs) -> DedupeOrchestrator:
    return DedupeOrchestrator(
        roots=[PurePosixPath("/a"), PurePosixPath("/b")],
        filesystem=fs,
        tui=tui,
        **kwargs,
    )


@pytest.mark.integration
class TestDedupeOrchestratorMemory:
    """Orchestrator runs against the in-memory scenario tree."""

    def test_run_reports_duplicate_sets(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        summary = _memory_orchestrator(scenario_tree, tui_with_captured_output).run()

        assert len(summary.duplicate_sets) == 1
        assert [str(p) for p in summary.duplicate_sets[0].paths] == [
            "/a/x",
            "/b/x-link",
            "/a/y",
            "/b/copy-of-y",
        ]
        assert summary.files_seen == 8
        assert summary.unique_files == 7
        assert summary.aliases == 1
        assert summary.partial_digests == 6
        assert summary.full_digests == 5
        assert summary.reclaimable_bytes == 8
        assert summary.errors == []
        assert summary.digest_name == "md5"
        assert summary.interrupted is False

        output = tui_with_captured_output.console.file.getvalue()
        assert "Duplicate Sets" in output
        assert "Scan Summary" in output
        assert "/b/copy-of-y" in output

    def test_paranoid_run(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        orchestrator = _memory_orchestrator(scenario_tree, tui_with_captured_output, paranoid=True)

        summary = orchestrator.run()

        assert orchestrator.digest_name == "sha3_256"
        assert summary.digest_name == "sha3_256"
        assert len(summary.duplicate_sets[0].digest) == 32

    def test_runs_are_repeatable(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        orchestrator = _memory_orchestrator(scenario_tree, tui_with_captured_output)

        first = orchestrator.run()
        second = orchestrator.run()

        assert [d.paths for d in first.duplicate_sets] == [d.paths for d in second.duplicate_sets]

    def test_exclusions_are_applied(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        summary = _memory_orchestrator(
            scenario_tree,
            tui_with_captured_output,
            excluded_dirs=[PurePosixPath("/b")],
            excluded_patterns=["^y$"],
        ).run()

        assert summary.duplicate_sets == []
        assert "No duplicate files found." in tui_with_captured_output.console.file.getvalue()

    def test_errors_are_collected(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        scenario_tree.add_file("/a/locked/f", b"")
        scenario_tree.deny_access("/a/locked")
        scenario_tree.fail_reads("/b/copy-of-y")

        summary = _memory_orchestrator(scenario_tree, tui_with_captured_output).run()

        assert len(summary.walk_errors) == 1
        assert len(summary.skipped) == 1
        assert len(summary.errors) == 2
        assert [str(p) for p in summary.duplicate_sets[0].paths] == ["/a/x", "/b/x-link", "/a/y"]
        assert "Issues (2)" in tui_with_captured_output.console.file.getvalue()

    def test_interrupt_keeps_partial_results(
        self, scenario_tree: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        summary = _memory_orchestrator(
            scenario_tree,
            tui_with_captured_output,
            observer=InterruptingObserver(after=2),
        ).run()

        assert summary.interrupted is True
        assert summary.files_seen == 2
        assert [str(p) for p in summary.duplicate_sets[0].paths] == ["/a/x", "/a/y"]
        assert "INTERRUPTED" in tui_with_captured_output.console.file.getvalue()

    def test_verbose_lists_every_issue(
        self, memory_fs: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        roots = [PurePosixPath(f"/missing-{i}") for i in range(12)]

        summary = DedupeOrchestrator(
            roots=roots,
            verbose=True,
            filesystem=memory_fs,
            tui=tui_with_captured_output,
        ).run()

        output = tui_with_captured_output.console.file.getvalue()
        assert len(summary.errors) == 12
        assert "All issues:" in output
        assert "/missing-11" in output


@pytest.mark.integration
class TestDedupeOrchestratorOnDisk:
    """Orchestrator runs against a real directory tree."""

    def test_real_tree(self, real_tree: Path, tui_with_captured_output: ReportTUI):
        summary = DedupeOrchestrator(roots=[real_tree], tui=tui_with_captured_output).run()

        assert len(summary.duplicate_sets) == 2
        assert summary.errors == []

    def test_log_file_is_written(
        self, real_tree: Path, temp_dir: Path, tui_with_captured_output: ReportTUI
    ):
        log_path = temp_dir / "scan.log"

        DedupeOrchestrator(
            roots=[real_tree / "photos"],
            log_file_path=log_path,
            tui=tui_with_captured_output,
        ).run()

        content = log_path.read_text(encoding="utf-8")
        assert "twinscan - Duplicate File Scan" in content
        assert "Digest: md5" in content
        assert "DUPLICATE SETS" in content
        assert "Set 1: 3 files" in content
        assert "SUMMARY" in content

    def test_unwritable_log_path_does_not_abort(
        self,
        real_tree: Path,
        tui_with_captured_output: ReportTUI,
        capsys: pytest.CaptureFixture,
    ):
        summary = DedupeOrchestrator(
            roots=[real_tree / "photos"],
            log_file_path=real_tree / "missing-dir" / "scan.log",
            tui=tui_with_captured_output,
        ).run()

        assert len(summary.duplicate_sets) == 1
        assert "Could not create log file" in capsys.readouterr().err


@pytest.mark.integration
class TestDedupeOrchestratorValidation:
    """Argument validation."""

    def test_requires_a_root(self):
        with pytest.raises(ValueError, match="At least one path"):
            DedupeOrchestrator(roots=[])

    def test_rejects_invalid_pattern_before_any_output(
        self, memory_fs: MemoryFileSystem, tui_with_captured_output: ReportTUI
    ):
        memory_fs.add_file("/a/x", b"AAAA")
        orchestrator = DedupeOrchestrator(
            roots=[PurePosixPath("/a")],
            excluded_patterns=["[unclosed"],
            filesystem=memory_fs,
            tui=tui_with_captured_output,
        )

        with pytest.raises(ValueError, match="Invalid exclude pattern"):
            orchestrator.run()
        assert tui_with_captured_output.console.file.getvalue() == ""
        assert memory_fs.open_count("/a/x") == 0
