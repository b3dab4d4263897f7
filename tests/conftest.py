"""Pytest fixtures for twinscan tests."""

import io
import os
import platform
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from rich.console import Console

from twinscan.catalog import FileCatalog
from twinscan.scanning import FileHasher, select_digest
from twinscan.ui import ReportTUI
from twinscan.vfs import MemoryFileSystem


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests against the in-memory filesystem")
    config.addinivalue_line("markers", "integration: tests touching the real filesystem")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Return an empty in-memory filesystem on device 1."""
    return MemoryFileSystem()


@pytest.fixture
def hasher(memory_fs: MemoryFileSystem) -> FileHasher:
    """FileHasher over the memory filesystem using the default digest."""
    return FileHasher(memory_fs, select_digest(paranoid=False))


@pytest.fixture
def catalog(memory_fs: MemoryFileSystem, hasher: FileHasher) -> FileCatalog:
    """Empty FileCatalog over the memory filesystem."""
    return FileCatalog(memory_fs, hasher)


@pytest.fixture
def scenario_tree(memory_fs: MemoryFileSystem) -> MemoryFileSystem:
    """Build a small tree exercising every stage of the catalog.

    Creates:
        /a/x          "AAAA"
        /a/y          "AAAA"           (duplicate of x)
        /a/z          "AAAB"           (same size, different content)
        /a/sub/big1   64 x "Q" + "1"
        /a/sub/big2   64 x "Q" + "2"   (same first 32 bytes as big1)
        /a/sub/lonely "unique size"
        /b/x-link     hard link to /a/x
        /b/copy-of-y  "AAAA"

    Returns:
        The populated memory filesystem.
    """
    memory_fs.add_file("/a/x", b"AAAA")
    memory_fs.add_file("/a/y", b"AAAA")
    memory_fs.add_file("/a/z", b"AAAB")
    memory_fs.add_file("/a/sub/big1", b"Q" * 64 + b"1")
    memory_fs.add_file("/a/sub/big2", b"Q" * 64 + b"2")
    memory_fs.add_file("/a/sub/lonely", b"unique size")
    memory_fs.add_dir("/b")
    memory_fs.make_hard_link("/b/x-link", "/a/x")
    memory_fs.add_file("/b/copy-of-y", b"AAAA")
    return memory_fs


@pytest.fixture
def real_tree(temp_dir: Path) -> Path:
    """Create a real directory tree with duplicates, a hard link and a symlink.

    Creates:
        temp_dir/
        ├── photos/
        │   ├── a.jpg          "jpeg-bytes-1"
        │   ├── b.jpg          "jpeg-bytes-1"   (duplicate of a.jpg)
        │   ├── c.jpg          "jpeg-bytes-2"
        │   └── notes.swp      "jpeg-bytes-1"   (excluded by pattern in tests)
        ├── backup/
        │   ├── a-copy.jpg     "jpeg-bytes-1"
        │   ├── a-link.jpg     hard link to photos/a.jpg (if supported)
        │   └── tmp/
        │       └── c-copy.jpg "jpeg-bytes-2"
        └── link-to-photos -> photos (if supported)

    Returns:
        Path to the base temporary directory.
    """
    photos = temp_dir / "photos"
    photos.mkdir()
    (photos / "a.jpg").write_bytes(b"jpeg-bytes-1")
    (photos / "b.jpg").write_bytes(b"jpeg-bytes-1")
    (photos / "c.jpg").write_bytes(b"jpeg-bytes-2")
    (photos / "notes.swp").write_bytes(b"jpeg-bytes-1")

    backup = temp_dir / "backup"
    (backup / "tmp").mkdir(parents=True)
    (backup / "a-copy.jpg").write_bytes(b"jpeg-bytes-1")
    (backup / "tmp" / "c-copy.jpg").write_bytes(b"jpeg-bytes-2")

    try:
        os.link(photos / "a.jpg", backup / "a-link.jpg")
    except OSError:
        pass

    try:
        (temp_dir / "link-to-photos").symlink_to(photos, target_is_directory=True)
    except OSError:
        pass

    return temp_dir


@pytest.fixture
def unreadable_dir(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a directory without read permission, or skip where unsupported."""
    if platform.system() == "Windows" or (hasattr(os, "geteuid") and os.geteuid() == 0):
        pytest.skip("Permission bits are not enforced here")

    locked = temp_dir / "locked"
    locked.mkdir()
    (locked / "hidden.txt").write_bytes(b"hidden")
    os.chmod(locked, 0o000)
    try:
        yield locked
    finally:
        os.chmod(locked, 0o755)


@pytest.fixture
def tui_with_captured_output() -> ReportTUI:
    """Create a ReportTUI instance with Console output captured to StringIO.

    Access captured output via: tui.console.file.getvalue()
    """
    output = io.StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return ReportTUI(console=console)
