"""
Unit tests for MemoryFileSystem in twinscan.vfs.memory_fs.

MemoryFileSystem stands in for the real disk in most tests, so these tests
pin down that it fails the same way the operating system does.
"""

import errno
from pathlib import PurePosixPath

import pytest

from twinscan.models import FileType
from twinscan.vfs import MemoryFileSystem


@pytest.mark.unit
class TestMemoryFileSystemBuilders:
    """Tests for the tree building helpers."""

    def test_add_file_creates_parents(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/a/b/c.txt", b"hello")

        assert memory_fs.stat("/a").file_type is FileType.DIR
        assert memory_fs.stat("/a/b").file_type is FileType.DIR
        metadata = memory_fs.stat("/a/b/c.txt")
        assert metadata.file_type is FileType.FILE
        assert metadata.size == 5

    def test_add_file_accepts_text(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/t.txt", "héllo")
        assert memory_fs.stat("/t.txt").size == len("héllo".encode("utf-8"))

    def test_add_file_twice_raises(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"1")
        with pytest.raises(FileExistsError):
            memory_fs.add_file("/x", b"2")

    def test_every_file_gets_its_own_inode(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"same")
        memory_fs.add_file("/y", b"same")
        assert memory_fs.stat("/x").identity != memory_fs.stat("/y").identity

    def test_mount_point_device_is_inherited(self, memory_fs: MemoryFileSystem):
        memory_fs.add_dir("/mnt/usb", device=2)
        memory_fs.add_file("/mnt/usb/photos/a.jpg", b"jpeg")

        assert memory_fs.stat("/mnt").identity.device == 1
        assert memory_fs.stat("/mnt/usb").identity.device == 2
        assert memory_fs.stat("/mnt/usb/photos/a.jpg").identity.device == 2


@pytest.mark.unit
class TestMemoryFileSystemListing:
    """Tests for list_dir."""

    def test_lists_children_in_insertion_order(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/d/b", b"")
        memory_fs.add_file("/d/a", b"")
        memory_fs.add_dir("/d/c")

        assert list(memory_fs.list_dir("/d")) == [
            PurePosixPath("/d/b"),
            PurePosixPath("/d/a"),
            PurePosixPath("/d/c"),
        ]

    def test_list_file_raises_not_a_directory(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/f", b"")
        with pytest.raises(NotADirectoryError):
            memory_fs.list_dir("/f")

    def test_list_missing_raises_not_found(self, memory_fs: MemoryFileSystem):
        with pytest.raises(FileNotFoundError):
            memory_fs.list_dir("/missing")

    def test_list_denied_raises_permission_error(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/locked/secret", b"")
        memory_fs.deny_access("/locked")

        with pytest.raises(PermissionError):
            memory_fs.list_dir("/locked")

    def test_denied_dir_is_still_visible_to_lstat(self, memory_fs: MemoryFileSystem):
        """The parent can still describe a locked directory, only its contents are hidden."""
        memory_fs.add_file("/locked/secret", b"")
        memory_fs.deny_access("/locked")

        assert memory_fs.lstat("/locked").file_type is FileType.DIR
        with pytest.raises(PermissionError):
            memory_fs.stat("/locked/secret")


@pytest.mark.unit
class TestMemoryFileSystemSymlinks:
    """Tests for symlink resolution."""

    def test_stat_follows_and_lstat_does_not(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/a/x", b"AAAA")
        memory_fs.add_symlink("/a/link", "/a/x")

        assert memory_fs.lstat("/a/link").file_type is FileType.SYMLINK
        assert memory_fs.stat("/a/link").file_type is FileType.FILE
        assert memory_fs.stat("/a/link").identity == memory_fs.stat("/a/x").identity

    def test_relative_target_resolves_from_link_directory(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/a/x", b"AAAA")
        memory_fs.add_symlink("/a/rel", "x")

        assert memory_fs.stat("/a/rel").identity == memory_fs.stat("/a/x").identity

    def test_symlinked_directory_in_the_middle_of_a_path(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/real/inner/f", b"data")
        memory_fs.add_symlink("/alias", "/real")

        assert memory_fs.stat("/alias/inner/f").size == 4
        assert list(memory_fs.list_dir("/alias/inner")) == [PurePosixPath("/alias/inner/f")]

    def test_read_link_returns_target(self, memory_fs: MemoryFileSystem):
        memory_fs.add_symlink("/l", "/nowhere")
        assert memory_fs.read_link("/l") == PurePosixPath("/nowhere")

    def test_read_link_on_file_raises_einval(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/f", b"")
        with pytest.raises(OSError) as exc_info:
            memory_fs.read_link("/f")
        assert exc_info.value.errno == errno.EINVAL

    def test_dangling_symlink(self, memory_fs: MemoryFileSystem):
        memory_fs.add_symlink("/dangling", "/nowhere")

        assert memory_fs.lstat("/dangling").file_type is FileType.SYMLINK
        with pytest.raises(FileNotFoundError):
            memory_fs.stat("/dangling")

    def test_symlink_loop_raises_eloop(self, memory_fs: MemoryFileSystem):
        memory_fs.add_symlink("/l1", "/l2")
        memory_fs.add_symlink("/l2", "/l1")

        with pytest.raises(OSError) as exc_info:
            memory_fs.stat("/l1")
        assert exc_info.value.errno == errno.ELOOP


@pytest.mark.unit
class TestMemoryFileSystemFiles:
    """Tests for open_file, remove_file and make_hard_link."""

    def test_open_file_reads_content(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"content")
        with memory_fs.open_file("/x") as f:
            assert f.read() == b"content"

    def test_open_counts_successful_opens(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"content")
        assert memory_fs.open_count("/x") == 0

        memory_fs.open_file("/x").close()
        memory_fs.open_file("x").close()

        assert memory_fs.open_count("/x") == 2

    def test_open_directory_raises(self, memory_fs: MemoryFileSystem):
        memory_fs.add_dir("/d")
        with pytest.raises(IsADirectoryError):
            memory_fs.open_file("/d")

    def test_open_special_raises_einval(self, memory_fs: MemoryFileSystem):
        memory_fs.add_special("/fifo")
        with pytest.raises(OSError) as exc_info:
            memory_fs.open_file("/fifo")
        assert exc_info.value.errno == errno.EINVAL

    def test_fail_reads_raises_on_read(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/bad", b"content")
        memory_fs.fail_reads("/bad")

        with memory_fs.open_file("/bad") as f:
            with pytest.raises(OSError) as exc_info:
                f.read(4)
        assert exc_info.value.errno == errno.EIO

    def test_fail_reads_after_offset(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/bad", b"content")
        memory_fs.fail_reads("/bad", after=4)

        with memory_fs.open_file("/bad") as f:
            assert f.read(4) == b"cont"
            with pytest.raises(OSError) as exc_info:
                f.read(4)
        assert exc_info.value.errno == errno.EIO

        # Each open starts from the beginning again
        with memory_fs.open_file("/bad") as f:
            assert f.read(2) == b"co"
        assert memory_fs.open_count("/bad") == 2

    def test_remove_file(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"1")
        memory_fs.remove_file("/x")

        with pytest.raises(FileNotFoundError):
            memory_fs.stat("/x")

    def test_remove_directory_raises(self, memory_fs: MemoryFileSystem):
        memory_fs.add_dir("/d")
        with pytest.raises(IsADirectoryError):
            memory_fs.remove_file("/d")

    def test_remove_missing_raises(self, memory_fs: MemoryFileSystem):
        with pytest.raises(FileNotFoundError):
            memory_fs.remove_file("/missing")

    def test_hard_link_shares_identity(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/a/x", b"AAAA")
        memory_fs.make_hard_link("/a/y", "/a/x")

        assert memory_fs.stat("/a/y").identity == memory_fs.stat("/a/x").identity
        with memory_fs.open_file("/a/y") as f:
            assert f.read() == b"AAAA"

    def test_hard_link_survives_removal_of_original(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/a/x", b"AAAA")
        memory_fs.make_hard_link("/a/y", "/a/x")
        memory_fs.remove_file("/a/x")

        assert memory_fs.stat("/a/y").size == 4

    def test_hard_link_over_existing_path_raises(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"1")
        memory_fs.add_file("/y", b"2")
        with pytest.raises(FileExistsError):
            memory_fs.make_hard_link("/y", "/x")

    def test_hard_link_across_devices_raises_exdev(self, memory_fs: MemoryFileSystem):
        memory_fs.add_file("/x", b"1")
        memory_fs.add_dir("/mnt", device=2)

        with pytest.raises(OSError) as exc_info:
            memory_fs.make_hard_link("/mnt/x", "/x")
        assert exc_info.value.errno == errno.EXDEV

    def test_hard_link_to_directory_raises(self, memory_fs: MemoryFileSystem):
        memory_fs.add_dir("/d")
        with pytest.raises(PermissionError):
            memory_fs.make_hard_link("/d2", "/d")
