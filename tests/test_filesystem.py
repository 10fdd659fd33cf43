"""Tests for the in-memory file system — files, directories, and queries.

The file system is a tree of nodes rooted at ``/``.  These tests cover
the everyday operations: writing and reading files, creating and
removing directories, listing, stat, and the commit events every
mutation reports.
"""

import pytest

from mem_vfs import create_vfs, errors
from mem_vfs.config import VFSOptions
from mem_vfs.events import RecordingListener
from mem_vfs.filesystem import VirtualFileSystem
from mem_vfs.logging import Logger, LogLevel
from mem_vfs.nodes import DIRECTORY_SIZE

# -- Files ---------------------------------------------------------------------


class TestWriteAndRead:
    """Verify that written bytes come back exactly."""

    def test_write_creates_parents(self) -> None:
        """Writing a deep path creates every missing directory."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a/b/c.txt", "hi")
        assert vfs.is_directory("/a")
        assert vfs.is_directory("/a/b")
        assert vfs.read_file("/a/b/c.txt", "utf-8") == "hi"

    @pytest.mark.parametrize("content", [b"", b"\x00\x01\xff", "plain text".encode()])
    def test_bytes_round_trip(self, content: bytes) -> None:
        """Whatever bytes go in come back out, including empty content."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", content)
        assert vfs.read_file("/f") == content

    def test_write_overwrites(self) -> None:
        """A second write replaces the first."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "first")
        vfs.write_file("/f", "second")
        assert vfs.read_file("/f") == b"second"

    def test_write_with_encoding(self) -> None:
        """String content is encoded with the given encoding."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "é", encoding="latin-1")
        assert vfs.read_file("/f") == b"\xe9"

    def test_write_with_temp_suffix(self) -> None:
        """A temp-suffixed write leaves only the final file behind."""
        vfs = VirtualFileSystem()
        vfs.write_file("/dir/f.txt", "data", temp_suffix=".tmp")
        assert vfs.read_file("/dir/f.txt") == b"data"
        assert not vfs.exists("/dir/f.txt.tmp")

    def test_relative_path_anchored_at_root(self) -> None:
        """A relative path means the same as its absolute form."""
        vfs = VirtualFileSystem()
        vfs.write_file("docs/readme", "x")
        assert vfs.read_file("/docs/readme") == b"x"

    def test_write_to_directory_fails(self) -> None:
        """A directory cannot be written as a file."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        with pytest.raises(errors.NotAFileError):
            vfs.write_file("/d", "x")

    def test_write_to_root_fails(self) -> None:
        """The root is never a file."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.NotAFileError):
            vfs.write_file("/", "x")

    def test_write_below_file_fails(self) -> None:
        """A file cannot act as a parent directory."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "x")
        with pytest.raises(errors.NotADirectoryError):
            vfs.write_file("/f/child", "y")

    def test_invalid_path_leaves_tree_untouched(self) -> None:
        """Validation fails before any directory is created."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.InvalidPathError):
            vfs.write_file("/new/dir/CON", "x")
        assert not vfs.exists("/new")

    def test_read_missing_file(self) -> None:
        """Reading a missing path raises FileNotFoundError."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError) as exc_info:
            vfs.read_file("/nope")
        assert exc_info.value.code is errors.ErrorCode.FILE_NOT_FOUND

    def test_read_directory_as_file(self) -> None:
        """Reading a directory raises NotAFileError."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        with pytest.raises(errors.NotAFileError):
            vfs.read_file("/d")


class TestAppendAndTruncate:
    """Verify in-place content changes."""

    def test_append_existing(self) -> None:
        """Append extends an existing file."""
        vfs = VirtualFileSystem()
        vfs.write_file("/log", "a")
        vfs.append_file("/log", "b")
        assert vfs.read_file("/log") == b"ab"

    def test_append_creates(self) -> None:
        """Append to a missing file creates it."""
        vfs = VirtualFileSystem()
        vfs.append_file("/x/log", "a")
        assert vfs.read_file("/x/log") == b"a"

    def test_append_to_directory_fails(self) -> None:
        """A directory cannot be appended to."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        with pytest.raises(errors.NotAFileError):
            vfs.append_file("/d", "x")

    def test_truncate(self) -> None:
        """Truncate shrinks to the requested length."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "abcdef")
        vfs.truncate_file("/f", 2)
        assert vfs.read_file("/f") == b"ab"

    def test_truncate_missing(self) -> None:
        """Truncating a missing file fails."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.truncate_file("/nope")


class TestDeleteCopyMove:
    """Verify unlinking and the composite copy/move operations."""

    def test_delete_file(self) -> None:
        """A deleted file no longer exists."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "x")
        vfs.delete_file("/f")
        assert not vfs.exists("/f")

    def test_delete_missing(self) -> None:
        """Deleting a missing file fails."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.delete_file("/nope")

    def test_delete_missing_parent(self) -> None:
        """A missing parent is reported as a missing file."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.delete_file("/no/such/file")

    def test_delete_directory_with_delete_file(self) -> None:
        """delete_file refuses directories."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        with pytest.raises(errors.NotAFileError):
            vfs.delete_file("/d")

    def test_copy(self) -> None:
        """Copy leaves both files with the same content."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a", "data")
        vfs.copy_file("/a", "/sub/b")
        assert vfs.read_file("/a") == b"data"
        assert vfs.read_file("/sub/b") == b"data"

    def test_copy_is_independent(self) -> None:
        """Changing the copy does not change the original."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a", "one")
        vfs.copy_file("/a", "/b")
        vfs.write_file("/b", "two")
        assert vfs.read_file("/a") == b"one"

    def test_copy_missing_source(self) -> None:
        """Copying a missing file fails without creating the destination."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.copy_file("/nope", "/b")
        assert not vfs.exists("/b")

    def test_move(self) -> None:
        """Move leaves only the destination."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a", "data")
        vfs.move_file("/a", "/b")
        assert not vfs.exists("/a")
        assert vfs.read_file("/b") == b"data"

    def test_move_onto_itself(self) -> None:
        """Moving a file to its own path keeps it."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a", "data")
        vfs.move_file("/a", "//a")
        assert vfs.read_file("/a") == b"data"

    def test_move_missing_onto_itself(self) -> None:
        """A same-path move still requires the source to exist."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.move_file("/a", "/a")


# -- Directories -----------------------------------------------------------------


class TestDirectories:
    """Verify creating, listing, and deleting directories."""

    def test_create(self) -> None:
        """A created directory exists and is empty."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        assert vfs.is_directory("/d")
        assert vfs.list_directory("/d") == []

    def test_create_existing_is_noop(self) -> None:
        """Creating an existing directory keeps its contents."""
        vfs = VirtualFileSystem()
        vfs.write_file("/d/f", "x")
        vfs.create_directory("/d")
        assert vfs.list_directory("/d") == ["f"]

    def test_create_without_parent(self) -> None:
        """Non-recursive creation needs the parent to exist."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.DirectoryNotFoundError):
            vfs.create_directory("/a/b")

    def test_create_recursive(self) -> None:
        """Recursive creation makes every level."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/a/b/c", recursive=True)
        assert vfs.is_directory("/a/b/c")

    def test_create_over_file(self) -> None:
        """A file in the way is reported as not a directory."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "x")
        with pytest.raises(errors.NotADirectoryError):
            vfs.create_directory("/f")

    def test_read_directory_sorted(self) -> None:
        """Listings are sorted by name and carry kinds and sizes."""
        vfs = VirtualFileSystem()
        vfs.write_file("/d/b.txt", "abc")
        vfs.create_directory("/d/a")
        vfs.create_symlink("/d/b.txt", "/d/c")
        entries = vfs.read_directory("/d")
        assert [e.name for e in entries] == ["a", "b.txt", "c"]
        assert [e.path for e in entries] == ["/d/a", "/d/b.txt", "/d/c"]
        assert entries[0].is_directory
        assert entries[0].size == DIRECTORY_SIZE
        assert entries[1].is_file
        assert entries[1].size == len(b"abc")
        assert entries[2].is_symlink

    def test_read_root(self) -> None:
        """Root entries have absolute paths."""
        vfs = VirtualFileSystem()
        vfs.write_file("/x", "")
        assert [e.path for e in vfs.read_directory("/")] == ["/x"]

    def test_read_missing_directory(self) -> None:
        """Listing a missing directory fails."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.DirectoryNotFoundError):
            vfs.read_directory("/nope")

    def test_read_file_as_directory(self) -> None:
        """Listing a file fails."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "")
        with pytest.raises(errors.NotADirectoryError):
            vfs.read_directory("/f")

    def test_delete_non_empty(self) -> None:
        """Non-recursive delete refuses a directory with children."""
        vfs = VirtualFileSystem()
        vfs.write_file("/d/file.txt", "x")
        with pytest.raises(errors.DirectoryNotEmptyError):
            vfs.delete_directory("/d")
        vfs.delete_directory("/d", recursive=True)
        assert not vfs.exists("/d")

    def test_delete_empty(self) -> None:
        """An empty directory is removed without recursion."""
        vfs = VirtualFileSystem()
        vfs.create_directory("/d")
        vfs.delete_directory("/d")
        assert not vfs.exists("/d")

    def test_delete_missing(self) -> None:
        """Deleting a missing directory fails."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.DirectoryNotFoundError):
            vfs.delete_directory("/nope")

    def test_delete_file_as_directory(self) -> None:
        """delete_directory refuses files."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "")
        with pytest.raises(errors.NotADirectoryError):
            vfs.delete_directory("/f")

    def test_delete_root_recursive_empties_it(self) -> None:
        """The root survives a recursive delete but loses its children."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a/b", "x")
        vfs.write_file("/c", "y")
        vfs.delete_directory("/", recursive=True)
        assert vfs.exists("/")
        assert vfs.list_directory("/") == []

    def test_delete_root_non_recursive(self) -> None:
        """A non-empty root refuses a non-recursive delete."""
        vfs = VirtualFileSystem()
        vfs.write_file("/c", "y")
        with pytest.raises(errors.DirectoryNotEmptyError):
            vfs.delete_directory("/")
        vfs.delete_file("/c")
        vfs.delete_directory("/")


# -- Queries ---------------------------------------------------------------------


class TestQueries:
    """Verify exists, stat, and the kind predicates."""

    def test_root_exists(self) -> None:
        """The root always exists and is a directory."""
        vfs = VirtualFileSystem()
        assert vfs.exists("/")
        assert vfs.is_directory("/")

    def test_exists_invalid_path_is_false(self) -> None:
        """An invalid path simply does not exist."""
        vfs = VirtualFileSystem()
        assert not vfs.exists("")
        assert not vfs.exists("/AUX")

    def test_stat_file(self) -> None:
        """Stat reports size and kind."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "12345")
        stats = vfs.stat("/f")
        expected_size = 5
        assert stats.is_file
        assert stats.size == expected_size
        assert stats.mode == VFSOptions().default_file_mode

    def test_stat_missing(self) -> None:
        """Stat on a missing path fails."""
        vfs = VirtualFileSystem()
        with pytest.raises(errors.FileNotFoundError):
            vfs.stat("/nope")

    def test_modes_from_options(self) -> None:
        """New nodes take their modes from the options."""
        file_mode = 0o600
        dir_mode = 0o700
        vfs = VirtualFileSystem(
            VFSOptions(default_file_mode=file_mode, default_directory_mode=dir_mode)
        )
        vfs.write_file("/d/f", "x")
        assert vfs.stat("/d/f").mode == file_mode
        assert vfs.stat("/d").mode == dir_mode

    def test_predicates_on_missing(self) -> None:
        """Every predicate is False for a missing path."""
        vfs = VirtualFileSystem()
        assert not vfs.is_file("/nope")
        assert not vfs.is_directory("/nope")
        assert not vfs.is_symlink("/nope")

    def test_create_vfs_factory(self) -> None:
        """The factory builds a file system with the given options."""
        options = VFSOptions(max_symlink_depth=3)
        vfs = create_vfs(options)
        assert vfs.options is options


# -- Commit events and logging ---------------------------------------------------


class TestCommitEvents:
    """Verify that every committed mutation is reported, in order."""

    def test_write_reports_parents_then_file(self) -> None:
        """Implicit directories are reported before the file."""
        vfs = VirtualFileSystem()
        listener = RecordingListener()
        vfs.add_listener(listener)
        vfs.write_file("/a/b/c.txt", "x")
        assert listener.events == [
            ("directory_added", "/a"),
            ("directory_added", "/a/b"),
            ("file_changed", "/a/b/c.txt"),
        ]

    def test_removals(self) -> None:
        """File and directory removals are told apart."""
        vfs = VirtualFileSystem()
        vfs.write_file("/d/f", "x")
        listener = RecordingListener()
        vfs.add_listener(listener)
        vfs.delete_file("/d/f")
        vfs.delete_directory("/d")
        assert listener.events == [("file_removed", "/d/f"), ("directory_removed", "/d")]

    def test_move_is_write_then_remove(self) -> None:
        """A move reports the destination write before the source removal."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a", "x")
        listener = RecordingListener()
        vfs.add_listener(listener)
        vfs.move_file("/a", "/b")
        assert listener.events == [("file_changed", "/b"), ("file_removed", "/a")]

    def test_failed_operation_reports_nothing(self) -> None:
        """Nothing is reported when an operation raises."""
        vfs = VirtualFileSystem()
        listener = RecordingListener()
        vfs.add_listener(listener)
        with pytest.raises(errors.FileNotFoundError):
            vfs.delete_file("/nope")
        assert listener.events == []

    def test_remove_listener(self) -> None:
        """A removed listener hears nothing more."""
        vfs = VirtualFileSystem()
        listener = RecordingListener()
        vfs.add_listener(listener)
        vfs.remove_listener(listener)
        vfs.remove_listener(listener)
        vfs.write_file("/f", "x")
        assert listener.events == []

    def test_mutations_are_logged(self) -> None:
        """Each commit leaves an INFO entry from the vfs source."""
        logger = Logger()
        vfs = VirtualFileSystem(logger=logger)
        vfs.write_file("/f", "x")
        vfs.delete_file("/f")
        messages = [e.message for e in logger.filter(source="vfs")]
        assert messages == ["create /f", "unlink /f"]
        assert all(e.level is LogLevel.INFO for e in logger.entries)

    def test_reset(self) -> None:
        """Reset empties the tree and forgets snapshots."""
        vfs = VirtualFileSystem()
        vfs.write_file("/f", "x")
        vfs.create_snapshot()
        vfs.reset()
        assert vfs.list_directory("/") == []
        assert vfs.list_snapshots() == []
