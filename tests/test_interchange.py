"""Tests for JSON interchange (load from a mapping, dump back out, save to disk).

The tree can be described as a plain mapping in two shapes, flat
(full path keys) or nested (one mapping per directory), and saved to a
real JSON file with ``dump_vfs`` and ``load_vfs``.
"""

import json
from pathlib import Path

import pytest

from mem_vfs.filesystem import VirtualFileSystem
from mem_vfs.interchange import dump_vfs, from_json, is_flat, load_vfs, to_json


class TestShapeDetection:
    """Verify flat versus nested detection."""

    def test_flat(self) -> None:
        """Path keys with content values are flat."""
        assert is_flat({"/src/index.ts": "x"})
        assert is_flat({"a/b": None})

    def test_nested(self) -> None:
        """Plain names and mapping values are nested."""
        assert not is_flat({"src": {"index.ts": "x"}})
        assert not is_flat({"file.txt": "x", "empty": None})


class TestFromJson:
    """Verify loading a tree from a mapping."""

    def test_flat(self) -> None:
        """Flat keys become files and directories."""
        vfs = VirtualFileSystem()
        from_json(vfs, {"/src/index.ts": "export {}", "/dist": None})
        assert vfs.read_file("/src/index.ts") == b"export {}"
        assert vfs.is_directory("/dist")

    def test_nested(self) -> None:
        """Nested mappings become subdirectories."""
        vfs = VirtualFileSystem()
        from_json(vfs, {"src": {"lib": {"a.py": "pass"}, "empty": None}, "top.txt": "t"})
        assert vfs.read_file("/src/lib/a.py") == b"pass"
        assert vfs.is_directory("/src/empty")
        assert vfs.read_file("/top.txt") == b"t"

    def test_nested_under_base_path(self) -> None:
        """A base path prefixes every nested key."""
        vfs = VirtualFileSystem()
        from_json(vfs, {"a.txt": "x"}, "/mount/point")
        assert vfs.read_file("/mount/point/a.txt") == b"x"

    def test_overwrites_existing(self) -> None:
        """Loading replaces existing file content."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a.txt", "old")
        from_json(vfs, {"a.txt": "new"})
        assert vfs.read_file("/a.txt") == b"new"


class TestToJson:
    """Verify describing the tree as a mapping."""

    def test_nested(self) -> None:
        """Files become strings, empty directories None, links tokens."""
        vfs = VirtualFileSystem()
        vfs.write_file("/src/index.ts", "export {}")
        vfs.create_directory("/dist")
        vfs.create_symlink("/src/index.ts", "/main")
        assert to_json(vfs) == {
            "dist": None,
            "main": "symlink:/src/index.ts",
            "src": {"index.ts": "export {}"},
        }

    def test_flat(self) -> None:
        """Flattened output keys files by full path."""
        vfs = VirtualFileSystem()
        vfs.write_file("/src/index.ts", "x")
        vfs.write_file("/src/lib/a.ts", "y")
        assert to_json(vfs, flatten=True) == {"/src/index.ts": "x", "/src/lib/a.ts": "y"}

    def test_flat_from_base(self) -> None:
        """A base path limits the output to its subtree."""
        vfs = VirtualFileSystem()
        vfs.write_file("/src/index.ts", "x")
        vfs.write_file("/other.txt", "y")
        assert to_json(vfs, "/src", flatten=True) == {"/src/index.ts": "x"}

    def test_missing_base(self) -> None:
        """A missing base path gives an empty mapping."""
        vfs = VirtualFileSystem()
        assert to_json(vfs, "/nope") == {}

    def test_round_trip_without_links(self) -> None:
        """Loading what was dumped rebuilds the same tree."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a/b.txt", "1")
        vfs.create_directory("/empty")
        structure = to_json(vfs)
        rebuilt = VirtualFileSystem()
        from_json(rebuilt, structure)
        assert to_json(rebuilt) == structure


class TestPersistence:
    """Verify saving to and loading from a real JSON file."""

    def test_dump_and_load(self, tmp_path: Path) -> None:
        """The tree survives a trip through a file on disk."""
        vfs = VirtualFileSystem()
        vfs.write_file("/docs/readme.md", "# hello")
        vfs.create_directory("/empty")
        path = tmp_path / "vfs.json"
        dump_vfs(vfs, path)

        loaded = load_vfs(path)
        assert loaded.read_file("/docs/readme.md") == b"# hello"
        assert loaded.is_directory("/empty")

    def test_file_is_nested_json(self, tmp_path: Path) -> None:
        """The saved file holds the nested shape."""
        vfs = VirtualFileSystem()
        vfs.write_file("/a.txt", "x")
        path = tmp_path / "vfs.json"
        dump_vfs(vfs, path)
        assert json.loads(path.read_text()) == {"a.txt": "x"}

    def test_load_into_existing(self, tmp_path: Path) -> None:
        """Loading into a file system merges with what is there."""
        path = tmp_path / "vfs.json"
        path.write_text(json.dumps({"new.txt": "n"}))
        vfs = VirtualFileSystem()
        vfs.write_file("/old.txt", "o")
        assert load_vfs(path, vfs) is vfs
        assert vfs.list_directory("/") == ["new.txt", "old.txt"]

    def test_load_missing_file(self, tmp_path: Path) -> None:
        """A missing save file raises the builtin FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_vfs(tmp_path / "absent.json")
