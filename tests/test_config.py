"""Tests for file system and watcher options."""

import dataclasses

import pytest

from mem_vfs.config import DEFAULT_DEBOUNCE, MAX_SYMLINK_DEPTH, VFSOptions, WatchOptions
from mem_vfs.nodes import DEFAULT_DIRECTORY_MODE, DEFAULT_FILE_MODE, DEFAULT_SYMLINK_MODE


class TestVFSOptions:
    """Verify defaults and derived copies."""

    def test_defaults(self) -> None:
        """Defaults match the node constants."""
        options = VFSOptions()
        assert options.case_sensitive
        assert options.default_file_mode == DEFAULT_FILE_MODE
        assert options.default_directory_mode == DEFAULT_DIRECTORY_MODE
        assert options.default_symlink_mode == DEFAULT_SYMLINK_MODE
        assert options.max_symlink_depth == MAX_SYMLINK_DEPTH

    def test_frozen(self) -> None:
        """Options cannot be changed in place."""
        options = VFSOptions()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.max_symlink_depth = 1  # type: ignore[misc]

    def test_with_overrides(self) -> None:
        """Overrides produce a new object and leave the original alone."""
        options = VFSOptions()
        limit = 8
        derived = options.with_overrides(max_symlink_depth=limit)
        assert derived.max_symlink_depth == limit
        assert options.max_symlink_depth == MAX_SYMLINK_DEPTH

    def test_overrides_are_validated(self) -> None:
        """A derived copy is validated like a new one."""
        with pytest.raises(ValueError, match="max_symlink_depth"):
            VFSOptions().with_overrides(max_symlink_depth=-5)


class TestWatchOptions:
    """Verify watcher defaults."""

    def test_defaults(self) -> None:
        """Watchers are recursive and primed by default."""
        options = WatchOptions()
        assert options.recursive
        assert not options.ignore_initial
        assert options.ignored == ()
        assert options.debounce == DEFAULT_DEBOUNCE
        assert options.depth is None

    def test_with_overrides(self) -> None:
        """Overrides produce a new object."""
        depth = 3
        options = WatchOptions().with_overrides(depth=depth, ignored=("*.log",))
        assert options.depth == depth
        assert options.ignored == ("*.log",)
