"""Configuration for the file system and its watchers.

Options are frozen dataclasses: build one, pass it in, and derive
variants with ``with_overrides`` instead of mutating shared state.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from mem_vfs.nodes import DEFAULT_DIRECTORY_MODE, DEFAULT_FILE_MODE, DEFAULT_SYMLINK_MODE

MAX_SYMLINK_DEPTH = 40
"""Default symlink resolution bound — matches Linux's SYMLOOP_MAX."""

DEFAULT_DEBOUNCE = 0.1
"""Default watcher coalescing window, in seconds."""


@dataclass(frozen=True)
class VFSOptions:
    """Settings applied when a ``VirtualFileSystem`` is created.

    Attributes:
        case_sensitive: Recorded for callers; names are always compared
            exactly.
        default_file_mode: Mode given to new files.
        default_directory_mode: Mode given to new directories.
        default_symlink_mode: Mode given to new symlinks.
        max_symlink_depth: How many symlinks one resolution may follow
            before it is reported as a loop.

    """

    case_sensitive: bool = True
    default_file_mode: int = DEFAULT_FILE_MODE
    default_directory_mode: int = DEFAULT_DIRECTORY_MODE
    default_symlink_mode: int = DEFAULT_SYMLINK_MODE
    max_symlink_depth: int = MAX_SYMLINK_DEPTH

    def __post_init__(self) -> None:
        """Reject a negative symlink bound."""
        if self.max_symlink_depth < 0:
            msg = f"max_symlink_depth must be >= 0, got {self.max_symlink_depth}"
            raise ValueError(msg)

    def with_overrides(self, **changes: Any) -> VFSOptions:
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class WatchOptions:
    """Settings for a ``Watcher``.

    Attributes:
        recursive: Also report changes below direct children.
        ignore_initial: Skip priming the watcher with paths that already
            exist; their first write then reports ``add``, not ``change``.
        ignored: Glob-style patterns, or a predicate, for paths to skip.
        debounce: Seconds a scheduled flush waits after the last event.
        depth: Maximum depth below the watched path (None = unbounded).

    """

    recursive: bool = True
    ignore_initial: bool = False
    ignored: tuple[str, ...] | Callable[[str], bool] = field(default=())
    debounce: float = DEFAULT_DEBOUNCE
    depth: int | None = None

    def with_overrides(self, **changes: Any) -> WatchOptions:
        """Return a copy with *changes* applied."""
        return dataclasses.replace(self, **changes)
