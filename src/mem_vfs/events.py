"""Commit events — how the file system tells the outside world it changed.

After every committed mutation the file system synchronously calls each
registered ``ChangeListener`` before the operation returns.  Listeners
own all buffering and coalescing; the file system only reports facts:

- ``file_changed(path, stats)`` — a file was created or its content changed.
- ``directory_added(path, stats)`` — a directory was created.
- ``removed(path, is_directory)`` — a file, symlink, or directory was unlinked.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from mem_vfs.nodes import FileStats


class ChangeListener(Protocol):
    """Receiver of synchronous commit events."""

    def file_changed(self, path: str, stats: FileStats | None) -> None:
        """Handle a created or modified file."""
        ...

    def directory_added(self, path: str, stats: FileStats | None) -> None:
        """Handle a created directory."""
        ...

    def removed(self, path: str, is_directory: bool) -> None:
        """Handle an unlinked file, symlink, or directory."""
        ...


class ChangeType(StrEnum):
    """Kinds of event a watcher emits to its handlers."""

    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"
    ADD_DIR = "addDir"
    UNLINK_DIR = "unlinkDir"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class ChangeEvent:
    """One coalesced change delivered to watcher handlers."""

    type: ChangeType
    path: str
    stats: FileStats | None = None
    error: Exception | None = None


class RecordingListener:
    """Listener that keeps every commit event, in order, for inspection."""

    def __init__(self) -> None:
        """Create a listener with no recorded events."""
        self.events: list[tuple[str, str]] = []

    def file_changed(self, path: str, stats: FileStats | None) -> None:  # noqa: ARG002
        """Record a file change."""
        self.events.append(("file_changed", path))

    def directory_added(self, path: str, stats: FileStats | None) -> None:  # noqa: ARG002
        """Record a directory creation."""
        self.events.append(("directory_added", path))

    def removed(self, path: str, is_directory: bool) -> None:  # noqa: FBT001
        """Record a removal."""
        kind = "directory_removed" if is_directory else "file_removed"
        self.events.append((kind, path))
