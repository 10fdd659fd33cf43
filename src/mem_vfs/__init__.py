"""mem-vfs — an in-memory hierarchical file system.

Re-exports public symbols so callers can write::

    from mem_vfs import VirtualFileSystem, GlobOptions
"""

from mem_vfs.aio import AsyncVirtualFileSystem
from mem_vfs.config import MAX_SYMLINK_DEPTH, VFSOptions, WatchOptions
from mem_vfs.errors import (
    DirectoryAlreadyExistsError,
    DirectoryNotEmptyError,
    DirectoryNotFoundError,
    ErrorCode,
    FileAlreadyExistsError,
    FileNotFoundError,  # noqa: A004
    FileSystemError,
    InvalidPathError,
    MaxDepthExceededError,
    NotADirectoryError,  # noqa: A004
    NotAFileError,
    NotASymlinkError,
    PermissionDeniedError,
    SnapshotNotFoundError,
    SymlinkLoopError,
    VFSIOError,
)
from mem_vfs.events import ChangeEvent, ChangeListener, ChangeType, RecordingListener
from mem_vfs.filesystem import DirectoryEntry, VirtualFileSystem
from mem_vfs.glob import GlobOptions, pattern_to_regex
from mem_vfs.interchange import dump_vfs, from_json, load_vfs, to_json
from mem_vfs.logging import LogEntry, Logger, LogLevel
from mem_vfs.nodes import Directory, File, FileStats, Node, NodeType, Symlink
from mem_vfs.snapshot import DiffType, FileDiff, SnapshotInfo
from mem_vfs.watcher import Debouncer, Watcher

__all__ = [
    "MAX_SYMLINK_DEPTH",
    "AsyncVirtualFileSystem",
    "ChangeEvent",
    "ChangeListener",
    "ChangeType",
    "Debouncer",
    "DiffType",
    "Directory",
    "DirectoryAlreadyExistsError",
    "DirectoryEntry",
    "DirectoryNotEmptyError",
    "DirectoryNotFoundError",
    "ErrorCode",
    "File",
    "FileAlreadyExistsError",
    "FileDiff",
    "FileNotFoundError",
    "FileStats",
    "FileSystemError",
    "GlobOptions",
    "InvalidPathError",
    "LogEntry",
    "LogLevel",
    "Logger",
    "MaxDepthExceededError",
    "Node",
    "NodeType",
    "NotADirectoryError",
    "NotAFileError",
    "NotASymlinkError",
    "PermissionDeniedError",
    "RecordingListener",
    "SnapshotInfo",
    "SnapshotNotFoundError",
    "Symlink",
    "SymlinkLoopError",
    "VFSIOError",
    "VFSOptions",
    "VirtualFileSystem",
    "WatchOptions",
    "Watcher",
    "create_vfs",
    "dump_vfs",
    "from_json",
    "load_vfs",
    "pattern_to_regex",
    "to_json",
]


def create_vfs(options: VFSOptions | None = None) -> VirtualFileSystem:
    """Return a new, empty file system."""
    return VirtualFileSystem(options)
