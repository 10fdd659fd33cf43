"""Asynchronous facade over ``VirtualFileSystem``.

Every operation is a coroutine, so it can be scheduled alongside other
tasks on one event loop.  The scheduling model:

- **Primitive operations never suspend mid-mutation.**  Each one calls
  the synchronous method and finishes before control returns to the loop.
- **Composite operations are not atomic.**  ``copy_file`` awaits the read
  and the write separately; ``move_file`` awaits the copy and the delete
  separately.  Another task can run between those steps and observe, for
  example, a file that exists at both the source and the destination.
- **No isolation, no locks, no cancellation.**  Two tasks writing the
  same path end with whichever write ran last.
"""

from __future__ import annotations

import asyncio

from mem_vfs.config import WatchOptions
from mem_vfs.events import ChangeListener
from mem_vfs.filesystem import DirectoryEntry, VirtualFileSystem
from mem_vfs.glob import GlobOptions
from mem_vfs.nodes import FileStats
from mem_vfs.paths import ROOT, resolve_path
from mem_vfs.snapshot import FileDiff, SnapshotInfo
from mem_vfs.watcher import Watcher


async def _yield() -> None:
    """Give other scheduled tasks a chance to run."""
    await asyncio.sleep(0)


class AsyncVirtualFileSystem:
    """Coroutine wrappers around a shared ``VirtualFileSystem``."""

    def __init__(self, vfs: VirtualFileSystem | None = None) -> None:
        """Wrap *vfs*, or a fresh file system."""
        self.sync = vfs or VirtualFileSystem()

    # -- Files ---------------------------------------------------------------

    async def read_file(self, path: str, encoding: str | None = None) -> str | bytes:
        """Read a file."""
        return self.sync.read_file(path, encoding)

    async def write_file(
        self,
        path: str,
        content: str | bytes,
        *,
        encoding: str | None = None,
        temp_suffix: str | None = None,
    ) -> None:
        """Write a file, creating parent directories."""
        if temp_suffix:
            temp_path = resolve_path(path).full_path + temp_suffix
            await self.write_file(temp_path, content, encoding=encoding)
            await self.move_file(temp_path, path)
            return
        self.sync.write_file(path, content, encoding=encoding)

    async def append_file(self, path: str, content: str | bytes) -> None:
        """Append to a file, creating it if needed."""
        self.sync.append_file(path, content)

    async def truncate_file(self, path: str, length: int = 0) -> None:
        """Shrink a file."""
        self.sync.truncate_file(path, length)

    async def delete_file(self, path: str) -> None:
        """Unlink a file or symlink."""
        self.sync.delete_file(path)

    async def copy_file(self, src_path: str, dest_path: str) -> None:
        """Read *src_path*, then (after yielding) write *dest_path*."""
        content = await self.read_file(src_path)
        await _yield()
        await self.write_file(dest_path, content)

    async def move_file(self, src_path: str, dest_path: str) -> None:
        """Copy, then (after yielding) delete the source."""
        if resolve_path(src_path).full_path == resolve_path(dest_path).full_path:
            self.sync.stat(src_path)
            return
        await self.copy_file(src_path, dest_path)
        await _yield()
        await self.delete_file(src_path)

    # -- Directories ---------------------------------------------------------

    async def create_directory(self, path: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Create a directory."""
        self.sync.create_directory(path, recursive)

    async def read_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory."""
        return self.sync.read_directory(path)

    async def list_directory(self, path: str) -> list[str]:
        """Return the sorted child names of a directory."""
        return self.sync.list_directory(path)

    async def delete_directory(self, path: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Remove a directory."""
        self.sync.delete_directory(path, recursive)

    # -- Queries -------------------------------------------------------------

    async def exists(self, path: str) -> bool:
        """Return True if *path* exists."""
        return self.sync.exists(path)

    async def stat(self, path: str) -> FileStats:
        """Return metadata, following symlinks."""
        return self.sync.stat(path)

    async def lstat(self, path: str) -> FileStats:
        """Return metadata without following the final symlink."""
        return self.sync.lstat(path)

    async def is_file(self, path: str) -> bool:
        """Return True for files."""
        return self.sync.is_file(path)

    async def is_directory(self, path: str) -> bool:
        """Return True for directories."""
        return self.sync.is_directory(path)

    async def is_symlink(self, path: str) -> bool:
        """Return True for symlinks."""
        return self.sync.is_symlink(path)

    # -- Symlinks, glob, snapshots -------------------------------------------

    async def create_symlink(self, target: str, link_path: str) -> None:
        """Create a symlink."""
        self.sync.create_symlink(target, link_path)

    async def read_symlink(self, path: str) -> str:
        """Return a symlink's target."""
        return self.sync.read_symlink(path)

    async def glob(self, pattern: str, options: GlobOptions | None = None) -> list[str]:
        """Return sorted matches for *pattern*."""
        return self.sync.glob(pattern, options)

    async def create_snapshot(self, name: str | None = None) -> str:
        """Take a snapshot."""
        return self.sync.create_snapshot(name)

    async def restore_snapshot(self, snapshot_id: str) -> None:
        """Restore a snapshot."""
        self.sync.restore_snapshot(snapshot_id)

    async def list_snapshots(self) -> list[SnapshotInfo]:
        """Return every snapshot summary."""
        return self.sync.list_snapshots()

    async def delete_snapshot(self, snapshot_id: str) -> bool:
        """Forget a snapshot."""
        return self.sync.delete_snapshot(snapshot_id)

    async def snapshot_info(self, snapshot_id: str) -> SnapshotInfo | None:
        """Return a snapshot's summary, or None if unknown."""
        return self.sync.snapshot_info(snapshot_id)

    async def diff(self, from_id: str | None = None, to_id: str | None = None) -> list[FileDiff]:
        """Compare two trees."""
        return self.sync.diff(from_id, to_id)

    # -- Listeners, watchers, housekeeping -----------------------------------

    async def add_listener(self, listener: ChangeListener) -> None:
        """Register *listener* for commit events."""
        self.sync.add_listener(listener)

    async def remove_listener(self, listener: ChangeListener) -> None:
        """Stop sending commit events to *listener*."""
        self.sync.remove_listener(listener)

    async def watch(self, path: str = ROOT, options: WatchOptions | None = None) -> Watcher:
        """Create a watcher whose delivery is armed on the running loop.

        ``ready`` arrives on the loop's next turn and changes arrive once
        ``debounce`` seconds pass without new events.
        """
        watcher = self.sync.watch(path, options)
        watcher.schedule(asyncio.get_running_loop())
        return watcher

    async def reset(self) -> None:
        """Empty the tree and forget every snapshot."""
        self.sync.reset()
