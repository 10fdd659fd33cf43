"""In-memory file system with directories, symlinks, snapshots, and glob.

Models a Unix-like tree that lives entirely in memory:

- **Nodes**: the tree is built from ``File``, ``Directory``, and
  ``Symlink`` nodes.  A directory owns its children by name; nothing
  points back up, so the path being walked is the only record of where
  a node sits.

- **Path resolution**: ``/foo/bar/baz.txt`` is validated, normalized,
  and walked segment by segment from the root.  Symlinks met along the
  way are followed; the last segment is followed only on request.

- **Commit events**: every mutation that completes is logged and
  reported to the registered listeners before the call returns.

Every public method validates its path before touching the tree, so a
malformed path never leaves a partial change behind.  Composite
operations (``copy_file``, ``move_file``) are sequences of primitive
steps with no rollback.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from mem_vfs import errors
from mem_vfs.config import VFSOptions, WatchOptions
from mem_vfs.events import ChangeListener
from mem_vfs.glob import GlobOptions, glob
from mem_vfs.logging import Logger, LogLevel
from mem_vfs.nodes import Directory, File, FileStats, Node, Symlink, to_bytes
from mem_vfs.paths import ROOT, is_absolute, is_valid_path, join, resolve_path
from mem_vfs.snapshot import FileDiff, SnapshotInfo, SnapshotStore, compute_diff
from mem_vfs.watcher import Watcher


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of a directory listing."""

    name: str
    path: str
    is_file: bool
    is_directory: bool
    is_symlink: bool
    size: int
    modified_time: datetime


def _child_path(parent: str, name: str) -> str:
    return f"/{name}" if parent == ROOT else f"{parent}/{name}"


class VirtualFileSystem:
    """An in-memory file system rooted at ``/``.

    All operations take ``/``-separated paths.  Relative paths are
    anchored at the root.
    """

    def __init__(self, options: VFSOptions | None = None, *, logger: Logger | None = None) -> None:
        """Create a file system with an empty root directory.

        Args:
            options: Modes and limits; defaults to ``VFSOptions()``.
            logger: Audit log to record into; a fresh one if omitted.

        """
        self.options = options or VFSOptions()
        self.logger = logger or Logger()
        self._root = Directory("", self.options.default_directory_mode)
        self._snapshots = SnapshotStore()
        self._listeners: list[ChangeListener] = []

    @property
    def root(self) -> Directory:
        """Return the root directory node."""
        return self._root

    # -- Commit events -------------------------------------------------------

    def add_listener(self, listener: ChangeListener) -> None:
        """Register *listener* for commit events."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        """Stop sending commit events to *listener* (no-op if unknown)."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _commit_file(self, path: str, node: Node, action: str) -> None:
        self.logger.log(LogLevel.INFO, f"{action} {path}", source="vfs", path=path)
        stats = node.stats()
        for listener in list(self._listeners):
            listener.file_changed(path, stats)

    def _commit_directory(self, path: str, node: Directory) -> None:
        self.logger.log(LogLevel.INFO, f"mkdir {path}", source="vfs", path=path)
        stats = node.stats()
        for listener in list(self._listeners):
            listener.directory_added(path, stats)

    def _commit_removal(self, path: str, *, is_directory: bool) -> None:
        action = "rmdir" if is_directory else "unlink"
        self.logger.log(LogLevel.INFO, f"{action} {path}", source="vfs", path=path)
        for listener in list(self._listeners):
            listener.removed(path, is_directory)

    # -- Resolution ----------------------------------------------------------

    def resolve_node(self, path: str, follow_symlinks: bool, depth: int = 0) -> Node | None:  # noqa: FBT001
        """Walk *path* from the root and return the node it names.

        Symlinks before the last segment are always followed; the last
        one only when *follow_symlinks* is set.  A relative symlink target
        is resolved against the directory that contains the symlink.

        Returns:
            The node, or None if a segment is missing, a non-directory
            is met mid-path, or a symlink's stored target is not a valid
            path.

        Raises:
            SymlinkLoopError: If more than ``max_symlink_depth`` symlinks
                are followed in one resolution.
            InvalidPathError: If *path* fails validation.

        """
        if depth > self.options.max_symlink_depth:
            self.logger.log(
                LogLevel.WARNING,
                f"symlink depth {self.options.max_symlink_depth} exceeded at {path}",
                source="resolver",
                path=path,
            )
            raise errors.SymlinkLoopError(path)

        resolution = resolve_path(path)
        segments = resolution.segments
        current: Node = self._root

        for i, segment in enumerate(segments):
            if not isinstance(current, Directory):
                return None
            child = current.get_child(segment)
            if child is None:
                return None

            is_last = i == len(segments) - 1
            if isinstance(child, Symlink) and (follow_symlinks or not is_last):
                container = "/" + "/".join(segments[:i])
                target = self._target_path(container, child)
                if not is_valid_path(target):
                    return None
                resolved = self.resolve_node(target, True, depth + 1)
                if resolved is None:
                    return None
                current = resolved
            else:
                current = child

        return current

    @staticmethod
    def _target_path(container: str, link: Symlink) -> str:
        """Return the absolute path a symlink inside *container* points at."""
        if is_absolute(link.target):
            return link.target
        return join(container, link.target)

    def get_directory(self, path: str) -> Directory:
        """Return the directory at *path*, following symlinks.

        Raises:
            DirectoryNotFoundError: If nothing exists at *path*.
            NotADirectoryError: If *path* is not a directory.

        """
        node = self.resolve_node(path, True)
        if node is None:
            raise errors.DirectoryNotFoundError(path)
        if not isinstance(node, Directory):
            raise errors.NotADirectoryError(path)
        return node

    def _get_directory_or_none(self, path: str) -> Directory | None:
        node = self.resolve_node(path, True)
        return node if isinstance(node, Directory) else None

    # -- Files ---------------------------------------------------------------

    def read_file(self, path: str, encoding: str | None = None) -> str | bytes:
        """Read a file's content.

        Args:
            path: Path to a file (symlinks are followed).
            encoding: If given, decode and return a string.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotAFileError: If the path is a directory.

        """
        node = self.resolve_node(path, True)
        match node:
            case File():
                return node.read(encoding)
            case Directory():
                raise errors.NotAFileError(path)
            case _:
                raise errors.FileNotFoundError(path)

    def write_file(
        self,
        path: str,
        content: str | bytes,
        *,
        encoding: str | None = None,
        temp_suffix: str | None = None,
    ) -> None:
        """Write *content* to a file, replacing what was there.

        Missing parent directories are created.  Writing through a
        symlink writes its target.

        Args:
            path: Path of the file to write.
            content: Bytes, or a string encoded with *encoding* (UTF-8).
            encoding: Encoding for string content.
            temp_suffix: If set, write ``path + temp_suffix`` first and
                then move it over *path*.

        Raises:
            NotAFileError: If *path* names a directory.
            NotADirectoryError: If a parent segment is not a directory.

        """
        resolution = resolve_path(path)
        if resolution.is_root:
            raise errors.NotAFileError(ROOT)
        data = to_bytes(content, encoding or "utf-8")

        if temp_suffix:
            temp_path = resolution.full_path + temp_suffix
            self._write(resolve_path(temp_path).full_path, data)
            self.move_file(temp_path, resolution.full_path)
            return
        self._write(resolution.full_path, data)

    def _write(self, full_path: str, data: bytes, depth: int = 0) -> None:
        resolution = resolve_path(full_path)
        self.create_directory(resolution.parent_path, recursive=True)
        parent = self.get_directory(resolution.parent_path)
        existing = parent.get_child(resolution.name)

        match existing:
            case File():
                existing.write(data)
                self._commit_file(full_path, existing, "write")
            case Directory():
                raise errors.NotAFileError(full_path)
            case Symlink():
                target = self.resolve_node(full_path, True, depth)
                match target:
                    case File():
                        target.write(data)
                        self._commit_file(full_path, target, "write")
                    case Directory():
                        raise errors.NotAFileError(full_path)
                    case _:
                        # Dangling link: create the file it points at.
                        dangling = self._target_path(resolution.parent_path, existing)
                        self._write(resolve_path(dangling).full_path, data, depth + 1)
            case _:
                node = File(resolution.name, data, self.options.default_file_mode)
                parent.add_child(node)
                self._commit_file(full_path, node, "create")

    def append_file(self, path: str, content: str | bytes) -> None:
        """Append *content* to a file, creating it if it does not exist.

        Raises:
            NotAFileError: If *path* is a directory.

        """
        node = self.resolve_node(path, True)
        match node:
            case None:
                self.write_file(path, content)
            case File():
                node.append(content)
                self._commit_file(resolve_path(path).full_path, node, "append")
            case _:
                raise errors.NotAFileError(path)

    def truncate_file(self, path: str, length: int = 0) -> None:
        """Shrink a file to *length* bytes.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotAFileError: If the path is a directory.

        """
        node = self.resolve_node(path, True)
        match node:
            case File():
                node.truncate(length)
                self._commit_file(resolve_path(path).full_path, node, "truncate")
            case None:
                raise errors.FileNotFoundError(path)
            case _:
                raise errors.NotAFileError(path)

    def delete_file(self, path: str) -> None:
        """Unlink a file or symlink (a final symlink is not followed).

        Raises:
            FileNotFoundError: If the path does not exist.
            NotAFileError: If the path is a directory.

        """
        resolution = resolve_path(path)
        if resolution.is_root:
            raise errors.NotAFileError(ROOT)
        parent = self._get_directory_or_none(resolution.parent_path)
        if parent is None:
            raise errors.FileNotFoundError(resolution.full_path)
        node = parent.get_child(resolution.name)
        if node is None:
            raise errors.FileNotFoundError(resolution.full_path)
        if isinstance(node, Directory):
            raise errors.NotAFileError(resolution.full_path)
        parent.remove_child(resolution.name)
        self._commit_removal(resolution.full_path, is_directory=False)

    def copy_file(self, src_path: str, dest_path: str) -> None:
        """Copy a file's content to *dest_path* (created or overwritten)."""
        content = self.read_file(src_path)
        self.write_file(dest_path, content)

    def move_file(self, src_path: str, dest_path: str) -> None:
        """Move a file: copy to *dest_path*, then delete *src_path*.

        The two steps are separate commits; there is no rollback if the
        delete fails.
        """
        source = resolve_path(src_path)
        dest = resolve_path(dest_path)
        if source.full_path == dest.full_path:
            self.stat(source.full_path)
            return
        self.copy_file(source.full_path, dest.full_path)
        self.delete_file(source.full_path)

    # -- Directories ---------------------------------------------------------

    def create_directory(self, path: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Create a directory; existing directories are left as they are.

        Args:
            path: Path of the directory.
            recursive: Also create missing intermediate directories.

        Raises:
            NotADirectoryError: If a segment exists as a non-directory.
            DirectoryNotFoundError: If an intermediate directory is
                missing and *recursive* is False.

        """
        resolution = resolve_path(path)
        if resolution.is_root:
            return

        current = self._root
        current_path = ""
        last = len(resolution.segments) - 1

        for i, segment in enumerate(resolution.segments):
            current_path = f"{current_path}/{segment}"
            child = current.get_child(segment)
            match child:
                case Directory():
                    current = child
                case Symlink():
                    resolved = self.resolve_node(current_path, True)
                    if not isinstance(resolved, Directory):
                        raise errors.NotADirectoryError(current_path)
                    current = resolved
                case File():
                    raise errors.NotADirectoryError(current_path)
                case _:
                    if not recursive and i < last:
                        raise errors.DirectoryNotFoundError(current_path)
                    new_dir = Directory(segment, self.options.default_directory_mode)
                    current.add_child(new_dir)
                    self._commit_directory(current_path, new_dir)
                    current = new_dir

    def read_directory(self, path: str) -> list[DirectoryEntry]:
        """List a directory, sorted by name.

        Raises:
            DirectoryNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.

        """
        directory = self.get_directory(path)
        base = resolve_path(path).full_path
        return [
            DirectoryEntry(
                name=node.name,
                path=_child_path(base, node.name),
                is_file=node.is_file,
                is_directory=node.is_directory,
                is_symlink=node.is_symlink,
                size=node.size,
                modified_time=node.modified_time,
            )
            for node in sorted(directory.children(), key=lambda n: n.name)
        ]

    def list_directory(self, path: str) -> list[str]:
        """Return the sorted child names of a directory."""
        return [entry.name for entry in self.read_directory(path)]

    def delete_directory(self, path: str, recursive: bool = False) -> None:  # noqa: FBT001, FBT002
        """Remove a directory.

        Deleting the root with *recursive* empties it; the root itself
        always remains.

        Raises:
            DirectoryNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.
            DirectoryNotEmptyError: If it has children and *recursive*
                is False.

        """
        resolution = resolve_path(path)
        if resolution.is_root:
            if self._root.is_empty:
                return
            if not recursive:
                raise errors.DirectoryNotEmptyError(ROOT)
            self._clear_root()
            return

        parent = self.get_directory(resolution.parent_path)
        node = parent.get_child(resolution.name)
        if node is None:
            raise errors.DirectoryNotFoundError(resolution.full_path)
        if not isinstance(node, Directory):
            raise errors.NotADirectoryError(resolution.full_path)
        if not recursive and not node.is_empty:
            raise errors.DirectoryNotEmptyError(resolution.full_path)

        parent.remove_child(resolution.name)
        self._commit_removal(resolution.full_path, is_directory=True)

    def _clear_root(self) -> None:
        for name, node in self._root.entries():
            self._root.remove_child(name)
            self._commit_removal(_child_path(ROOT, name), is_directory=node.is_directory)

    # -- Queries -------------------------------------------------------------

    def exists(self, path: str) -> bool:
        """Return True if *path* names a node (a dangling symlink counts)."""
        try:
            return self.resolve_node(path, False) is not None
        except errors.FileSystemError:
            return False

    def stat(self, path: str) -> FileStats:
        """Return metadata for *path*, following symlinks.

        Raises:
            FileNotFoundError: If the path does not exist.

        """
        node = self.resolve_node(path, True)
        if node is None:
            raise errors.FileNotFoundError(path)
        return node.stats()

    def lstat(self, path: str) -> FileStats:
        """Return metadata without following the final symlink.

        Raises:
            FileNotFoundError: If the path does not exist.

        """
        node = self.resolve_node(path, False)
        if node is None:
            raise errors.FileNotFoundError(path)
        return node.stats()

    def is_file(self, path: str) -> bool:
        """Return True if *path* resolves to a file."""
        return self._is_kind(path, File, follow_symlinks=True)

    def is_directory(self, path: str) -> bool:
        """Return True if *path* resolves to a directory."""
        return self._is_kind(path, Directory, follow_symlinks=True)

    def is_symlink(self, path: str) -> bool:
        """Return True if *path* itself is a symlink."""
        return self._is_kind(path, Symlink, follow_symlinks=False)

    def _is_kind(self, path: str, kind: type[Node], *, follow_symlinks: bool) -> bool:
        try:
            return isinstance(self.resolve_node(path, follow_symlinks), kind)
        except errors.FileSystemError:
            return False

    # -- Symlinks ------------------------------------------------------------

    def create_symlink(self, target: str, link_path: str) -> None:
        """Create a symlink at *link_path* pointing to *target*.

        The target is stored as given and need not exist.  Missing
        parent directories of *link_path* are created.

        Raises:
            FileAlreadyExistsError: If *link_path* is taken.

        """
        resolution = resolve_path(link_path)
        if resolution.is_root:
            raise errors.FileAlreadyExistsError(ROOT)
        self.create_directory(resolution.parent_path, recursive=True)
        parent = self.get_directory(resolution.parent_path)
        if parent.has_child(resolution.name):
            raise errors.FileAlreadyExistsError(resolution.full_path)

        link = Symlink(resolution.name, target, self.options.default_symlink_mode)
        parent.add_child(link)
        self._commit_file(resolution.full_path, link, "symlink")

    def read_symlink(self, path: str) -> str:
        """Return the target stored in a symlink.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotASymlinkError: If the path is not a symlink.

        """
        node = self.resolve_node(path, False)
        if node is None:
            raise errors.FileNotFoundError(path)
        if not isinstance(node, Symlink):
            raise errors.NotASymlinkError(path)
        return node.target

    # -- Glob ----------------------------------------------------------------

    def glob(self, pattern: str, options: GlobOptions | None = None) -> list[str]:
        """Return the sorted paths matching *pattern*; see ``mem_vfs.glob``."""
        return glob(self, pattern, options)

    # -- Snapshots -----------------------------------------------------------

    def create_snapshot(self, name: str | None = None) -> str:
        """Deep-clone the tree and return the new snapshot's id."""
        snapshot_id = self._snapshots.create(self._root, name)
        self.logger.log(LogLevel.INFO, f"create {snapshot_id}", source="snapshot")
        return snapshot_id

    def restore_snapshot(self, snapshot_id: str) -> None:
        """Replace the whole tree with a fresh clone of a snapshot.

        Raises:
            SnapshotNotFoundError: If *snapshot_id* is unknown.

        """
        restored = self._snapshots.clone_root(snapshot_id)
        self._clear_root()
        for name, node in restored.entries():
            self._root.add_child(node)
            path = _child_path(ROOT, name)
            match node:
                case Directory():
                    self._commit_directory(path, node)
                case _:
                    self._commit_file(path, node, "restore")
        self.logger.log(LogLevel.INFO, f"restore {snapshot_id}", source="snapshot")

    def snapshot_info(self, snapshot_id: str) -> SnapshotInfo | None:
        """Return a snapshot's summary, or None if unknown."""
        return self._snapshots.info(snapshot_id)

    def list_snapshots(self) -> list[SnapshotInfo]:
        """Return every stored snapshot's summary, oldest first."""
        return self._snapshots.infos()

    def delete_snapshot(self, snapshot_id: str) -> bool:
        """Forget a snapshot; return whether it existed."""
        deleted = self._snapshots.delete(snapshot_id)
        if deleted:
            self.logger.log(LogLevel.INFO, f"delete {snapshot_id}", source="snapshot")
        return deleted

    def diff(self, from_id: str | None = None, to_id: str | None = None) -> list[FileDiff]:
        """Compare two trees file by file.

        *from_id* defaults to an empty tree and *to_id* to the live tree.

        Raises:
            SnapshotNotFoundError: If a given id is unknown.

        """
        from_root = self._snapshots.root_of(from_id) if from_id is not None else Directory("")
        to_root = self._snapshots.root_of(to_id) if to_id is not None else self._root
        return compute_diff(from_root, to_root)

    # -- Watching ------------------------------------------------------------

    def watch(self, path: str = ROOT, options: WatchOptions | None = None) -> Watcher:
        """Create a watcher for *path* and subscribe it to commit events.

        Unless ``ignore_initial`` is set, the paths that already exist
        below *path* are registered so their first write reports
        ``change`` rather than ``add``.  ``watcher.close()`` unsubscribes.

        Events are buffered until the caller delivers them, either with
        ``watcher.flush()`` or by arming ``watcher.schedule(loop)``.  The
        first delivery starts with a ``ready`` event, so handlers added
        right after this call still receive it.
        """
        watch_path = resolve_path(path).full_path
        watcher = Watcher(watch_path, options, on_close=self.remove_listener)
        self.add_listener(watcher)
        if not watcher.options.ignore_initial:
            watcher.register_path(watch_path)
            for known in self._walk_paths(watch_path):
                watcher.register_path(known)
        watcher.mark_ready()
        return watcher

    def _walk_paths(self, path: str) -> Sequence[str]:
        directory = self._get_directory_or_none(path)
        if directory is None:
            return []
        found: list[str] = []
        for name, node in directory.entries():
            child = _child_path(path, name)
            found.append(child)
            if isinstance(node, Directory):
                found.extend(self._walk_paths(child))
        return found

    # -- Housekeeping --------------------------------------------------------

    def reset(self) -> None:
        """Empty the tree and forget every snapshot."""
        self._clear_root()
        self._snapshots.clear()
