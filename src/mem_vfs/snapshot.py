"""Snapshots and structural diffs.

A snapshot is a full deep clone of the tree: new node objects, copied
content buffers, and the original timestamps, mode, uid, and gid.  The
clone shares nothing with the live tree, so later writes cannot leak into
it.  Restoring clones it *again*, which leaves the stored copy untouched
and lets the same snapshot be restored any number of times.

A diff walks two trees side by side, matching children by name:

- a file only in the newer tree → ``ADDED``
- a file in both with different bytes → ``MODIFIED``
- a file only in the older tree → ``DELETED``

Directories never produce records of their own; their contents are
compared instead, whether the directory is new, removed, or in both.
A renamed directory therefore shows up as every file deleted under the
old name and added under the new one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from itertools import count

from mem_vfs import errors
from mem_vfs.nodes import Directory, File, FileStats, Node


class DiffType(StrEnum):
    """The kind of change a ``FileDiff`` records."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class FileDiff:
    """One changed file between two trees."""

    type: DiffType
    path: str
    old_content: bytes | None = None
    new_content: bytes | None = None
    old_stats: FileStats | None = None
    new_stats: FileStats | None = None


@dataclass(frozen=True)
class SnapshotInfo:
    """Summary of a stored snapshot, computed when it was taken."""

    id: str
    name: str | None
    created_at: datetime
    file_count: int
    directory_count: int
    total_size: int


@dataclass(frozen=True)
class NodeCounts:
    """Aggregate counters over a subtree."""

    file_count: int = 0
    directory_count: int = 0
    total_size: int = 0


def count_nodes(root: Directory) -> NodeCounts:
    """Count files, directories (including *root*), and content bytes.

    Symlinks are not counted and not followed.
    """
    files = 0
    directories = 0
    total = 0
    pending: list[Node] = [root]
    while pending:
        node = pending.pop()
        match node:
            case File():
                files += 1
                total += node.size
            case Directory():
                directories += 1
                pending.extend(child for _, child in node.entries())
    return NodeCounts(file_count=files, directory_count=directories, total_size=total)


class SnapshotStore:
    """Keeps deep clones of a tree under generated ids (``snapshot-1``, ...)."""

    def __init__(self) -> None:
        """Create an empty store."""
        self._snapshots: dict[str, tuple[Directory, SnapshotInfo]] = {}
        self._counter = count(start=1)

    def create(self, root: Directory, name: str | None = None) -> str:
        """Clone *root* and store it; return the new snapshot id."""
        snapshot_id = f"snapshot-{next(self._counter)}"
        cloned = root.clone()
        counts = count_nodes(cloned)
        info = SnapshotInfo(
            id=snapshot_id,
            name=name,
            created_at=datetime.now(UTC),
            file_count=counts.file_count,
            directory_count=counts.directory_count,
            total_size=counts.total_size,
        )
        self._snapshots[snapshot_id] = (cloned, info)
        return snapshot_id

    def root_of(self, snapshot_id: str) -> Directory:
        """Return the stored tree itself (treat it as read-only).

        Raises:
            SnapshotNotFoundError: If *snapshot_id* is unknown.

        """
        try:
            return self._snapshots[snapshot_id][0]
        except KeyError as exc:
            raise errors.SnapshotNotFoundError(snapshot_id, exc) from exc

    def clone_root(self, snapshot_id: str) -> Directory:
        """Return a fresh, independent clone of a stored tree."""
        return self.root_of(snapshot_id).clone()

    def info(self, snapshot_id: str) -> SnapshotInfo | None:
        """Return a snapshot's summary, or None if unknown."""
        entry = self._snapshots.get(snapshot_id)
        return entry[1] if entry else None

    def infos(self) -> list[SnapshotInfo]:
        """Return every summary in creation order."""
        return [info for _, info in self._snapshots.values()]

    def delete(self, snapshot_id: str) -> bool:
        """Drop a snapshot; return whether it existed."""
        return self._snapshots.pop(snapshot_id, None) is not None

    def clear(self) -> None:
        """Drop every snapshot and restart id numbering."""
        self._snapshots.clear()
        self._counter = count(start=1)

    def __len__(self) -> int:
        """Return the number of stored snapshots."""
        return len(self._snapshots)


def compute_diff(from_root: Directory, to_root: Directory) -> list[FileDiff]:
    """Return the per-file differences from *from_root* to *to_root*.

    Records come out depth-first with names in sorted order.
    """
    diffs: list[FileDiff] = []
    _diff_directories(from_root, to_root, "", diffs)
    return diffs


def _diff_directories(
    old_dir: Directory | None,
    new_dir: Directory | None,
    base: str,
    diffs: list[FileDiff],
) -> None:
    old_children = dict(old_dir.entries()) if old_dir else {}
    new_children = dict(new_dir.entries()) if new_dir else {}

    for name in sorted(old_children.keys() | new_children.keys()):
        path = f"{base}/{name}"
        old = old_children.get(name)
        new = new_children.get(name)
        old_file = old if isinstance(old, File) else None
        new_file = new if isinstance(new, File) else None

        if old_file and new_file:
            if old_file.content != new_file.content:
                diffs.append(
                    FileDiff(
                        type=DiffType.MODIFIED,
                        path=path,
                        old_content=old_file.content,
                        new_content=new_file.content,
                        old_stats=old_file.stats(),
                        new_stats=new_file.stats(),
                    )
                )
        elif new_file:
            diffs.append(
                FileDiff(
                    type=DiffType.ADDED,
                    path=path,
                    new_content=new_file.content,
                    new_stats=new_file.stats(),
                )
            )
        elif old_file:
            diffs.append(
                FileDiff(
                    type=DiffType.DELETED,
                    path=path,
                    old_content=old_file.content,
                    old_stats=old_file.stats(),
                )
            )

        old_sub = old if isinstance(old, Directory) else None
        new_sub = new if isinstance(new, Directory) else None
        if old_sub or new_sub:
            _diff_directories(old_sub, new_sub, path, diffs)
