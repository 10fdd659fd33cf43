"""Node model — files, directories, and symlinks.

Every entry in the tree is a ``Node``.  The three kinds share one metadata
contract (name, timestamps, mode, uid, gid, size) and each carries its own
payload:

- **File** — a byte buffer, replaced wholesale on write.
- **Directory** — a name-keyed mapping of child nodes.
- **Symlink** — a target path string, resolved only when traversed.

A node never points back at its parent.  The owning directory's mapping is
the only edge into a node, so ancestry is rebuilt from the path being
walked.  Removing a name from that mapping is how a node is destroyed.

Kind is fixed by the concrete class and never changes after construction;
code that needs to branch on it uses ``match`` over the three classes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import ClassVar


class NodeType(StrEnum):
    """The kind of object a node represents."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


DEFAULT_FILE_MODE = 0o644
DEFAULT_DIRECTORY_MODE = 0o755
DEFAULT_SYMLINK_MODE = 0o777

DIRECTORY_SIZE = 4096
"""Reported size of every directory — metadata overhead, not content."""


def _now() -> datetime:
    return datetime.now(UTC)


def to_bytes(data: str | bytes | bytearray | memoryview, encoding: str = "utf-8") -> bytes:
    """Coerce file content to bytes, encoding strings with *encoding*."""
    if isinstance(data, str):
        return data.encode(encoding)
    return bytes(data)


@dataclass(frozen=True)
class FileStats:
    """Read-only snapshot of a node's metadata (returned by stat)."""

    is_file: bool
    is_directory: bool
    is_symlink: bool
    size: int
    created_time: datetime
    modified_time: datetime
    accessed_time: datetime
    mode: int
    uid: int = 0
    gid: int = 0


class Node:
    """Metadata shared by every node kind.

    Subclasses set ``node_type`` and implement ``size`` and ``clone``.
    """

    node_type: ClassVar[NodeType]

    def __init__(self, name: str, mode: int) -> None:
        """Create a node stamped with the current time."""
        self.name = name
        self.mode = mode
        self.uid = 0
        self.gid = 0
        now = _now()
        self.created_time = now
        self.modified_time = now
        self.accessed_time = now

    @property
    def is_file(self) -> bool:
        """Return True for file nodes."""
        return self.node_type is NodeType.FILE

    @property
    def is_directory(self) -> bool:
        """Return True for directory nodes."""
        return self.node_type is NodeType.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        """Return True for symlink nodes."""
        return self.node_type is NodeType.SYMLINK

    @property
    def size(self) -> int:
        """Return the kind-dependent size in bytes."""
        raise NotImplementedError

    def stats(self) -> FileStats:
        """Create a read-only snapshot of this node's metadata."""
        return FileStats(
            is_file=self.is_file,
            is_directory=self.is_directory,
            is_symlink=self.is_symlink,
            size=self.size,
            created_time=self.created_time,
            modified_time=self.modified_time,
            accessed_time=self.accessed_time,
            mode=self.mode,
            uid=self.uid,
            gid=self.gid,
        )

    def touch(self) -> None:
        """Update the access time."""
        self.accessed_time = _now()

    def mark_modified(self) -> None:
        """Update the modification (and access) time."""
        now = _now()
        self.modified_time = now
        self.accessed_time = now

    def clone(self) -> Node:
        """Return an independent deep copy of this node."""
        raise NotImplementedError

    def _copy_metadata_to(self, other: Node) -> None:
        other.uid = self.uid
        other.gid = self.gid
        other.created_time = self.created_time
        other.modified_time = self.modified_time
        other.accessed_time = self.accessed_time

    def __repr__(self) -> str:
        """Show the kind and name."""
        return f"{type(self).__name__}({self.name!r})"


class File(Node):
    """A regular file holding raw bytes."""

    node_type = NodeType.FILE

    def __init__(
        self,
        name: str,
        content: str | bytes = b"",
        mode: int = DEFAULT_FILE_MODE,
    ) -> None:
        """Create a file; string content is stored as UTF-8."""
        super().__init__(name, mode)
        self._content: bytes = to_bytes(content)

    @property
    def size(self) -> int:
        """Return the content length in bytes."""
        return len(self._content)

    @property
    def content(self) -> bytes:
        """Return the raw content without touching the access time."""
        return self._content

    def read(self, encoding: str | None = None) -> str | bytes:
        """Return the content, decoded when *encoding* is given."""
        self.touch()
        if encoding:
            return self._content.decode(encoding)
        return self._content

    def write(self, data: str | bytes) -> None:
        """Replace the whole content."""
        self._content = to_bytes(data)
        self.mark_modified()

    def append(self, data: str | bytes) -> None:
        """Append to the end of the content."""
        self._content += to_bytes(data)
        self.mark_modified()

    def truncate(self, length: int = 0) -> None:
        """Shrink the content to *length* bytes (never grows it)."""
        if length >= len(self._content):
            return
        self._content = self._content[: max(length, 0)]
        self.mark_modified()

    def clone(self) -> File:
        """Return a copy with its own buffer and the same metadata."""
        cloned = File(self.name, self._content, self.mode)
        self._copy_metadata_to(cloned)
        return cloned


class Directory(Node):
    """A directory owning a name-keyed mapping of child nodes."""

    node_type = NodeType.DIRECTORY

    def __init__(self, name: str, mode: int = DEFAULT_DIRECTORY_MODE) -> None:
        """Create an empty directory."""
        super().__init__(name, mode)
        self._children: dict[str, Node] = {}

    @property
    def size(self) -> int:
        """Return the fixed directory size."""
        return DIRECTORY_SIZE

    @property
    def child_count(self) -> int:
        """Return the number of direct children."""
        return len(self._children)

    @property
    def is_empty(self) -> bool:
        """Return True if the directory has no children."""
        return not self._children

    def get_child(self, name: str) -> Node | None:
        """Return the child called *name*, or None."""
        self.touch()
        return self._children.get(name)

    def has_child(self, name: str) -> bool:
        """Return True if a child called *name* exists."""
        return name in self._children

    def add_child(self, node: Node) -> None:
        """Link *node* under its own name, replacing any same-named child."""
        self._children[node.name] = node
        self.mark_modified()

    def remove_child(self, name: str) -> bool:
        """Unlink the child called *name*; return whether it existed."""
        if self._children.pop(name, None) is None:
            return False
        self.mark_modified()
        return True

    def clear(self) -> None:
        """Unlink every child."""
        if self._children:
            self._children.clear()
            self.mark_modified()

    def child_names(self) -> list[str]:
        """Return the child names (unordered)."""
        return list(self._children)

    def children(self) -> list[Node]:
        """Return the child nodes (unordered)."""
        self.touch()
        return list(self._children.values())

    def entries(self) -> Iterator[tuple[str, Node]]:
        """Iterate over (name, node) pairs."""
        yield from list(self._children.items())

    def clone(self) -> Directory:
        """Return a deep copy of this directory and everything below it."""
        cloned = Directory(self.name, self.mode)
        self._copy_metadata_to(cloned)
        for name, child in self._children.items():
            cloned._children[name] = child.clone()
        return cloned


class Symlink(Node):
    """A symbolic link storing an unvalidated target path."""

    node_type = NodeType.SYMLINK

    def __init__(self, name: str, target: str, mode: int = DEFAULT_SYMLINK_MODE) -> None:
        """Create a symlink; *target* need not exist."""
        super().__init__(name, mode)
        self._target = target

    @property
    def target(self) -> str:
        """Return the stored target path."""
        return self._target

    @property
    def size(self) -> int:
        """Return the UTF-8 byte length of the target."""
        return len(self._target.encode("utf-8"))

    def set_target(self, target: str) -> None:
        """Point the link somewhere else."""
        self._target = target
        self.mark_modified()

    def clone(self) -> Symlink:
        """Return a copy pointing at the same target."""
        cloned = Symlink(self.name, self._target, self.mode)
        self._copy_metadata_to(cloned)
        return cloned
