"""In-memory record of what the file system committed.

``VirtualFileSystem`` writes one ``LogEntry`` per mutation to its
``Logger`` so callers can audit a session after the fact.  Sources:

    - ``"vfs"``: create, write, append, truncate, symlink, mkdir,
      unlink, rmdir, and the entries put back by a restore.
    - ``"snapshot"``: create, restore, delete.
    - ``"resolver"``: a symlink chain that hit ``max_symlink_depth``.

Commits log at INFO and loops at WARNING.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """How much an entry matters; comparable for ``min_level`` checks."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """One committed action, e.g. ``[INFO] vfs: write /a.txt``."""

    level: LogLevel
    message: str
    source: str
    path: str | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message``."""
        return f"[{self.level.name}] {self.source}: {self.message}"


class Logger:
    """Keeps the entries of one or more file systems in commit order.

    Entries below ``min_level`` are dropped at write time, so a file
    system used in a hot loop can keep only the loop warnings.
    """

    def __init__(self, *, min_level: LogLevel = LogLevel.DEBUG) -> None:
        """Create an empty logger that keeps entries at or above *min_level*."""
        self._entries: list[LogEntry] = []
        self.min_level = min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every kept entry, oldest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        path: str | None = None,
    ) -> None:
        """Record *message* from *source* about *path* unless below ``min_level``."""
        if level < self.min_level:
            return
        self._entries.append(LogEntry(level=level, message=message, source=source, path=path))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        path: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching every given criterion."""
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        if path is not None:
            result = [e for e in result if e.path == path]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()
