"""Watchers — coalesce commit events into change notifications.

The file system reports every commit synchronously.  A ``Watcher`` sits
on the receiving end and turns those reports into ``ChangeEvent`` objects
for its handlers:

- **Scope** — only the watched path and its descendants, up to
  ``depth`` levels, minus anything matched by ``ignored``.
- **Add vs change** — a set of known paths decides whether a file write
  is reported as ``add`` or ``change``.
- **Coalescing** — events go into a ``Debouncer`` keyed by path, so a
  burst of writes to one file is delivered once, as its last event.

Delivery happens on ``flush()``.  When an asyncio loop is passed to
``schedule`` the flush is armed with ``loop.call_later`` instead, and
every new event pushes it back by ``debounce`` seconds.  If that loop
closes, the watcher goes back to waiting for ``flush()``.

``ignored`` patterns use the glob syntax of ``mem_vfs.glob`` and are
tested against the path relative to the watched path and the bare name,
just like ``GlobOptions.ignore``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Generic, TypeVar

from mem_vfs.config import WatchOptions
from mem_vfs.events import ChangeEvent, ChangeType
from mem_vfs.glob import pattern_to_regex
from mem_vfs.nodes import FileStats
from mem_vfs.paths import basename, is_sub_path, normalize_path, relative, split_path

T = TypeVar("T")

Handler = Callable[[ChangeEvent], None]
ALL_EVENTS = "all"


class Debouncer(Generic[T]):
    """Path-keyed, last-write-wins buffer flushed as one batch."""

    def __init__(self, callback: Callable[[dict[str, T]], None], delay: float = 0.1) -> None:
        """Create a debouncer that hands batches to *callback*.

        Args:
            callback: Receives the pending items, keyed by path, in
                first-seen order.
            delay: Seconds a scheduled flush waits after the last add.

        """
        self._callback = callback
        self.delay = delay
        self._pending: dict[str, T] = {}
        self._timer: asyncio.TimerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def has_pending(self) -> bool:
        """Return True if items are waiting to be flushed."""
        return bool(self._pending)

    @property
    def pending_count(self) -> int:
        """Return the number of waiting items."""
        return len(self._pending)

    def add(self, key: str, item: T) -> None:
        """Buffer *item* under *key*, replacing any earlier item for it."""
        self._pending[key] = item
        if self._loop is not None:
            self._arm()

    def peek(self, key: str) -> T | None:
        """Return the pending item for *key* without removing it."""
        return self._pending.get(key)

    def remove(self, key: str) -> None:
        """Drop the pending item for *key*, if any."""
        self._pending.pop(key, None)

    def schedule(self, loop: asyncio.AbstractEventLoop) -> None:
        """Flush automatically on *loop* once ``delay`` passes without adds."""
        self._loop = loop
        if self._pending:
            self._arm()

    def unschedule(self) -> None:
        """Stop flushing automatically; pending items wait for ``flush``."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._loop = None

    @property
    def is_scheduled(self) -> bool:
        """Return True while an open loop is set to flush automatically."""
        return self._loop is not None and not self._loop.is_closed()

    def _arm(self) -> None:
        if not self.is_scheduled:
            # The loop has closed; fall back to explicit flushing.
            self._timer = None
            self._loop = None
            return
        assert self._loop is not None  # noqa: S101
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(self.delay, self.flush)

    def cancel(self) -> None:
        """Discard everything pending and disarm the timer."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending.clear()

    def flush(self) -> None:
        """Deliver everything pending now."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self._pending:
            return
        batch = self._pending
        self._pending = {}
        self._callback(batch)


class Watcher:
    """Receive commit events for one subtree and notify handlers.

    Implements the ``ChangeListener`` protocol; register it with
    ``VirtualFileSystem.add_listener`` or create it through
    ``VirtualFileSystem.watch``.
    """

    def __init__(
        self,
        path: str,
        options: WatchOptions | None = None,
        *,
        on_close: Callable[[Watcher], None] | None = None,
    ) -> None:
        """Create a watcher for *path*."""
        self.path = normalize_path(path)
        self.options = options or WatchOptions()
        self._on_close = on_close
        self._closed = False
        self._ready_due = False
        self._known: set[str] = set()
        self._handlers: dict[str, list[Handler]] = {}
        self._debouncer: Debouncer[ChangeEvent] = Debouncer(self._deliver, self.options.debounce)

        ignored = self.options.ignored
        self._ignore_predicate = ignored if callable(ignored) else None
        self._ignore_patterns = [] if callable(ignored) else [pattern_to_regex(p) for p in ignored]

    @property
    def is_closed(self) -> bool:
        """Return True once ``close`` has been called."""
        return self._closed

    @property
    def pending_count(self) -> int:
        """Return the number of events waiting for ``flush``."""
        return self._debouncer.pending_count

    # -- Handlers ------------------------------------------------------------

    def on(self, event: ChangeType | str, handler: Handler) -> Watcher:
        """Call *handler* for *event* (or ``"all"``); return self for chaining."""
        self._handlers.setdefault(str(event), []).append(handler)
        return self

    def off(self, event: ChangeType | str, handler: Handler) -> Watcher:
        """Stop calling *handler* for *event*."""
        handlers = self._handlers.get(str(event), [])
        if handler in handlers:
            handlers.remove(handler)
        return self

    def listener_count(self, event: ChangeType | str) -> int:
        """Return how many handlers are registered for *event*."""
        return len(self._handlers.get(str(event), []))

    def _emit(self, event: ChangeEvent) -> None:
        for handler in list(self._handlers.get(event.type.value, [])):
            handler(event)
        for handler in list(self._handlers.get(ALL_EVENTS, [])):
            handler(event)

    # -- Scope ---------------------------------------------------------------

    def register_path(self, path: str) -> None:
        """Mark *path* as already existing."""
        self._known.add(normalize_path(path))

    def unregister_path(self, path: str) -> None:
        """Forget *path*."""
        self._known.discard(normalize_path(path))

    def _depth_of(self, path: str) -> int:
        return len(split_path(path)) - len(split_path(self.path))

    def should_watch(self, path: str) -> bool:
        """Return True if *path* is inside this watcher's scope."""
        if path != self.path and not is_sub_path(path, self.path):
            return False
        depth = self._depth_of(path)
        if not self.options.recursive and depth > 1:
            return False
        if self.options.depth is not None and depth > self.options.depth:
            return False
        return not self._is_ignored(path)

    def _is_ignored(self, path: str) -> bool:
        if self._ignore_predicate is not None:
            return self._ignore_predicate(path)
        relative_path = relative(self.path, path)
        name = basename(path)
        return any(p.match(relative_path) or p.match(name) for p in self._ignore_patterns)

    # -- ChangeListener ------------------------------------------------------

    def file_changed(self, path: str, stats: FileStats | None) -> None:
        """Queue an ``add`` for a new path or a ``change`` for a known one.

        A ``change`` that lands on a still-pending ``add`` stays an ``add``.
        """
        path = normalize_path(path)
        if self._closed or not self.should_watch(path):
            return
        change = ChangeType.CHANGE if path in self._known else ChangeType.ADD
        pending = self._debouncer.peek(path)
        if pending is not None and pending.type is ChangeType.ADD:
            change = ChangeType.ADD
        self._known.add(path)
        self._debouncer.add(path, ChangeEvent(type=change, path=path, stats=stats))

    def directory_added(self, path: str, stats: FileStats | None) -> None:
        """Queue an ``addDir``."""
        path = normalize_path(path)
        if self._closed or not self.should_watch(path):
            return
        self._known.add(path)
        self._debouncer.add(path, ChangeEvent(type=ChangeType.ADD_DIR, path=path, stats=stats))

    def removed(self, path: str, is_directory: bool) -> None:  # noqa: FBT001
        """Queue an ``unlink`` or ``unlinkDir``; forget paths below it."""
        path = normalize_path(path)
        if self._closed or not self.should_watch(path):
            return
        self._known.discard(path)
        if is_directory:
            self._known = {p for p in self._known if not is_sub_path(p, path)}
        change = ChangeType.UNLINK_DIR if is_directory else ChangeType.UNLINK
        self._debouncer.add(path, ChangeEvent(type=change, path=path))

    # -- Delivery ------------------------------------------------------------

    def schedule(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Flush automatically on *loop* (the running loop if omitted).

        A ``ready`` still owed to handlers is sent on the loop's next turn.
        """
        target = loop or asyncio.get_running_loop()
        self._debouncer.schedule(target)
        if self._ready_due:
            target.call_soon(self._send_due_ready)

    def unschedule(self) -> None:
        """Go back to delivering only on ``flush``."""
        self._debouncer.unschedule()

    @property
    def is_scheduled(self) -> bool:
        """Return True while delivery is armed on an open loop."""
        return self._debouncer.is_scheduled

    def flush(self) -> None:
        """Deliver a pending ``ready`` and then every pending event."""
        if self._closed:
            return
        self._send_due_ready()
        self._debouncer.flush()

    def _deliver(self, batch: dict[str, ChangeEvent]) -> None:
        self._send_due_ready()
        for event in batch.values():
            self._emit(event)

    def mark_ready(self) -> None:
        """Owe handlers a ``ready``, sent before the next delivery."""
        self._ready_due = True

    def _send_due_ready(self) -> None:
        if self._ready_due:
            self.emit_ready()

    def emit_ready(self) -> None:
        """Tell handlers the initial scan is complete."""
        self._ready_due = False
        if not self._closed:
            self._emit(ChangeEvent(type=ChangeType.READY, path=self.path))

    def emit_error(self, error: Exception) -> None:
        """Pass *error* to ``error`` handlers."""
        if not self._closed:
            self._emit(ChangeEvent(type=ChangeType.ERROR, path=self.path, error=error))

    def close(self) -> None:
        """Drop pending events and handlers, and unsubscribe."""
        if self._closed:
            return
        self._closed = True
        self._debouncer.cancel()
        self._handlers.clear()
        self._known.clear()
        if self._on_close is not None:
            self._on_close(self)
