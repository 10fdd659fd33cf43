"""Glob matching over the in-memory tree.

A pattern is compiled to an anchored regular expression:

- ``*`` matches any run of characters except ``/``.
- ``?`` matches exactly one character except ``/``.
- ``**`` matches any run of characters, ``/`` included.

Everything else is literal.  ``**`` is swapped for a placeholder before
``*`` is expanded, so the single-star rule cannot eat half of it.

The tree is walked depth-first, pre-order, from ``cwd``.  Each node's path
relative to ``cwd`` is tested against the pattern.  Results are sorted
before they are returned, so the output never depends on the order
directories happen to store their children in.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mem_vfs import errors
from mem_vfs.nodes import Directory, Node, Symlink
from mem_vfs.paths import ROOT, relative, resolve_path

if TYPE_CHECKING:
    from mem_vfs.filesystem import VirtualFileSystem

_GLOBSTAR = "\x00GLOBSTAR\x00"
_REGEX_SPECIALS = re.compile(r"[.+^${}()|\[\]\\]")


@dataclass(frozen=True)
class GlobOptions:
    """Settings for one glob call.

    Attributes:
        cwd: Directory the walk starts from; patterns match paths
            relative to it.
        ignore: Patterns for nodes to skip, tested against both the
            relative path and the bare name.  An ignored directory is
            not descended into.
        dot: Include names starting with ``.``.
        absolute: Return absolute paths instead of relative ones.
        only_files: Return files only.
        only_directories: Return directories only.
        follow_symlinks: Treat a symlink as the node it points to.
        max_depth: Deepest directory level below ``cwd`` to descend
            into (None = unbounded).

    """

    cwd: str = ROOT
    ignore: Sequence[str] = ()
    dot: bool = False
    absolute: bool = True
    only_files: bool = False
    only_directories: bool = False
    follow_symlinks: bool = True
    max_depth: int | None = None


def pattern_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a glob *pattern* into an anchored regular expression."""
    escaped = _REGEX_SPECIALS.sub(lambda m: "\\" + m.group(0), pattern)
    expression = (
        escaped.replace("**", _GLOBSTAR)
        .replace("*", "[^/]*")
        .replace("?", "[^/]")
        .replace(_GLOBSTAR, ".*")
    )
    return re.compile(f"^{expression}$")


def _matches_any(patterns: Sequence[re.Pattern[str]], relative_path: str, name: str) -> bool:
    return any(p.match(relative_path) or p.match(name) for p in patterns)


def _include(node: Node, options: GlobOptions) -> bool:
    if options.only_files and not node.is_file:
        return False
    return not (options.only_directories and not node.is_directory)


def glob(
    vfs: VirtualFileSystem,
    pattern: str,
    options: GlobOptions | None = None,
) -> list[str]:
    """Return the sorted paths below ``options.cwd`` that match *pattern*.

    A missing or non-directory ``cwd`` matches nothing.  Broken (or
    looping) symlinks are skipped when following symlinks.  A symlink
    that leads back to a directory already being walked is matched but
    not descended into again.
    """
    options = options or GlobOptions()
    cwd = resolve_path(options.cwd).full_path
    regex = pattern_to_regex(pattern)
    ignore = [pattern_to_regex(p) for p in options.ignore]
    results: list[str] = []

    def traverse(directory: Directory, current_path: str, depth: int, active: set[int]) -> None:
        if options.max_depth is not None and depth > options.max_depth:
            return

        for name, node in directory.entries():
            node_path = f"/{name}" if current_path == ROOT else f"{current_path}/{name}"
            relative_path = relative(cwd, node_path)

            if not options.dot and name.startswith("."):
                continue
            if _matches_any(ignore, relative_path, name):
                continue

            effective = node
            if isinstance(node, Symlink) and options.follow_symlinks:
                try:
                    resolved = vfs.resolve_node(node_path, True)
                except errors.FileSystemError:
                    resolved = None
                if resolved is None:
                    continue
                effective = resolved

            if regex.match(relative_path) and _include(effective, options):
                results.append(node_path if options.absolute else relative_path)

            if isinstance(effective, Directory) and id(effective) not in active:
                traverse(effective, node_path, depth + 1, active | {id(effective)})

    start = vfs.resolve_node(cwd, True)
    if isinstance(start, Directory):
        traverse(start, cwd, 0, {id(start)})
    return sorted(results)
