"""JSON interchange — load a tree from a mapping and dump it back out.

Two shapes are accepted:

- **flat** — full path → value::

      {"/src/index.ts": "export {}", "/dist": None}

- **nested** — name → value, relative to a base path::

      {"src": {"index.ts": "export {}"}, "dist": None}

Values: ``None`` is an empty directory, ``str``/``bytes`` is file content,
and a mapping is a subdirectory.  A structure is treated as flat when any
key contains a ``/`` and its value is content or ``None``.

Symlinks are written out as the string ``"symlink:<target>"``.  Loading
does not turn that string back into a link, so symlinks do not survive a
round trip.

``dump_vfs`` / ``load_vfs`` store the nested shape as a JSON file.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mem_vfs.filesystem import VirtualFileSystem
from mem_vfs.nodes import Directory, File, Symlink
from mem_vfs.paths import ROOT, join, resolve_path

SYMLINK_PREFIX = "symlink:"

DirectoryJSON = Mapping[str, Any]


def is_flat(structure: DirectoryJSON) -> bool:
    """Return True if *structure* uses full paths as keys."""
    return any(
        "/" in key and (value is None or isinstance(value, str | bytes))
        for key, value in structure.items()
    )


def from_json(vfs: VirtualFileSystem, structure: DirectoryJSON, base_path: str = ROOT) -> None:
    """Create the directories and files described by *structure*.

    Existing files are overwritten; existing directories are kept.
    """
    if is_flat(structure):
        _load_flat(vfs, structure)
    else:
        _load_nested(vfs, structure, base_path)


def _load_flat(vfs: VirtualFileSystem, structure: DirectoryJSON) -> None:
    for path, value in structure.items():
        if value is None:
            vfs.create_directory(path, recursive=True)
        elif isinstance(value, str | bytes):
            vfs.write_file(path, value)


def _load_nested(vfs: VirtualFileSystem, structure: DirectoryJSON, base_path: str) -> None:
    for key, value in structure.items():
        full_path = join(base_path, key)
        if value is None:
            vfs.create_directory(full_path, recursive=True)
        elif isinstance(value, str | bytes):
            vfs.write_file(full_path, value)
        elif isinstance(value, Mapping):
            vfs.create_directory(full_path, recursive=True)
            _load_nested(vfs, value, full_path)


def _file_text(node: File) -> str:
    return node.content.decode("utf-8", errors="replace")


def to_json(vfs: VirtualFileSystem, base_path: str = ROOT, *, flatten: bool = False) -> dict[str, Any]:
    """Describe the tree under *base_path* as a JSON-ready mapping.

    File content is decoded as UTF-8.  A missing *base_path* gives ``{}``.
    """
    base = resolve_path(base_path).full_path
    node = vfs.resolve_node(base, True)
    if not isinstance(node, Directory):
        return {}
    if flatten:
        flat: dict[str, Any] = {}
        _dump_flat(node, "" if base == ROOT else base, flat)
        return flat
    return _dump_nested(node)


def _dump_flat(directory: Directory, current: str, result: dict[str, Any]) -> None:
    for name, node in sorted(directory.entries()):
        path = f"{current}/{name}"
        match node:
            case File():
                result[path] = _file_text(node)
            case Directory():
                _dump_flat(node, path, result)
            case Symlink():
                result[path] = f"{SYMLINK_PREFIX}{node.target}"


def _dump_nested(directory: Directory) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for name, node in sorted(directory.entries()):
        match node:
            case File():
                result[name] = _file_text(node)
            case Directory():
                result[name] = _dump_nested(node) or None
            case Symlink():
                result[name] = f"{SYMLINK_PREFIX}{node.target}"
    return result


def dump_vfs(vfs: VirtualFileSystem, path: Path) -> None:
    """Save the whole tree to a JSON file (nested shape).

    Args:
        vfs: The file system to save.
        path: The real file to write to.

    """
    path.write_text(json.dumps(to_json(vfs), indent=2))


def load_vfs(path: Path, vfs: VirtualFileSystem | None = None) -> VirtualFileSystem:
    """Load a JSON file written by ``dump_vfs``.

    Args:
        path: The real file to read from.
        vfs: File system to load into; a fresh one if omitted.

    Returns:
        The populated file system.

    Raises:
        FileNotFoundError: If *path* does not exist (the builtin error).

    """
    target = vfs or VirtualFileSystem()
    from_json(target, json.loads(path.read_text()))
    return target
