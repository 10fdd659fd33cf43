"""Path normalization, validation, and resolution into segments.

All paths are ``/``-separated strings; absolute paths start with ``/``.
Nothing here touches the tree, so every function is pure:

- **normalize_path** collapses repeated separators and resolves ``.`` and
  ``..``.  A leading ``..`` is dropped for absolute paths (you cannot go
  above the root) but kept for relative ones.
- **validate_path** rejects malformed input *before* any operation mutates
  the tree, so a bad path never leaves a half-finished change behind.
- **resolve_path** combines the two and splits the result into the pieces
  the file system walks: parent path, final name, and segments.

Examples::

    normalize_path("/a//b/./c/../d")  → "/a/b/d"
    normalize_path("/../x")           → "/x"
    normalize_path("../x/..")         → ".."
    relative("/a/b/c", "/a/d")        → "../../d"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mem_vfs.errors import InvalidPathError

SEPARATOR = "/"
ROOT = "/"

MAX_PATH_LENGTH = 4096
"""Maximum length of a whole path string."""

MAX_SEGMENT_LENGTH = 255
"""Maximum length of a single path segment."""

_INVALID_CHARS = re.compile(r"[\x00-\x1f]")

RESERVED_NAMES = frozenset(
    {
        "CON",
        "PRN",
        "AUX",
        "NUL",
        *(f"COM{i}" for i in range(1, 10)),
        *(f"LPT{i}" for i in range(1, 10)),
    }
)
"""Device names that cannot be used as a segment, whatever the extension."""


@dataclass(frozen=True)
class PathResolution:
    """A validated, normalized path split into the pieces traversal needs."""

    full_path: str
    parent_path: str
    name: str
    segments: tuple[str, ...]
    is_root: bool


def normalize_path(path: str) -> str:
    """Return the canonical form of *path*.

    Backslashes are treated as separators.  An empty string normalizes
    to the root; a relative path that cancels out normalizes to ``.``.
    """
    if not path:
        return ROOT

    unified = path.replace("\\", SEPARATOR)
    is_abs = unified.startswith(SEPARATOR)
    stack: list[str] = []

    for part in unified.split(SEPARATOR):
        if part in ("", "."):
            continue
        if part == "..":
            if stack and stack[-1] != "..":
                stack.pop()
            elif not is_abs:
                stack.append("..")
        else:
            stack.append(part)

    result = SEPARATOR.join(stack)
    if is_abs:
        return SEPARATOR + result
    return result or "."


def split_path(path: str) -> list[str]:
    """Split *path* into its normalized segments (root → ``[]``)."""
    return [part for part in normalize_path(path).split(SEPARATOR) if part]


def dirname(path: str) -> str:
    """Return the directory portion of *path*."""
    normalized = normalize_path(path)
    if normalized == ROOT:
        return ROOT
    last_slash = normalized.rfind(SEPARATOR)
    if last_slash == -1:
        return "."
    if last_slash == 0:
        return ROOT
    return normalized[:last_slash]


def basename(path: str, suffix: str | None = None) -> str:
    """Return the final segment of *path*, minus *suffix* if it ends with it."""
    normalized = normalize_path(path)
    if normalized == ROOT:
        return ""
    name = normalized.rsplit(SEPARATOR, 1)[-1]
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return name


def extname(path: str) -> str:
    """Return the extension of *path* including the dot (``""`` if none).

    A leading dot marks a hidden file, not an extension: ``.bashrc`` → ``""``.
    """
    name = basename(path)
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot:]


def join(*paths: str) -> str:
    """Join path fragments with ``/`` and normalize, skipping empty ones."""
    if not paths:
        return "."
    joined = SEPARATOR.join(p for p in paths if p)
    return normalize_path(joined) if joined else "."


def resolve(base: str, *paths: str) -> str:
    """Resolve *paths* against *base*, always returning an absolute path.

    An absolute fragment restarts resolution from itself, like ``cd``.
    """
    resolved = normalize_path(base)
    for path in paths:
        if not path:
            continue
        normalized = normalize_path(path)
        resolved = normalized if normalized.startswith(SEPARATOR) else join(resolved, normalized)
    if not resolved.startswith(SEPARATOR):
        resolved = SEPARATOR + resolved
    return normalize_path(resolved)


def relative(from_path: str, to_path: str) -> str:
    """Return the relative path that leads from *from_path* to *to_path*.

    Computed from the longest common segment prefix: one ``..`` for every
    remaining segment of *from_path*, then the rest of *to_path*.
    """
    source = normalize_path(from_path)
    target = normalize_path(to_path)
    if source == target:
        return ""

    from_parts = split_path(source)
    to_parts = split_path(target)
    common = 0
    for left, right in zip(from_parts, to_parts, strict=False):
        if left != right:
            break
        common += 1

    parts = [".."] * (len(from_parts) - common) + to_parts[common:]
    return SEPARATOR.join(parts) or "."


def is_absolute(path: str) -> bool:
    """Return True if *path* starts at the root."""
    return path.startswith(SEPARATOR)


def is_sub_path(child: str, parent: str) -> bool:
    """Return True if *child* lies strictly below *parent*."""
    normalized_child = normalize_path(child)
    normalized_parent = normalize_path(parent)
    if normalized_child == normalized_parent:
        return False
    prefix = ROOT if normalized_parent == ROOT else normalized_parent + SEPARATOR
    return normalized_child.startswith(prefix)


def common_ancestor(first: str, second: str) -> str:
    """Return the deepest absolute path that contains both arguments."""
    common: list[str] = []
    for left, right in zip(split_path(first), split_path(second), strict=False):
        if left != right:
            break
        common.append(left)
    return SEPARATOR + SEPARATOR.join(common)


# -- Validation ---------------------------------------------------------------


def _validate_segment(segment: str, full_path: str) -> None:
    """Check a single segment; ``.`` and ``..`` never reach here."""
    if len(segment) > MAX_SEGMENT_LENGTH:
        reason = f'Path segment "{segment}" is too long (max {MAX_SEGMENT_LENGTH} characters)'
        raise InvalidPathError(full_path, reason)

    if segment.upper().split(".", 1)[0] in RESERVED_NAMES:
        reason = f'"{segment}" is a reserved name'
        raise InvalidPathError(full_path, reason)

    if segment.endswith((" ", ".")):
        reason = f'Path segment cannot end with space or period: "{segment}"'
        raise InvalidPathError(full_path, reason)


def validate_path(path: str) -> None:
    """Validate *path*, raising ``InvalidPathError`` with the reason.

    Raises:
        InvalidPathError: If the path is empty, contains control
            characters, is too long, or has an invalid segment.

    """
    if not isinstance(path, str):
        raise InvalidPathError(str(path), "Path must be a string")
    if not path:
        raise InvalidPathError("", "Path cannot be empty")
    if _INVALID_CHARS.search(path):
        raise InvalidPathError(path, "Path contains invalid characters")
    if len(path) > MAX_PATH_LENGTH:
        reason = f"Path is too long (max {MAX_PATH_LENGTH} characters)"
        raise InvalidPathError(path, reason)

    for part in path.split(SEPARATOR):
        if part in ("", ".", ".."):
            continue
        _validate_segment(part, path)


def validate_file_name(name: str) -> None:
    """Validate a bare file name (no separators allowed).

    Raises:
        InvalidPathError: If the name is empty, contains a separator,
            or breaks a segment rule.

    """
    if not name:
        raise InvalidPathError("", "File name cannot be empty")
    if SEPARATOR in name or "\\" in name:
        raise InvalidPathError(name, "File name cannot contain path separators")
    if _INVALID_CHARS.search(name):
        raise InvalidPathError(name, "File name contains invalid characters")
    _validate_segment(name, name)


def is_valid_path(path: str) -> bool:
    """Return True if *path* passes ``validate_path``."""
    try:
        validate_path(path)
    except InvalidPathError:
        return False
    return True


def is_valid_file_name(name: str) -> bool:
    """Return True if *name* passes ``validate_file_name``."""
    try:
        validate_file_name(name)
    except InvalidPathError:
        return False
    return True


# -- Resolution ---------------------------------------------------------------


def resolve_path(path: str) -> PathResolution:
    """Validate and normalize *path*, then split it for traversal.

    Relative paths are anchored at the root, since the file system has no
    working directory of its own.

    Raises:
        InvalidPathError: If *path* fails validation.

    """
    validate_path(path)
    full_path = normalize_path(path)
    if not full_path.startswith(SEPARATOR):
        full_path = resolve(ROOT, full_path)
    is_root = full_path == ROOT
    return PathResolution(
        full_path=full_path,
        parent_path=ROOT if is_root else dirname(full_path),
        name="" if is_root else basename(full_path),
        segments=tuple(split_path(full_path)),
        is_root=is_root,
    )


def ancestor_paths(path: str) -> list[str]:
    """Return every ancestor of *path*, root first, parent last."""
    segments = resolve_path(path).segments
    ancestors = [ROOT]
    current = ""
    for segment in segments[:-1]:
        current = f"{current}/{segment}"
        ancestors.append(current)
    return ancestors


def path_depth(path: str) -> int:
    """Return the number of segments in *path* (the root is depth 0)."""
    return len(resolve_path(path).segments)
