"""Error taxonomy for the virtual file system.

Every public operation either completes or fails with exactly one of the
errors below.  Each error records:

- **code** — a stable ``ErrorCode`` string, useful when errors cross a
  process or serialization boundary.
- **path** — the offending path (or snapshot id).
- **cause** — an optional wrapped exception.

The names match the builtin ``FileNotFoundError`` and
``NotADirectoryError``; import them qualified (``errors.FileNotFoundError``)
or through ``mem_vfs`` when a module also needs the builtins.
"""

from __future__ import annotations

import builtins
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable identifiers for every error kind."""

    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    DIRECTORY_NOT_FOUND = "DIRECTORY_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DIRECTORY_NOT_EMPTY = "DIRECTORY_NOT_EMPTY"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"
    DIRECTORY_ALREADY_EXISTS = "DIRECTORY_ALREADY_EXISTS"
    INVALID_PATH = "INVALID_PATH"
    NOT_A_FILE = "NOT_A_FILE"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    NOT_A_SYMLINK = "NOT_A_SYMLINK"
    SYMLINK_LOOP = "SYMLINK_LOOP"
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
    IO_ERROR = "IO_ERROR"
    SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"


class FileSystemError(Exception):
    """Base class for all virtual file system errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        path: str | None = None,
        cause: builtins.BaseException | None = None,
    ) -> None:
        """Create an error with its code, message, path, and optional cause."""
        super().__init__(message)
        self.code = code
        self.path = path
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class FileNotFoundError(FileSystemError):  # noqa: A001
    """Raise when a path does not resolve to a node."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(ErrorCode.FILE_NOT_FOUND, f"File not found: {path}", path, cause)


class DirectoryNotFoundError(FileSystemError):
    """Raise when a directory (or a required parent) is missing."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(
            ErrorCode.DIRECTORY_NOT_FOUND, f"Directory not found: {path}", path, cause
        )


class PermissionDeniedError(FileSystemError):
    """Reserved: mode/uid/gid are stored but never enforced."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(ErrorCode.PERMISSION_DENIED, f"Permission denied: {path}", path, cause)


class DirectoryNotEmptyError(FileSystemError):
    """Raise when a non-recursive delete meets a directory with children."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(
            ErrorCode.DIRECTORY_NOT_EMPTY, f"Directory not empty: {path}", path, cause
        )


class FileAlreadyExistsError(FileSystemError):
    """Raise when a name is already taken in its parent directory."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(
            ErrorCode.FILE_ALREADY_EXISTS, f"File already exists: {path}", path, cause
        )


class DirectoryAlreadyExistsError(FileSystemError):
    """Raise when a directory is created over an existing one."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(
            ErrorCode.DIRECTORY_ALREADY_EXISTS,
            f"Directory already exists: {path}",
            path,
            cause,
        )


class InvalidPathError(FileSystemError):
    """Raise when a path string fails validation."""

    def __init__(
        self,
        path: str,
        reason: str | None = None,
        cause: builtins.BaseException | None = None,
    ) -> None:
        """Create the error for *path*, optionally explaining *reason*."""
        message = f"Invalid path: {path} ({reason})" if reason else f"Invalid path: {path}"
        super().__init__(ErrorCode.INVALID_PATH, message, path, cause)
        self.reason = reason


class NotAFileError(FileSystemError):
    """Raise when a file operation targets a directory."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(ErrorCode.NOT_A_FILE, f"Not a file: {path}", path, cause)


class NotADirectoryError(FileSystemError):  # noqa: A001
    """Raise when a directory operation (or traversal) meets a non-directory."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(ErrorCode.NOT_A_DIRECTORY, f"Not a directory: {path}", path, cause)


class NotASymlinkError(FileSystemError):
    """Raise when readlink targets something other than a symlink."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(ErrorCode.NOT_A_SYMLINK, f"Not a symbolic link: {path}", path, cause)


class SymlinkLoopError(FileSystemError):
    """Raise when symlink resolution exceeds the configured depth bound."""

    def __init__(self, path: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *path*."""
        super().__init__(
            ErrorCode.SYMLINK_LOOP, f"Symbolic link loop detected: {path}", path, cause
        )


class MaxDepthExceededError(FileSystemError):
    """Raise when a traversal goes deeper than an explicit limit."""

    def __init__(
        self,
        path: str,
        max_depth: int,
        cause: builtins.BaseException | None = None,
    ) -> None:
        """Create the error for *path* and the *max_depth* that was exceeded."""
        super().__init__(
            ErrorCode.MAX_DEPTH_EXCEEDED,
            f"Max depth ({max_depth}) exceeded at: {path}",
            path,
            cause,
        )
        self.max_depth = max_depth


class VFSIOError(FileSystemError):
    """Reserved: generic I/O failure during *operation*."""

    def __init__(
        self,
        path: str,
        operation: str,
        cause: builtins.BaseException | None = None,
    ) -> None:
        """Create the error for *operation* on *path*."""
        super().__init__(
            ErrorCode.IO_ERROR, f"IO error during {operation} on: {path}", path, cause
        )
        self.operation = operation


class SnapshotNotFoundError(FileSystemError):
    """Raise when a snapshot id is unknown."""

    def __init__(self, snapshot_id: str, cause: builtins.BaseException | None = None) -> None:
        """Create the error for *snapshot_id*."""
        super().__init__(
            ErrorCode.SNAPSHOT_NOT_FOUND, f"Snapshot not found: {snapshot_id}", snapshot_id, cause
        )
