"""
Atomic file writer shared by the content store and the dependency index.

A write goes to ``<path>.tmp`` first and is then renamed over ``<path>``.
The rename is the durability boundary: a reader never observes a partially
written file. OS errors are translated into FileWriteError with a kind
that lets callers tell permission problems, read-only file systems and
full disks apart. There is no retry logic here; retries belong to callers.
"""

from __future__ import annotations

import errno
import logging
from enum import Enum
from pathlib import Path

from hod.core.errors import HodError
from hod.core.fs.io import FileSystem, LocalFileSystem

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


class FailureKind(str, Enum):
    """Classification of OS-level file system failures."""

    PERMISSION_DENIED = "permission_denied"
    READ_ONLY = "read_only"
    NO_SPACE = "no_space"
    OTHER = "other"


class FileWriteError(HodError):
    """Raised when an atomic write or directory creation fails."""

    def __init__(self, message: str, path: Path, kind: FailureKind) -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind


_ERRNO_KINDS = {
    errno.EACCES: FailureKind.PERMISSION_DENIED,
    errno.EPERM: FailureKind.PERMISSION_DENIED,
    errno.EROFS: FailureKind.READ_ONLY,
    errno.ENOSPC: FailureKind.NO_SPACE,
}

_KIND_MESSAGES = {
    FailureKind.PERMISSION_DENIED: "Permission denied",
    FailureKind.READ_ONLY: "Read-only file system",
    FailureKind.NO_SPACE: "No space left on device",
    FailureKind.OTHER: "Write failed",
}


def classify_os_error(error: BaseException) -> FailureKind:
    """
    Map an exception to a FailureKind using its errno.

    Args:
        error: Exception raised by a file system call

    Returns:
        Matching kind, or OTHER for anything unrecognised
    """
    if isinstance(error, OSError) and error.errno is not None:
        return _ERRNO_KINDS.get(error.errno, FailureKind.OTHER)
    return FailureKind.OTHER


def temp_path_for(path: Path) -> Path:
    """Return the temp file path used when writing path."""
    return path.with_name(path.name + TMP_SUFFIX)


def _remove_quietly(path: Path, fs: FileSystem) -> None:
    try:
        fs.unlink(path)
    except OSError:
        pass


def ensure_directory(path: Path, fs: FileSystem | None = None) -> None:
    """
    Create a directory and its parents (mkdir -p semantics).

    An already existing directory is not an error.

    Args:
        path: Directory to create
        fs: File system to use (defaults to the local disk)

    Raises:
        FileWriteError: If the directory cannot be created
    """
    fs = fs or LocalFileSystem()
    try:
        fs.mkdir(path)
    except FileExistsError:
        return
    except OSError as e:
        kind = classify_os_error(e)
        raise FileWriteError(
            f"{_KIND_MESSAGES[kind]}: cannot create directory {path}", path, kind
        ) from e


def atomic_write(path: Path, text: str, fs: FileSystem | None = None) -> None:
    """
    Write text to path atomically.

    Algorithm:
        1. Delete any stale ``<path>.tmp`` (absence is ignored)
        2. Write all text to ``<path>.tmp``
        3. Rename ``<path>.tmp`` over ``<path>``

    On failure the temp file is removed on a best-effort basis before the
    error propagates; a failed cleanup is swallowed.

    Args:
        path: Target file
        text: Complete new file content
        fs: File system to use (defaults to the local disk)

    Raises:
        FileWriteError: If writing or renaming fails
    """
    fs = fs or LocalFileSystem()
    temp_path = temp_path_for(path)

    _remove_quietly(temp_path, fs)

    try:
        fs.write_text(temp_path, text)
        fs.rename(temp_path, path)
    except OSError as e:
        _remove_quietly(temp_path, fs)
        kind = classify_os_error(e)
        logger.debug("Atomic write to %s failed (%s): %s", path, kind.value, e)
        raise FileWriteError(f"{_KIND_MESSAGES[kind]}: {path}", path, kind) from e
