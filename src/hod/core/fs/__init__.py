"""
File system access for hod.

Public API:
    - FileSystem: Protocol for injectable file system implementations
    - LocalFileSystem: Real disk implementation
    - atomic_write: Write-to-temp-then-rename
    - ensure_directory: Idempotent mkdir -p
    - FileWriteError / FailureKind: Typed write failures
"""

from hod.core.fs.atomic import (
    TMP_SUFFIX,
    FileWriteError,
    FailureKind,
    atomic_write,
    classify_os_error,
    ensure_directory,
    temp_path_for,
)
from hod.core.fs.io import FileSystem, LocalFileSystem

__all__ = [
    "FileSystem",
    "LocalFileSystem",
    "TMP_SUFFIX",
    "FileWriteError",
    "FailureKind",
    "atomic_write",
    "classify_os_error",
    "ensure_directory",
    "temp_path_for",
]
