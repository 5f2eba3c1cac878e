"""
Dependency index exceptions.
"""

from __future__ import annotations

from pathlib import Path

from hod.core.errors import HodError
from hod.core.fs.atomic import FailureKind


class DependencyIndexError(HodError):
    """Base exception for dependency index errors."""

    pass


class IndexLoadError(DependencyIndexError):
    """Raised when the index file exists but cannot be read."""

    def __init__(self, message: str, path: Path, kind: FailureKind = FailureKind.OTHER) -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind


class IndexWriteError(DependencyIndexError):
    """Raised when the index file or its directory cannot be written."""

    def __init__(self, message: str, path: Path, kind: FailureKind = FailureKind.OTHER) -> None:
        super().__init__(message)
        self.path = path
        self.kind = kind


class IndexCorruptionError(DependencyIndexError):
    """Raised when the index file is not valid JSON or has malformed entries."""

    def __init__(self, message: str, path: Path) -> None:
        super().__init__(message)
        self.path = path


class CircularDependencyError(DependencyIndexError):
    """
    Raised when a dependency edge would close a cycle.

    Attributes:
        cycle: Ordered IDs forming the cycle; first and last are the same
    """

    def __init__(self, message: str, cycle: list[str]) -> None:
        super().__init__(message)
        self.cycle = cycle
