"""
Task content store exceptions.
"""

from __future__ import annotations

from hod.core.errors import HodError
from hod.core.fs.atomic import FailureKind


class StorageError(HodError):
    """Base exception for content store errors."""

    pass


class TaskNotFoundError(StorageError):
    """Raised when a task file does not exist."""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class StorageAccessError(StorageError):
    """Raised for permission, read-only or not-a-directory problems."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.OTHER) -> None:
        super().__init__(message)
        self.kind = kind


class StorageWriteError(StorageError):
    """Raised when a task file cannot be written (out of space, other OS errors)."""

    def __init__(self, message: str, kind: FailureKind = FailureKind.OTHER) -> None:
        super().__init__(message)
        self.kind = kind


class InvalidTaskContentError(StorageError):
    """Raised when content handed to the store is not a JSON object."""

    pass


class StorageParseError(StorageError):
    """
    Raised when a stored JSON task file is malformed.

    Attributes:
        task_id: Task whose file failed to parse
        position: Character offset of the syntax error, if known
    """

    def __init__(self, task_id: str, detail: str, position: int | None = None) -> None:
        super().__init__(f"Invalid JSON in task {task_id}: {detail}")
        self.task_id = task_id
        self.detail = detail
        self.position = position
