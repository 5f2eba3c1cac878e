"""
Task content store.

Public API:
    - TaskStore: create / read / update / delete / exists / list
    - StoredTask: Raw content of one task file
    - Errors: TaskNotFoundError, StorageAccessError, StorageWriteError,
      StorageParseError, InvalidTaskContentError
"""

from .errors import (
    InvalidTaskContentError,
    StorageAccessError,
    StorageError,
    StorageParseError,
    StorageWriteError,
    TaskNotFoundError,
)
from .store import StoredTask, TaskStore

__all__ = [
    "TaskStore",
    "StoredTask",
    "StorageError",
    "TaskNotFoundError",
    "StorageAccessError",
    "StorageWriteError",
    "StorageParseError",
    "InvalidTaskContentError",
]
