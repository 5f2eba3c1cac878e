"""
Task ID validator.

This module is the single source of truth for what a legal task ID is.
IDs are dot-separated digit segments encoding an optional parent/child
hierarchy:
- Main task: 1, 2, 42
- Subtask: 1.1, 1.2, 42.10

The content store, the dependency index and command-level parent and
dependency checks all validate through this module.

Public API:
    - validate_task_id: Raise IdValidationError for malformed IDs
    - is_valid_task_id: Boolean twin of validate_task_id
    - get_parent_id: Extract parent ID from a hierarchical ID
    - id_depth: Number of segments in an ID
"""

import re

from hod.core.errors import HodError

# ASCII digits, optionally followed by dot-separated digit segments (no empty segments)
ID_REGEX = re.compile(r"^[0-9]+(\.[0-9]+)*$")

MAX_ID_LENGTH = 50


class IdValidationError(HodError):
    """Raised when a task ID is malformed or too long."""

    def __init__(self, message: str, task_id: str) -> None:
        super().__init__(message)
        self.task_id = task_id


def validate_task_id(task_id: str) -> None:
    """
    Validate a task ID.

    Args:
        task_id: Task ID to check

    Raises:
        IdValidationError: If the ID is empty, longer than MAX_ID_LENGTH,
            contains anything but digits and dots, or has empty segments

    Example:
        >>> validate_task_id("1.2")
        >>> validate_task_id("1..2")
        Traceback (most recent call last):
        ...
        hod.core.ids.validator.IdValidationError: Invalid task ID format: '1..2'
    """
    if not isinstance(task_id, str):
        raise IdValidationError(f"Task ID must be a string, got {type(task_id).__name__}", str(task_id))
    if len(task_id) > MAX_ID_LENGTH:
        raise IdValidationError(
            f"Task ID exceeds maximum length of {MAX_ID_LENGTH} characters: '{task_id}'",
            task_id,
        )
    # fullmatch so a trailing newline is not accepted the way "$" would allow
    if not ID_REGEX.fullmatch(task_id):
        raise IdValidationError(f"Invalid task ID format: '{task_id}'", task_id)


def is_valid_task_id(task_id: str) -> bool:
    """
    Check whether a string is a valid task ID without raising.

    Args:
        task_id: Candidate ID

    Returns:
        True if the ID passes validate_task_id
    """
    try:
        validate_task_id(task_id)
    except IdValidationError:
        return False
    return True


def get_parent_id(task_id: str) -> str | None:
    """
    Extract the parent ID from a hierarchical ID.

    Args:
        task_id: Task ID (e.g., '1.2')

    Returns:
        Parent ID ('1') or None for main tasks
    """
    if "." not in task_id:
        return None
    return task_id.rsplit(".", 1)[0]


def id_depth(task_id: str) -> int:
    """Return the number of dot-separated segments in an ID."""
    return len(task_id.split("."))


def is_direct_child(task_id: str, parent_id: str) -> bool:
    """Check whether task_id sits exactly one level below parent_id."""
    return task_id.startswith(parent_id + ".") and id_depth(task_id) == id_depth(parent_id) + 1
