"""
ID generation for new tasks.

Main tasks get the next integer after the highest existing main segment.
Subtasks get the next number among the parent's direct children, with
best-effort collision detection against the content store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hod.core.errors import HodError
from hod.core.ids.validator import MAX_ID_LENGTH, is_direct_child

if TYPE_CHECKING:
    from hod.core.storage.store import TaskStore

# Safety limit for subtask collision probing
MAX_GENERATION_ATTEMPTS = 100


class IdGenerationError(HodError):
    """Raised when a new ID cannot be generated."""

    pass


def next_main_id(store: TaskStore) -> str:
    """
    Generate the next available main task ID.

    Only main IDs (1, 2, 3, ...) are produced; subtask IDs contribute their
    first segment ("1.5" counts as "1").

    Args:
        store: Content store to read existing IDs from

    Returns:
        Next main task ID as a string
    """
    main_numbers = set()
    for task in store.list():
        head = task.id.split(".")[0]
        if head.isdigit():
            main_numbers.add(int(head))

    if not main_numbers:
        return "1"
    return str(max(main_numbers) + 1)


def next_subtask_id(parent: str, store: TaskStore) -> str:
    """
    Generate the next subtask ID under a parent.

    Args:
        parent: Parent task ID
        store: Content store to read existing IDs from

    Returns:
        Generated subtask ID (e.g., '1.3')

    Raises:
        IdGenerationError: If the ID would exceed MAX_ID_LENGTH or no free
            ID is found within MAX_GENERATION_ATTEMPTS
    """
    for attempt in range(MAX_GENERATION_ATTEMPTS):
        sub_numbers = [
            int(task.id.rsplit(".", 1)[1])
            for task in store.list()
            if is_direct_child(task.id, parent)
        ]
        highest = max(sub_numbers) if sub_numbers else 0
        candidate = f"{parent}.{highest + 1 + attempt}"

        if len(candidate) > MAX_ID_LENGTH:
            raise IdGenerationError(
                f"Cannot create subtask: ID '{candidate}' exceeds maximum length "
                f"of {MAX_ID_LENGTH} characters"
            )

        if not store.exists(candidate):
            return candidate

    raise IdGenerationError(
        f"Could not generate a unique subtask ID under '{parent}' "
        f"after {MAX_GENERATION_ATTEMPTS} attempts"
    )
