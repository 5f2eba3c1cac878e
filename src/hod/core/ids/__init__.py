"""
Task ID system.

Public API:
    Validator:
        - validate_task_id: Raise IdValidationError for malformed IDs
        - is_valid_task_id: Boolean check
        - get_parent_id: Extract parent ID
        - id_depth: Segment count
        - is_direct_child: One-level parent/child check

    Ordering:
        - sort_ids: Numeric segment-wise sort
        - compare_ids: Comparison function behind sort_ids

    Generator:
        - next_main_id: Next main task ID
        - next_subtask_id: Next subtask ID under a parent

Example:
    >>> from hod.core.ids import sort_ids, validate_task_id
    >>> validate_task_id("1.2")
    >>> sort_ids(["1", "1.10", "1.2"])
    ['1', '1.2', '1.10']
"""

from hod.core.ids.generator import IdGenerationError, next_main_id, next_subtask_id
from hod.core.ids.sorting import compare_ids, sort_ids
from hod.core.ids.validator import (
    ID_REGEX,
    MAX_ID_LENGTH,
    IdValidationError,
    get_parent_id,
    id_depth,
    is_direct_child,
    is_valid_task_id,
    validate_task_id,
)

__all__ = [
    # Validator
    "ID_REGEX",
    "MAX_ID_LENGTH",
    "IdValidationError",
    "validate_task_id",
    "is_valid_task_id",
    "get_parent_id",
    "id_depth",
    "is_direct_child",
    # Ordering
    "compare_ids",
    "sort_ids",
    # Generator
    "IdGenerationError",
    "next_main_id",
    "next_subtask_id",
]
