"""
Service layer for hod.

Services compose the core packages into a clean API surface. The CLI calls
service methods instead of reaching into the stores directly.

Design principles:
- Every user-facing command maps to a service method.
- Methods accept typed inputs, return typed outputs, raise typed exceptions.
- No Rich, no sys.exit, no print statements; presentation is the caller's job.

Modules:
    compensation: TwoPhaseWrite, the content-then-index write with rollback.
    tasks: TaskService with add, update, append, delete, move, done, next,
        list, get and sync.
"""

from hod.core.ids.generator import IdGenerationError
from hod.core.services.compensation import SagaState, TwoPhaseWrite
from hod.core.services.tasks import (
    DoneResult,
    FieldValidationError,
    ParentValidationError,
    SubtaskConflictError,
    SyncReport,
    TaskNotIndexedError,
    TaskService,
    TaskServiceError,
    UnknownFieldError,
    init_project,
    parse_dependencies,
)

__all__ = [
    # Compensation
    "SagaState",
    "TwoPhaseWrite",
    # Task service
    "TaskService",
    "DoneResult",
    "SyncReport",
    "init_project",
    "parse_dependencies",
    # Errors
    "TaskServiceError",
    "UnknownFieldError",
    "FieldValidationError",
    "ParentValidationError",
    "SubtaskConflictError",
    "TaskNotIndexedError",
    "IdGenerationError",
]
