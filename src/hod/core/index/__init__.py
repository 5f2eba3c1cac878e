"""
Dependency index.

Persists a map from task ID to {status, dependencies} in
``<tasksDir>/.hod/index.json``, rejects cyclic edges and answers readiness
queries.

Public API:
    - DependencyIndex: load / update / remove / get_next_tasks
    - IndexEntry: Status and dependency set of one task
    - Errors: IndexLoadError, IndexWriteError, IndexCorruptionError,
      CircularDependencyError
"""

from .errors import (
    CircularDependencyError,
    DependencyIndexError,
    IndexCorruptionError,
    IndexLoadError,
    IndexWriteError,
)
from .graph import find_cycle, ready_ids
from .models import DEFAULT_STATUS, IndexData, IndexEntry, normalize_dependencies
from .service import (
    HOD_DIR_NAME,
    INDEX_FILE_NAME,
    DependencyIndex,
    normalize_done_statuses,
)

__all__ = [
    # Models
    "IndexEntry",
    "IndexData",
    "DEFAULT_STATUS",
    "normalize_dependencies",
    # Service
    "DependencyIndex",
    "HOD_DIR_NAME",
    "INDEX_FILE_NAME",
    "normalize_done_statuses",
    # Graph
    "find_cycle",
    "ready_ids",
    # Errors
    "DependencyIndexError",
    "IndexLoadError",
    "IndexWriteError",
    "IndexCorruptionError",
    "CircularDependencyError",
]
