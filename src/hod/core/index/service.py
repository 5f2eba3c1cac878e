"""
Dependency index backed by ``<tasksDir>/.hod/index.json``.

The index is the only relationship store: it maps task IDs to their status
and dependency set. Every public operation reloads the file from disk at
its start; there is no cached copy that could drift from what a previous
process (or a rolled-back operation) left on disk.

File format:
    {
      "1": {"status": "pending", "dependencies": []},
      "2": {"status": "pending", "dependencies": ["1"]}
    }

Example:
    >>> index = DependencyIndex(Path("tasks"))
    >>> entry = index.update("1", IndexEntry(status="pending", dependencies=[]))
    >>> entry = index.update("2", IndexEntry(status="pending", dependencies=["1"]))
    >>> index.get_next_tasks("completed")
    ['1']
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hod.core.fs.atomic import (
    FailureKind,
    FileWriteError,
    atomic_write,
    classify_os_error,
    ensure_directory,
)
from hod.core.fs.io import FileSystem, LocalFileSystem
from hod.core.ids.sorting import sort_ids
from hod.core.ids.validator import is_valid_task_id, validate_task_id

from .errors import (
    CircularDependencyError,
    IndexCorruptionError,
    IndexLoadError,
    IndexWriteError,
)
from .graph import find_cycle, ready_ids
from .models import IndexData, IndexEntry

logger = logging.getLogger(__name__)

HOD_DIR_NAME = ".hod"
INDEX_FILE_NAME = "index.json"


def normalize_done_statuses(done_statuses: str | Iterable[str]) -> frozenset[str]:
    """
    Turn a single done status or a collection of them into a set.

    Args:
        done_statuses: e.g. ``"completed"`` or ``["completed", "cancelled"]``

    Returns:
        Frozen set of statuses counted as complete
    """
    if isinstance(done_statuses, str):
        return frozenset([done_statuses])
    return frozenset(done_statuses)


class DependencyIndex:
    """
    Embedded dependency graph store.

    The public contract is exactly load(), update(), remove() and
    get_next_tasks(). Writes are atomic (temp file + rename) and every
    update is checked for dependency cycles before anything is written.
    """

    def __init__(self, tasks_dir: Path, fs: FileSystem | None = None) -> None:
        """
        Initialize the index.

        Args:
            tasks_dir: Tasks directory containing ``.hod/``
            fs: File system implementation (defaults to the local disk)
        """
        self.tasks_dir = Path(tasks_dir)
        self.fs = fs or LocalFileSystem()
        self.hod_dir = self.tasks_dir / HOD_DIR_NAME
        self.index_file = self.hod_dir / INDEX_FILE_NAME

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self) -> IndexData:
        """
        Load and validate the index file.

        Returns:
            Mapping of task ID to IndexEntry; empty if the file does not
            exist or holds a legacy JSON array

        Raises:
            IndexCorruptionError: If the file is not valid JSON, is not an
                object, has a key or dependency that is not a valid task
                ID, or has an entry without a string ``status`` or a
                list-of-strings ``dependencies``
            IndexLoadError: If the file exists but cannot be read
        """
        try:
            content = self.fs.read_text(self.index_file)
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as e:
            raise IndexCorruptionError(
                f"Index file is not valid UTF-8: {self.index_file}", self.index_file
            ) from e
        except OSError as e:
            kind = classify_os_error(e)
            if kind == FailureKind.PERMISSION_DENIED:
                message = f"Permission denied reading index: {self.index_file}"
            else:
                message = f"Failed to load index: {self.index_file}"
            raise IndexLoadError(message, self.index_file, kind) from e

        return self._parse(content)

    def update(self, task_id: str, entry: IndexEntry) -> IndexEntry:
        """
        Create or replace the entry for a task.

        Steps: validate IDs, normalize the entry, reload the index, check
        for cycles with the candidate dependencies, write atomically.

        Args:
            task_id: Task whose entry is written
            entry: New status and dependencies

        Returns:
            The normalized entry that was persisted

        Raises:
            IdValidationError: If task_id or a dependency ID is malformed
            CircularDependencyError: If the new edges would close a cycle
            IndexCorruptionError / IndexLoadError: If the current index
                cannot be loaded
            IndexWriteError: If the index cannot be written
        """
        validate_task_id(task_id)
        normalized = entry.normalized()
        for dep in normalized.dependencies:
            validate_task_id(dep)

        data = self.load()
        self._check_cycles(task_id, normalized.dependencies, data)

        data[task_id] = normalized
        self._ensure_hod_dir()
        self._write(data)
        logger.debug(
            "Index entry %s set to status=%s dependencies=%s",
            task_id,
            normalized.status,
            normalized.dependencies,
        )
        return normalized

    def remove(self, task_id: str) -> None:
        """
        Remove a task's entry.

        A missing entry is a no-op. Other entries that still list task_id
        as a dependency are left untouched (orphan references are allowed).

        Raises:
            IndexCorruptionError / IndexLoadError: If the index cannot be loaded
            IndexWriteError: If the index cannot be written
        """
        data = self.load()
        if task_id not in data:
            return

        del data[task_id]
        self._write(data)
        logger.debug("Index entry %s removed", task_id)

    def get_next_tasks(self, done_statuses: str | Iterable[str]) -> list[str]:
        """
        Return IDs of tasks that are ready to work on.

        A task is ready when its own status is not a done status and every
        dependency exists in the index with a done status. Dependencies on
        IDs absent from the index block readiness.

        Args:
            done_statuses: Status (or statuses) counted as complete

        Returns:
            Ready task IDs sorted numerically by segment
        """
        data = self.load()
        return sort_ids(ready_ids(data, normalize_done_statuses(done_statuses)))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _parse(self, content: str) -> IndexData:
        try:
            raw: Any = json.loads(content)
        except json.JSONDecodeError as e:
            raise IndexCorruptionError(
                f"Failed to parse index JSON {self.index_file}: {e}", self.index_file
            ) from e

        if isinstance(raw, list):
            # legacy files may hold a bare array
            return {}

        if not isinstance(raw, dict):
            raise IndexCorruptionError(
                f"Invalid index format: expected an object, got {type(raw).__name__}",
                self.index_file,
            )

        data: IndexData = {}
        for task_id, value in raw.items():
            if not is_valid_task_id(task_id):
                raise IndexCorruptionError(
                    f"Invalid task ID '{task_id}' in index", self.index_file
                )
            try:
                entry = IndexEntry.model_validate(value)
            except ValidationError as e:
                raise IndexCorruptionError(
                    f"Invalid index entry for task '{task_id}': "
                    "expected {status: string, dependencies: [string, ...]}",
                    self.index_file,
                ) from e
            for dep in entry.dependencies:
                if not is_valid_task_id(dep):
                    raise IndexCorruptionError(
                        f"Invalid dependency ID '{dep}' for task '{task_id}' in index",
                        self.index_file,
                    )
            data[task_id] = entry
        return data

    def _check_cycles(self, task_id: str, dependencies: list[str], data: IndexData) -> None:
        if task_id in dependencies:
            raise CircularDependencyError(
                f"Task {task_id} depends on itself", [task_id, task_id]
            )

        edges: dict[str, list[str]] = {tid: entry.dependencies for tid, entry in data.items()}
        edges[task_id] = dependencies

        cycle = find_cycle(edges, start=task_id)
        if cycle:
            raise CircularDependencyError(
                f"Circular dependency detected: {' -> '.join(cycle)}", cycle
            )

    def _ensure_hod_dir(self) -> None:
        try:
            ensure_directory(self.hod_dir, self.fs)
        except FileWriteError as e:
            raise IndexWriteError(
                f"Cannot create index directory {self.hod_dir}: {e}", self.hod_dir, e.kind
            ) from e

    def _write(self, data: IndexData) -> None:
        payload = {task_id: entry.model_dump() for task_id, entry in data.items()}
        text = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
        try:
            atomic_write(self.index_file, text, self.fs)
        except FileWriteError as e:
            raise IndexWriteError(
                f"Failed to write index: {e}", self.index_file, e.kind
            ) from e
