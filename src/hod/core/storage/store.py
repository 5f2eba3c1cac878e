"""
Per-task file store.

Each task lives in ``<tasksDir>/<id>.json`` as a JSON object of string
fields. Older projects may still have ``<id>.md`` files; they are read as
a fallback and replaced by ``.json`` on the next update. The store owns
no relationship data: status and dependencies live in the dependency
index.

Writes go through the atomic writer, and create/delete are safe to call
without a matching earlier call (create overwrites, delete is idempotent),
which is what makes best-effort rollback of a two-phase write meaningful.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from hod.core.fs.atomic import (
    TMP_SUFFIX,
    FailureKind,
    FileWriteError,
    atomic_write,
    classify_os_error,
    ensure_directory,
)
from hod.core.fs.io import FileSystem, LocalFileSystem
from hod.core.ids.sorting import sort_ids
from hod.core.ids.validator import is_valid_task_id
from hod.core.index.service import HOD_DIR_NAME

from .errors import (
    InvalidTaskContentError,
    StorageAccessError,
    StorageParseError,
    StorageWriteError,
    TaskNotFoundError,
)

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
MD_SUFFIX = ".md"


@dataclass(frozen=True)
class StoredTask:
    """Raw task file content keyed by ID."""

    id: str
    content: str


def _extract_id(filename: str) -> str | None:
    """Return the task ID for a task file name, or None for other files."""
    if filename.endswith(TMP_SUFFIX):
        return None
    for suffix in (JSON_SUFFIX, MD_SUFFIX):
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return None


class TaskStore:
    """
    Content store for task files.

    Example:
        >>> store = TaskStore(Path("tasks"))
        >>> store.create("1", '{"title": "Write docs"}')
        >>> store.exists("1")
        True
        >>> [t.id for t in store.list()]
        ['1']
    """

    def __init__(self, tasks_dir: Path, fs: FileSystem | None = None) -> None:
        """
        Initialize the store.

        Args:
            tasks_dir: Directory holding task files
            fs: File system implementation (defaults to the local disk)
        """
        self.tasks_dir = Path(tasks_dir)
        self.fs = fs or LocalFileSystem()

    def _json_path(self, task_id: str) -> Path:
        return self.tasks_dir / f"{task_id}{JSON_SUFFIX}"

    def _md_path(self, task_id: str) -> Path:
        return self.tasks_dir / f"{task_id}{MD_SUFFIX}"

    def _require_valid_id(self, task_id: str) -> None:
        if not is_valid_task_id(task_id):
            raise StorageAccessError(f"Invalid task ID: {task_id}")

    def _validate_content(self, content: str) -> None:
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidTaskContentError(f"Invalid JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise InvalidTaskContentError("Task content must be a JSON object")

    def _write(self, task_id: str, content: str) -> None:
        try:
            atomic_write(self._json_path(task_id), content, self.fs)
        except FileWriteError as e:
            if e.kind in (FailureKind.PERMISSION_DENIED, FailureKind.READ_ONLY):
                raise StorageAccessError(f"Cannot write task {task_id}: {e}", e.kind) from e
            raise StorageWriteError(f"Cannot write task {task_id}: {e}", e.kind) from e

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, task_id: str, content: str) -> None:
        """
        Write a new task file.

        An existing file with the same ID is replaced.

        Args:
            task_id: Task ID
            content: JSON object text

        Raises:
            StorageAccessError: If the ID is invalid or the directory is not writable
            InvalidTaskContentError: If content is not a JSON object
            StorageWriteError: If the write fails
        """
        self._require_valid_id(task_id)
        self._validate_content(content)

        try:
            ensure_directory(self.tasks_dir, self.fs)
        except FileWriteError as e:
            raise StorageAccessError(
                f"Cannot create tasks directory {self.tasks_dir}: {e}", e.kind
            ) from e

        self._write(task_id, content)
        logger.debug("Created task file %s", self._json_path(task_id))

    def read(self, task_id: str) -> str:
        """
        Read a task file.

        Tries ``<id>.json`` first, then the legacy ``<id>.md``.

        Returns:
            Raw file content

        Raises:
            StorageAccessError: If the ID is invalid or the file is unreadable
            StorageParseError: If the JSON file is malformed
            TaskNotFoundError: If neither file exists
        """
        self._require_valid_id(task_id)

        try:
            content = self.fs.read_text(self._json_path(task_id))
        except FileNotFoundError:
            pass
        except UnicodeDecodeError as e:
            raise StorageParseError(task_id, "file is not valid UTF-8") from e
        except OSError as e:
            raise StorageAccessError(
                f"Cannot read task {task_id}: {e}", classify_os_error(e)
            ) from e
        else:
            try:
                json.loads(content)
            except json.JSONDecodeError as e:
                raise StorageParseError(task_id, e.msg, e.pos) from e
            return content

        try:
            return self.fs.read_text(self._md_path(task_id))
        except FileNotFoundError:
            raise TaskNotFoundError(task_id) from None
        except OSError as e:
            raise StorageAccessError(
                f"Cannot read task {task_id}: {e}", classify_os_error(e)
            ) from e

    def update(self, task_id: str, content: str) -> None:
        """
        Replace an existing task's content.

        The task is always written as ``<id>.json``; a legacy ``<id>.md``
        sibling is removed after the write succeeds.

        Raises:
            StorageAccessError: If the ID is invalid or the file is not writable
            InvalidTaskContentError: If content is not a JSON object
            TaskNotFoundError: If the task does not exist
            StorageWriteError: If the write fails
        """
        self._require_valid_id(task_id)
        self._validate_content(content)

        md_path = self._md_path(task_id)
        if not self.fs.exists(self._json_path(task_id)) and not self.fs.exists(md_path):
            raise TaskNotFoundError(task_id)

        self._write(task_id, content)

        try:
            self.fs.unlink(md_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not remove legacy file %s: %s", md_path, e)

    def delete(self, task_id: str) -> None:
        """
        Delete a task's files.

        Idempotent: a missing file or an invalid ID is a no-op.

        Raises:
            StorageAccessError: If a file exists but cannot be removed
        """
        if not is_valid_task_id(task_id):
            return

        for path in (self._json_path(task_id), self._md_path(task_id)):
            try:
                self.fs.unlink(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageAccessError(
                    f"Cannot delete task {task_id}: {e}", classify_os_error(e)
                ) from e

    def exists(self, task_id: str) -> bool:
        """Check whether a task file exists (invalid IDs never exist)."""
        if not is_valid_task_id(task_id):
            return False
        return self.fs.exists(self._json_path(task_id)) or self.fs.exists(
            self._md_path(task_id)
        )

    def list(self) -> list[StoredTask]:
        """
        List all tasks sorted by ID.

        Ignores the ``.hod`` directory, temp files and files whose name is
        not a valid task ID. When both formats exist, ``.json`` wins.
        Unreadable files are skipped.

        Returns:
            Tasks sorted numerically by ID; empty if the directory is missing

        Raises:
            StorageAccessError: If the directory exists but cannot be listed
        """
        try:
            entries = self.fs.listdir(self.tasks_dir)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageAccessError(
                f"Cannot list tasks directory {self.tasks_dir}: {e}", classify_os_error(e)
            ) from e

        names = set(entries)
        tasks: dict[str, StoredTask] = {}

        for entry in entries:
            if entry == HOD_DIR_NAME:
                continue
            task_id = _extract_id(entry)
            if task_id is None or not is_valid_task_id(task_id) or task_id in tasks:
                continue

            if f"{task_id}{JSON_SUFFIX}" in names:
                path = self._json_path(task_id)
            else:
                path = self._md_path(task_id)

            try:
                tasks[task_id] = StoredTask(id=task_id, content=self.fs.read_text(path))
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Skipping unreadable task file %s: %s", path, e)
                continue

        return [tasks[task_id] for task_id in sort_ids(tasks)]
