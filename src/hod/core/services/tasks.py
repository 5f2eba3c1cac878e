"""
Task service: every user-facing command as a typed method.

The service composes the content store, the dependency index and the
configuration. Mutations that touch both stores run as a TwoPhaseWrite
(content first, index second, content compensated on index failure).

Usage:
    >>> from hod.core.services.tasks import TaskService
    >>> service = TaskService.from_config(load_config())
    >>> task_id = service.add({"title": "Write docs"})
    >>> service.update(task_id, {"description": "Cover the CLI"}, dependencies="1")
    >>> [view.id for view in service.next(all=True)]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hod.core.config.loader import create_default_config
from hod.core.config.models import DEFAULT_TASKS_DIR, HodConfig
from hod.core.errors import HodError
from hod.core.fs.io import FileSystem
from hod.core.ids.generator import next_main_id, next_subtask_id
from hod.core.ids.sorting import sort_ids
from hod.core.ids.validator import (
    get_parent_id,
    is_direct_child,
    is_valid_task_id,
    validate_task_id,
)
from hod.core.index.errors import CircularDependencyError
from hod.core.index.models import DEFAULT_STATUS, IndexEntry
from hod.core.index.service import DependencyIndex
from hod.core.storage.errors import StorageParseError, TaskNotFoundError
from hod.core.storage.store import TaskStore
from hod.core.tasks.models import (
    DEPENDENCIES_FIELD,
    DESCRIPTION_FIELD,
    STATUS_FIELD,
    TITLE_FIELD,
    TaskBody,
    TaskView,
)
from hod.core.tasks.parser import ParseError, is_json_content, parse_content, serialize_json

from .compensation import TwoPhaseWrite

logger = logging.getLogger(__name__)


# ============================================================================
# Typed exceptions
# ============================================================================


class TaskServiceError(HodError):
    """Base exception for TaskService errors."""


class UnknownFieldError(TaskServiceError):
    """A field name is not defined in the config."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown field '{name}'. Available fields: {', '.join(available)}")


class FieldValidationError(TaskServiceError):
    """A field value is missing, empty or not allowed for the operation."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        self.field_name = field_name
        super().__init__(message)


class ParentValidationError(TaskServiceError):
    """The --parent task is empty, malformed, a subtask, or missing."""


class SubtaskConflictError(TaskServiceError):
    """The task has subtasks that block the operation."""

    def __init__(self, task_id: str, subtasks: list[str], message: str) -> None:
        self.task_id = task_id
        self.subtasks = subtasks
        super().__init__(message)


class TaskNotIndexedError(TaskServiceError):
    """The task exists in the content store but has no index entry."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(
            f"Task {task_id} is missing from the index. "
            "Run 'hod sync' to rebuild the index."
        )


# ============================================================================
# Service outputs
# ============================================================================


@dataclass(frozen=True)
class DoneResult:
    """Outcome of marking a task done."""

    id: str
    was_already_done: bool
    done_status: str


@dataclass
class SyncReport:
    """Index entries added and removed by a sync."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


# ============================================================================
# Helpers
# ============================================================================


def parse_dependencies(text: str | None) -> list[str]:
    """
    Parse a comma separated dependency list.

    Example:
        >>> parse_dependencies(" 1, 2,,3 ")
        ['1', '2', '3']
    """
    if not text or not text.strip():
        return []
    return [dep.strip() for dep in text.split(",") if dep.strip()]


def init_project(tasks_dir: str = DEFAULT_TASKS_DIR, cwd: Path | None = None) -> tuple[bool, Path]:
    """
    Initialize a hod project in cwd.

    Returns:
        Tuple of (created, config_path); created is False when a config
        already existed and was left untouched
    """
    return create_default_config(tasks_dir, cwd)


# ============================================================================
# TaskService
# ============================================================================


class TaskService:
    """
    Service for managing tasks.

    Stateless apart from its collaborators: every call reads current state
    from disk. Methods raise typed exceptions and never print.

    Example:
        >>> service = TaskService.from_config(config)
        >>> service.add({"title": "Parent"})
        '1'
        >>> service.add({"title": "Child"}, parent="1")
        '1.1'
        >>> service.done("1.1").was_already_done
        False
    """

    def __init__(self, config: HodConfig, store: TaskStore, index: DependencyIndex) -> None:
        self.config = config
        self.store = store
        self.index = index

    @classmethod
    def from_config(cls, config: HodConfig, fs: FileSystem | None = None) -> TaskService:
        """
        Create a service for the config's tasks directory.

        Args:
            config: Loaded project configuration
            fs: File system implementation (defaults to the local disk)

        Returns:
            Configured TaskService instance
        """
        tasks_dir = Path(config.tasks_dir)
        return cls(config, TaskStore(tasks_dir, fs), DependencyIndex(tasks_dir, fs))

    # ------------------------------------------------------------------
    # Field handling
    # ------------------------------------------------------------------

    def _resolve_fields(self, fields: Mapping[str, str | None]) -> dict[str, str]:
        """Drop unset values, reject unknown names, strip the rest."""
        available = self.config.field_names
        resolved: dict[str, str] = {}
        for name, value in fields.items():
            if value is None:
                continue
            if name not in available:
                raise UnknownFieldError(name, available)
            resolved[name] = value.strip()
        return resolved

    def _field_key(self, name: str) -> str:
        found = self.config.field_by_name(name)
        return found[0] if found else name

    def _is_required(self, name: str) -> bool:
        found = self.config.field_by_name(name)
        return bool(found and found[1].required)

    def _check_required(self, body: TaskBody) -> None:
        for key, field_config in self.config.fields.items():
            if not field_config.required or field_config.name == STATUS_FIELD:
                continue
            if not body.get(field_config.name):
                raise FieldValidationError(
                    f"Field '{key}' cannot be empty", field_config.name
                )

    def _build_body(self, values: dict[str, str]) -> TaskBody:
        title = values.pop(TITLE_FIELD, "")
        if not title:
            raise FieldValidationError(
                f"Missing required field '{self._field_key(TITLE_FIELD)}'. "
                f'Use --{TITLE_FIELD} "value"',
                TITLE_FIELD,
            )
        description = values.pop(DESCRIPTION_FIELD, None) or None
        return TaskBody(title=title, description=description, custom=values)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _require_task(self, task_id: str) -> None:
        validate_task_id(task_id)
        if not self.store.exists(task_id):
            raise TaskNotFoundError(task_id)

    def _read_body(self, task_id: str) -> TaskBody:
        return parse_content(self.store.read(task_id))

    def _snapshot(self, task_id: str) -> tuple[TaskBody, str]:
        """Return the body and JSON content that restores the task as it is now."""
        raw = self.store.read(task_id)
        body = parse_content(raw)
        content = raw if is_json_content(raw) else serialize_json(body)
        return body, content

    def _direct_subtasks(self, task_id: str) -> list[str]:
        return [task.id for task in self.store.list() if is_direct_child(task.id, task_id)]

    def _validate_parent(self, parent: str) -> str:
        parent = parent.strip()
        if not parent:
            raise ParentValidationError("Parent task ID cannot be empty")
        if not is_valid_task_id(parent):
            raise ParentValidationError(f"Invalid parent task ID format: '{parent}'")
        if get_parent_id(parent) is not None:
            raise ParentValidationError(
                f"Parent task '{parent}' is a subtask. Subtasks cannot have subtasks"
            )
        if not self.store.exists(parent):
            raise ParentValidationError(f"Parent task '{parent}' does not exist")
        return parent

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add(
        self,
        fields: Mapping[str, str | None],
        dependencies: str | None = None,
        parent: str | None = None,
    ) -> str:
        """
        Create a task.

        Args:
            fields: Field values keyed by CLI name (None means not given)
            dependencies: Comma separated dependency IDs
            parent: Main task to create a subtask under

        Returns:
            The new task ID

        Raises:
            UnknownFieldError: If a field name is not configured
            FieldValidationError: If a required field is missing
            ParentValidationError: If the parent is unusable
            IdValidationError: If a dependency ID is malformed
            CircularDependencyError: If the subtask depends on its parent
                or the dependencies close a cycle
        """
        values = self._resolve_fields(fields)
        if parent is not None:
            parent = self._validate_parent(parent)

        merged: dict[str, str] = {}
        for field_config in self.config.fields.values():
            value = values.get(field_config.name)
            if value:
                merged[field_config.name] = value
            elif field_config.default is not None:
                merged[field_config.name] = field_config.default

        for key, field_config in self.config.fields.items():
            if field_config.required and not merged.get(field_config.name):
                raise FieldValidationError(
                    f"Missing required field '{key}'. Use --{field_config.name} \"value\"",
                    field_config.name,
                )

        deps = parse_dependencies(dependencies)
        for dep in deps:
            validate_task_id(dep)

        status = merged.pop(STATUS_FIELD, "") or DEFAULT_STATUS
        body = self._build_body(merged)

        task_id = next_subtask_id(parent, self.store) if parent else next_main_id(self.store)

        if parent and parent in deps:
            raise CircularDependencyError(
                f"Subtask cannot depend on its parent task '{parent}'", [parent, task_id]
            )

        content = serialize_json(body)
        entry = IndexEntry(status=status, dependencies=deps)

        TwoPhaseWrite(
            task_id=task_id,
            action="create",
            write_content=lambda: self.store.create(task_id, content),
            write_index=lambda: self.index.update(task_id, entry),
            compensate=lambda: self.store.delete(task_id),
        ).run()

        logger.info("Created task %s", task_id)
        return task_id

    def update(
        self,
        task_id: str,
        fields: Mapping[str, str | None],
        dependencies: str | None = None,
    ) -> str:
        """
        Replace field values of an existing task.

        An empty string removes an optional field. ``dependencies=""``
        clears the dependency list; None keeps the current one.

        Raises:
            TaskNotFoundError: If the task does not exist
            UnknownFieldError: If a field name is not configured
            FieldValidationError: If a required field or the status is emptied
            CircularDependencyError: If the new dependencies close a cycle
        """
        self._require_task(task_id)
        values = self._resolve_fields(fields)

        old_body, old_content = self._snapshot(task_id)
        current = self.index.load().get(task_id)

        status: str | None = None
        if STATUS_FIELD in values:
            status = values.pop(STATUS_FIELD)
            if not status:
                raise FieldValidationError(
                    f"Field '{self._field_key(STATUS_FIELD)}' cannot be empty", STATUS_FIELD
                )

        body = old_body
        for name, value in values.items():
            if value:
                body = body.with_field(name, value)
            elif self._is_required(name) or name == TITLE_FIELD:
                raise FieldValidationError(f"Field '{self._field_key(name)}' cannot be empty", name)
            else:
                body = body.with_field(name, None)

        self._check_required(body)

        if dependencies is not None:
            deps = parse_dependencies(dependencies)
            for dep in deps:
                validate_task_id(dep)
        else:
            deps = list(current.dependencies) if current else []

        entry = IndexEntry(
            status=status or (current.status if current else DEFAULT_STATUS),
            dependencies=deps,
        )
        content = serialize_json(body)

        TwoPhaseWrite(
            task_id=task_id,
            action="update",
            write_content=lambda: self.store.update(task_id, content),
            write_index=lambda: self.index.update(task_id, entry),
            compensate=lambda: self.store.update(task_id, old_content),
        ).run()

        logger.info("Updated task %s", task_id)
        return task_id

    def append(self, task_id: str, fields: Mapping[str, str | None]) -> str:
        """
        Append text to field values, separated by a newline.

        Status and dependencies live in the index and cannot be appended to.
        Empty values for optional fields are ignored.

        Raises:
            TaskNotFoundError: If the task does not exist
            UnknownFieldError: If a field name is not configured
            FieldValidationError: If appending to status or dependencies, or
                an empty value is given for a required field
        """
        self._require_task(task_id)

        for system_field in (STATUS_FIELD, DEPENDENCIES_FIELD):
            if fields.get(system_field) is not None:
                raise FieldValidationError(
                    f"Cannot append to system field '{self._field_key(system_field)}'. "
                    "It is stored in the index.",
                    system_field,
                )

        values = self._resolve_fields(fields)
        old_body, old_content = self._snapshot(task_id)
        current = self.index.load().get(task_id)

        body = old_body
        for name, value in values.items():
            if not value:
                if self._is_required(name):
                    raise FieldValidationError(
                        f"Field '{self._field_key(name)}' cannot be empty", name
                    )
                continue
            existing = body.get(name)
            body = body.with_field(name, f"{existing}\n{value}" if existing else value)

        self._check_required(body)

        entry = current or IndexEntry(status=DEFAULT_STATUS, dependencies=[])
        content = serialize_json(body)

        TwoPhaseWrite(
            task_id=task_id,
            action="append",
            write_content=lambda: self.store.update(task_id, content),
            write_index=lambda: self.index.update(task_id, entry),
            compensate=lambda: self.store.update(task_id, old_content),
        ).run()

        logger.info("Appended to task %s", task_id)
        return task_id

    def delete(self, task_id: str, recursive: bool = False) -> str:
        """
        Delete a task.

        Args:
            task_id: Task to delete
            recursive: Also delete its subtasks (required when it has any)

        Raises:
            TaskNotFoundError: If the task does not exist
            SubtaskConflictError: If it has subtasks and recursive is False
        """
        self._require_task(task_id)

        subtasks = sort_ids(self._direct_subtasks(task_id))
        if subtasks and not recursive:
            raise SubtaskConflictError(
                task_id,
                subtasks,
                f"Task {task_id} has subtasks: {', '.join(subtasks)}. "
                "Use -r to delete recursively",
            )

        for subtask_id in subtasks:
            self.delete(subtask_id, recursive=True)

        _, old_content = self._snapshot(task_id)

        TwoPhaseWrite(
            task_id=task_id,
            action="delete",
            write_content=lambda: self.store.delete(task_id),
            write_index=lambda: self.index.remove(task_id),
            compensate=lambda: self.store.create(task_id, old_content),
        ).run()

        logger.info("Deleted task %s", task_id)
        return task_id

    def move(self, task_id: str, parent: str) -> str:
        """
        Re-parent a task under a main task.

        The task gets a new subtask ID; its status and dependencies move
        with it. References to the old ID in other tasks are left as is.

        Returns:
            ``"<old> -> <new>"``, or the unchanged ID if already under parent

        Raises:
            TaskNotFoundError: If the task does not exist
            ParentValidationError: If the parent is missing, a subtask, or
                the task itself
            SubtaskConflictError: If the task has subtasks
        """
        self._require_task(task_id)
        parent = self._validate_parent(parent)
        if parent == task_id:
            raise ParentValidationError(f"Task {task_id} cannot be moved under itself")

        if get_parent_id(task_id) == parent:
            return task_id

        subtasks = sort_ids(self._direct_subtasks(task_id))
        if subtasks:
            raise SubtaskConflictError(
                task_id,
                subtasks,
                f"Task {task_id} has subtasks. Moving tasks with subtasks is not supported",
            )

        _, old_content = self._snapshot(task_id)
        current = self.index.load().get(task_id)
        entry = current or IndexEntry(status=DEFAULT_STATUS, dependencies=[])

        new_id = next_subtask_id(parent, self.store)

        TwoPhaseWrite(
            task_id=new_id,
            action="create",
            write_content=lambda: self.store.create(new_id, old_content),
            write_index=lambda: self.index.update(new_id, entry),
            compensate=lambda: self.store.delete(new_id),
        ).run()

        def restore_old() -> None:
            self.store.create(task_id, old_content)
            self.index.remove(new_id)
            self.store.delete(new_id)

        TwoPhaseWrite(
            task_id=task_id,
            action="move",
            write_content=lambda: self.store.delete(task_id),
            write_index=lambda: self.index.remove(task_id),
            compensate=restore_old,
        ).run()

        logger.info("Moved task %s to %s", task_id, new_id)
        return f"{task_id} -> {new_id}"

    def done(self, task_id: str) -> DoneResult:
        """
        Mark a task done with the first configured done status.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        self._require_task(task_id)

        done_statuses = self.config.done_statuses
        current = self.index.load().get(task_id)
        status = current.status if current else DEFAULT_STATUS

        if status in done_statuses:
            return DoneResult(id=task_id, was_already_done=True, done_status=status)

        self.index.update(
            task_id,
            IndexEntry(
                status=done_statuses[0],
                dependencies=list(current.dependencies) if current else [],
            ),
        )
        logger.info("Marked task %s as %s", task_id, done_statuses[0])
        return DoneResult(id=task_id, was_already_done=False, done_status=done_statuses[0])

    def next(self, all: bool = False) -> list[TaskView]:
        """
        Return tasks that are ready to work on.

        Args:
            all: Return every ready task instead of only the first

        Returns:
            Ready tasks in ID order; ready IDs without a readable body are
            skipped with a warning
        """
        ready = self.index.get_next_tasks(self.config.done_statuses)
        data = self.index.load()

        views: list[TaskView] = []
        for task_id in ready:
            try:
                body = self._read_body(task_id)
            except TaskNotFoundError:
                logger.warning("Task %s is in the index but not in the task store", task_id)
                continue
            except (ParseError, StorageParseError) as e:
                logger.warning("Task %s skipped: %s", task_id, e)
                continue

            views.append(TaskView(id=task_id, body=body, entry=data.get(task_id)))
            if not all:
                break

        return views

    def list(self, filters: Mapping[str, str] | None = None) -> list[TaskView]:
        """
        List indexed tasks, optionally filtered by exact field values.

        The ``status`` filter matches the index entry; other filters match
        body fields. Tasks missing from the index are skipped.

        Raises:
            UnknownFieldError: If a filter names an unconfigured field
        """
        filters = dict(filters or {})
        available = self.config.field_names
        for name in filters:
            if name not in available:
                raise UnknownFieldError(name, available)

        data = self.index.load()
        views: list[TaskView] = []

        for stored in self.store.list():
            try:
                body = parse_content(stored.content)
            except ParseError as e:
                logger.warning("Task %s skipped: %s", stored.id, e)
                continue

            entry = data.get(stored.id)
            if entry is None:
                logger.debug("Task %s is not in the index, skipping", stored.id)
                continue

            view = TaskView(id=stored.id, body=body, entry=entry)
            if all(self._matches(view, name, value) for name, value in filters.items()):
                views.append(view)

        return views

    @staticmethod
    def _matches(view: TaskView, name: str, value: str) -> bool:
        if name == STATUS_FIELD:
            return view.status == value
        return view.body.get(name) == value

    def get(self, task_id: str) -> TaskView:
        """
        Load one task with its index entry (None if not indexed).

        Raises:
            IdValidationError: If the ID is malformed
            TaskNotFoundError: If the task does not exist
            ParseError: If the task file cannot be parsed
        """
        validate_task_id(task_id)
        body = self._read_body(task_id)
        return TaskView(id=task_id, body=body, entry=self.index.load().get(task_id))

    def sync(self) -> SyncReport:
        """
        Reconcile the index with the content store.

        Stored tasks without an index entry get a ``pending`` entry with no
        dependencies; entries without a stored task are removed.

        Returns:
            SyncReport listing added and removed IDs
        """
        data = self.index.load()
        stored = {task.id for task in self.store.list()}
        report = SyncReport()

        for task_id in sort_ids(stored - data.keys()):
            self.index.update(task_id, IndexEntry(status=DEFAULT_STATUS, dependencies=[]))
            report.added.append(task_id)

        for task_id in sort_ids(data.keys() - stored):
            self.index.remove(task_id)
            report.removed.append(task_id)

        if report.changed:
            logger.info(
                "Sync added %d and removed %d index entries",
                len(report.added),
                len(report.removed),
            )
        return report
