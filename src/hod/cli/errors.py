"""
Standardized error handling and exit codes for the hod CLI.

Core code raises typed HodError subclasses; this module turns them into a
problem / reason / solution message and an exit code.
"""

from __future__ import annotations

from enum import IntEnum
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from hod.core.config.errors import ConfigNotFoundError, ConfigValidationError
from hod.core.errors import HodError
from hod.core.ids.validator import IdValidationError
from hod.core.index.errors import (
    CircularDependencyError,
    DependencyIndexError,
    IndexCorruptionError,
)
from hod.core.services.tasks import (
    SubtaskConflictError,
    TaskNotIndexedError,
    TaskServiceError,
    UnknownFieldError,
)
from hod.core.storage.errors import InvalidTaskContentError, TaskNotFoundError

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for hod CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Storage, index or other unexpected failure."""

    USER_ERROR = 2
    """Invalid input, unknown task, or configuration problem (actionable by user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


_USER_ERRORS: tuple[type[BaseException], ...] = (
    IdValidationError,
    TaskNotFoundError,
    CircularDependencyError,
    TaskServiceError,
    ConfigNotFoundError,
    ConfigValidationError,
    InvalidTaskContentError,
)


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Config file hod.config.yml not found",
        ...     solution="hod init",
        ... )
    """
    console.print(f"[red]Error:[/red] {escape(problem)}")

    if reason:
        console.print(f"[dim]{escape(reason)}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {escape(solution)}")


def print_warning(message: str) -> None:
    """Print a non-fatal warning."""
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def exit_code_for(error: BaseException) -> ExitCode:
    """Map an exception to the exit code the CLI reports for it."""
    if isinstance(error, _USER_ERRORS):
        return ExitCode.USER_ERROR
    return ExitCode.GENERAL_ERROR


def _guidance(error: HodError) -> tuple[str | None, str | None]:
    """Return (reason, solution) for an error."""
    if error.compensation_error is not None:
        return (
            f"Rollback also failed: {error.compensation_error}",
            "hod sync  # to reconcile the index with the task files",
        )
    if isinstance(error, ConfigNotFoundError):
        return ("No hod.config.yml in this directory or any parent", "hod init")
    if isinstance(error, TaskNotFoundError):
        return (None, "hod list  # to see available tasks")
    if isinstance(error, TaskNotIndexedError):
        return ("The task file exists but the index has no entry for it", "hod sync")
    if isinstance(error, UnknownFieldError):
        return (None, "Add the field to hod.config.yml or use one of the listed fields")
    if isinstance(error, SubtaskConflictError):
        return (f"Subtasks: {', '.join(error.subtasks)}", None)
    if isinstance(error, CircularDependencyError):
        return ("Dependencies must not form a cycle", None)
    if isinstance(error, IndexCorruptionError):
        return (
            "The index file is damaged and is never repaired automatically",
            f"Fix or remove {error.path}, then run hod sync",
        )
    if isinstance(error, DependencyIndexError):
        return (None, "hod sync  # if the index and task files disagree")
    return (None, None)


def handle_error(error: HodError) -> NoReturn:
    """
    Print a HodError and exit with its exit code.

    Raises:
        typer.Exit: Always
    """
    reason, solution = _guidance(error)
    print_error(str(error), reason=reason, solution=solution)
    raise typer.Exit(exit_code_for(error))
