"""
hod CLI - Task mutation commands.

add, update, append, delete, move and done.
"""

import typer
from rich.console import Console

from hod.cli.context import collect_fields, get_service
from hod.cli.errors import handle_error
from hod.core.errors import HodError

console = Console()

TITLE_OPTION = typer.Option(None, "--title", "-t", help="Task title")
DESCRIPTION_OPTION = typer.Option(None, "--description", help="Task description")
STATUS_OPTION = typer.Option(None, "--status", "-s", help="Task status")
SET_OPTION = typer.Option(
    None,
    "--set",
    help="Custom field as NAME=VALUE (can be repeated)",
)
DEPENDENCIES_OPTION = typer.Option(
    None,
    "--dependencies",
    help="Comma separated task IDs this task depends on",
)


def add(
    ctx: typer.Context,
    title: str | None = TITLE_OPTION,
    description: str | None = DESCRIPTION_OPTION,
    status: str | None = STATUS_OPTION,
    set_fields: list[str] | None = SET_OPTION,
    dependencies: str | None = DEPENDENCIES_OPTION,
    parent: str | None = typer.Option(
        None,
        "--parent",
        "-p",
        help="Create as a subtask of this main task",
    ),
) -> None:
    """
    Create a new task.

    Examples:
        hod add --title "Write docs"
        hod add --title "Draft outline" --parent 1
        hod add --title "Publish" --dependencies 1,2 --set priority=high
    """
    fields = collect_fields(title, description, status, set_fields)
    service = get_service(ctx)

    try:
        task_id = service.add(fields, dependencies=dependencies, parent=parent)
    except HodError as e:
        handle_error(e)

    console.print(f"[green]Created:[/green] {task_id}")


def update(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to update"),
    title: str | None = TITLE_OPTION,
    description: str | None = DESCRIPTION_OPTION,
    status: str | None = STATUS_OPTION,
    set_fields: list[str] | None = SET_OPTION,
    dependencies: str | None = DEPENDENCIES_OPTION,
) -> None:
    """
    Replace field values of a task.

    An empty value removes an optional field; --dependencies "" clears
    the dependency list.

    Examples:
        hod update 3 --status in-progress
        hod update 3 --description ""
        hod update 3 --dependencies 1,2
    """
    fields = collect_fields(title, description, status, set_fields)
    service = get_service(ctx)

    try:
        service.update(task_id, fields, dependencies=dependencies)
    except HodError as e:
        handle_error(e)

    console.print(f"[green]Updated:[/green] {task_id}")


def append(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to append to"),
    title: str | None = TITLE_OPTION,
    description: str | None = DESCRIPTION_OPTION,
    status: str | None = STATUS_OPTION,
    set_fields: list[str] | None = SET_OPTION,
    dependencies: str | None = DEPENDENCIES_OPTION,
) -> None:
    """
    Append text to task fields on a new line.

    Examples:
        hod append 3 --description "Also cover the config file"
        hod append 3 --set notes="Checked with the team"
    """
    fields = collect_fields(title, description, status, set_fields)
    fields["dependencies"] = dependencies
    service = get_service(ctx)

    try:
        service.append(task_id, fields)
    except HodError as e:
        handle_error(e)

    console.print(f"[green]Updated:[/green] {task_id}")


def delete(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to delete"),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Also delete the task's subtasks",
    ),
) -> None:
    """
    Delete a task.

    Examples:
        hod delete 3
        hod delete 1 -r
    """
    service = get_service(ctx)

    try:
        service.delete(task_id, recursive=recursive)
    except HodError as e:
        handle_error(e)

    console.print(f"[green]Deleted:[/green] {task_id}")


def move(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to move"),
    parent: str = typer.Option(..., "--parent", "-p", help="Main task to move it under"),
) -> None:
    """
    Move a task under another main task.

    The task gets a new subtask ID; status and dependencies move with it.

    Examples:
        hod move 4 --parent 1
    """
    service = get_service(ctx)

    try:
        result = service.move(task_id, parent)
    except HodError as e:
        handle_error(e)

    if result == task_id:
        console.print(f"[dim]Task {task_id} is already under {parent}[/dim]")
    else:
        console.print(f"[green]Moved:[/green] {result}")


def done(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to mark done"),
) -> None:
    """
    Mark a task as done.

    Examples:
        hod done 3
    """
    service = get_service(ctx)

    try:
        result = service.done(task_id)
    except HodError as e:
        handle_error(e)

    if result.was_already_done:
        console.print(f"[dim]Task {result.id} is already {result.done_status}[/dim]")
    else:
        console.print(f"[green]Done:[/green] {result.id} ({result.done_status})")
