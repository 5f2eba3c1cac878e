"""
hod CLI - Read-only commands.

next, list and get.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from hod.cli.context import get_service, parse_assignments
from hod.cli.errors import handle_error, print_warning
from hod.cli.output import (
    format_status,
    print_json,
    print_text,
    render_tree,
    tasks_table,
    view_to_json,
)
from hod.core.errors import HodError
from hod.core.fs.atomic import atomic_write, ensure_directory
from hod.core.services.tasks import TaskNotIndexedError
from hod.core.tasks.models import STATUS_FIELD, TITLE_FIELD
from hod.core.tasks.render import render_markdown
from hod.core.tasks.tree import build_tree, detect_orphans, tree_to_json

console = Console()


def next_tasks(
    ctx: typer.Context,
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show every ready task, not just the first",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
) -> None:
    """
    Show tasks that are ready to work on.

    A task is ready when it is not done and all its dependencies are done.

    Examples:
        hod next
        hod next --all --json
    """
    service = get_service(ctx)

    try:
        views = service.next(all=show_all)
    except HodError as e:
        handle_error(e)

    if json_output:
        print_json([view_to_json(view) for view in views])
        return

    if not views:
        console.print("[dim]No tasks ready to work on[/dim]")
        return

    console.print(tasks_table(views, service.config))


def list_tasks(
    ctx: typer.Context,
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Filter by status",
    ),
    filters: list[str] | None = typer.Option(
        None,
        "--filter",
        "-f",
        help="Filter by field as NAME=VALUE (can be repeated)",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON",
    ),
    tree: bool = typer.Option(
        False,
        "--tree",
        help="Show tasks as a parent/subtask tree",
    ),
) -> None:
    """
    List tasks with optional filters.

    Examples:
        hod list
        hod list --status pending
        hod list --filter priority=high --json
        hod list --tree
    """
    criteria = parse_assignments(filters, "--filter")
    if status is not None:
        criteria[STATUS_FIELD] = status

    service = get_service(ctx)

    try:
        views = service.list(criteria)
    except HodError as e:
        handle_error(e)

    if tree:
        result = build_tree(views)
        for warning in result.warnings:
            print_warning(warning)
        orphans = detect_orphans(result.roots)
        if orphans:
            print_warning(
                f"{len(orphans)} subtask(s) with missing parents: {', '.join(orphans)}"
            )

        if json_output:
            print_json(tree_to_json(result.roots))
        elif not result.roots:
            console.print("[dim]No tasks[/dim]")
        else:
            console.print(render_tree(result.roots))
        return

    if json_output:
        print_json([view_to_json(view) for view in views])
        return

    if not views:
        console.print("[dim]No tasks[/dim]")
        return

    console.print(tasks_table(views, service.config))
    console.print(f"\n[dim]Total: {len(views)} tasks[/dim]")


def get(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID to display"),
    title: bool = typer.Option(False, "--title", help="Show only the title"),
    status: bool = typer.Option(False, "--status", help="Show only the status"),
    dependencies: bool = typer.Option(
        False, "--dependencies", help="Show only the dependencies"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    markdown: bool = typer.Option(False, "--markdown", help="Output as markdown"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the task as markdown to this file instead of printing it",
    ),
) -> None:
    """
    Show a single task.

    Examples:
        hod get 3
        hod get 3 --status
        hod get 3 --markdown
        hod get 3 --output notes/3.md
    """
    service = get_service(ctx)

    try:
        view = service.get(task_id)
        if (status or dependencies) and view.entry is None:
            raise TaskNotIndexedError(task_id)
        if markdown or output is not None:
            rendered = render_markdown(view.id, view.body, view.entry)
        else:
            rendered = None
        if output is not None:
            ensure_directory(output.parent)
            atomic_write(output, rendered)
    except HodError as e:
        handle_error(e)

    if output is not None:
        console.print(f"[green]Wrote:[/green] {escape(str(output))}")
    elif rendered is not None:
        print_text(rendered)
    elif json_output:
        print_json(view.to_dict())
    elif title:
        print_text(f"{view.id}. {view.title}")
    elif status:
        print_text(view.status)
    elif dependencies:
        print_text(", ".join(view.dependencies) if view.dependencies else "No dependencies")
    else:
        console.print(f"[bold]ID:[/bold] {view.id}")
        console.print(f"[bold]Title:[/bold] {escape(view.title)}")
        if view.entry is not None:
            console.print(f"[bold]Status:[/bold] {format_status(view.status)}")
            if view.dependencies:
                console.print(f"[bold]Dependencies:[/bold] {', '.join(view.dependencies)}")
        for key, field_config in service.config.fields.items():
            if field_config.name in (TITLE_FIELD, STATUS_FIELD):
                continue
            value = view.body.get(field_config.name)
            if value:
                console.print(f"[bold]{escape(key)}:[/bold] {escape(value)}")
