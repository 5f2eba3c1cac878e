"""
hod CLI - Project commands.

init and sync.
"""

from pathlib import Path

import typer
from rich.console import Console

from hod.cli.context import get_service
from hod.cli.errors import ExitCode, handle_error, print_error
from hod.core.config.models import DEFAULT_TASKS_DIR
from hod.core.errors import HodError
from hod.core.services.tasks import init_project

console = Console()


def init(
    tasks_dir: str = typer.Option(
        DEFAULT_TASKS_DIR,
        "--tasks-dir",
        help="Directory for task files, relative to the config",
    ),
) -> None:
    """
    Initialize a hod project in the current directory.

    Writes hod.config.yml with the default fields and creates the tasks
    directory. An existing config is left untouched.

    Examples:
        hod init
        hod init --tasks-dir ./todo
    """
    try:
        created, config_path = init_project(tasks_dir, Path.cwd())
    except OSError as e:
        print_error("Could not initialize project", reason=str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if created:
        console.print(f"[green]Initialized hod project[/green] ({config_path.name})")
    else:
        console.print(f"[yellow]Config already exists[/yellow] ({config_path.name})")


def sync(ctx: typer.Context) -> None:
    """
    Reconcile the index with the task files.

    Adds pending index entries for task files missing from the index and
    removes entries whose task file no longer exists.

    Examples:
        hod sync
    """
    service = get_service(ctx)

    try:
        report = service.sync()
    except HodError as e:
        handle_error(e)

    if not report.changed:
        console.print("[green]Index is in sync[/green]")
        return

    for task_id in report.added:
        console.print(f"[green]+[/green] {task_id} added to index")
    for task_id in report.removed:
        console.print(f"[red]-[/red] {task_id} removed from index")
