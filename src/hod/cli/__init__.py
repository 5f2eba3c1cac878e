"""
hod CLI - Main application entry point.

This module sets up the Typer CLI application with all commands.
"""

import logging
import sys
from pathlib import Path

import typer
from rich.console import Console

from hod import __version__
from hod.cli import project, query, tasks

# Help panel names for command grouping
PANEL_TASKS = "Change Tasks"
PANEL_QUERY = "Find Tasks"
PANEL_PROJECT = "Project"

app = typer.Typer(
    name="hod",
    help="Personal task tracker with dependency-aware next-task selection",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for hod commands.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to hod.config.yml (default: search upward from the current directory)",
    ),
) -> None:
    """
    hod - personal task tracker.

    Each task is a JSON file in the tasks directory; statuses and
    dependencies live in .hod/index.json.

    Quick Start:
        1. hod init                          # Create hod.config.yml
        2. hod add --title "Write docs"      # Create a task
        3. hod next                          # See what to work on
        4. hod done 1                        # Mark it done
    """
    setup_logging(debug)
    ctx.obj = {"debug": debug, "config_path": config}


# =============================================================================
# Change Tasks
# =============================================================================

app.command(name="add", rich_help_panel=PANEL_TASKS)(tasks.add)
app.command(name="update", rich_help_panel=PANEL_TASKS)(tasks.update)
app.command(name="append", rich_help_panel=PANEL_TASKS)(tasks.append)
app.command(name="delete", rich_help_panel=PANEL_TASKS)(tasks.delete)
app.command(name="move", rich_help_panel=PANEL_TASKS)(tasks.move)
app.command(name="done", rich_help_panel=PANEL_TASKS)(tasks.done)


# =============================================================================
# Find Tasks
# =============================================================================

app.command(name="next", rich_help_panel=PANEL_QUERY)(query.next_tasks)
app.command(name="list", rich_help_panel=PANEL_QUERY)(query.list_tasks)
app.command(name="get", rich_help_panel=PANEL_QUERY)(query.get)


# =============================================================================
# Project
# =============================================================================

app.command(name="init", rich_help_panel=PANEL_PROJECT)(project.init)
app.command(name="sync", rich_help_panel=PANEL_PROJECT)(project.sync)


@app.command(rich_help_panel=PANEL_PROJECT)
def version() -> None:
    """Show hod version and exit."""
    console.print(f"hod version {__version__}")


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main", "setup_logging"]
