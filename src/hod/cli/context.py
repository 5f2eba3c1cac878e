"""
Shared helpers for building services and parsing options in commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from hod.cli.errors import handle_error
from hod.core.config.loader import load_config
from hod.core.errors import HodError
from hod.core.services.tasks import TaskService


def get_service(ctx: typer.Context) -> TaskService:
    """Load the project config and build a TaskService, exiting on failure."""
    obj = ctx.obj or {}
    config_path: Path | None = obj.get("config_path")
    try:
        config = load_config(config_path)
    except HodError as e:
        handle_error(e)
    return TaskService.from_config(config)


def parse_assignments(values: list[str] | None, option: str) -> dict[str, str]:
    """
    Parse repeatable ``NAME=VALUE`` options into a dict.

    ``NAME=`` yields an empty value (used by update to clear a field).

    Raises:
        typer.BadParameter: If an item has no ``=`` or an empty name
    """
    result: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected NAME=VALUE, got '{item}'", param_hint=option)
        result[name.strip()] = value
    return result


def collect_fields(
    title: str | None,
    description: str | None,
    status: str | None,
    set_fields: list[str] | None,
) -> dict[str, str | None]:
    """Combine the dedicated field options with ``--set`` assignments."""
    fields: dict[str, str | None] = {
        "title": title,
        "description": description,
        "status": status,
    }
    fields.update(parse_assignments(set_fields, "--set"))
    return fields
