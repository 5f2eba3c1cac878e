"""
Rendering helpers shared by hod commands.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from hod.core.config.models import HodConfig
from hod.core.ids.sorting import sort_ids
from hod.core.tasks.models import STATUS_FIELD, TaskView
from hod.core.tasks.tree import TreeNode

console = Console()

STATUS_COLORS = {
    "pending": "white",
    "in-progress": "yellow",
    "in_progress": "yellow",
    "blocked": "red",
    "completed": "green",
}


def print_json(data: Any) -> None:
    """Print data as 2-space indented JSON, without markup or wrapping."""
    console.print(
        json.dumps(data, indent=2, ensure_ascii=False),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def print_text(text: str) -> None:
    """Print literal text (task content may contain square brackets)."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def format_status(status: str) -> str:
    color = STATUS_COLORS.get(status, "white")
    return f"[{color}]{escape(status)}[/{color}]"


def view_to_json(view: TaskView) -> dict[str, Any]:
    """JSON form of a task for list/next output (dependencies sorted)."""
    data = view.to_dict()
    if view.entry is not None:
        data["dependencies"] = sort_ids(view.dependencies)
    return data


def tasks_table(views: list[TaskView], config: HodConfig) -> Table:
    """
    Build a table with an ID column plus one column per configured field.

    Status comes from the index; other columns from the task body.
    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")

    columns = sorted(config.fields.items())
    for key, _ in columns:
        table.add_column(key, overflow="fold")

    for view in views:
        row = [view.id]
        for _, field_config in columns:
            if field_config.name == STATUS_FIELD:
                row.append(format_status(view.status))
                continue
            value = view.body.get(field_config.name)
            row.append(escape(" ".join(value.split())) if value else "[dim]-[/dim]")
        table.add_row(*row)

    return table


def _add_nodes(branch: Tree, nodes: list[TreeNode]) -> None:
    for node in nodes:
        label = f"[bold]{node.id}[/bold]  {format_status(node.status)}  {escape(node.title)}"
        _add_nodes(branch.add(label), node.children)


def render_tree(roots: list[TreeNode]) -> Tree:
    """Build a rich Tree from task tree nodes."""
    tree = Tree("Tasks", hide_root=True, guide_style="dim")
    _add_nodes(tree, roots)
    return tree
