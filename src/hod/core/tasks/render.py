"""
Markdown rendering of a task for ``hod get --markdown``.

Section order: Title, Description, Dependencies (from the index entry),
then custom fields sorted by their title-cased heading.
"""

from __future__ import annotations

from hod.core.index.models import IndexEntry

from .models import TaskBody
from .parser import ParseError


def title_case_key(key: str) -> str:
    """
    Title-case each hyphen separated part of a field name.

    Example:
        >>> title_case_key("test-strategy")
        'Test-Strategy'
    """
    return "-".join(part[:1].upper() + part[1:].lower() for part in key.split("-"))


def render_markdown(task_id: str, body: TaskBody, entry: IndexEntry | None = None) -> str:
    """
    Render a task as flat markdown sections.

    Args:
        task_id: Task ID (used in error messages)
        body: Parsed task body
        entry: Index entry supplying dependencies, if indexed

    Returns:
        Markdown text, each section followed by a blank line

    Raises:
        ParseError: If the title is empty
    """
    if not body.title.strip():
        raise ParseError(f"Missing required field title for task {task_id}", "title")

    lines = ["# Title", body.title.strip(), ""]

    if body.description and body.description.strip():
        lines += ["# Description", body.description.strip(), ""]

    if entry is not None and entry.dependencies:
        lines += ["# Dependencies", ", ".join(entry.dependencies), ""]

    custom = sorted(
        (title_case_key(key), value.strip())
        for key, value in body.custom.items()
        if value.strip()
    )
    for heading, value in custom:
        lines += [f"# {heading}", value, ""]

    return "\n".join(lines)
