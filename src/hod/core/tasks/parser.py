"""
Task body parsing and serialization.

Two on-disk formats are understood:

    JSON (current)::

        {
          "title": "Write docs",
          "description": "Cover the CLI",
          "test-strategy": "Read it twice"
        }

    Markdown (legacy, read only)::

        # Title
        Write docs

        # Description
        Cover the CLI

Status and dependencies sections or keys are ignored; they belong to the
dependency index.
"""

from __future__ import annotations

import json
import re
from typing import Any

from hod.core.errors import HodError

from .models import DESCRIPTION_FIELD, RESERVED_FIELDS, TITLE_FIELD, TaskBody

SECTION_PATTERN = re.compile(r"^#\s+(.+)$")

_MARKDOWN_RESERVED = frozenset({"Title", "Description", "Status", "Dependencies"})


class ParseError(HodError):
    """Raised when task content cannot be parsed or serialized."""

    def __init__(self, message: str, section: str | None = None) -> None:
        super().__init__(message)
        self.section = section


def _type_name(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return type(value).__name__


def parse_json(text: str) -> TaskBody:
    """
    Parse a JSON task file.

    Custom keys are lowercased and every value is stripped.

    Raises:
        ParseError: If the text is empty, not a JSON object, lacks a string
            title, or has a non-string field
    """
    stripped = text.strip()
    if not stripped:
        raise ParseError("Empty input")

    try:
        raw = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e.msg}") from e

    if not isinstance(raw, dict):
        raise ParseError("Task JSON must be an object")

    title = raw.get(TITLE_FIELD)
    if not isinstance(title, str):
        raise ParseError("Missing required field 'title' or it is not a string", TITLE_FIELD)

    description = raw.get(DESCRIPTION_FIELD)
    if description is not None and not isinstance(description, str):
        raise ParseError("Field 'description' must be a string", DESCRIPTION_FIELD)

    custom: dict[str, str] = {}
    for key, value in raw.items():
        if key in RESERVED_FIELDS or value is None:
            continue
        if not isinstance(value, str):
            raise ParseError(
                f"Field '{key}' must be a string, got {_type_name(value)}", key
            )
        custom[key.lower()] = value.strip()

    return TaskBody(
        title=title.strip(),
        description=description.strip() if description is not None else None,
        custom=custom,
    )


def _parse_sections(text: str) -> dict[str, str]:
    sections: dict[str, str] = {}
    seen: set[str] = set()
    current: str | None = None
    lines: list[str] = []

    def flush() -> None:
        # first occurrence of a heading wins, even when it is empty
        if current is None or current in seen:
            return
        seen.add(current)
        value = "\n".join(lines).strip()
        if value:
            sections[current] = value

    for line in text.split("\n"):
        match = SECTION_PATTERN.match(line)
        if match:
            flush()
            current = match.group(1)
            lines = []
        elif current is not None:
            lines.append(line)
    flush()

    return sections


def parse_markdown(text: str) -> TaskBody:
    """
    Parse a legacy markdown task file made of ``# Heading`` sections.

    Raises:
        ParseError: If the text is empty or has no ``# Title`` section
    """
    stripped = text.strip()
    if not stripped:
        raise ParseError("Empty input")

    sections = _parse_sections(stripped)
    title = sections.get("Title")
    if not title:
        raise ParseError("Missing required section: Title", "Title")

    custom = {
        key.lower(): value
        for key, value in sections.items()
        if key not in _MARKDOWN_RESERVED
    }
    return TaskBody(title=title, description=sections.get("Description"), custom=custom)


def is_json_content(text: str) -> bool:
    """Return True when text holds a JSON object."""
    stripped = text.strip()
    if not stripped.startswith("{"):
        return False
    try:
        return isinstance(json.loads(stripped), dict)
    except json.JSONDecodeError:
        return False


def parse_content(text: str) -> TaskBody:
    """Parse task file content in whichever format it is in."""
    if is_json_content(text):
        return parse_json(text)
    return parse_markdown(text)


def serialize_json(body: TaskBody) -> str:
    """
    Serialize a task body for storage.

    Empty optional fields are dropped. Output is 2-space indented JSON with
    a trailing newline.

    Raises:
        ParseError: If the title is empty
    """
    if not body.title.strip():
        raise ParseError("Missing required field: title", TITLE_FIELD)

    data = {TITLE_FIELD: body.title.strip()}
    if body.description and body.description.strip():
        data[DESCRIPTION_FIELD] = body.description.strip()
    for key, value in body.custom.items():
        if key in RESERVED_FIELDS:
            continue
        if value.strip():
            data[key] = value.strip()

    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
