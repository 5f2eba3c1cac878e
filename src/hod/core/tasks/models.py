"""
Task body and view models.

A task body is what lives in ``<id>.json``: a required title, an optional
description and any number of custom string fields keyed by their CLI
name (``test-strategy``, ``priority``, ...). Status and dependencies are
not part of the body; they are read from the dependency index and joined
in a TaskView.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from hod.core.index.models import DEFAULT_STATUS, IndexEntry

TITLE_FIELD = "title"
DESCRIPTION_FIELD = "description"
STATUS_FIELD = "status"
DEPENDENCIES_FIELD = "dependencies"

# Keys that never end up in custom fields
RESERVED_FIELDS = frozenset({TITLE_FIELD, DESCRIPTION_FIELD, STATUS_FIELD, DEPENDENCIES_FIELD})


class TaskBody(BaseModel):
    """
    Content of a single task file.

    Example:
        >>> body = TaskBody(title="Write docs", custom={"priority": "high"})
        >>> body.get("priority")
        'high'
        >>> body.with_field("priority", None).custom
        {}
    """

    title: str
    description: str | None = None
    custom: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def get(self, name: str) -> str | None:
        """Return the value of a body field by CLI name."""
        if name == TITLE_FIELD:
            return self.title
        if name == DESCRIPTION_FIELD:
            return self.description
        return self.custom.get(name)

    def with_field(self, name: str, value: str | None) -> TaskBody:
        """
        Return a copy with one field set (or removed when value is None).

        The title cannot be removed; callers enforce required fields.
        """
        if name == TITLE_FIELD:
            return self.model_copy(update={"title": value or ""})
        if name == DESCRIPTION_FIELD:
            return self.model_copy(update={"description": value})

        custom = dict(self.custom)
        if value is None:
            custom.pop(name, None)
        else:
            custom[name] = value
        return self.model_copy(update={"custom": custom})

    def fields(self) -> dict[str, str]:
        """Flat mapping of every non-empty field, title first."""
        result = {TITLE_FIELD: self.title}
        if self.description:
            result[DESCRIPTION_FIELD] = self.description
        for name, value in self.custom.items():
            if value:
                result[name] = value
        return result


@dataclass(frozen=True)
class TaskView:
    """A task body joined with its index entry (None when not indexed)."""

    id: str
    body: TaskBody
    entry: IndexEntry | None = None

    @property
    def title(self) -> str:
        return self.body.title

    @property
    def status(self) -> str:
        return self.entry.status if self.entry else DEFAULT_STATUS

    @property
    def dependencies(self) -> list[str]:
        return list(self.entry.dependencies) if self.entry else []

    def to_dict(self) -> dict[str, object]:
        """JSON-ready representation used by ``--json`` output."""
        data: dict[str, object] = {"id": self.id}
        data.update(self.body.fields())
        if self.entry is not None:
            data[STATUS_FIELD] = self.entry.status
            data[DEPENDENCIES_FIELD] = list(self.entry.dependencies)
        return data
