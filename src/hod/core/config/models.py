"""
Configuration data models for hod.

These models define the structure of ``hod.config.yml``, with validation
via Pydantic. YAML keys use camelCase (``tasksDir``, ``doneStatus``);
attributes are snake_case.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_DONE_STATUS = "completed"
DEFAULT_TASKS_DIR = "./tasks"

FIELD_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,50}$")
FIELD_NAME_PATTERN = re.compile(r"^[a-z0-9-]{1,50}$")


class FieldConfig(BaseModel):
    """
    A task field exposed on the command line.

    The config key (``Title``, ``Test-Strategy``) is the display heading;
    ``name`` is the kebab-case CLI and storage name.
    """

    name: str
    required: bool = False
    default: str | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Names are kebab-case: lowercase letters, digits and hyphens."""
        if not FIELD_NAME_PATTERN.match(v):
            raise ValueError(
                "name must be kebab-case (lowercase letters, numbers, hyphens only)"
            )
        return v

    @model_validator(mode="after")
    def check_required_default(self) -> FieldConfig:
        """A required field cannot also have a default."""
        if self.required and self.default is not None:
            raise ValueError("field with required: true cannot have a default value")
        return self


def default_fields() -> dict[str, FieldConfig]:
    return {
        "Title": FieldConfig(name="title", required=True),
        "Description": FieldConfig(name="description"),
        "Status": FieldConfig(name="status", default="pending"),
    }


class HodConfig(BaseModel):
    """
    Project configuration loaded from ``hod.config.yml``.

    Example:
        >>> config = HodConfig.model_validate(
        ...     {"tasksDir": "./tasks", "fields": {"Title": {"name": "title", "required": True}}}
        ... )
        >>> sorted(config.fields)
        ['Description', 'Title']
        >>> config.done_statuses
        ['completed']
    """

    tasks_dir: Path = Field(alias="tasksDir")
    fields: dict[str, FieldConfig] = Field(default_factory=default_fields)
    done_status: str | list[str] | None = Field(default=None, alias="doneStatus")

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @field_validator("tasks_dir", mode="before")
    @classmethod
    def validate_tasks_dir(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            raise ValueError("tasksDir cannot be empty")
        return v

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: dict[str, FieldConfig]) -> dict[str, FieldConfig]:
        """Check keys, unique names, and add the Description field."""
        if not v:
            raise ValueError("fields must contain at least one field")

        for key in v:
            if not FIELD_KEY_PATTERN.match(key):
                raise ValueError(
                    f"field key '{key}' must contain only letters, numbers, "
                    "hyphens and underscores"
                )

        seen: dict[str, str] = {}
        for key, field in v.items():
            if field.name in seen:
                raise ValueError(
                    f"duplicate name '{field.name}' used by fields "
                    f"'{seen[field.name]}' and '{key}'"
                )
            seen[field.name] = key

        description = v.get("Description")
        if description is None:
            if "description" in seen:
                raise ValueError(
                    f"name 'description' is reserved for the Description field "
                    f"(used by '{seen['description']}')"
                )
            return {**v, "Description": FieldConfig(name="description")}
        if description.name != "description":
            raise ValueError(
                f"field 'Description' must have name 'description', found '{description.name}'"
            )
        return v

    @field_validator("done_status")
    @classmethod
    def validate_done_status(cls, v: str | list[str] | None) -> str | list[str] | None:
        if isinstance(v, str) and not v:
            raise ValueError("doneStatus cannot be empty")
        if isinstance(v, list):
            if not v:
                raise ValueError("doneStatus list cannot be empty")
            if any(not status for status in v):
                raise ValueError("doneStatus entries cannot be empty")
        return v

    @property
    def done_statuses(self) -> list[str]:
        """Statuses that count as complete, in config order."""
        if self.done_status is None:
            return [DEFAULT_DONE_STATUS]
        if isinstance(self.done_status, str):
            return [self.done_status]
        return list(self.done_status)

    def field_by_name(self, name: str) -> tuple[str, FieldConfig] | None:
        """Look up a field by its CLI name, returning (key, config)."""
        for key, field in self.fields.items():
            if field.name == name:
                return key, field
        return None

    @property
    def field_names(self) -> list[str]:
        return [field.name for field in self.fields.values()]
