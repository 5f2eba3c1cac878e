"""
Configuration exceptions.
"""

from __future__ import annotations

from pathlib import Path

from hod.core.errors import HodError


class ConfigError(HodError):
    """Base exception for configuration errors."""

    pass


class ConfigNotFoundError(ConfigError):
    """Raised when no hod.config.yml can be located."""

    def __init__(self, searched_from: Path | None = None) -> None:
        if searched_from is not None:
            message = f"Config file hod.config.yml not found (searched upward from {searched_from})"
        else:
            message = "Config file hod.config.yml not found"
        super().__init__(message)
        self.searched_from = searched_from


class ConfigLoadError(ConfigError):
    """Raised when the config file cannot be read or is not valid YAML."""

    pass


class ConfigValidationError(ConfigError):
    """
    Raised when the config content violates the schema.

    Attributes:
        issues: Human readable problem descriptions
    """

    def __init__(self, issues: list[str]) -> None:
        super().__init__("Configuration validation failed: " + "; ".join(issues))
        self.issues = issues
