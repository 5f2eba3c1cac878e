"""
Configuration discovery and loading.

Resolution order for the config file:
    1. Explicit path (``--config``)
    2. ``HOD_CONFIG`` environment variable
    3. ``hod.config.yml`` in the working directory or any parent

``HOD_TASKS_DIR`` overrides the ``tasksDir`` value from the file. The
tasks directory is resolved relative to the config file's directory.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .errors import ConfigLoadError, ConfigNotFoundError, ConfigValidationError
from .models import DEFAULT_DONE_STATUS, DEFAULT_TASKS_DIR, HodConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "hod.config.yml"
CONFIG_ENV_VAR = "HOD_CONFIG"
TASKS_DIR_ENV_VAR = "HOD_TASKS_DIR"

# tasksDir may not point into these
CRITICAL_PATHS = (Path("/etc"), Path("/sys"), Path("/proc"), Path("/boot"))


def find_config_path(start_dir: Path | None = None) -> Path | None:
    """
    Search for hod.config.yml from start_dir up to the file system root.

    Args:
        start_dir: Directory to start from (defaults to the working directory)

    Returns:
        Path to the config file, or None if not found

    Raises:
        ConfigLoadError: If a candidate exists but cannot be accessed
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILE_NAME
        try:
            if candidate.is_file():
                return candidate
        except PermissionError as e:
            raise ConfigLoadError(f"Cannot access config at {candidate}: {e}") from e

        if current.parent == current:
            return None
        current = current.parent


def _format_issues(error: ValidationError) -> list[str]:
    issues = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        message = item["msg"].removeprefix("Value error, ")
        issues.append(f"{location}: {message}" if location else message)
    return issues


def validate_tasks_dir(tasks_dir: Path) -> None:
    """
    Reject task directories inside critical system paths.

    Raises:
        ConfigLoadError: If tasks_dir is under /etc, /sys, /proc or /boot
    """
    for critical in CRITICAL_PATHS:
        if tasks_dir == critical or tasks_dir.is_relative_to(critical):
            raise ConfigLoadError(
                f"tasksDir {tasks_dir} points into critical system directory {critical}"
            )


def parse_config(raw: Any, config_dir: Path) -> HodConfig:
    """
    Validate raw YAML data and resolve tasksDir against config_dir.

    Raises:
        ConfigLoadError: If raw is not a mapping or tasksDir is unsafe
        ConfigValidationError: If the data violates the schema
    """
    if not isinstance(raw, dict):
        raise ConfigLoadError("Configuration file is empty or invalid")

    if tasks_dir_override := os.environ.get(TASKS_DIR_ENV_VAR):
        raw = {**raw, "tasksDir": tasks_dir_override}

    try:
        config = HodConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(_format_issues(e)) from e

    tasks_dir = (config_dir / config.tasks_dir.expanduser()).resolve()
    validate_tasks_dir(tasks_dir)

    return config.model_copy(update={"tasks_dir": tasks_dir})


def load_config(path: Path | None = None, cwd: Path | None = None) -> HodConfig:
    """
    Locate, read and validate the project configuration.

    Args:
        path: Explicit config file path
        cwd: Directory to search upward from (defaults to the working directory)

    Returns:
        Validated HodConfig with an absolute tasks_dir

    Raises:
        ConfigNotFoundError: If no config file is found
        ConfigLoadError: If the file cannot be read or is not valid YAML
        ConfigValidationError: If the content is invalid

    Example:
        >>> config = load_config()
        >>> config.tasks_dir.name
        'tasks'
    """
    if path is None and (env_path := os.environ.get(CONFIG_ENV_VAR)):
        path = Path(env_path)

    if path is not None:
        config_path = Path(path).expanduser().resolve()
        if not config_path.is_file():
            raise ConfigNotFoundError()
    else:
        found = find_config_path(cwd)
        if found is None:
            raise ConfigNotFoundError((cwd or Path.cwd()).resolve())
        config_path = found

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config at {config_path}: {e}") from e

    try:
        raw = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in configuration file {config_path}: {e}") from e

    config = parse_config(raw, config_path.parent)
    logger.debug("Loaded config from %s (tasks_dir=%s)", config_path, config.tasks_dir)
    return config


def create_default_config(
    tasks_dir: str = DEFAULT_TASKS_DIR, cwd: Path | None = None
) -> tuple[bool, Path]:
    """
    Write a default hod.config.yml and create the tasks directory.

    An existing config file is never overwritten.

    Args:
        tasks_dir: Value written as ``tasksDir``
        cwd: Directory to initialize (defaults to the working directory)

    Returns:
        Tuple of (created, config_path); created is False if the file existed
    """
    root = cwd or Path.cwd()
    config_path = root / CONFIG_FILE_NAME

    if config_path.exists():
        return False, config_path

    (root / tasks_dir).mkdir(parents=True, exist_ok=True)

    default = {
        "tasksDir": tasks_dir,
        "fields": {
            "Title": {"name": "title", "required": True},
            "Description": {"name": "description"},
            "Status": {"name": "status", "default": "pending"},
        },
        "doneStatus": DEFAULT_DONE_STATUS,
    }
    config_path.write_text(yaml.safe_dump(default, sort_keys=False), encoding="utf-8")
    logger.debug("Created default config at %s", config_path)
    return True, config_path
