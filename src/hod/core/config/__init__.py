"""
Configuration models and loading.

Loads ``hod.config.yml`` (YAML, validated with Pydantic), found via an
explicit path, the ``HOD_CONFIG`` env var, or an upward directory search.
"""

from .errors import ConfigError, ConfigLoadError, ConfigNotFoundError, ConfigValidationError
from .loader import (
    CONFIG_ENV_VAR,
    CONFIG_FILE_NAME,
    TASKS_DIR_ENV_VAR,
    create_default_config,
    find_config_path,
    load_config,
    parse_config,
    validate_tasks_dir,
)
from .models import DEFAULT_DONE_STATUS, FieldConfig, HodConfig

__all__ = [
    # Models
    "FieldConfig",
    "HodConfig",
    "DEFAULT_DONE_STATUS",
    # Loader functions
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "TASKS_DIR_ENV_VAR",
    "create_default_config",
    "find_config_path",
    "load_config",
    "parse_config",
    "validate_tasks_dir",
    # Errors
    "ConfigError",
    "ConfigLoadError",
    "ConfigNotFoundError",
    "ConfigValidationError",
]
