"""Configuration loading for caught.

Functions:
    load_config: Load configuration from a YAML file
    load_config_from_env: Build configuration from CAUGHT_LOG_* variables
    apply_config: Apply a configuration (configures logging)
"""

from collections.abc import Mapping
import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError as PydanticValidationError
import yaml

from caught.config.models import CaughtConfig, get_config_dir
from caught.core.errors import ConfigError
from caught.observability.logging import (
    LOG_LEVEL_ENV,
    LOG_MODE_ENV,
    configure_logging,
)

LOG_DIR_ENV = "CAUGHT_LOG_DIR"
LOG_FILE_ENV = "CAUGHT_LOG_FILE"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _validate(data: dict[str, Any], source: str) -> CaughtConfig:
    """Validate a raw config dict, turning pydantic errors into ConfigError."""
    try:
        return CaughtConfig.model_validate(data)
    except PydanticValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        raise ConfigError(
            "Configuration validation failed:\n" + "\n".join(error_messages),
            config_file=source,
            details={"validation_errors": e.errors()},
        ) from e


def load_config(config_path: Path | None = None) -> CaughtConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ~/.caught/config.yaml.

    Returns:
        Validated CaughtConfig instance.

    Raises:
        ConfigError: If file doesn't exist, is malformed, or fails validation.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            config_file=str(config_path),
        )

    try:
        with config_path.open() as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse configuration file: {e}",
            config_file=str(config_path),
            details={"yaml_error": str(e)},
        ) from e

    if config_dict is None:
        config_dict = {}

    if not isinstance(config_dict, dict):
        raise ConfigError(
            "Configuration file must contain a mapping at the top level",
            config_file=str(config_path),
        )

    return _validate(config_dict, str(config_path))


def load_config_from_env(env_file: Path | None = None) -> CaughtConfig:
    """Build configuration from environment variables.

    Recognised variables: CAUGHT_LOG_MODE, CAUGHT_LOG_LEVEL, CAUGHT_LOG_DIR,
    CAUGHT_LOG_FILE (truthy enables file logging). Values in env_file, when
    given, are read without modifying os.environ and override the process
    environment.

    Args:
        env_file: Optional path to a .env file.

    Returns:
        Validated CaughtConfig instance.

    Raises:
        ConfigError: If env_file doesn't exist or values fail validation.
    """
    env: dict[str, str | None] = dict(os.environ)
    if env_file is not None:
        if not env_file.exists():
            raise ConfigError(
                f"Environment file not found: {env_file}",
                config_file=str(env_file),
            )
        env.update(dotenv_values(env_file))

    return _validate(
        {"logging": _logging_section(env)},
        str(env_file) if env_file is not None else "<environment>",
    )


def _logging_section(env: Mapping[str, str | None]) -> dict[str, Any]:
    section: dict[str, Any] = {}
    if mode := env.get(LOG_MODE_ENV):
        section["mode"] = mode.lower()
    if level := env.get(LOG_LEVEL_ENV):
        section["log_level"] = level.upper()
    if log_dir := env.get(LOG_DIR_ENV):
        section["log_dir"] = Path(log_dir).expanduser()
    if file_flag := env.get(LOG_FILE_ENV):
        section["enable_file_logging"] = file_flag.strip().lower() in _TRUTHY
    return section


def apply_config(config: CaughtConfig) -> None:
    """Apply configuration to the running process."""
    configure_logging(config.logging)
