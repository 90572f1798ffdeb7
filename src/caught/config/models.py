"""Pydantic models for caught configuration.

Classes:
    CaughtConfig: Top-level configuration. The only section today is logging.
"""

from pathlib import Path

from pydantic import BaseModel, Field

from caught.observability.logging import LoggingConfig


class CaughtConfig(BaseModel, frozen=True):
    """Top-level caught configuration.

    Attributes:
        logging: Structured logging configuration.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_config_dir() -> Path:
    """Get the caught configuration directory path.

    Returns:
        Path to ~/.caught/
    """
    return Path.home() / ".caught"


def get_default_config() -> CaughtConfig:
    """Get the default caught configuration."""
    return CaughtConfig()
