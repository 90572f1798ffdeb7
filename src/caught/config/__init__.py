"""Configuration module for caught.

Usage:
    from caught.config import apply_config, load_config

    apply_config(load_config(Path("caught.yaml")))
"""

from caught.config.loader import apply_config, load_config, load_config_from_env
from caught.config.models import CaughtConfig, get_config_dir, get_default_config

__all__ = [
    "CaughtConfig",
    "apply_config",
    "get_config_dir",
    "get_default_config",
    "load_config",
    "load_config_from_env",
]
