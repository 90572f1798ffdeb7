"""caught core module - Outcome, AsyncOutcome, classification and errors."""

from caught.core.async_outcome import AsyncOutcome
from caught.core.classify import (
    ClassSpec,
    is_error_like,
    matches_exact_type,
    matches_type,
    normalize_class_spec,
)
from caught.core.errors import (
    CaughtError,
    ClassSpecError,
    ConfigError,
    UnraisableFailure,
)
from caught.core.outcome import Outcome

__all__ = [
    # Types
    "Outcome",
    "AsyncOutcome",
    "ClassSpec",
    # Classification
    "is_error_like",
    "matches_type",
    "matches_exact_type",
    "normalize_class_spec",
    # Errors
    "CaughtError",
    "ClassSpecError",
    "ConfigError",
    "UnraisableFailure",
]
