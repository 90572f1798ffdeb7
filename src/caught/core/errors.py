"""Error hierarchy for caught.

These exceptions report misuse of the library itself. They are never used to
classify or wrap the failures an Outcome captures: a captured failure is kept
and re-raised verbatim.

Exception Hierarchy:
    CaughtError (base)
    ├── ClassSpecError     - Invalid class spec passed to a classification step
    ├── UnraisableFailure  - A non-exception value reached a raising terminal
    └── ConfigError        - Configuration file issues
"""

from typing import Any


class CaughtError(Exception):
    """Base exception for all caught errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error description.
            details: Optional dict with additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ClassSpecError(CaughtError, TypeError):
    """A classification step received something other than a class or a
    non-empty list/tuple of classes.

    Attributes:
        class_spec: The rejected class spec.
    """

    def __init__(
        self,
        message: str,
        *,
        class_spec: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.class_spec = class_spec


class UnraisableFailure(CaughtError, TypeError):
    """A raising terminal was asked to raise a value that is not an exception.

    Python can only raise ``BaseException`` instances, so a literal failure
    payload such as a string is carried here instead.

    Attributes:
        payload: The value that could not be raised.
    """

    def __init__(
        self,
        payload: Any,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize unraisable failure.

        Args:
            payload: The non-exception value that reached a raising terminal.
            details: Optional dict with additional context.
        """
        super().__init__(
            f"Cannot raise non-exception failure of type {type(payload).__name__}",
            details,
        )
        self.payload = payload


class ConfigError(CaughtError):
    """Error from configuration operations.

    Raised when configuration loading, parsing, or validation fails.

    Attributes:
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize config error.

        Args:
            message: Human-readable error description.
            config_file: Path to the config file if applicable.
            details: Optional dict with additional context.
        """
        super().__init__(message, details)
        self.config_file = config_file
