"""Outcome - the synchronous result of a fallible computation.

An Outcome holds either a success value or a captured failure payload. A chain
of classification steps can turn the failure into a *mapped* value; the first
step that matches resolves the Outcome and every later step is a no-op that
returns the same instance. A single terminal call then extracts a plain value
or raises.

Usage:
    from caught import run_safely

    port = (
        run_safely(lambda: int(raw_port))
        .map_by_type(ValueError, lambda _: 8080)
        .or_rethrow()
    )
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Never, NoReturn, cast

from caught.core.classify import (
    ClassSpec,
    is_error_like,
    matches_exact_type,
    matches_type,
    normalize_class_spec,
)
from caught.core.errors import UnraisableFailure
from caught.observability.logging import get_logger

log = get_logger(__name__)


def _raise(value: Any) -> NoReturn:
    """Raise value as-is, or UnraisableFailure if it is not an exception."""
    log.debug("outcome.failure.raised", payload_type=type(value).__name__)
    if isinstance(value, BaseException):
        raise value
    raise UnraisableFailure(value)


@dataclass(frozen=True, slots=True)
class Outcome[T, E, M]:
    """Either a success value or a classifiable failure payload.

    Type parameters:
        T: The success value type.
        E: The captured failure payload type.
        M: The union of values produced by matching classification steps.

    An Outcome is immutable. Every chain step returns either the same
    instance or a new resolved Outcome; nothing is changed in place.
    """

    _value: T | M | None
    _failure: E | None
    _is_success: bool
    _is_resolved: bool
    _traceback: TracebackType | None = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self._is_success and not self._is_resolved:
            object.__setattr__(self, "_is_resolved", True)

    @classmethod
    def from_success(cls, value: T) -> Outcome[T, Never, Never]:
        """Create a resolved Outcome holding a success value."""
        return cast(
            "Outcome[T, Never, Never]",
            cls(_value=value, _failure=None, _is_success=True, _is_resolved=True),
        )

    @classmethod
    def from_failure(cls, failure: E) -> Outcome[Never, E, Never]:
        """Create an unresolved Outcome holding a failure payload."""
        return cast(
            "Outcome[Never, E, Never]",
            cls(
                _value=None,
                _failure=failure,
                _is_success=False,
                _is_resolved=False,
                _traceback=failure.__traceback__ if isinstance(failure, BaseException) else None,
            ),
        )

    @classmethod
    def try_run(cls, fn: Callable[[], T]) -> Outcome[T, Exception, Never]:
        """Call fn with no arguments and capture its return value or exception.

        The raised exception is stored verbatim. Exceptions that are not
        ``Exception`` subclasses (KeyboardInterrupt, SystemExit, ...) propagate.
        """
        try:
            value = fn()
        except Exception as exc:
            log.debug("outcome.failure.captured", payload_type=type(exc).__name__)
            return cast("Outcome[T, Exception, Never]", cls.from_failure(exc))
        return cast("Outcome[T, Exception, Never]", cls.from_success(value))

    @property
    def is_success(self) -> bool:
        """Return True if this Outcome came from a successful computation."""
        return self._is_success

    @property
    def is_resolved(self) -> bool:
        """Return True if the held value is final (success or mapped)."""
        return self._is_resolved

    @property
    def is_mapped(self) -> bool:
        """Return True if a classification step resolved the failure."""
        return self._is_resolved and not self._is_success

    @property
    def value(self) -> T | M:
        """Return the success or mapped value.

        Raises:
            ValueError: If no value has been resolved yet.
        """
        if not self._is_resolved:
            msg = "Cannot access value on unresolved Outcome"
            raise ValueError(msg)
        return cast("T | M", self._value)

    @property
    def failure(self) -> E:
        """Return the originally captured failure payload.

        The payload is kept after a classification step maps it.

        Raises:
            ValueError: If this Outcome came from a successful computation.
        """
        if self._is_success:
            msg = "Cannot access failure on successful Outcome"
            raise ValueError(msg)
        return cast(E, self._failure)

    def __repr__(self) -> str:
        if self._is_success:
            return f"Success({self._value!r})"
        if self._is_resolved:
            return f"Mapped({self._value!r})"
        return f"Failure({self._failure!r})"

    # -- classification steps -------------------------------------------

    def _resolve_with[U](self, step: str, transform: Callable[..., U]) -> Outcome[T, E, M | U]:
        log.debug(
            "outcome.classification.matched",
            step=step,
            payload_type=type(self._failure).__name__,
        )
        return Outcome(
            _value=transform(self._failure),
            _failure=self._failure,
            _is_success=False,
            _is_resolved=True,
            _traceback=self._traceback,
        )

    def map_by_type[X, U](
        self,
        class_spec: ClassSpec[X],
        transform: Callable[[X], U],
    ) -> Outcome[T, E, M | U]:
        """Map the failure if it is an instance of any listed class.

        Subclass instances match. If this Outcome is already resolved, or the
        failure does not match, the same instance is returned and transform is
        never called. An exception raised by transform propagates.

        Args:
            class_spec: A class or a non-empty list/tuple of classes.
            transform: Called with the failure payload on a match.

        Returns:
            A new resolved Outcome holding transform's result, or self.

        Raises:
            ClassSpecError: If class_spec is malformed.
        """
        if self._is_resolved:
            return cast("Outcome[T, E, M | U]", self)

        if not matches_type(self._failure, normalize_class_spec(class_spec)):
            return cast("Outcome[T, E, M | U]", self)

        return self._resolve_with("map_by_type", transform)

    def map_by_exact_type[X, U](
        self,
        class_spec: ClassSpec[X],
        transform: Callable[[X], U],
    ) -> Outcome[T, E, M | U]:
        """Map the failure if its runtime type is exactly a listed class.

        Unlike map_by_type, an instance of a subclass does not match.

        Args:
            class_spec: A class or a non-empty list/tuple of classes.
            transform: Called with the failure payload on a match.

        Returns:
            A new resolved Outcome holding transform's result, or self.

        Raises:
            ClassSpecError: If class_spec is malformed.
        """
        if self._is_resolved:
            return cast("Outcome[T, E, M | U]", self)

        if not matches_exact_type(self._failure, normalize_class_spec(class_spec)):
            return cast("Outcome[T, E, M | U]", self)

        return self._resolve_with("map_by_exact_type", transform)

    def map_non_error[U](self, transform: Callable[[E], U]) -> Outcome[T, E, M | U]:
        """Map the failure if it is not an exception object.

        Handles literal failure payloads such as strings, dicts or None.
        """
        if self._is_resolved or is_error_like(self._failure):
            return cast("Outcome[T, E, M | U]", self)

        return self._resolve_with("map_non_error", transform)

    map = map_by_type
    map_exact = map_by_exact_type

    # -- terminal operations --------------------------------------------

    def _raise_failure(self) -> NoReturn:
        # Restore the captured traceback so repeated raises do not stack frames.
        if isinstance(self._failure, BaseException):
            self._failure.with_traceback(self._traceback)
        _raise(self._failure)

    def and_return[D](self, default: Callable[[E], D] | None = None) -> T | M | D | None:
        """Return the resolved value.

        If unresolved, return ``default(failure)`` when a default is given,
        otherwise None.
        """
        if self._is_resolved:
            return cast("T | M", self._value)

        if default is not None:
            return default(cast(E, self._failure))

        return None

    def and_map_return[U, D](
        self,
        on_mapped: Callable[[M], U],
        default: Callable[[E], D] | None = None,
    ) -> T | U | D | None:
        """Return the success value, or on_mapped applied to the mapped value.

        If unresolved, return ``default(failure)`` when a default is given,
        otherwise None.
        """
        if self._is_success:
            return cast(T, self._value)

        if self._is_resolved:
            return on_mapped(cast(M, self._value))

        if default is not None:
            return default(cast(E, self._failure))

        return None

    def or_rethrow(self) -> T | M:
        """Return the resolved value, or re-raise the original failure verbatim.

        Raises:
            UnraisableFailure: If the failure to raise is not an exception.
        """
        if self._is_resolved:
            return cast("T | M", self._value)

        self._raise_failure()

    def or_throw(self, to_error: Callable[[E], BaseException]) -> T | M:
        """Return the resolved value, or raise ``to_error(failure)``."""
        if self._is_resolved:
            return cast("T | M", self._value)

        _raise(to_error(cast(E, self._failure)))

    def and_throw(self, default: Callable[[E], BaseException] | None = None) -> T:
        """Return the success value; otherwise always raise.

        Raises, in order of preference: the mapped value when it is an
        exception, ``default(failure)`` when a default is given, or the
        original failure verbatim.
        """
        if self._is_success:
            return cast(T, self._value)

        if self._is_resolved and is_error_like(self._value):
            _raise(self._value)

        if default is not None:
            _raise(default(cast(E, self._failure)))

        self._raise_failure()

    def and_map_throw(
        self,
        on_mapped: Callable[[M], BaseException],
        default: Callable[[E], BaseException] | None = None,
    ) -> T:
        """Return the success value; otherwise always raise.

        Raises ``on_mapped(value)`` when a classification step matched,
        ``default(failure)`` when a default is given, or the original failure
        verbatim.
        """
        if self._is_success:
            return cast(T, self._value)

        if self._is_resolved:
            _raise(on_mapped(cast(M, self._value)))

        if default is not None:
            _raise(default(cast(E, self._failure)))

        self._raise_failure()
