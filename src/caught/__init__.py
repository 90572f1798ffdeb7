"""caught - classify and map failures of fallible calls.

Wrap the outcome of a call, turn the failures you expect into values with
type-based classification steps, then return or re-raise.

Example:
    from caught import run_safely, wrap_failure

    timeout = (
        run_safely(lambda: float(os.environ["TIMEOUT"]))
        .map_by_type(KeyError, lambda _: 30.0)
        .map_by_type(ValueError, lambda e: fail_config(e))
        .or_rethrow()
    )

    message = wrap_failure(exc).map_by_type(OSError, str).and_return()
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Never

from caught.core import (
    AsyncOutcome,
    CaughtError,
    ClassSpecError,
    ConfigError,
    Outcome,
    UnraisableFailure,
)

__version__ = "0.1.0"


def wrap_success[T](value: T) -> Outcome[T, Never, Never]:
    """Wrap a known success value."""
    return Outcome.from_success(value)


def wrap_failure[E](failure: E) -> Outcome[Never, E, Never]:
    """Wrap a known failure payload, e.g. an exception already caught."""
    return Outcome.from_failure(failure)


def run_safely[T](fn: Callable[[], T]) -> Outcome[T, Exception, Never]:
    """Call fn and capture its return value or the exception it raises."""
    return Outcome.try_run(fn)


def run_safely_async[T](fn: Callable[[], T | Awaitable[T]]) -> AsyncOutcome[T, Exception, Never]:
    """Call fn and capture its result, whether it returns, raises or returns
    an awaitable that later resolves or raises."""
    return AsyncOutcome.try_run(fn)


def wrap_pending[T](awaitable: Awaitable[T]) -> AsyncOutcome[T, Exception, Never]:
    """Wrap an awaitable (coroutine, task, future) that is already in flight."""
    return AsyncOutcome.from_pending(awaitable)


__all__ = [
    "__version__",
    # Entry points
    "wrap_success",
    "wrap_failure",
    "run_safely",
    "run_safely_async",
    "wrap_pending",
    # Types
    "Outcome",
    "AsyncOutcome",
    # Errors
    "CaughtError",
    "ClassSpecError",
    "ConfigError",
    "UnraisableFailure",
]
