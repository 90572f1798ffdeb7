"""AsyncOutcome - the awaitable mirror of Outcome.

An AsyncOutcome wraps a computation that settles to an Outcome. Awaiting it
yields that Outcome. Every chain step returns a new AsyncOutcome that forwards
to the identically named Outcome method once the wrapped computation settles;
every terminal method is a coroutine returning (or raising) what the Outcome
terminal returns (or raises).

The wrapped awaitable is awaited at most once. Any number of awaits and chain
calls on the same instance share that single settlement.

Usage:
    from caught import run_safely_async

    body = await (
        run_safely_async(lambda: client.get(url))
        .map_by_type(TimeoutError, lambda _: None)
        .or_rethrow()
    )
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Generator
from dataclasses import dataclass, field
import inspect
from types import TracebackType
from typing import Any, Never, cast

from caught.core.classify import ClassSpec
from caught.core.outcome import Outcome
from caught.observability.logging import get_logger

log = get_logger(__name__)


async def _capture[T](awaitable: Awaitable[T]) -> Outcome[T, Exception, Never]:
    """Await awaitable and capture its result or exception as an Outcome."""
    try:
        value = await awaitable
    except Exception as exc:
        log.debug("outcome.failure.captured", payload_type=type(exc).__name__)
        return cast("Outcome[T, Exception, Never]", Outcome.from_failure(exc))
    return cast("Outcome[T, Exception, Never]", Outcome.from_success(value))


class _Settlement:
    """Single-shot, memoized settlement of an Outcome-producing coroutine.

    The factory runs once, in a task started by the first waiter. Waiters await
    that task through asyncio.shield, so a waiter that is cancelled or times out
    leaves the shared settlement running for the others. The resulting Outcome,
    or the exception the factory raised, is handed to every waiter.
    """

    __slots__ = ("_factory", "_task", "_outcome", "_error", "_traceback")

    def __init__(
        self,
        factory: Callable[[], Awaitable[Outcome[Any, Any, Any]]] | None = None,
        *,
        outcome: Outcome[Any, Any, Any] | None = None,
    ) -> None:
        self._factory = factory
        self._task: asyncio.Future[None] | None = None
        self._outcome = outcome
        self._error: Exception | None = None
        self._traceback: TracebackType | None = None

    @property
    def done(self) -> bool:
        if self._task is not None:
            return self._task.done()
        return self._factory is None

    async def _run(self, factory: Callable[[], Awaitable[Outcome[Any, Any, Any]]]) -> None:
        try:
            self._outcome = await factory()
        except Exception as exc:
            self._error = exc
            self._traceback = exc.__traceback__
        log.debug("async_outcome.settled", failed=self._error is not None)

    async def wait(self) -> Outcome[Any, Any, Any]:
        if self._task is None and self._factory is not None:
            factory, self._factory = self._factory, None
            self._task = asyncio.ensure_future(self._run(factory))

        if self._task is not None:
            await asyncio.shield(self._task)

        if self._error is not None:
            raise self._error.with_traceback(self._traceback)
        return cast("Outcome[Any, Any, Any]", self._outcome)


@dataclass(frozen=True, slots=True)
class AsyncOutcome[T, E, M]:
    """Awaitable wrapper around a computation that settles to an Outcome.

    Type parameters match Outcome: success T, failure E, mapped M.
    """

    _settlement: _Settlement = field(repr=False)

    def __repr__(self) -> str:
        state = "settled" if self._settlement.done else "pending"
        return f"AsyncOutcome(<{state}>)"

    @classmethod
    def try_run(cls, fn: Callable[[], T | Awaitable[T]]) -> AsyncOutcome[T, Exception, Never]:
        """Call fn now and capture what it raises, returns or eventually settles to.

        An exception raised by fn itself becomes an already-settled failure.
        An awaitable result is awaited on first use; a plain result is a success.
        """
        try:
            result = fn()
        except Exception as exc:
            log.debug("outcome.failure.captured", payload_type=type(exc).__name__)
            return cls.from_outcome(Outcome.from_failure(exc))

        if inspect.isawaitable(result):
            return cls.from_pending(cast("Awaitable[T]", result))
        return cls.from_outcome(Outcome.from_success(cast(T, result)))

    @classmethod
    def from_pending(cls, awaitable: Awaitable[T]) -> AsyncOutcome[T, Exception, Never]:
        """Wrap an awaitable; its result is a success and its exception a failure.

        Raises:
            TypeError: If awaitable is not awaitable.
        """
        if not inspect.isawaitable(awaitable):
            msg = f"Expected an awaitable, got {type(awaitable).__name__}"
            raise TypeError(msg)
        return cast(
            "AsyncOutcome[T, Exception, Never]",
            cls(_Settlement(lambda: _capture(awaitable))),
        )

    @classmethod
    def from_outcome(cls, outcome: Outcome[T, E, M]) -> AsyncOutcome[T, E, M]:
        """Wrap an Outcome that is already known."""
        return cast("AsyncOutcome[T, E, M]", cls(_Settlement(outcome=outcome)))

    def __await__(self) -> Generator[Any, None, Outcome[T, E, M]]:
        return cast(
            "Generator[Any, None, Outcome[T, E, M]]",
            self._settlement.wait().__await__(),
        )

    def _then[U](
        self, step: Callable[[Outcome[T, E, M]], Outcome[T, E, U]]
    ) -> AsyncOutcome[T, E, U]:
        async def forward() -> Outcome[T, E, U]:
            return step(await self)

        return AsyncOutcome(_Settlement(forward))

    # -- classification steps -------------------------------------------

    def map_by_type[X, U](
        self,
        class_spec: ClassSpec[X],
        transform: Callable[[X], U],
    ) -> AsyncOutcome[T, E, M | U]:
        """Forward to Outcome.map_by_type once settled."""
        return self._then(lambda outcome: outcome.map_by_type(class_spec, transform))

    def map_by_exact_type[X, U](
        self,
        class_spec: ClassSpec[X],
        transform: Callable[[X], U],
    ) -> AsyncOutcome[T, E, M | U]:
        """Forward to Outcome.map_by_exact_type once settled."""
        return self._then(lambda outcome: outcome.map_by_exact_type(class_spec, transform))

    def map_non_error[U](self, transform: Callable[[E], U]) -> AsyncOutcome[T, E, M | U]:
        """Forward to Outcome.map_non_error once settled."""
        return self._then(lambda outcome: outcome.map_non_error(transform))

    map = map_by_type
    map_exact = map_by_exact_type

    # -- terminal operations --------------------------------------------

    async def and_return[D](self, default: Callable[[E], D] | None = None) -> T | M | D | None:
        return (await self).and_return(default)

    async def and_map_return[U, D](
        self,
        on_mapped: Callable[[M], U],
        default: Callable[[E], D] | None = None,
    ) -> T | U | D | None:
        return (await self).and_map_return(on_mapped, default)

    async def or_rethrow(self) -> T | M:
        return (await self).or_rethrow()

    async def or_throw(self, to_error: Callable[[E], BaseException]) -> T | M:
        return (await self).or_throw(to_error)

    async def and_throw(self, default: Callable[[E], BaseException] | None = None) -> T:
        return (await self).and_throw(default)

    async def and_map_throw(
        self,
        on_mapped: Callable[[M], BaseException],
        default: Callable[[E], BaseException] | None = None,
    ) -> T:
        return (await self).and_map_throw(on_mapped, default)
