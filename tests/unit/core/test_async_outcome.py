"""Unit tests for caught.core.async_outcome module."""

import asyncio
from collections.abc import Callable
from dataclasses import FrozenInstanceError
import traceback
from typing import Any
from unittest.mock import Mock

import pytest

from caught import run_safely_async, wrap_failure, wrap_pending, wrap_success
from caught.core.async_outcome import AsyncOutcome
from caught.core.outcome import Outcome


class Error2(Exception):
    pass


async def resolve(value: Any) -> Any:
    await asyncio.sleep(0)
    return value


async def reject(error: BaseException) -> Any:
    await asyncio.sleep(0)
    raise error


class TestRunSafelyAsync:
    """Test run_safely_async / AsyncOutcome.try_run."""

    async def test_plain_return_is_success(self) -> None:
        fn = Mock(return_value=True)

        caught = run_safely_async(fn)

        fn.assert_called_once_with()
        assert isinstance(caught, AsyncOutcome)
        assert isinstance(await caught, Outcome)
        assert await caught.and_return() is True

    async def test_resolved_awaitable_is_success(self) -> None:
        calls: list[int] = []

        async def fn() -> bool:
            calls.append(1)
            return True

        caught = run_safely_async(fn)

        assert await caught.and_return() is True
        assert calls == [1]

    async def test_synchronous_raise_is_failure(self) -> None:
        error = Exception("sync")
        fn = Mock(side_effect=error)

        caught = run_safely_async(fn)

        fn.assert_called_once_with()
        assert await caught.and_return(lambda e: e) is error

    async def test_rejected_awaitable_is_failure(self) -> None:
        error = Exception("async")

        caught = run_safely_async(lambda: reject(error))

        assert (await caught).failure is error

    async def test_fn_is_called_before_awaiting(self) -> None:
        fn = Mock(return_value=1)

        run_safely_async(fn)

        fn.assert_called_once_with()


class TestWrapPending:
    """Test wrap_pending / AsyncOutcome.from_pending."""

    async def test_resolved_coroutine_is_success(self) -> None:
        assert await wrap_pending(resolve("ok")).and_return() == "ok"

    async def test_rejected_coroutine_is_failure(self) -> None:
        error = Exception("rejected")

        assert await wrap_pending(reject(error)).and_return(lambda e: e) is error

    async def test_wraps_future(self) -> None:
        future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
        future.set_result(5)

        assert await wrap_pending(future).and_return() == 5

    async def test_wraps_failed_task(self) -> None:
        error = KeyError("task")
        task = asyncio.ensure_future(reject(error))

        outcome = await wrap_pending(task)

        assert outcome.failure is error

    def test_rejects_non_awaitable(self) -> None:
        with pytest.raises(TypeError, match="awaitable"):
            wrap_pending(42)  # type: ignore[arg-type]

    async def test_cancellation_propagates(self) -> None:
        """CancelledError is not captured as a failure payload."""
        with pytest.raises(asyncio.CancelledError):
            await wrap_pending(reject(asyncio.CancelledError()))


class TestSettlement:
    """The wrapped awaitable settles once and is shared."""

    async def test_awaiting_twice_yields_same_outcome(self) -> None:
        caught = wrap_pending(resolve(1))

        first = await caught
        second = await caught

        assert first is second

    async def test_awaitable_is_awaited_once(self) -> None:
        calls: list[int] = []

        async def work() -> int:
            calls.append(1)
            await asyncio.sleep(0)
            return 7

        caught = wrap_pending(work())
        results = await asyncio.gather(
            caught.and_return(),
            caught.map_by_type(Exception, lambda e: 0).and_return(),
            caught.or_rethrow(),
        )

        assert results == [7, 7, 7]
        assert calls == [1]

    async def test_independent_chains_from_one_instance(self) -> None:
        caught = wrap_pending(reject(Error2("x")))

        by_type = caught.map_by_type(Error2, lambda e: "type")
        exact = caught.map_by_exact_type(Exception, lambda e: "exact")

        assert await by_type.and_return() == "type"
        assert await exact.and_return() is None

    async def test_timed_out_waiter_does_not_affect_siblings(self) -> None:
        release = asyncio.Event()
        calls: list[int] = []

        async def work() -> str:
            calls.append(1)
            await release.wait()
            return "done"

        caught = wrap_pending(work())
        impatient = caught.map_by_type(Exception, lambda e: "mapped")
        patient = caught.map_by_type(Exception, lambda e: "mapped")

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(impatient.and_return(), timeout=0.01)

        release.set()

        assert await patient.and_return() == "done"
        assert await caught.and_return() == "done"
        assert calls == [1]

    async def test_cancelled_waiter_does_not_cancel_settlement(self) -> None:
        release = asyncio.Event()

        async def work() -> int:
            await release.wait()
            return 3

        caught = wrap_pending(work())
        waiter = asyncio.ensure_future(caught.and_return())
        await asyncio.sleep(0)
        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter

        release.set()
        assert await caught.and_return() == 3

    async def test_repr_reports_settlement(self) -> None:
        caught = wrap_pending(resolve(1))

        assert repr(caught) == "AsyncOutcome(<pending>)"
        await caught
        assert repr(caught) == "AsyncOutcome(<settled>)"

    def test_async_outcome_is_frozen(self) -> None:
        caught = AsyncOutcome.from_outcome(wrap_success(1))

        with pytest.raises(FrozenInstanceError):
            caught._settlement = None  # type: ignore[misc,assignment]


class TestAsyncClassification:
    """Chain steps forward to the Outcome once settled."""

    async def test_steps_on_success_return_same_outcome(self) -> None:
        caught = run_safely_async(lambda: resolve("test"))
        fn = Mock()

        outcome = await caught
        assert await caught.map_by_type(Exception, fn) is outcome
        assert await caught.map_by_exact_type(Exception, fn) is outcome
        assert await caught.map_non_error(fn) is outcome
        fn.assert_not_called()

    async def test_map_by_type_matches_subclass(self) -> None:
        result = await wrap_pending(reject(Error2("x"))).map(Exception, str).and_return()

        assert result == "x"

    async def test_map_by_exact_type_rejects_subclass(self) -> None:
        fn = Mock()

        result = (
            await wrap_pending(reject(Error2("x")))
            .map_exact(Exception, fn)
            .map_by_type(Error2, lambda e: str(e))
            .and_return()
        )

        assert result == "x"
        fn.assert_not_called()

    async def test_map_non_error(self) -> None:
        result = (
            await AsyncOutcome.from_outcome(wrap_failure("plain"))
            .map_non_error(lambda v: f"got:{v}")
            .and_return()
        )

        assert result == "got:plain"

    async def test_transform_exception_propagates_on_await(self) -> None:
        handler_error = RuntimeError("handler bug")

        def handler(_: Exception) -> None:
            raise handler_error

        chained = wrap_pending(reject(Exception("e"))).map(Exception, handler)

        with pytest.raises(RuntimeError) as first:
            await chained
        with pytest.raises(RuntimeError) as second:
            await chained.and_return()

        assert first.value is handler_error
        assert second.value is handler_error

    async def test_repeated_awaits_keep_traceback_length(self) -> None:
        def handler(_: Exception) -> None:
            raise RuntimeError("handler bug")

        chained = wrap_pending(reject(Exception("e"))).map(Exception, handler)

        depths = []
        for _ in range(3):
            with pytest.raises(RuntimeError) as exc_info:
                await chained
            depths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))

        assert depths[0] == depths[1] == depths[2]

    async def test_repeated_rethrow_keeps_traceback_length(self) -> None:
        caught = wrap_pending(reject(Error2("x")))

        depths = []
        for _ in range(3):
            with pytest.raises(Error2) as exc_info:
                await caught.or_rethrow()
            depths.append(len(traceback.extract_tb(exc_info.value.__traceback__)))

        assert depths[0] == depths[1] == depths[2]


class TestAsyncTerminals:
    """Terminal coroutines return or raise what the Outcome terminal does."""

    async def test_or_rethrow_reraises_original(self) -> None:
        error = Error2("rethrown")

        with pytest.raises(Error2) as exc_info:
            await wrap_pending(reject(error)).or_rethrow()

        assert exc_info.value is error

    async def test_or_throw(self) -> None:
        built = ValueError("built")

        with pytest.raises(ValueError) as exc_info:
            await wrap_pending(reject(Exception())).or_throw(lambda e: built)

        assert exc_info.value is built

    async def test_and_map_return(self) -> None:
        caught = wrap_pending(reject(Exception())).map(Exception, lambda e: 2)

        assert await caught.and_map_return(lambda v: v * 10) == 20

    async def test_and_throw_raises_mapped_exception(self) -> None:
        mapped = KeyError("mapped")

        with pytest.raises(KeyError) as exc_info:
            await wrap_pending(reject(Exception())).map(Exception, lambda e: mapped).and_throw()

        assert exc_info.value is mapped

    async def test_and_map_throw(self) -> None:
        built = LookupError("404")

        with pytest.raises(LookupError) as exc_info:
            await (
                wrap_pending(reject(Exception()))
                .map(Exception, lambda e: 404)
                .and_map_throw(lambda code: built)
            )

        assert exc_info.value is built

    async def test_and_throw_returns_success(self) -> None:
        assert await wrap_pending(resolve("ok")).and_throw() == "ok"


def _chains() -> list[Callable[[Any], Any]]:
    return [
        lambda o: o.map_by_type(KeyError, lambda e: "key").map_by_type(Exception, str),
        lambda o: o.map_by_exact_type(Exception, lambda e: "exact"),
        lambda o: o.map_non_error(lambda v: "non-error"),
        lambda o: o,
    ]


class TestSyncAsyncEquivalence:
    """An async chain gives the same terminal result as the sync chain."""

    @pytest.mark.parametrize("chain", _chains())
    @pytest.mark.parametrize("payload", [Error2("x"), Exception("y"), KeyError("k"), "plain"])
    async def test_and_return_matches(self, chain: Callable[[Any], Any], payload: Any) -> None:
        sync_result = chain(wrap_failure(payload)).and_return()
        async_result = await chain(AsyncOutcome.from_outcome(wrap_failure(payload))).and_return()

        assert async_result == sync_result

    @pytest.mark.parametrize("chain", _chains())
    async def test_or_rethrow_matches(self, chain: Callable[[Any], Any]) -> None:
        error = Error2("z")

        try:
            sync_result: Any = chain(wrap_failure(error)).or_rethrow()
        except Error2 as exc:
            sync_result = exc

        try:
            async_result: Any = await chain(wrap_pending(reject(error))).or_rethrow()
        except Error2 as exc:
            async_result = exc

        assert async_result is sync_result or async_result == sync_result
