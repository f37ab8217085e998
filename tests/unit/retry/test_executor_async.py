r"""Unit tests for asynchronous retry executor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, Mock, call

import pytest

from aretry import (
    FixedBackoff,
    RetryContext,
    RetryDefinition,
    RetryExhaustedError,
    SimpleRetryPolicy,
)
from aretry.config import BackoffConfig
from aretry.context import get_current_context
from aretry.retry import AsyncRetryExecutor


def async_flaky(failures: int, result: str = "ok") -> AsyncMock:
    """Create a coroutine operation failing ``failures`` times before
    returning ``result``."""
    return AsyncMock(side_effect=[ConnectionError(f"failure {i}") for i in range(failures)] + [result])


def create_executor(max_attempts: int = 3, delay: int = 0, **kwargs) -> AsyncRetryExecutor:
    return AsyncRetryExecutor(
        policy=SimpleRetryPolicy(max_attempts=max_attempts, retry_on=kwargs.pop("retry_on", ())),
        backoff=FixedBackoff(delay=delay),
        **kwargs,
    )


def test_async_retry_executor_from_definition() -> None:
    """Test creating an async executor from a definition."""
    executor = AsyncRetryExecutor.from_definition(RetryDefinition(max_attempts=4))
    assert isinstance(executor, AsyncRetryExecutor)
    assert executor.policy.max_attempts == 4


@pytest.mark.asyncio
async def test_async_retry_executor_success_first_attempt(mock_asleep: Mock) -> None:
    """Test successful async operation without retries."""
    executor = create_executor()
    operation = AsyncMock(return_value="result")

    assert await executor.execute(operation) == "result"
    operation.assert_awaited_once()
    mock_asleep.assert_not_called()
    assert executor.statistics.get_success_count() == 1


@pytest.mark.asyncio
async def test_async_retry_executor_sync_operation() -> None:
    """Test that plain callables are accepted."""
    executor = create_executor()
    assert await executor.execute(lambda _: "sync") == "sync"


@pytest.mark.asyncio
async def test_async_retry_executor_eventual_success(mock_asleep: Mock) -> None:
    """Test async success after two failures."""
    executor = create_executor(max_attempts=3, delay=500)
    operation = async_flaky(2)
    context = RetryContext()

    assert await executor.execute(operation, context=context) == "ok"
    assert operation.await_count == 3
    assert context.attempt_count == 2
    assert mock_asleep.call_args_list == [call(0.5), call(0.5)]


@pytest.mark.asyncio
async def test_async_retry_executor_exhausted_without_recovery(mock_asleep: Mock) -> None:  # noqa: ARG001
    """Test that async exhaustion raises RetryExhaustedError."""
    executor = create_executor(max_attempts=2)
    context = RetryContext("job")

    with pytest.raises(RetryExhaustedError) as exc_info:
        await executor.execute(async_flaky(3), context=context)

    assert exc_info.value.attempts == 2
    assert exc_info.value.__cause__ is context.last_failure
    assert executor.statistics.get_exhausted_count() == 1


@pytest.mark.asyncio
async def test_async_retry_executor_async_recovery(mock_asleep: Mock) -> None:  # noqa: ARG001
    """Test that a coroutine recovery is awaited."""
    executor = create_executor(max_attempts=2)
    recovery = AsyncMock(return_value="fallback")

    assert await executor.execute(async_flaky(3), recovery) == "fallback"
    recovery.assert_awaited_once()
    assert executor.statistics.get_recovered_count() == 1


@pytest.mark.asyncio
async def test_async_retry_executor_non_retryable(mock_asleep: Mock) -> None:
    """Test that a non-retryable failure stops immediately."""
    executor = create_executor(max_attempts=5, retry_on=(ConnectionError,))
    operation = AsyncMock(side_effect=ValueError("bad"))

    with pytest.raises(RetryExhaustedError):
        await executor.execute(operation)
    operation.assert_awaited_once()
    mock_asleep.assert_not_called()


@pytest.mark.asyncio
async def test_async_retry_executor_listener_order(
    mock_asleep: Mock,  # noqa: ARG001
    listener,
    events: list[tuple],
) -> None:
    """Test the lifecycle order of an async execution."""
    executor = create_executor(max_attempts=3, listeners=[listener])
    await executor.execute(async_flaky(1))

    assert [name for _, name, _, _ in events] == ["open", "error", "retry", "close"]
    assert events[-1][3] is None


@pytest.mark.asyncio
async def test_async_retry_executor_recovery_failure_closes_once(listener, events: list[tuple]) -> None:
    """Test that a failing async recovery closes the execution once."""
    executor = create_executor(max_attempts=1, listeners=[listener])
    error = RuntimeError("recovery failed")

    with pytest.raises(RuntimeError, match="recovery failed"):
        await executor.execute(AsyncMock(side_effect=ValueError()), AsyncMock(side_effect=error))

    closes = [event for event in events if event[1] == "close"]
    assert closes == [("listener", "close", 1, error)]


@pytest.mark.asyncio
async def test_async_retry_executor_binds_current_context() -> None:
    """Test that the context is current while the coroutine runs."""
    executor = create_executor()
    context = RetryContext()

    async def operation(_: RetryContext) -> RetryContext | None:
        return get_current_context()

    assert await executor.execute(operation, context=context) is context
    assert get_current_context() is None


@pytest.mark.asyncio
async def test_async_retry_executor_cancellation(listener, events: list[tuple]) -> None:
    """Test that cancelling the task closes the execution once."""
    executor = create_executor(max_attempts=3, listeners=[listener])
    started = asyncio.Event()

    async def operation(_: RetryContext) -> None:
        started.set()
        await asyncio.Event().wait()

    task = asyncio.create_task(executor.execute(operation))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert [name for _, name, _, _ in events] == ["open", "close"]
    assert isinstance(events[-1][3], asyncio.CancelledError)
    snapshot = executor.statistics.snapshot()
    assert snapshot.started == 1
    assert snapshot.success == 0
    assert snapshot.exhausted == 0


@pytest.mark.asyncio
async def test_async_retry_executor_concurrent_executions() -> None:
    """Test that concurrent executions share statistics but not
    contexts."""
    executor = AsyncRetryExecutor.from_definition(
        RetryDefinition(max_attempts=3, backoff=BackoffConfig(delay=0))
    )
    contexts = [RetryContext(f"job-{i}") for i in range(5)]
    results = await asyncio.gather(
        *(executor.execute(async_flaky(1, result=ctx.name), context=ctx) for ctx in contexts)
    )

    assert results == [ctx.name for ctx in contexts]
    assert all(ctx.attempt_count == 1 for ctx in contexts)
    assert executor.statistics.get_started_count() == 5
    assert executor.statistics.get_success_count() == 5
