r"""Asynchronous retry executor.

This module provides the AsyncRetryExecutor class that runs an operation
under a retry policy on the asyncio event loop. Operations and recoveries
may be plain callables or coroutine functions.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor"]

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from aretry.context import RetryContext, bind_context
from aretry.retry.executor_core import (
    BaseRetryExecutor,
    closing_error,
    compute_delay,
    create_exhausted_error,
    should_continue,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncRetryExecutor(BaseRetryExecutor):
    """Executes async operations with automatic retry logic.

    The algorithm is the one of ``RetryExecutor``. Backoff delays use
    ``asyncio.sleep()``, allowing other tasks to run during retry waits.

    Cancelling the task running ``execute`` interrupts the current
    attempt or backoff wait. The cancellation is not counted as a
    failure: ``on_close`` is notified once with the ``CancelledError``,
    which then propagates.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretry import RetryDefinition
        >>> from aretry.retry import AsyncRetryExecutor
        >>> async def fetch(context):
        ...     return "payload"
        ...
        >>> executor = AsyncRetryExecutor.from_definition(RetryDefinition())
        >>> asyncio.run(executor.execute(fetch))
        'payload'

        ```
    """

    async def execute(
        self,
        operation: Callable[[RetryContext], Awaitable[T] | T],
        recovery: Callable[[RetryContext], Awaitable[T] | T] | None = None,
        context: RetryContext | None = None,
    ) -> T:
        """Execute ``operation`` until it succeeds or no retry is
        permitted.

        Args:
            operation: The operation, called with the context. Awaitable
                results are awaited.
            recovery: Optional fallback, called with the context once the
                attempts are exhausted. Awaitable results are awaited.
            context: Optional context. A new one is created if omitted.

        Returns:
            The result of the operation or of the recovery.

        Raises:
            RetryExhaustedError: If no retry is permitted and no recovery
                is configured.
            asyncio.CancelledError: If the task is cancelled.
            Exception: Any exception raised by the recovery, unwrapped.
        """
        if context is None:
            context = RetryContext()

        self.statistics.increment_started()
        self.listeners.on_open(context)

        close_error: BaseException | None = None
        try:
            result, close_error = await self._run(operation, recovery, context)
        except BaseException as exc:
            close_error = closing_error(exc, context)
            raise
        finally:
            self.listeners.on_close(context, close_error)
        return result

    async def _run(
        self,
        operation: Callable[[RetryContext], Awaitable[T] | T],
        recovery: Callable[[RetryContext], Awaitable[T] | T] | None,
        context: RetryContext,
    ) -> tuple[T, BaseException | None]:
        while True:
            if context.attempt_count > 0:
                self.listeners.on_retry(context)
                delay = compute_delay(self.backoff, context)
                if delay > 0:
                    await asyncio.sleep(delay)

            self.listeners.on_attempt(context)
            try:
                result = await _invoke(operation, context)
            except Exception as exc:
                context.register_failure(exc)
                self.listeners.on_error(context, exc)
                if not should_continue(self.policy, exc, context):
                    break
                continue

            self.statistics.increment_success()
            return result, None

        self.statistics.increment_exhausted()
        if recovery is None:
            raise create_exhausted_error(context, self.label) from context.last_failure

        logger.debug(f"Invoking recovery after {context.attempt_count} failed attempts")
        self.statistics.increment_recovered()
        result = await _invoke(recovery, context)
        return result, context.last_failure


async def _invoke(func: Callable[[RetryContext], Any], context: RetryContext) -> Any:
    with bind_context(context):
        result = func(context)
        if inspect.isawaitable(result):
            result = await result
    return result
