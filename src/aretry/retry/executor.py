r"""Synchronous retry executor.

This module provides the RetryExecutor class that runs a blocking
operation under a retry policy, waiting between attempts with
``time.sleep``.
"""

from __future__ import annotations

__all__ = ["RetryExecutor"]

import logging
import time
from typing import TYPE_CHECKING, TypeVar

from aretry.context import RetryContext, bind_context
from aretry.retry.executor_core import (
    BaseRetryExecutor,
    closing_error,
    compute_delay,
    create_exhausted_error,
    should_continue,
)

if TYPE_CHECKING:
    from collections.abc import Callable

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor(BaseRetryExecutor):
    """Executes blocking operations with automatic retry logic.

    Example:
        ```pycon
        >>> from aretry import RetryDefinition
        >>> from aretry.config import BackoffConfig
        >>> from aretry.retry import RetryExecutor
        >>> executor = RetryExecutor.from_definition(
        ...     RetryDefinition(max_attempts=3, backoff=BackoffConfig(delay=0))
        ... )
        >>> attempts = []
        >>> def flaky(context):
        ...     attempts.append(context.attempt_count)
        ...     if len(attempts) < 3:
        ...         raise ConnectionError("unavailable")
        ...     return "done"
        ...
        >>> executor.execute(flaky)
        'done'
        >>> attempts
        [0, 1, 2]
        >>> executor.statistics.get_success_count()
        1

        ```
    """

    def execute(
        self,
        operation: Callable[[RetryContext], T],
        recovery: Callable[[RetryContext], T] | None = None,
        context: RetryContext | None = None,
    ) -> T:
        """Execute ``operation`` until it succeeds or no retry is
        permitted.

        The loop works as follows:
        - Before every attempt after the first one, listeners are
          notified and the backoff delay is slept
        - On success the result is returned immediately
        - On failure the failure is registered in the context, listeners
          are notified and the retry policy decides whether to continue
        - Once no retry is permitted, the recovery (if any) is invoked
          and its result returned; otherwise ``RetryExhaustedError`` is
          raised from the last failure

        ``on_close`` is notified exactly once, whatever the outcome,
        including when the recovery itself fails.

        Args:
            operation: The operation, called with the context.
            recovery: Optional fallback, called with the context once the
                attempts are exhausted.
            context: Optional context. A new one is created if omitted.

        Returns:
            The result of the operation or of the recovery.

        Raises:
            RetryExhaustedError: If no retry is permitted and no recovery
                is configured.
            Exception: Any exception raised by the recovery, unwrapped.
        """
        if context is None:
            context = RetryContext()

        self.statistics.increment_started()
        self.listeners.on_open(context)

        close_error: BaseException | None = None
        try:
            result, close_error = self._run(operation, recovery, context)
        except BaseException as exc:
            close_error = closing_error(exc, context)
            raise
        finally:
            self.listeners.on_close(context, close_error)
        return result

    def _run(
        self,
        operation: Callable[[RetryContext], T],
        recovery: Callable[[RetryContext], T] | None,
        context: RetryContext,
    ) -> tuple[T, BaseException | None]:
        while True:
            if context.attempt_count > 0:
                self.listeners.on_retry(context)
                delay = compute_delay(self.backoff, context)
                if delay > 0:
                    time.sleep(delay)

            self.listeners.on_attempt(context)
            try:
                with bind_context(context):
                    result = operation(context)
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
        with bind_context(context):
            result = recovery(context)
        return result, context.last_failure
