r"""Shared core logic for retry executors.

This module provides the base class and helper functions used by both
the synchronous and asynchronous retry executors. They encapsulate the
retry decision after a failure, the backoff delay computation and the
creation of the terminal error.
"""

from __future__ import annotations

__all__ = [
    "BaseRetryExecutor",
    "closing_error",
    "compute_delay",
    "create_exhausted_error",
    "should_continue",
]

import logging
from typing import TYPE_CHECKING

from aretry.exceptions import RetryExhaustedError
from aretry.retry.manager import ListenerManager
from aretry.statistics import InMemoryStatistics

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from aretry.backoff.base import BaseBackoffPolicy
    from aretry.config import RetryDefinition
    from aretry.context import RetryContext
    from aretry.listeners import AttemptEvent, RetryListener
    from aretry.retry.policy import RetryPolicy
    from aretry.statistics import RetryStatistics

logger: logging.Logger = logging.getLogger(__name__)


class BaseRetryExecutor:
    """Holds the collaborators of a retry executor.

    The executor orchestrates the following components:
    - RetryPolicy: Decides whether a failure may be retried
    - BaseBackoffPolicy: Calculates the delay before each retry
    - ListenerManager: Notifies listeners of lifecycle events
    - RetryStatistics: Counts started, successful, exhausted and
      recovered executions

    All collaborators are fixed at construction time. An executor keeps
    no per-execution state, so one instance may run several executions
    as long as each one has its own ``RetryContext``.

    Args:
        policy: The retry policy.
        backoff: The backoff policy.
        listeners: Listeners notified of the lifecycle, in order.
        statistics: Statistics sink. Defaults to a new
            ``InMemoryStatistics``.
        attempt_sink: Optional callable notified before every attempt.
        label: Optional label of the operation, reported by the
            terminal error.

    Attributes:
        policy: The retry policy.
        backoff: The backoff policy.
        listeners: Manager for invoking listeners.
        statistics: The statistics sink.
        label: The label of the operation.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        backoff: BaseBackoffPolicy,
        listeners: Iterable[RetryListener] = (),
        statistics: RetryStatistics | None = None,
        attempt_sink: Callable[[AttemptEvent], None] | None = None,
        label: str | None = None,
    ) -> None:
        self.policy = policy
        self.label = label
        self.backoff = backoff
        self.listeners: ListenerManager = ListenerManager(listeners, attempt_sink)
        self.statistics: RetryStatistics = (
            statistics if statistics is not None else InMemoryStatistics()
        )

    @classmethod
    def from_definition(
        cls,
        definition: RetryDefinition,
        statistics: RetryStatistics | None = None,
        attempt_sink: Callable[[AttemptEvent], None] | None = None,
    ) -> BaseRetryExecutor:
        """Create an executor with fresh policies built from a
        definition.

        Args:
            definition: The retry definition.
            statistics: Optional statistics sink, possibly shared.
            attempt_sink: Optional callable notified before every attempt.

        Returns:
            The executor.
        """
        return cls(
            policy=definition.create_policy(),
            backoff=definition.create_backoff(),
            listeners=definition.listeners,
            statistics=statistics,
            attempt_sink=attempt_sink,
            label=definition.label,
        )


def should_continue(policy: RetryPolicy, failure: Exception, context: RetryContext) -> bool:
    """Decide whether the loop performs another attempt after a failure.

    The failure must already be registered in the context. A
    non-retryable failure stops the loop without consulting the attempt
    budget again.

    Args:
        policy: The retry policy.
        failure: The exception raised by the last attempt.
        context: The context of the running execution.

    Returns:
        True if another attempt should be made.
    """
    if not policy.should_retry(failure, context):
        logger.debug(f"{_describe(context)}: not retrying {type(failure).__name__}: {failure}")
        return False
    if not policy.can_retry(context):
        logger.debug(
            f"{_describe(context)}: retry budget exhausted after {context.attempt_count} attempts"
        )
        return False
    return True


def compute_delay(backoff: BaseBackoffPolicy, context: RetryContext) -> float:
    """Compute the wait before the next attempt.

    Args:
        backoff: The backoff policy.
        context: The context of the running execution.

    Returns:
        The delay in seconds. 0 means retry immediately.
    """
    delay_ms = max(backoff.compute_backoff(context), 0)
    if delay_ms > 0:
        logger.debug(
            f"{_describe(context)}: sleeping {delay_ms}ms before attempt {context.attempt_count + 1}"
        )
    return delay_ms / 1000


def create_exhausted_error(context: RetryContext, label: str | None = None) -> RetryExhaustedError:
    """Create the terminal error of an execution without recovery.

    Args:
        context: The context of the exhausted execution.
        label: Optional label of the operation.

    Returns:
        The error to raise from the last failure.
    """
    return RetryExhaustedError(context, label=label)


def closing_error(error: BaseException, context: RetryContext) -> BaseException | None:
    """Return the failure reported to ``on_close`` for an error leaving
    the executor.

    The terminal error of this execution is reported as its last failure;
    any other error (recovery failure, cancellation, interrupt) is
    reported as is.
    """
    if isinstance(error, RetryExhaustedError) and error.context is context:
        return context.last_failure
    return error


def _describe(context: RetryContext) -> str:
    return context.name or "retry"
