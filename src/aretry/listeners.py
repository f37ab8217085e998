r"""Listener types and data structures for observability.

This module provides the hooks of the retry lifecycle. Listeners are pure
observers: they are notified of every event of an execution but cannot
change its control flow.

The lifecycle provides four hooks:
- on_open: Called once, before the first attempt
- on_retry: Called before each attempt after the first one
- on_error: Called after each failed attempt
- on_close: Called once, after the execution finished, whatever the outcome

Example:
    ```pycon
    >>> from aretry import RetryDefinition, RetryListener, RetryTemplate
    >>> class PrintListener(RetryListener):
    ...     def on_error(self, context, error):
    ...         print(f"attempt {context.attempt_count} failed: {error}")
    ...
    >>> definition = RetryDefinition(listeners=(PrintListener(),))
    >>> RetryTemplate().execute(definition, lambda: "ok")
    'ok'

    ```
"""

from __future__ import annotations

__all__ = ["AttemptEvent", "LoggingRetryListener", "RetryListener"]

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from aretry.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from aretry.context import RetryContext


class RetryListener:
    """Observer of the retry lifecycle.

    All hooks are no-ops, so subclasses only override the events they
    need. A listener instance shared across concurrent executions must
    be thread-safe.
    """

    def on_open(self, context: RetryContext) -> None:
        """Called once before the first attempt."""

    def on_retry(self, context: RetryContext) -> None:
        """Called before each attempt after the first one."""

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        """Called after each failed attempt, once the failure is
        registered in the context."""

    def on_close(self, context: RetryContext, error: BaseException | None) -> None:
        """Called once when the execution finishes.

        Args:
            context: The context of the execution.
            error: None on success, otherwise the last known failure.
        """


@dataclass(frozen=True)
class AttemptEvent:
    """Information passed to the attempt sink before every attempt.

    Attributes:
        name: The name of the execution, if any.
        attempt: The attempt about to occur (1-indexed).
        timestamp: Wall clock time of the notification.
    """

    name: str | None
    attempt: int
    timestamp: float = field(default_factory=time.time)


class LoggingRetryListener(RetryListener):
    """Listener logging every lifecycle event with structured fields.

    Args:
        logger: The logger to use. Defaults to this module's logger.
        level: The level used for open, retry and successful close
            events. Failures are logged at WARNING.
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG) -> None:
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._level = level

    def on_open(self, context: RetryContext) -> None:
        log_structured(self._logger, self._level, "retry execution opened", retry_event="open")

    def on_retry(self, context: RetryContext) -> None:
        log_structured(
            self._logger,
            self._level,
            f"retrying after {context.attempt_count} failed attempts",
            retry_event="retry",
        )

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        log_structured(
            self._logger,
            logging.WARNING,
            f"attempt {context.attempt_count} failed: {error!r}",
            retry_event="error",
            error_type=type(error).__name__,
        )

    def on_close(self, context: RetryContext, error: BaseException | None) -> None:
        if error is None:
            log_structured(self._logger, self._level, "retry execution succeeded", retry_event="close")
            return
        log_structured(
            self._logger,
            logging.WARNING,
            f"retry execution closed after {context.attempt_count} failed attempts: {error!r}",
            retry_event="close",
            error_type=type(error).__name__,
        )
