r"""Retry decision logic.

This module provides the ``RetryPolicy`` interface and the
``SimpleRetryPolicy`` that decides whether a failed attempt should be
retried based on the attempt budget and on the type of the failure.
"""

from __future__ import annotations

__all__ = ["RetryPolicy", "SimpleRetryPolicy"]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from aretry.config import DEFAULT_MAX_ATTEMPTS
from aretry.utils.validation import validate_failure_types, validate_max_attempts

if TYPE_CHECKING:
    from collections.abc import Iterable

    from aretry.context import RetryContext


class RetryPolicy(ABC):
    """Decides whether a failed attempt may be retried."""

    @abstractmethod
    def can_retry(self, context: RetryContext) -> bool:
        """Indicate if the attempt budget allows another attempt.

        Args:
            context: The context of the running execution.

        Returns:
            True if another attempt is permitted.
        """

    @abstractmethod
    def should_retry(self, failure: BaseException, context: RetryContext) -> bool:
        """Indicate if ``failure`` should trigger another attempt.

        Args:
            failure: The exception raised by the last attempt.
            context: The context of the running execution.

        Returns:
            True if the failure is retryable and the budget allows it.
        """


class SimpleRetryPolicy(RetryPolicy):
    """Retry policy bounded by an attempt count with type-based rules.

    - Retries are bounded by ``max_attempts`` (first attempt included).
    - Failures matching ``no_retry_on`` never trigger a retry.
    - Failures matching ``retry_on`` trigger a retry.
    - When ``retry_on`` is empty, ``match_all_when_empty`` decides: every
      non-excluded failure is retryable (True, the default) or none is
      (False).

    Matching uses ``isinstance``, so subclasses of a configured type
    match. The policy is immutable once created.

    Args:
        max_attempts: Maximum number of attempts. Must be >= 1.
        retry_on: Retryable failure types.
        no_retry_on: Non-retryable failure types.
        match_all_when_empty: Semantics of an empty ``retry_on``.

    Example:
        ```pycon
        >>> from aretry import RetryContext
        >>> from aretry.retry import SimpleRetryPolicy
        >>> policy = SimpleRetryPolicy(max_attempts=3, retry_on=(ConnectionError,))
        >>> context = RetryContext()
        >>> policy.should_retry(ConnectionRefusedError(), context)
        True
        >>> policy.should_retry(ValueError(), context)
        False

        ```
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_on: Iterable[type[BaseException]] = (),
        no_retry_on: Iterable[type[BaseException]] = (),
        match_all_when_empty: bool = True,
    ) -> None:
        validate_max_attempts(max_attempts)
        self._max_attempts = max_attempts
        self._retry_on = tuple(retry_on)
        self._no_retry_on = tuple(no_retry_on)
        validate_failure_types("retry_on", self._retry_on)
        validate_failure_types("no_retry_on", self._no_retry_on)
        self._match_all_when_empty = match_all_when_empty

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(max_attempts={self._max_attempts}, "
            f"retry_on={self._retry_on}, no_retry_on={self._no_retry_on}, "
            f"match_all_when_empty={self._match_all_when_empty})"
        )

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def retry_on(self) -> tuple[type[BaseException], ...]:
        return self._retry_on

    @property
    def no_retry_on(self) -> tuple[type[BaseException], ...]:
        return self._no_retry_on

    def can_retry(self, context: RetryContext) -> bool:
        return context.attempt_count < self._max_attempts

    def should_retry(self, failure: BaseException, context: RetryContext) -> bool:
        if not self.can_retry(context):
            return False
        if self._no_retry_on and isinstance(failure, self._no_retry_on):
            return False
        if not self._retry_on:
            return self._match_all_when_empty
        return isinstance(failure, self._retry_on)
