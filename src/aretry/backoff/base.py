r"""Abstract base class for backoff policies."""

from __future__ import annotations

__all__ = ["BaseBackoffPolicy"]

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aretry.context import RetryContext


class BaseBackoffPolicy(ABC):
    """Abstract base class for backoff policies.

    A backoff policy determines how long to wait before the next attempt
    based on the number of failures registered so far. Implementations
    are pure functions of the attempt count and their configuration.
    """

    @abstractmethod
    def calculate(self, attempt: int) -> int:
        """Calculate the delay before the next attempt.

        Args:
            attempt: The number of failed attempts so far. ``attempt=1``
                is the delay before the first retry.

        Returns:
            The delay in milliseconds. Never negative; 0 means retry
            immediately.
        """

    def compute_backoff(self, context: RetryContext) -> int:
        """Calculate the delay before the next attempt of ``context``.

        Args:
            context: The context of the running execution.

        Returns:
            The delay in milliseconds.
        """
        return self.calculate(context.attempt_count)
