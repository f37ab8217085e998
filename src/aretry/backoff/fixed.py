r"""Fixed backoff policy."""

from __future__ import annotations

__all__ = ["FixedBackoff"]

from typing import TYPE_CHECKING

from aretry.backoff.base import BaseBackoffPolicy
from aretry.config import DEFAULT_DELAY_MS
from aretry.utils.validation import validate_backoff_params

if TYPE_CHECKING:
    from aretry.config import BackoffConfig


class FixedBackoff(BaseBackoffPolicy):
    """Fixed backoff policy.

    Returns the same delay for every retry, regardless of the attempt
    count.

    Args:
        delay: The delay in milliseconds used before every retry
            (default: 1000).

    Example:
        ```pycon
        >>> from aretry.backoff import FixedBackoff
        >>> backoff = FixedBackoff(delay=500)
        >>> backoff.calculate(1)
        500
        >>> backoff.calculate(10)
        500

        ```
    """

    def __init__(self, delay: int = DEFAULT_DELAY_MS) -> None:
        validate_backoff_params(delay=delay)
        self.delay = int(delay)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(delay={self.delay})"

    @classmethod
    def from_config(cls, config: BackoffConfig) -> FixedBackoff:
        """Create a policy from the ``delay`` of a backoff configuration."""
        return cls(delay=config.delay)

    def calculate(self, attempt: int) -> int:  # noqa: ARG002
        return self.delay
