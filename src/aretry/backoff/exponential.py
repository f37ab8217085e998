r"""Exponential backoff policy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

import logging
import random
from typing import TYPE_CHECKING

from aretry.backoff.base import BaseBackoffPolicy
from aretry.config import (
    DEFAULT_DELAY_MS,
    DEFAULT_JITTER_FACTOR,
    DEFAULT_MAX_DELAY_MS,
    DEFAULT_MULTIPLIER,
)
from aretry.utils.validation import validate_backoff_params

if TYPE_CHECKING:
    from aretry.config import BackoffConfig

logger: logging.Logger = logging.getLogger(__name__)

# Exponent cap preventing overflow for very long executions
MAX_EXPONENT = 31


class ExponentialBackoff(BaseBackoffPolicy):
    """Exponential backoff policy with optional jitter.

    Calculates the delay as
    ``initial_delay * multiplier ** (min(attempt, 31) - 1)``. When a
    randomization factor ``J`` is set, the delay is multiplied by a
    uniform factor in ``[1 - J, 1 + J]``. The result is clamped to
    ``[0, max_delay]`` and truncated to whole milliseconds. There is no
    delay before the first attempt (``attempt <= 0``).

    Args:
        initial_delay: Delay in milliseconds before the first retry
            (default: 1000).
        multiplier: Growth factor between consecutive delays (default: 2.0).
        max_delay: Maximum delay in milliseconds (default: 30000).
        randomization_factor: Jitter amplitude in ``[0, 1]``
            (default: 0.0, no jitter).
        rng: Optional random number generator used for jitter.

    Example:
        ```pycon
        >>> from aretry.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(initial_delay=1000, multiplier=2.0, max_delay=30000)
        >>> [backoff.calculate(attempt) for attempt in range(7)]
        [0, 1000, 2000, 4000, 8000, 16000, 30000]

        ```
    """

    def __init__(
        self,
        initial_delay: int = DEFAULT_DELAY_MS,
        multiplier: float = DEFAULT_MULTIPLIER,
        max_delay: int = DEFAULT_MAX_DELAY_MS,
        randomization_factor: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        validate_backoff_params(
            delay=initial_delay,
            multiplier=multiplier,
            max_delay=max_delay,
            randomization_factor=randomization_factor,
        )
        self.initial_delay = initial_delay
        self.multiplier = multiplier
        self.max_delay = max_delay
        self.randomization_factor = randomization_factor
        self._rng = rng if rng is not None else random.Random()  # noqa: S311

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(initial_delay={self.initial_delay}, "
            f"multiplier={self.multiplier}, max_delay={self.max_delay}, "
            f"randomization_factor={self.randomization_factor})"
        )

    @classmethod
    def from_config(cls, config: BackoffConfig, rng: random.Random | None = None) -> ExponentialBackoff:
        """Create a policy from a backoff configuration.

        Enabling ``jitter`` in the configuration sets the randomization
        factor to ``DEFAULT_JITTER_FACTOR`` (0.25).
        """
        return cls(
            initial_delay=config.delay,
            multiplier=config.multiplier,
            max_delay=config.max_delay,
            randomization_factor=DEFAULT_JITTER_FACTOR if config.jitter else 0.0,
            rng=rng,
        )

    def calculate(self, attempt: int) -> int:
        if attempt <= 0:
            return 0

        try:
            delay = self.initial_delay * self.multiplier ** (min(attempt, MAX_EXPONENT) - 1)
        except OverflowError:
            logger.debug(f"Backoff delay overflow at attempt {attempt}, using {self.max_delay}ms")
            return self.max_delay if self.initial_delay > 0 else 0
        if self.randomization_factor > 0:
            delay *= self._rng.uniform(1 - self.randomization_factor, 1 + self.randomization_factor)

        if delay > self.max_delay:
            logger.debug(f"Capping backoff delay from {delay:.0f}ms to {self.max_delay}ms")
            delay = self.max_delay
        return max(int(delay), 0)
