r"""Configuration dataclasses and defaults for retry executions.

This module provides the default constants and the immutable
``RetryDefinition`` and ``BackoffConfig`` values describing how an
operation is retried. Definitions are built once per kind of operation
and never mutated: policies and backoff objects are derived from them
for every execution.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_DELAY_MS",
    "DEFAULT_JITTER_FACTOR",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_DELAY_MS",
    "DEFAULT_MULTIPLIER",
    "BackoffConfig",
    "BackoffKind",
    "RetryDefinition",
]

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from aretry.utils.validation import (
    validate_backoff_params,
    validate_failure_types,
    validate_max_attempts,
)

if TYPE_CHECKING:
    from aretry.backoff.base import BaseBackoffPolicy
    from aretry.listeners import RetryListener
    from aretry.retry.policy import SimpleRetryPolicy


# Default maximum number of attempts, including the first one
DEFAULT_MAX_ATTEMPTS = 3

# Default delay in milliseconds before the first retry
DEFAULT_DELAY_MS = 1000

# Default growth factor of the exponential backoff
# With 1000ms: 1st retry waits 1s, 2nd waits 2s, 3rd waits 4s
DEFAULT_MULTIPLIER = 2.0

# Default cap in milliseconds of a single backoff delay
DEFAULT_MAX_DELAY_MS = 30000

# Jitter amplitude applied when jitter is enabled (+/- 25%)
DEFAULT_JITTER_FACTOR = 0.25


class BackoffKind(Enum):
    """Backoff policy families.

    Attributes:
        FIXED: The same delay before every retry.
        EXPONENTIAL: A delay growing geometrically with the attempt count.
    """

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class BackoffConfig:
    """Backoff parameters of a retry definition.

    Args:
        kind: The backoff family (default: exponential).
        delay: Initial delay in milliseconds, or the fixed delay.
        multiplier: Growth factor of the exponential backoff.
        max_delay: Maximum delay in milliseconds.
        jitter: Whether to randomize the exponential delay by +/- 25%.

    Example:
        ```pycon
        >>> from aretry.config import BackoffConfig, BackoffKind
        >>> BackoffConfig().create()
        ExponentialBackoff(initial_delay=1000, multiplier=2.0, max_delay=30000, randomization_factor=0.0)
        >>> BackoffConfig(kind=BackoffKind.FIXED, delay=500).create()
        FixedBackoff(delay=500)

        ```
    """

    kind: BackoffKind = BackoffKind.EXPONENTIAL
    delay: int = DEFAULT_DELAY_MS
    multiplier: float = DEFAULT_MULTIPLIER
    max_delay: int = DEFAULT_MAX_DELAY_MS
    jitter: bool = False

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Raises:
            ValueError: If any parameter fails validation.
        """
        validate_backoff_params(
            delay=self.delay, multiplier=self.multiplier, max_delay=self.max_delay
        )

    def create(self) -> BaseBackoffPolicy:
        """Create a new backoff policy from this configuration.

        Returns:
            A fresh ``FixedBackoff`` or ``ExponentialBackoff``.
        """
        from aretry.backoff import ExponentialBackoff, FixedBackoff  # noqa: PLC0415

        if self.kind is BackoffKind.FIXED:
            return FixedBackoff.from_config(self)
        return ExponentialBackoff.from_config(self)


@dataclass(frozen=True)
class RetryDefinition:
    """Immutable description of how an operation is retried.

    Args:
        max_attempts: Maximum number of attempts, including the first
            one. Must be >= 1.
        retry_on: Failure types that trigger a retry. Subclasses match.
        no_retry_on: Failure types that never trigger a retry. They take
            precedence over ``retry_on``.
        backoff: Backoff parameters.
        label: Optional label used to pick a recovery handler.
        name: Optional operation name used for logging and errors.
        listeners: Listeners notified of the lifecycle, in order.
        retry_all_when_unspecified: When ``retry_on`` is empty, whether
            every non-excluded failure is retryable (True) or none is
            (False).

    Example:
        ```pycon
        >>> from aretry import RetryDefinition
        >>> definition = RetryDefinition(max_attempts=5, retry_on=(ConnectionError,))
        >>> definition.max_attempts
        5
        >>> merged = definition.merge(max_attempts=2)
        >>> merged.max_attempts
        2
        >>> definition.max_attempts  # Original unchanged
        5

        ```
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    retry_on: tuple[type[BaseException], ...] = ()
    no_retry_on: tuple[type[BaseException], ...] = ()
    backoff: BackoffConfig = field(default_factory=BackoffConfig)
    label: str | None = None
    name: str | None = None
    listeners: tuple[RetryListener, ...] = ()
    retry_all_when_unspecified: bool = True

    def __post_init__(self) -> None:
        """Validate configuration parameters after initialization.

        Lists are converted to tuples so the definition stays hashable
        and immutable.

        Raises:
            ValueError: If ``max_attempts`` is lower than 1.
            TypeError: If a failure type is not an exception class.
        """
        validate_max_attempts(self.max_attempts)
        object.__setattr__(self, "retry_on", tuple(self.retry_on))
        object.__setattr__(self, "no_retry_on", tuple(self.no_retry_on))
        object.__setattr__(self, "listeners", tuple(self.listeners))
        validate_failure_types("retry_on", self.retry_on)
        validate_failure_types("no_retry_on", self.no_retry_on)

    def merge(self, **overrides: Any) -> RetryDefinition:
        """Create a new definition with the specified parameters
        overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new ``RetryDefinition`` with overrides applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def create_policy(self) -> SimpleRetryPolicy:
        """Create a new retry policy from this definition."""
        from aretry.retry.policy import SimpleRetryPolicy  # noqa: PLC0415

        return SimpleRetryPolicy(
            max_attempts=self.max_attempts,
            retry_on=self.retry_on,
            no_retry_on=self.no_retry_on,
            match_all_when_empty=self.retry_all_when_unspecified,
        )

    def create_backoff(self) -> BaseBackoffPolicy:
        """Create a new backoff policy from this definition."""
        return self.backoff.create()
