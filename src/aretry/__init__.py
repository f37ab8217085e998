r"""aretry - Retry execution engine with backoff, listeners and recovery.

This package governs how a fallible operation is re-attempted: how many
times, how long to wait between attempts, which failures are retryable,
how the attempt lifecycle is observed, and which fallback runs when all
attempts are exhausted.

Key Features:
    - Immutable retry definitions built once per kind of operation
    - Retryable and non-retryable failure types (exclusion wins)
    - Fixed and exponential backoff, with optional jitter
    - Lifecycle listeners (open, retry, error, close) for observability
    - Thread-safe statistics shared across executions
    - Recovery handlers selected by label, result type and arguments
    - Synchronous and asyncio executors

Example:
    ```pycon
    >>> from aretry import RetryDefinition, RetryTemplate
    >>> from aretry.config import BackoffConfig
    >>> template = RetryTemplate()
    >>> definition = RetryDefinition(
    ...     max_attempts=5,
    ...     retry_on=(ConnectionError,),
    ...     backoff=BackoffConfig(delay=100, multiplier=2.0, max_delay=5000),
    ... )
    >>> template.execute(definition, lambda: "pong")
    'pong'

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "AttemptEvent",
    "BackoffConfig",
    "BackoffKind",
    "ExponentialBackoff",
    "FixedBackoff",
    "InMemoryStatistics",
    "LoggingRetryListener",
    "RecoveryDescriptor",
    "RecoveryRegistry",
    "RecoveryResolver",
    "RetryContext",
    "RetryDefinition",
    "RetryError",
    "RetryExecutor",
    "RetryExhaustedError",
    "RetryListener",
    "RetryPolicy",
    "RetryStatistics",
    "RetryTemplate",
    "SimpleRetryPolicy",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from aretry.backoff import ExponentialBackoff, FixedBackoff
from aretry.config import BackoffConfig, BackoffKind, RetryDefinition
from aretry.context import RetryContext
from aretry.exceptions import RetryError, RetryExhaustedError
from aretry.listeners import AttemptEvent, LoggingRetryListener, RetryListener
from aretry.recovery import RecoveryDescriptor, RecoveryRegistry, RecoveryResolver
from aretry.retry import AsyncRetryExecutor, RetryExecutor, RetryPolicy, SimpleRetryPolicy
from aretry.statistics import InMemoryStatistics, RetryStatistics
from aretry.template import RetryTemplate

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
