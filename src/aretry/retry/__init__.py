r"""Retry package implementing class-based composition pattern.

This package provides the retry execution loop, built by composition of
a retry policy, a backoff policy, listeners and a statistics sink.

Public API:
    - RetryPolicy: Interface deciding whether to retry
    - SimpleRetryPolicy: Attempt budget with type-based rules
    - ListenerManager: Manager for listener notifications
    - RetryExecutor: Synchronous retry executor
    - AsyncRetryExecutor: Asynchronous retry executor
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "ListenerManager",
    "RetryExecutor",
    "RetryPolicy",
    "SimpleRetryPolicy",
]

from aretry.retry.executor import RetryExecutor
from aretry.retry.executor_async import AsyncRetryExecutor
from aretry.retry.manager import ListenerManager
from aretry.retry.policy import RetryPolicy, SimpleRetryPolicy
