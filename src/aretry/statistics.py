r"""Aggregated counters over retry executions.

This module provides the ``RetryStatistics`` interface and the
thread-safe ``InMemoryStatistics`` sink. A sink can be shared by several
executors running concurrently.
"""

from __future__ import annotations

__all__ = ["InMemoryStatistics", "RetryStatistics", "StatisticsSnapshot"]

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Consistent view of the four counters.

    Attributes:
        started: Number of executions started.
        success: Number of executions whose operation succeeded.
        exhausted: Number of executions that ran out of attempts or hit a
            non-retryable failure.
        recovered: Number of exhausted executions handed to a recovery.
    """

    started: int = 0
    success: int = 0
    exhausted: int = 0
    recovered: int = 0


class RetryStatistics(ABC):
    """Sink of the execution counters."""

    @abstractmethod
    def increment_started(self, count: int = 1) -> None:
        """Increment the number of started executions."""

    @abstractmethod
    def increment_success(self, count: int = 1) -> None:
        """Increment the number of successful executions."""

    @abstractmethod
    def increment_exhausted(self, count: int = 1) -> None:
        """Increment the number of exhausted executions."""

    @abstractmethod
    def increment_recovered(self, count: int = 1) -> None:
        """Increment the number of recovered executions."""

    @abstractmethod
    def snapshot(self) -> StatisticsSnapshot:
        """Return a consistent snapshot of the counters."""

    @abstractmethod
    def reset(self) -> None:
        """Reset all counters to zero at once."""

    def get_started_count(self) -> int:
        return self.snapshot().started

    def get_success_count(self) -> int:
        return self.snapshot().success

    def get_exhausted_count(self) -> int:
        return self.snapshot().exhausted

    def get_recovered_count(self) -> int:
        return self.snapshot().recovered


class InMemoryStatistics(RetryStatistics):
    r"""In-memory statistics sink.

    Thread-safe implementation using a lock: every increment, read and
    reset holds the same lock, so no reader observes a partially reset
    state.

    Example:
        ```pycon
        >>> from aretry import InMemoryStatistics
        >>> stats = InMemoryStatistics()
        >>> stats.increment_started()
        >>> stats.increment_success()
        >>> stats.snapshot()
        StatisticsSnapshot(started=1, success=1, exhausted=0, recovered=0)
        >>> stats.reset()
        >>> stats.get_started_count()
        0

        ```
    """

    def __init__(self) -> None:
        self._started = 0
        self._success = 0
        self._exhausted = 0
        self._recovered = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        snapshot = self.snapshot()
        return (
            f"{self.__class__.__qualname__}(started={snapshot.started}, "
            f"success={snapshot.success}, exhausted={snapshot.exhausted}, "
            f"recovered={snapshot.recovered})"
        )

    def increment_started(self, count: int = 1) -> None:
        _check_count(count)
        with self._lock:
            self._started += count

    def increment_success(self, count: int = 1) -> None:
        _check_count(count)
        with self._lock:
            self._success += count

    def increment_exhausted(self, count: int = 1) -> None:
        _check_count(count)
        with self._lock:
            self._exhausted += count

    def increment_recovered(self, count: int = 1) -> None:
        _check_count(count)
        with self._lock:
            self._recovered += count

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            return StatisticsSnapshot(
                started=self._started,
                success=self._success,
                exhausted=self._exhausted,
                recovered=self._recovered,
            )

    def reset(self) -> None:
        with self._lock:
            self._started = 0
            self._success = 0
            self._exhausted = 0
            self._recovered = 0


def _check_count(count: int) -> None:
    # Counters never decrease
    if count < 0:
        msg = f"count must be >= 0, got {count}"
        raise ValueError(msg)
