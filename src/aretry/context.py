r"""Per-execution retry state.

This module provides the ``RetryContext`` that records the attempt count,
the last registered failure and caller-defined attributes of a single
execution. It also exposes the context of the attempt currently running
through a context variable so log records can be enriched with it.
"""

from __future__ import annotations

__all__ = ["RetryContext", "bind_context", "get_current_context"]

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

# Context variable holding the context of the running attempt (thread-safe and async-safe)
_current_context: contextvars.ContextVar[RetryContext | None] = contextvars.ContextVar(
    "retry_context", default=None
)


class RetryContext:
    r"""Mutable state of one retry execution.

    A context is created once per logical invocation and owned by that
    execution only. It is not safe to mutate the same instance from
    several threads.

    Args:
        name: Optional label used for logging and error messages.
        attributes: Optional initial caller-defined attributes.

    Example:
        ```pycon
        >>> from aretry import RetryContext
        >>> context = RetryContext("fetch-user")
        >>> context.attempt_count
        0
        >>> context.register_failure(ValueError("boom"))
        >>> context.attempt_count
        1
        >>> context.last_failure
        ValueError('boom')

        ```
    """

    def __init__(self, name: str | None = None, attributes: dict[str, Any] | None = None) -> None:
        self._name = name
        self._attempt_count = 0
        self._last_failure: BaseException | None = None
        self._attributes: dict[str, Any] = dict(attributes or {})

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(name={self._name!r}, "
            f"attempt_count={self._attempt_count}, last_failure={self._last_failure!r})"
        )

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def attempt_count(self) -> int:
        return self._attempt_count

    @property
    def last_failure(self) -> BaseException | None:
        return self._last_failure

    @property
    def attributes(self) -> dict[str, Any]:
        """A copy of the caller-defined attributes."""
        return dict(self._attributes)

    def get_name(self) -> str | None:
        return self._name

    def get_attempt_count(self) -> int:
        return self._attempt_count

    def get_last_failure(self) -> BaseException | None:
        return self._last_failure

    def register_failure(self, failure: BaseException) -> None:
        """Record a failed attempt.

        Increments the attempt count by exactly one and stores the
        failure as the last known one.

        Args:
            failure: The exception raised by the attempt.
        """
        self._attempt_count += 1
        self._last_failure = failure

    def get_attribute(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def set_attribute(self, key: str, value: Any) -> None:
        self._attributes[key] = value


def get_current_context() -> RetryContext | None:
    """Get the context of the attempt running in the current thread or
    task.

    Returns:
        The active context, or None outside of an attempt.

    Example:
        ```pycon
        >>> from aretry.context import RetryContext, bind_context, get_current_context
        >>> get_current_context()  # Initially None
        >>> with bind_context(RetryContext("job")):
        ...     get_current_context().name
        ...
        'job'

        ```
    """
    return _current_context.get()


@contextmanager
def bind_context(context: RetryContext) -> Generator[RetryContext, None, None]:
    """Make ``context`` the current context for the duration of the
    block.

    The previous value is restored on exit, so nested executions see
    their own context.

    Args:
        context: The context to bind.

    Yields:
        The bound context.
    """
    token = _current_context.set(context)
    try:
        yield context
    finally:
        _current_context.reset(token)
