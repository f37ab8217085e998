r"""Exceptions raised by the retry engine."""

from __future__ import annotations

__all__ = ["RetryError", "RetryExhaustedError"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aretry.context import RetryContext


class RetryError(RuntimeError):
    r"""Base class of the errors raised by aretry."""


class RetryExhaustedError(RetryError):
    """Exception raised when no further attempt is permitted and no
    recovery is available.

    The error exposes the execution context so callers can inspect the
    number of attempts and the last failure. It is raised ``from`` the
    last failure, which is therefore also available as ``__cause__``.

    Args:
        context: The context of the exhausted execution.
        label: Optional label of the operation.
        message: Optional message. A default one is built from the
            context when omitted.

    Example:
        ```pycon
        >>> from aretry import RetryContext, RetryExhaustedError
        >>> context = RetryContext("fetch")
        >>> context.register_failure(ConnectionError("refused"))
        >>> error = RetryExhaustedError(context)
        >>> error.attempts
        1
        >>> error.last_failure
        ConnectionError('refused')
        >>> raise error
        Traceback (most recent call last):
            ...
        aretry.exceptions.RetryExhaustedError: fetch: retry attempts exhausted after 1 attempts

        ```
    """

    def __init__(
        self,
        context: RetryContext,
        label: str | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            prefix = f"{context.name}: " if context.name else ""
            message = f"{prefix}retry attempts exhausted after {context.attempt_count} attempts"
        super().__init__(message)
        self.context = context
        self.label = label

    @property
    def attempts(self) -> int:
        return self.context.attempt_count

    @property
    def last_failure(self) -> BaseException | None:
        return self.context.last_failure

    @property
    def name(self) -> str | None:
        return self.context.name
