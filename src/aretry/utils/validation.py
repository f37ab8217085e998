r"""Parameter validation utilities for retry configuration.

This module provides validation functions for retry and backoff
parameters to ensure they meet the required constraints before being
used by the retry executors.
"""

from __future__ import annotations

__all__ = ["validate_backoff_params", "validate_failure_types", "validate_max_attempts"]

from typing import Any


def validate_max_attempts(max_attempts: int) -> None:
    """Validate the attempt budget.

    Args:
        max_attempts: Maximum number of attempts, including the first one.
            Must be >= 1.

    Raises:
        ValueError: If ``max_attempts`` is lower than 1.

    Example:
        ```pycon
        >>> from aretry.utils.validation import validate_max_attempts
        >>> validate_max_attempts(3)
        >>> validate_max_attempts(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: max_attempts must be >= 1, got 0

        ```
    """
    if max_attempts < 1:
        msg = f"max_attempts must be >= 1, got {max_attempts}"
        raise ValueError(msg)


def validate_backoff_params(
    delay: float,
    multiplier: float = 1.0,
    max_delay: float | None = None,
    randomization_factor: float = 0.0,
) -> None:
    """Validate backoff parameters.

    Args:
        delay: Initial (or fixed) delay in milliseconds. Must be >= 0.
        multiplier: Growth factor between consecutive delays. Must be > 0.
        max_delay: Optional delay cap in milliseconds. Must be >= 0 if provided.
        randomization_factor: Jitter amplitude. Must be in ``[0, 1]``.

    Raises:
        ValueError: If any parameter is out of range.

    Example:
        ```pycon
        >>> from aretry.utils.validation import validate_backoff_params
        >>> validate_backoff_params(delay=1000, multiplier=2.0, max_delay=30000)
        >>> validate_backoff_params(delay=-1)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: delay must be >= 0, got -1

        ```
    """
    if delay < 0:
        msg = f"delay must be >= 0, got {delay}"
        raise ValueError(msg)
    if multiplier <= 0:
        msg = f"multiplier must be > 0, got {multiplier}"
        raise ValueError(msg)
    if max_delay is not None and max_delay < 0:
        msg = f"max_delay must be >= 0, got {max_delay}"
        raise ValueError(msg)
    if not 0.0 <= randomization_factor <= 1.0:
        msg = f"randomization_factor must be in [0, 1], got {randomization_factor}"
        raise ValueError(msg)


def validate_failure_types(name: str, types: tuple[Any, ...]) -> None:
    """Validate that every entry of ``types`` is an exception class.

    Args:
        name: The parameter name, used in the error message.
        types: The tuple of failure types to check.

    Raises:
        TypeError: If an entry is not a subclass of ``BaseException``.
    """
    for tp in types:
        if not (isinstance(tp, type) and issubclass(tp, BaseException)):
            msg = f"{name} must only contain exception types, got {tp!r}"
            raise TypeError(msg)
