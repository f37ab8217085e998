r"""Unit tests for parameter validation utilities."""

from __future__ import annotations

import pytest

from aretry.utils.validation import (
    validate_backoff_params,
    validate_failure_types,
    validate_max_attempts,
)

###########################################
#     Tests for validate_max_attempts     #
###########################################


@pytest.mark.parametrize("max_attempts", [1, 3, 100])
def test_validate_max_attempts_valid(max_attempts: int) -> None:
    """Test valid attempt budgets."""
    validate_max_attempts(max_attempts)


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_validate_max_attempts_invalid(max_attempts: int) -> None:
    """Test that budgets below 1 are rejected."""
    with pytest.raises(ValueError, match=f"max_attempts must be >= 1, got {max_attempts}"):
        validate_max_attempts(max_attempts)


#############################################
#     Tests for validate_backoff_params     #
#############################################


def test_validate_backoff_params_valid() -> None:
    """Test valid backoff parameters."""
    validate_backoff_params(delay=0)
    validate_backoff_params(delay=1000, multiplier=0.5, max_delay=0, randomization_factor=1.0)


def test_validate_backoff_params_negative_delay() -> None:
    """Test that a negative delay is rejected."""
    with pytest.raises(ValueError, match="delay must be >= 0, got -1"):
        validate_backoff_params(delay=-1)


@pytest.mark.parametrize("multiplier", [0, -2.0])
def test_validate_backoff_params_invalid_multiplier(multiplier: float) -> None:
    """Test that the multiplier must be positive."""
    with pytest.raises(ValueError, match="multiplier must be > 0"):
        validate_backoff_params(delay=100, multiplier=multiplier)


def test_validate_backoff_params_negative_max_delay() -> None:
    """Test that a negative max_delay is rejected."""
    with pytest.raises(ValueError, match="max_delay must be >= 0"):
        validate_backoff_params(delay=100, max_delay=-1)


@pytest.mark.parametrize("factor", [-0.01, 1.01])
def test_validate_backoff_params_invalid_randomization(factor: float) -> None:
    """Test that the randomization factor must be in [0, 1]."""
    with pytest.raises(ValueError, match="randomization_factor must be in"):
        validate_backoff_params(delay=100, randomization_factor=factor)


############################################
#     Tests for validate_failure_types     #
############################################


def test_validate_failure_types_valid() -> None:
    """Test valid failure types."""
    validate_failure_types("retry_on", ())
    validate_failure_types("retry_on", (ValueError, KeyboardInterrupt, BaseException))


@pytest.mark.parametrize("value", [int, "ValueError", ValueError()])
def test_validate_failure_types_invalid(value: object) -> None:
    """Test that non exception classes are rejected."""
    with pytest.raises(TypeError, match="retry_on must only contain exception types"):
        validate_failure_types("retry_on", (ValueError, value))
