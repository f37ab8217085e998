r"""Unit tests for retry policies."""

from __future__ import annotations

import pytest

from aretry import RetryContext, RetryPolicy, SimpleRetryPolicy


def context_with_failures(count: int) -> RetryContext:
    context = RetryContext()
    for _ in range(count):
        context.register_failure(RuntimeError())
    return context


def test_retry_policy_is_abstract() -> None:
    """Test that RetryPolicy cannot be instantiated."""
    with pytest.raises(TypeError):
        RetryPolicy()


def test_simple_retry_policy_defaults() -> None:
    """Test the default policy parameters."""
    policy = SimpleRetryPolicy()
    assert policy.max_attempts == 3
    assert policy.retry_on == ()
    assert policy.no_retry_on == ()


def test_simple_retry_policy_repr() -> None:
    """Test the string representation."""
    assert repr(SimpleRetryPolicy(max_attempts=2, retry_on=[ValueError])) == (
        "SimpleRetryPolicy(max_attempts=2, retry_on=(<class 'ValueError'>,), "
        "no_retry_on=(), match_all_when_empty=True)"
    )


@pytest.mark.parametrize("max_attempts", [0, -1])
def test_simple_retry_policy_invalid_max_attempts(max_attempts: int) -> None:
    """Test that max_attempts must be >= 1."""
    with pytest.raises(ValueError, match="max_attempts must be >= 1"):
        SimpleRetryPolicy(max_attempts=max_attempts)


def test_simple_retry_policy_invalid_failure_type() -> None:
    """Test that failure types must be exception classes."""
    with pytest.raises(TypeError, match="retry_on must only contain exception types"):
        SimpleRetryPolicy(retry_on=(int,))


#################################
#     Tests for can_retry      #
#################################


@pytest.mark.parametrize(("failures", "expected"), [(0, True), (1, True), (2, True), (3, False), (4, False)])
def test_simple_retry_policy_can_retry(failures: int, expected: bool) -> None:
    """Test the attempt budget with max_attempts=3."""
    policy = SimpleRetryPolicy(max_attempts=3)
    assert policy.can_retry(context_with_failures(failures)) is expected


def test_simple_retry_policy_single_attempt() -> None:
    """Test that max_attempts=1 never permits a retry."""
    policy = SimpleRetryPolicy(max_attempts=1)
    assert not policy.should_retry(RuntimeError(), context_with_failures(1))


##################################
#     Tests for should_retry     #
##################################


def test_simple_retry_policy_should_retry_included() -> None:
    """Test that included types and their subclasses are retried."""
    policy = SimpleRetryPolicy(max_attempts=3, retry_on=(OSError,))
    context = context_with_failures(1)
    assert policy.should_retry(OSError(), context)
    assert policy.should_retry(ConnectionResetError(), context)
    assert not policy.should_retry(ValueError(), context)


def test_simple_retry_policy_should_retry_exhausted_budget() -> None:
    """Test that a retryable failure is not retried past the budget."""
    policy = SimpleRetryPolicy(max_attempts=2, retry_on=(OSError,))
    assert not policy.should_retry(OSError(), context_with_failures(2))


def test_simple_retry_policy_exclusion_wins() -> None:
    """Test that exclusions take precedence over inclusions."""
    policy = SimpleRetryPolicy(
        max_attempts=3, retry_on=(OSError,), no_retry_on=(PermissionError,)
    )
    context = context_with_failures(1)
    assert not policy.should_retry(PermissionError(), context)
    assert policy.should_retry(TimeoutError(), context)


def test_simple_retry_policy_same_type_included_and_excluded() -> None:
    """Test that a type listed in both sets is not retried."""
    policy = SimpleRetryPolicy(retry_on=(ValueError,), no_retry_on=(ValueError,))
    assert not policy.should_retry(ValueError(), RetryContext())


def test_simple_retry_policy_empty_inclusion_matches_all() -> None:
    """Test that an empty inclusion set retries every non-excluded
    failure by default."""
    policy = SimpleRetryPolicy(max_attempts=3, no_retry_on=(KeyError,))
    context = context_with_failures(1)
    assert policy.should_retry(ValueError(), context)
    assert policy.should_retry(RuntimeError(), context)
    assert not policy.should_retry(KeyError(), context)


def test_simple_retry_policy_empty_inclusion_matches_none() -> None:
    """Test that an empty inclusion set retries nothing when
    match_all_when_empty is False."""
    policy = SimpleRetryPolicy(max_attempts=3, match_all_when_empty=False)
    assert not policy.should_retry(ValueError(), context_with_failures(1))


def test_simple_retry_policy_accepts_lists() -> None:
    """Test that iterables of types are stored as tuples."""
    policy = SimpleRetryPolicy(retry_on=[ValueError], no_retry_on=[KeyError])
    assert policy.retry_on == (ValueError,)
    assert policy.no_retry_on == (KeyError,)
