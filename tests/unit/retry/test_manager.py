r"""Unit tests for the listener manager."""

from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from aretry import AttemptEvent, RetryContext, RetryListener
from aretry.retry import ListenerManager


def test_listener_manager_defaults() -> None:
    """Test manager without listeners."""
    manager = ListenerManager()
    assert manager.listeners == ()
    assert manager.attempt_sink is None


def test_listener_manager_without_listeners_is_noop() -> None:
    """Test that notifications without listeners do nothing."""
    manager = ListenerManager()
    context = RetryContext()
    manager.on_open(context)
    manager.on_retry(context)
    manager.on_error(context, ValueError())
    manager.on_close(context, None)
    manager.on_attempt(context)


def test_listener_manager_fans_out_in_order() -> None:
    """Test that listeners are notified in registration order."""
    parent = Mock()
    first = Mock(spec=RetryListener)
    second = Mock(spec=RetryListener)
    parent.attach_mock(first, "first")
    parent.attach_mock(second, "second")
    manager = ListenerManager([first, second])
    context = RetryContext()
    error = ValueError("boom")

    manager.on_open(context)
    manager.on_error(context, error)
    manager.on_retry(context)
    manager.on_close(context, error)

    assert [c[0] for c in parent.mock_calls] == [
        "first.on_open",
        "second.on_open",
        "first.on_error",
        "second.on_error",
        "first.on_retry",
        "second.on_retry",
        "first.on_close",
        "second.on_close",
    ]
    first.on_close.assert_called_once_with(context, error)


def test_listener_manager_failing_listener(caplog: pytest.LogCaptureFixture) -> None:
    """Test that a failing listener is logged and does not stop the
    others."""
    failing = Mock(spec=RetryListener)
    failing.on_open.side_effect = RuntimeError("listener bug")
    other = Mock(spec=RetryListener)
    manager = ListenerManager([failing, other])

    with caplog.at_level(logging.WARNING):
        manager.on_open(RetryContext())

    other.on_open.assert_called_once()
    assert "Error in retry listener" in caplog.text
    assert "listener bug" in caplog.text


def test_listener_manager_on_attempt() -> None:
    """Test that the attempt sink receives the upcoming attempt
    number."""
    sink = Mock()
    manager = ListenerManager(attempt_sink=sink)
    context = RetryContext("job")
    context.register_failure(ValueError())

    manager.on_attempt(context)

    event = sink.call_args.args[0]
    assert isinstance(event, AttemptEvent)
    assert event.name == "job"
    assert event.attempt == 2


def test_listener_manager_failing_attempt_sink(caplog: pytest.LogCaptureFixture) -> None:
    """Test that a failing attempt sink is logged."""
    manager = ListenerManager(attempt_sink=Mock(side_effect=RuntimeError("sink down")))
    with caplog.at_level(logging.WARNING):
        manager.on_attempt(RetryContext())
    assert "sink down" in caplog.text
