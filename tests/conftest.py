from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

from aretry import RetryListener

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from aretry import RetryContext


class RecordingListener(RetryListener):
    """Listener appending ``(tag, event, attempt_count, error)`` tuples to
    a shared list."""

    def __init__(self, events: list[tuple], tag: str = "listener") -> None:
        self.events = events
        self.tag = tag

    def on_open(self, context: RetryContext) -> None:
        self.events.append((self.tag, "open", context.attempt_count, None))

    def on_retry(self, context: RetryContext) -> None:
        self.events.append((self.tag, "retry", context.attempt_count, None))

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        self.events.append((self.tag, "error", context.attempt_count, error))

    def on_close(self, context: RetryContext, error: BaseException | None) -> None:
        self.events.append((self.tag, "close", context.attempt_count, error))


@pytest.fixture
def mock_sleep() -> Generator[Mock, None, None]:
    """Patch time.sleep to make tests run faster."""
    with patch("time.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def mock_asleep() -> Generator[Mock, None, None]:
    """Patch asyncio.sleep to make tests run faster."""
    with patch("asyncio.sleep", return_value=None) as mock:
        yield mock


@pytest.fixture
def events() -> list[tuple]:
    """Create the list shared by recording listeners."""
    return []


@pytest.fixture
def make_listener(events: list[tuple]) -> Callable[[str], RecordingListener]:
    """Create a factory of recording listeners sharing ``events``."""

    def factory(tag: str = "listener") -> RecordingListener:
        return RecordingListener(events, tag)

    return factory


@pytest.fixture
def listener(make_listener: Callable[[str], RecordingListener]) -> RecordingListener:
    """Create a recording listener."""
    return make_listener("listener")
