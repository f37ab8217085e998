r"""Listener manager for orchestrating retry lifecycle events.

This module provides the ListenerManager class that fans out lifecycle
events to the configured listeners and to the optional attempt sink.
"""

from __future__ import annotations

__all__ = ["ListenerManager"]

import logging
from typing import TYPE_CHECKING

from aretry.listeners import AttemptEvent

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from aretry.context import RetryContext
    from aretry.listeners import RetryListener

logger: logging.Logger = logging.getLogger(__name__)


class ListenerManager:
    """Manages listener invocations during the retry lifecycle.

    Listeners are notified in registration order. A listener raising an
    exception is logged and skipped: listeners never influence the
    control flow of the execution.

    Attributes:
        listeners: The listeners, in notification order.
        attempt_sink: Optional callable notified before every attempt.
    """

    def __init__(
        self,
        listeners: Iterable[RetryListener] = (),
        attempt_sink: Callable[[AttemptEvent], None] | None = None,
    ) -> None:
        """Initialize listener manager.

        Args:
            listeners: Listeners to notify.
            attempt_sink: Optional callable notified before every attempt.
        """
        self.listeners: tuple[RetryListener, ...] = tuple(listeners)
        self.attempt_sink = attempt_sink

    def on_open(self, context: RetryContext) -> None:
        for listener in self.listeners:
            self._notify(listener.on_open, context)

    def on_retry(self, context: RetryContext) -> None:
        for listener in self.listeners:
            self._notify(listener.on_retry, context)

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        for listener in self.listeners:
            self._notify(listener.on_error, context, error)

    def on_close(self, context: RetryContext, error: BaseException | None) -> None:
        for listener in self.listeners:
            self._notify(listener.on_close, context, error)

    def on_attempt(self, context: RetryContext) -> None:
        """Notify the attempt sink that an attempt is about to occur.

        Args:
            context: The context of the running execution.
        """
        if self.attempt_sink is None:
            return
        event = AttemptEvent(name=context.name, attempt=context.attempt_count + 1)
        self._notify(self.attempt_sink, event)

    @staticmethod
    def _notify(hook: Callable[..., None], *args: object) -> None:
        try:
            hook(*args)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Error in retry listener {hook!r}: {e}")
