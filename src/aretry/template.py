r"""Entry point running callables under a retry definition.

This module provides the RetryTemplate class that wraps plain callables
with retry logic. For every call it builds a fresh context, fresh
policies from the immutable definition and resolves the recovery handler
from its registry, then delegates to the executors.

Example:
    ```pycon
    >>> from aretry import RetryDefinition, RetryTemplate
    >>> from aretry.config import BackoffConfig
    >>> template = RetryTemplate()
    >>> @template.recoverers.register
    ... def fallback(error: Exception, key: str) -> str:
    ...     return f"default-{key}"
    ...
    >>> @template.wrap(RetryDefinition(max_attempts=2, backoff=BackoffConfig(delay=0)))
    ... def load(key: str) -> str:
    ...     raise KeyError(key)
    ...
    >>> load("color")
    'default-color'
    >>> template.statistics.get_recovered_count()
    1

    ```
"""

from __future__ import annotations

__all__ = ["RetryTemplate"]

import functools
import inspect
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from aretry.context import RetryContext
from aretry.exceptions import RetryExhaustedError
from aretry.recovery import (
    DescriptorRecovery,
    RecoveryRegistry,
    RecoveryResolver,
    declared_result_type,
)
from aretry.retry.executor import RetryExecutor
from aretry.retry.executor_async import AsyncRetryExecutor
from aretry.statistics import InMemoryStatistics

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from aretry.config import RetryDefinition
    from aretry.listeners import AttemptEvent
    from aretry.recovery import RecoveryDescriptor
    from aretry.statistics import RetryStatistics

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryTemplate:
    """Runs callables with the retry behaviour of a definition.

    A template owns a statistics sink and a registry of recovery
    handlers, both shared by all the executions it runs. Executions
    never share a context or a policy instance, so one template can be
    used from several threads or tasks at once.

    Args:
        statistics: Statistics sink. Defaults to a new
            ``InMemoryStatistics``.
        recoverers: Recovery handlers or descriptors, in priority order,
            or an existing registry.
        attempt_sink: Optional callable notified before every attempt.
        resolver: Recovery resolver. Defaults to ``RecoveryResolver()``.
    """

    def __init__(
        self,
        statistics: RetryStatistics | None = None,
        recoverers: RecoveryRegistry | Iterable[RecoveryDescriptor | Callable[..., Any]] = (),
        attempt_sink: Callable[[AttemptEvent], None] | None = None,
        resolver: RecoveryResolver | None = None,
    ) -> None:
        self._statistics: RetryStatistics = (
            statistics if statistics is not None else InMemoryStatistics()
        )
        self._recoverers = (
            recoverers if isinstance(recoverers, RecoveryRegistry) else RecoveryRegistry(recoverers)
        )
        self._attempt_sink = attempt_sink
        self._resolver = resolver if resolver is not None else RecoveryResolver()

    @property
    def statistics(self) -> RetryStatistics:
        return self._statistics

    @property
    def recoverers(self) -> RecoveryRegistry:
        return self._recoverers

    def execute(
        self, definition: RetryDefinition, operation: Callable[..., T], *args: Any, **kwargs: Any
    ) -> T:
        """Call ``operation(*args, **kwargs)`` with retries.

        Recovery handlers defined with ``async def`` are only used by
        ``execute_async``.

        Args:
            definition: The retry definition.
            operation: The callable to run.
            *args: Positional arguments of the operation.
            **kwargs: Keyword arguments of the operation.

        Returns:
            The result of the operation, or of the recovery handler
            selected for it.

        Raises:
            RetryExhaustedError: If no retry is permitted and no recovery
                handler matches the operation.
        """
        context = _create_context(definition, operation)
        executor = RetryExecutor.from_definition(definition, self._statistics, self._attempt_sink)
        recovery = self._find_recovery(definition, operation, args, kwargs, asynchronous=False)
        try:
            return executor.execute(lambda _: operation(*args, **kwargs), recovery, context)
        except RetryExhaustedError as exc:
            _log_exhausted(exc, context)
            raise

    async def execute_async(
        self,
        definition: RetryDefinition,
        operation: Callable[..., Awaitable[T] | T],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Call ``operation(*args, **kwargs)`` with retries on the event
        loop.

        Coroutine functions are awaited; plain callables are accepted
        too. See ``execute`` for the semantics.
        """
        context = _create_context(definition, operation)
        executor = AsyncRetryExecutor.from_definition(
            definition, self._statistics, self._attempt_sink
        )
        recovery = self._find_recovery(definition, operation, args, kwargs, asynchronous=True)
        try:
            return await executor.execute(lambda _: operation(*args, **kwargs), recovery, context)
        except RetryExhaustedError as exc:
            _log_exhausted(exc, context)
            raise

    def wrap(self, definition: RetryDefinition) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Return a decorator routing calls through this template.

        Coroutine functions get an async wrapper using
        ``execute_async``; other callables use ``execute``.

        Args:
            definition: The retry definition applied to every call.

        Returns:
            The decorator.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            if inspect.iscoroutinefunction(func):

                @functools.wraps(func)
                async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                    return await self.execute_async(definition, func, *args, **kwargs)

                return async_wrapper

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                return self.execute(definition, func, *args, **kwargs)

            return wrapper

        return decorator

    def _find_recovery(
        self,
        definition: RetryDefinition,
        operation: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        asynchronous: bool,
    ) -> DescriptorRecovery | None:
        descriptors: Iterable[RecoveryDescriptor] = self._recoverers
        if not asynchronous:
            # Coroutine handlers cannot be awaited by the blocking executor
            descriptors = [d for d in descriptors if not inspect.iscoroutinefunction(d.func)]
        descriptor = self._resolver.resolve(
            descriptors,
            label=definition.label,
            result_type=declared_result_type(operation),
            args=args,
            kwargs=kwargs,
        )
        if descriptor is None:
            return None
        return DescriptorRecovery(descriptor, args, kwargs)


def _create_context(definition: RetryDefinition, operation: Callable[..., Any]) -> RetryContext:
    name = definition.name or getattr(operation, "__qualname__", None) or repr(operation)
    return RetryContext(name)


def _log_exhausted(error: RetryExhaustedError, context: RetryContext) -> None:
    if error.context is context:
        logger.warning(
            f"Retries exhausted for {context.name} after {error.attempts} attempts: "
            f"{error.last_failure!r}"
        )
