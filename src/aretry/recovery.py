r"""Recovery handlers invoked once the attempts are exhausted.

This module provides the explicit registry of recovery handlers and the
resolution algorithm selecting, for a given operation, the handler to
call with the last failure and the operation's original arguments.

A handler is any callable accepting the failure as its first positional
parameter followed by parameters compatible with the arguments of the
operation:

Example:
    ```pycon
    >>> from aretry.recovery import RecoveryRegistry, RecoveryResolver
    >>> registry = RecoveryRegistry()
    >>> @registry.register(label="user")
    ... def cached_user(error: ConnectionError, user_id: int) -> dict:
    ...     return {"id": user_id, "stale": True}
    ...
    >>> descriptor = RecoveryResolver().resolve(
    ...     registry, label="user", result_type=dict, args=(42,)
    ... )
    >>> descriptor.func is cached_user
    True
    >>> RecoveryResolver().resolve(registry, label=None, args=(42,)) is None
    True

    ```
"""

from __future__ import annotations

__all__ = [
    "DescriptorRecovery",
    "RecoveryCallback",
    "RecoveryDescriptor",
    "RecoveryRegistry",
    "RecoveryResolver",
    "declared_result_type",
]

import inspect
import logging
import threading
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar, Union, get_args, get_origin

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

    from aretry.context import RetryContext

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


class RecoveryCallback(ABC, Generic[T]):
    """Fallback computation run once an execution is exhausted.

    Instances are callables accepting the ``RetryContext``, so they can
    be passed directly to the executors.
    """

    @abstractmethod
    def recover(self, context: RetryContext) -> T:
        """Produce a substitute result.

        Args:
            context: The context of the exhausted execution. It exposes
                the last failure and the attempt count.

        Returns:
            The substitute result.
        """

    def __call__(self, context: RetryContext) -> T:
        return self.recover(context)


@dataclass(frozen=True)
class RecoveryDescriptor:
    """Description of a recovery handler.

    Attributes:
        func: The handler, called as ``func(failure, *args, **kwargs)``.
        label: Optional label; it must equal the label of the operation.
        failure_type: The type accepted by the first parameter, or None
            if the handler cannot receive the failure positionally.
        result_type: The declared result type (``Any`` if unknown).
        signature: The handler signature with resolved annotations.
    """

    func: Callable[..., Any]
    label: str | None = None
    failure_type: Any = BaseException
    result_type: Any = Any
    signature: inspect.Signature | None = None

    @classmethod
    def from_callable(cls, func: Callable[..., Any], label: str | None = None) -> RecoveryDescriptor:
        """Create a descriptor from the signature and type hints of a
        callable.

        A missing failure annotation means ``BaseException``; a missing
        return annotation means ``Any``.

        Args:
            func: The recovery handler.
            label: Optional label of the handler.

        Returns:
            The descriptor.
        """
        signature = _resolved_signature(func)
        if signature is None:
            return cls(func=func, label=label)
        parameters = list(signature.parameters.values())
        failure_type: Any = None
        if parameters and parameters[0].kind in _POSITIONAL_KINDS:
            annotation = parameters[0].annotation
            failure_type = BaseException if _is_unknown(annotation) else annotation
        return_annotation = signature.return_annotation
        return cls(
            func=func,
            label=label,
            failure_type=failure_type,
            result_type=Any if _is_unknown(return_annotation) else return_annotation,
            signature=signature,
        )


class DescriptorRecovery(RecoveryCallback[Any]):
    """Recovery calling a descriptor's handler with the last failure and
    the original arguments.

    Args:
        descriptor: The selected recovery descriptor.
        args: The positional arguments of the original call.
        kwargs: The keyword arguments of the original call.
    """

    def __init__(
        self,
        descriptor: RecoveryDescriptor,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
    ) -> None:
        self.descriptor = descriptor
        self.args = tuple(args)
        self.kwargs = dict(kwargs or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(func={self.descriptor.func!r}, label={self.descriptor.label!r})"

    def recover(self, context: RetryContext) -> Any:
        return self.descriptor.func(context.last_failure, *self.args, **self.kwargs)


class RecoveryRegistry:
    """Ordered registry of recovery descriptors.

    Descriptors are enumerated in registration order, which makes
    recovery resolution deterministic. Registration is thread-safe.

    Args:
        descriptors: Optional initial descriptors or handlers.
    """

    def __init__(self, descriptors: Iterable[RecoveryDescriptor | Callable[..., Any]] = ()) -> None:
        self._descriptors: list[RecoveryDescriptor] = []
        self._lock = threading.Lock()
        for descriptor in descriptors:
            self.add(descriptor)

    def __iter__(self) -> Iterator[RecoveryDescriptor]:
        with self._lock:
            return iter(tuple(self._descriptors))

    def __len__(self) -> int:
        with self._lock:
            return len(self._descriptors)

    def add(
        self, handler: RecoveryDescriptor | Callable[..., Any], label: str | None = None
    ) -> RecoveryDescriptor:
        """Append a handler to the registry.

        Args:
            handler: A descriptor, or a callable turned into one with
                ``RecoveryDescriptor.from_callable``.
            label: The label of a callable handler. Ignored for
                descriptors, which carry their own.

        Returns:
            The registered descriptor.
        """
        descriptor = (
            handler
            if isinstance(handler, RecoveryDescriptor)
            else RecoveryDescriptor.from_callable(handler, label=label)
        )
        with self._lock:
            self._descriptors.append(descriptor)
        return descriptor

    def register(
        self, func: Callable[..., Any] | None = None, *, label: str | None = None
    ) -> Any:
        """Register a recovery handler, usable as a decorator.

        ``@registry.register`` and ``@registry.register(label="x")`` are
        both supported. The decorated function is returned unchanged.
        """

        def decorator(handler: Callable[..., Any]) -> Callable[..., Any]:
            self.add(handler, label=label)
            return handler

        if func is not None:
            return decorator(func)
        return decorator


class RecoveryResolver:
    """Selects the recovery handler of an operation.

    A descriptor is a candidate if:
    1. Its label equals the operation label. An unlabeled descriptor only
       matches an unlabeled operation, and the other way around.
    2. Its result type is assignable to the operation result type.
    3. Its first parameter accepts an exception (a supertype of
       ``failure_type`` when given) and its remaining parameters accept
       the original arguments.

    The first candidate in enumeration order wins; there is no scoring.
    """

    def resolve(
        self,
        descriptors: Iterable[RecoveryDescriptor],
        *,
        label: str | None = None,
        result_type: Any = Any,
        args: tuple[Any, ...] = (),
        kwargs: Mapping[str, Any] | None = None,
        failure_type: type[BaseException] | None = None,
    ) -> RecoveryDescriptor | None:
        """Return the first matching descriptor, or None.

        Args:
            descriptors: The candidate descriptors, in priority order.
            label: The label of the operation.
            result_type: The declared result type of the operation.
            args: The positional arguments of the original call.
            kwargs: The keyword arguments of the original call.
            failure_type: Optional concrete failure type to accept.

        Returns:
            The selected descriptor, or None if no candidate survives.
        """
        kwargs = kwargs or {}
        for descriptor in descriptors:
            if descriptor.label != label:
                continue
            if not _is_assignable(descriptor.result_type, result_type):
                continue
            if not _accepts_failure(descriptor.failure_type, failure_type):
                continue
            if not _accepts_arguments(descriptor, args, kwargs):
                continue
            logger.debug(f"Found recovery handler {descriptor.func!r} (label={label!r})")
            return descriptor
        return None


def declared_result_type(func: Callable[..., Any]) -> Any:
    """Return the declared result type of a callable.

    Args:
        func: The callable to inspect.

    Returns:
        The resolved return annotation, or ``Any`` if missing or not
        resolvable.
    """
    signature = _resolved_signature(func)
    if signature is None:
        return Any
    return Any if _is_unknown(signature.return_annotation) else signature.return_annotation


def _resolved_signature(func: Callable[..., Any]) -> inspect.Signature | None:
    try:
        signature = inspect.signature(func)
    except (ValueError, TypeError) as exc:
        logger.debug(f"Cannot read the signature of {func!r}: {exc}")
        return None
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError) as exc:
        logger.debug(f"Cannot resolve type hints of {func!r}, ignoring annotations: {exc}")
        hints = {}
    parameters = [
        parameter.replace(annotation=hints.get(parameter.name, parameter.annotation))
        for parameter in signature.parameters.values()
    ]
    return signature.replace(
        parameters=parameters,
        return_annotation=hints.get("return", signature.return_annotation),
    )


def _is_unknown(tp: Any) -> bool:
    return tp is Any or tp is inspect.Signature.empty or isinstance(tp, (str, TypeVar))


def _union_args(tp: Any) -> tuple[Any, ...] | None:
    if get_origin(tp) in (Union, types.UnionType):
        return get_args(tp)
    return None


def _normalize(tp: Any) -> Any:
    return type(None) if tp is None else tp


def _is_assignable(source: Any, target: Any) -> bool:
    """Indicate if a value of type ``source`` can be used where
    ``target`` is declared."""
    if _is_unknown(source) or _is_unknown(target):
        return True
    source, target = _normalize(source), _normalize(target)
    if source == target:
        return True
    source_arms = _union_args(source)
    if source_arms is not None:
        return all(_is_assignable(arm, target) for arm in source_arms)
    target_arms = _union_args(target)
    if target_arms is not None:
        return any(_is_assignable(source, arm) for arm in target_arms)
    source_origin = get_origin(source) or source
    target_origin = get_origin(target) or target
    if isinstance(source_origin, type) and isinstance(target_origin, type):
        return issubclass(source_origin, target_origin)
    return False


def _exception_classes(tp: Any) -> tuple[type[BaseException], ...] | None:
    arms = _union_args(tp)
    if arms is not None:
        classes: list[type[BaseException]] = []
        for arm in arms:
            arm_classes = _exception_classes(arm)
            if arm_classes is None:
                return None
            classes.extend(arm_classes)
        return tuple(classes)
    if get_origin(tp) is None and isinstance(tp, type) and issubclass(tp, BaseException):
        return (tp,)
    return None


def _accepts_failure(accepted: Any, failure_type: type[BaseException] | None) -> bool:
    classes = _exception_classes(accepted)
    if classes is None:
        return False
    return failure_type is None or issubclass(failure_type, classes)


def _accepts_arguments(
    descriptor: RecoveryDescriptor, args: tuple[Any, ...], kwargs: Mapping[str, Any]
) -> bool:
    signature = descriptor.signature
    if signature is None:
        return True
    failure_placeholder = object()
    try:
        bound = signature.bind(failure_placeholder, *args, **kwargs)
    except TypeError:
        return False
    for name, value in bound.arguments.items():
        if value is failure_placeholder:
            continue
        parameter = signature.parameters[name]
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if not _is_instance(value, parameter.annotation):
            return False
    return True


def _is_instance(value: Any, annotation: Any) -> bool:
    if _is_unknown(annotation):
        return True
    annotation = _normalize(annotation)
    arms = _union_args(annotation)
    if arms is not None:
        return any(_is_instance(value, arm) for arm in arms)
    # Parametrized generics are checked on their origin only
    origin = get_origin(annotation)
    if origin is not None:
        return isinstance(value, origin) if isinstance(origin, type) else True
    if annotation is float:
        return isinstance(value, (int, float))
    if isinstance(annotation, type):
        return isinstance(value, annotation)
    return True
