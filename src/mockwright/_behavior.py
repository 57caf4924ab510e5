from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Generator, Mapping
from dataclasses import dataclass
from typing import Any, assert_never, final

from mockwright._errors import NotSettledError
from mockwright._refs import Ref


@final
@dataclass(frozen=True, slots=True)
class Value:
    value: Any


@final
@dataclass(frozen=True, slots=True)
class Thrown:
    error: BaseException


type ExecutionResult = Value | Thrown


def unwrap(result: ExecutionResult) -> Any:
    match result:
        case Value(value=value):
            return value
        case Thrown(error=error):
            raise error
        case _:
            assert_never(result)


@final
class Deferred[T]:
    """Awaitable that settles exactly once.

    A deferred is either built already settled from an ``ExecutionResult`` or
    around another awaitable, which is awaited on first use; every later
    await (or ``result()``) sees the same outcome.
    """

    __slots__ = ("_outcome", "_source")

    def __init__(
        self,
        *,
        outcome: ExecutionResult | None = None,
        source: Awaitable[T] | None = None,
    ) -> None:
        self._outcome = outcome
        self._source = source

    @classmethod
    def settled(cls, outcome: ExecutionResult) -> Deferred[Any]:
        return cls(outcome=outcome)

    @classmethod
    def of(cls, source: Awaitable[T]) -> Deferred[T]:
        if isinstance(source, Deferred):
            return source
        return cls(source=source)

    def done(self) -> bool:
        return self._outcome is not None

    def result(self) -> T:
        if self._outcome is None:
            raise NotSettledError("pending value has not been awaited yet")
        return unwrap(self._outcome)

    def __await__(self) -> Generator[Any, None, T]:
        if self._outcome is None:
            source, self._source = self._source, None
            if source is None:
                raise NotSettledError("pending value is already being awaited")
            try:
                value = yield from source.__await__()
            except Exception as exc:
                self._outcome = Thrown(exc)
                raise
            self._outcome = Value(value)
        return unwrap(self._outcome)

    def __repr__(self) -> str:
        state = "pending" if self._outcome is None else repr(self._outcome)
        return f"<Deferred {state}>"


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class ReturnConstant:
    value: Any


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class ReturnComputed:
    fn: Callable[..., Any]


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class ReturnDefault:
    factory: Callable[[], Any]


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class SetOutputs:
    assignments: tuple[tuple[int, Any], ...]
    then: Behavior


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class ThrowInstance:
    error: BaseException


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class ThrowType:
    kind: type[BaseException]
    message: str | None = None


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class Callback:
    fn: Callable[..., Any]
    then: Behavior


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class AsyncWrap:
    inner: Behavior


type Behavior = (
    ReturnConstant
    | ReturnComputed
    | ReturnDefault
    | SetOutputs
    | ThrowInstance
    | ThrowType
    | Callback
    | AsyncWrap
)


def execute(
    behavior: Behavior,
    arguments: tuple[Any, ...],
    slots: Mapping[int, Ref[Any]],
) -> ExecutionResult:
    try:
        return _execute(behavior, arguments, slots)
    except Exception as exc:
        return Thrown(exc)


def _execute(
    behavior: Behavior,
    arguments: tuple[Any, ...],
    slots: Mapping[int, Ref[Any]],
) -> ExecutionResult:
    match behavior:
        case ReturnConstant(value=value):
            return Value(value)
        case ReturnComputed(fn=fn):
            return Value(fn(*arguments))
        case ReturnDefault(factory=factory):
            return Value(factory())
        case SetOutputs(assignments=assignments, then=then):
            for position, value in assignments:
                slots[position].value = value
            return _execute(then, arguments, slots)
        case ThrowInstance(error=error):
            return Thrown(error)
        case ThrowType(kind=kind, message=message):
            return Thrown(kind() if message is None else kind(message))
        case Callback(fn=fn, then=then):
            fn(*arguments)
            return _execute(then, arguments, slots)
        case AsyncWrap(inner=inner):
            return Value(_defer(execute(inner, arguments, slots)))
        case _:
            assert_never(behavior)


def _defer(outcome: ExecutionResult) -> Deferred[Any]:
    if isinstance(outcome, Value) and inspect.isawaitable(outcome.value):
        return Deferred.of(outcome.value)
    return Deferred.settled(outcome)
