import asyncio

import pytest

from mockwright import Deferred, NotSettledError, Ref
from mockwright._behavior import (
    AsyncWrap,
    Callback,
    ReturnComputed,
    ReturnConstant,
    ReturnDefault,
    SetOutputs,
    Thrown,
    ThrowInstance,
    ThrowType,
    Value,
    execute,
    unwrap,
)


def test_return_constant() -> None:
    assert execute(ReturnConstant(value=True), ("ping",), {}) == Value(True)


def test_return_computed_from_arguments() -> None:
    behavior = ReturnComputed(fn=lambda s: s.upper())

    assert execute(behavior, ("ping",), {}) == Value("PING")


def test_return_computed_error_becomes_thrown() -> None:
    result = execute(ReturnComputed(fn=lambda s: int(s)), ("nan",), {})

    assert isinstance(result, Thrown)
    assert isinstance(result.error, ValueError)


def test_return_default_is_built_per_call() -> None:
    behavior = ReturnDefault(factory=list)

    first = unwrap(execute(behavior, (), {}))
    second = unwrap(execute(behavior, (), {}))
    assert first == second == []
    assert first is not second


def test_callback_then_return() -> None:
    captured: list[str] = []
    behavior = Callback(fn=captured.append, then=ReturnConstant(value=True))

    assert execute(behavior, ("ping",), {}) == Value(True)
    assert captured == ["ping"]


def test_failing_callback_stops_delegate() -> None:
    delegated: list[str] = []

    def explode(command: str) -> None:
        raise PermissionError(command)

    behavior = Callback(
        fn=explode,
        then=Callback(fn=delegated.append, then=ReturnConstant(value=True)),
    )

    result = execute(behavior, ("ping",), {})
    assert isinstance(result, Thrown)
    assert isinstance(result.error, PermissionError)
    assert delegated == []


def test_set_outputs_writes_slots_by_position() -> None:
    slot: Ref[str] = Ref()
    behavior = SetOutputs(assignments=((1, "ack"),), then=ReturnConstant(value=True))

    assert execute(behavior, ("ping", slot), {1: slot}) == Value(True)
    assert slot.value == "ack"


def test_throw_instance() -> None:
    error = ValueError("command")

    assert execute(ThrowInstance(error=error), (), {}) == Thrown(error)


def test_throw_type_with_and_without_message() -> None:
    bare = execute(ThrowType(kind=RuntimeError), (), {})
    with_message = execute(ThrowType(kind=RuntimeError, message="reset"), (), {})

    assert isinstance(bare, Thrown) and isinstance(bare.error, RuntimeError)
    assert isinstance(with_message, Thrown)
    assert str(with_message.error) == "reset"


def test_unwrap() -> None:
    assert unwrap(Value(3)) == 3
    with pytest.raises(KeyError):
        unwrap(Thrown(KeyError("x")))


@pytest.mark.asyncio
async def test_async_wrap_settles_to_inner_value() -> None:
    result = execute(AsyncWrap(inner=ReturnConstant(value=True)), (), {})

    assert isinstance(result, Value)
    pending = result.value
    assert isinstance(pending, Deferred)
    assert pending.done()
    assert await pending is True
    assert await pending is True


@pytest.mark.asyncio
async def test_async_wrap_rejects_with_inner_error() -> None:
    result = execute(AsyncWrap(inner=ThrowType(kind=TimeoutError)), (), {})

    assert isinstance(result, Value)
    with pytest.raises(TimeoutError):
        await result.value


@pytest.mark.asyncio
async def test_async_wrap_of_awaitable_settles_once() -> None:
    calls: list[int] = []

    async def compute(x: int) -> int:
        calls.append(x)
        await asyncio.sleep(0)
        return x * 2

    result = execute(AsyncWrap(inner=ReturnComputed(fn=compute)), (21,), {})
    pending = result.value

    assert not pending.done()
    with pytest.raises(NotSettledError):
        pending.result()

    assert await pending == 42
    assert await pending == 42
    assert pending.result() == 42
    assert calls == [21]


@pytest.mark.asyncio
async def test_deferred_caches_failure() -> None:
    async def fail() -> None:
        raise ConnectionError("down")

    pending = Deferred.of(fail())

    with pytest.raises(ConnectionError):
        await pending
    with pytest.raises(ConnectionError):
        pending.result()


@pytest.mark.asyncio
async def test_deferred_works_with_gather() -> None:
    first = Deferred.settled(Value(1))
    second = Deferred.settled(Value(2))

    assert await asyncio.gather(first, second) == [1, 2]


def test_deferred_of_deferred_is_identity() -> None:
    pending = Deferred.settled(Value(1))

    assert Deferred.of(pending) is pending
