from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Mapping
from typing import Any, cast, final

from mockwright._behavior import (
    AsyncWrap,
    Behavior,
    Callback,
    ReturnComputed,
    ReturnConstant,
    ReturnDefault,
    SetOutputs,
    ThrowInstance,
    ThrowType,
    unwrap,
)
from mockwright._defaults import DefaultValue
from mockwright._dispatch import Dispatcher, MockBehavior
from mockwright._errors import ConfigurationError
from mockwright._matchers import AnyValue, as_matcher
from mockwright._refs import Ref
from mockwright._registry import Registrar, SetupEntry, SetupRegistry
from mockwright._signature import (
    CallSignature,
    MemberId,
    MemberInfo,
    MemberKind,
    build_call_signature,
    describe_member,
)

_UNSET: Any = object()


def _adapt_function(fn: Any, arity: int, what: str, member: str) -> Callable[..., Any]:
    """Accept ``fn`` taking either no arguments or the member's arguments."""
    if not callable(fn):
        raise ConfigurationError(f"{what} for '{member}' must be callable, got {fn!r}")
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return fn

    if arity and not signature.parameters:

        @functools.wraps(fn)
        def _ignore_arguments(*_: Any) -> Any:
            return fn()

        return _ignore_arguments

    try:
        signature.bind(*(None,) * arity)
    except TypeError as exc:
        raise ConfigurationError(
            f"{what} {fn!r} cannot accept the {arity} argument(s) of '{member}': {exc}"
        ) from exc
    return fn


@final
class ReturnSetter:
    def __init__(
        self,
        info: MemberInfo,
        signature: CallSignature,
        registrar: Registrar,
        default: Callable[[], Any],
        *,
        awaited: bool = False,
        outputs: tuple[tuple[int, Any], ...] = (),
        callbacks: tuple[Callable[..., Any], ...] = (),
    ) -> None:
        self._info = info
        self._signature = signature
        self._registrar = registrar
        self._default = default
        self._awaited = awaited
        self._outputs = outputs
        self._callbacks = callbacks

    def callback(self, fn: Callable[..., Any]) -> ReturnSetter:
        adapted = _adapt_function(
            fn, self._signature.member.arity, "callback", self._info.name
        )
        setter = ReturnSetter(
            self._info,
            self._signature,
            self._registrar,
            self._default,
            awaited=self._awaited,
            outputs=self._outputs,
            callbacks=(*self._callbacks, adapted),
        )
        # a callback alone is a complete setup; a later terminal call
        # registers again for the same signature and shadows this entry
        setter._register(ReturnDefault(factory=self._default))
        return setter

    def returns(self, *values: Any) -> SetupEntry:
        value = values[0] if len(values) == 1 else values
        terminal: Behavior = ReturnConstant(value=value)
        if self._awaited:
            return self._register(terminal, wrap=True)
        if self._info.awaitable and not inspect.isawaitable(value):
            raise ConfigurationError(
                f"'{self._info.name}' is awaitable; use returns_async(...) or "
                f"awaited_with(...).returns(...) for {value!r}"
            )
        return self._register(terminal)

    def returns_async(self, *values: Any) -> SetupEntry:
        value = values[0] if len(values) == 1 else values
        return self._register(ReturnConstant(value=value), wrap=True)

    def returns_from(self, fn: Callable[..., Any]) -> SetupEntry:
        adapted = _adapt_function(
            fn, self._signature.member.arity, "value function", self._info.name
        )
        wrap = (
            self._awaited
            or self._info.awaitable
            or inspect.iscoroutinefunction(fn)
        )
        return self._register(ReturnComputed(fn=adapted), wrap=wrap)

    def raises(
        self,
        error: BaseException | type[BaseException],
        message: str | None = None,
    ) -> SetupEntry:
        terminal: Behavior
        if isinstance(error, type) and issubclass(error, BaseException):
            terminal = ThrowType(kind=error, message=message)
        elif isinstance(error, BaseException):
            if message is not None:
                raise ConfigurationError(
                    "a message can only be given with an exception type"
                )
            terminal = ThrowInstance(error=error)
        else:
            raise ConfigurationError(f"cannot raise {error!r}: not an exception")
        return self._register(terminal, wrap=self._awaited)

    def _register(self, terminal: Behavior, *, wrap: bool = False) -> SetupEntry:
        behavior = terminal
        if self._outputs and not isinstance(terminal, (ThrowInstance, ThrowType)):
            behavior = SetOutputs(assignments=self._outputs, then=behavior)
        if wrap:
            behavior = AsyncWrap(inner=behavior)
        for fn in reversed(self._callbacks):
            behavior = Callback(fn=fn, then=behavior)
        return self._registrar.register(self._signature, behavior)


@final
class CallArgsSetter:
    def __init__(self, info: MemberInfo, controller: MockController[Any]) -> None:
        self._info = info
        self._controller = controller

    def called_with(self, *args: Any, **kwargs: Any) -> ReturnSetter:
        return self._method_setter(args, kwargs, awaited=False)

    def awaited_with(self, *args: Any, **kwargs: Any) -> ReturnSetter:
        return self._method_setter(args, kwargs, awaited=True)

    def gets(self) -> ReturnSetter:
        self._require_property()
        return ReturnSetter(
            self._info,
            CallSignature(member=self._info.identity()),
            self._controller,
            self._controller.default_factory(self._info),
        )

    def sets(self, value: Any = _UNSET) -> ReturnSetter:
        self._require_property()
        if not self._info.writable:
            raise ConfigurationError(f"property '{self._info.name}' is read-only")
        matcher = AnyValue() if value is _UNSET else as_matcher(value)
        return ReturnSetter(
            self._info,
            CallSignature(member=self._info.setter_identity(), matchers=(matcher,)),
            self._controller,
            lambda: None,
        )

    def _method_setter(
        self, args: tuple[Any, ...], kwargs: Mapping[str, Any], *, awaited: bool
    ) -> ReturnSetter:
        if self._info.is_property:
            if args or kwargs:
                raise ConfigurationError(
                    f"property '{self._info.name}' takes no arguments; "
                    f"use sets(...) to match assignments"
                )
            return ReturnSetter(
                self._info,
                CallSignature(member=self._info.identity()),
                self._controller,
                self._controller.default_factory(self._info),
                awaited=awaited,
            )
        signature, outputs = build_call_signature(self._info, args, kwargs)
        return ReturnSetter(
            self._info,
            signature,
            self._controller,
            self._controller.default_factory(self._info),
            awaited=awaited,
            outputs=outputs,
        )

    def _require_property(self) -> None:
        if not self._info.is_property:
            raise ConfigurationError(f"'{self._info.name}' is not a property")


@final
class MemberProxy:
    def __init__(self, info: MemberInfo, controller: MockController[Any]) -> None:
        self._info = info
        self._controller = controller

    def __call__(self) -> CallArgsSetter:
        return CallArgsSetter(self._info, self._controller)


@final
class SetupBuilder:
    def __init__(self, controller: MockController[Any]) -> None:
        self._controller = controller

    def __getattr__(self, name: str) -> MemberProxy:
        if name.startswith("_"):
            raise AttributeError(f"Cannot set up private attribute: {name}")
        return MemberProxy(self._controller.require(name), self._controller)


@final
class MockController[T]:
    def __init__(
        self,
        target: type[T],
        *,
        behavior: MockBehavior = MockBehavior.LOOSE,
        default_value: DefaultValue = DefaultValue.EMPTY,
    ) -> None:
        self._target = target
        self._default_value = default_value
        self._members: dict[str, MemberInfo | None] = {}
        self._registry = SetupRegistry()
        self._dispatcher = Dispatcher(self._registry, self._default_for, behavior)
        self._mock = cast(T, _MockProxyImpl(target, self))

    @property
    def mock(self) -> T:
        return self._mock

    @property
    def target(self) -> type[T]:
        return self._target

    def member(self, name: str) -> MemberInfo | None:
        if name not in self._members:
            self._members[name] = describe_member(self._target, name)
        return self._members[name]

    def require(self, name: str) -> MemberInfo:
        info = self.member(name)
        if info is None:
            raise ConfigurationError(
                f"Member '{name}' not found on target type {self._target}"
            )
        return info

    def register(self, signature: CallSignature, behavior: Behavior) -> SetupEntry:
        return self._registry.register(signature, behavior)

    def default_factory(self, info: MemberInfo) -> Callable[[], Any]:
        return functools.partial(info.default, self._default_value)

    def invoke(self, info: MemberInfo, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> Any:
        arguments = info.bind(args, kwargs)
        slots: dict[int, Ref[Any]] = {}
        for position, argument in enumerate(arguments):
            if isinstance(argument, Ref):
                slots[position] = argument
            elif position in info.slots:
                raise TypeError(
                    f"argument {position} of '{info.name}' must be passed as a Ref"
                )
        member = info.identity(len(arguments))
        return unwrap(self._dispatcher.dispatch(member, arguments, slots))

    def get(self, info: MemberInfo) -> Any:
        return unwrap(self._dispatcher.dispatch(info.identity(), (), {}))

    def set(self, info: MemberInfo, value: Any) -> None:
        unwrap(self._dispatcher.dispatch(info.setter_identity(), (value,), {}))

    def setup_property(self, name: str, initial: Any = _UNSET) -> None:
        info = self.require(name)
        if not info.is_property:
            raise ConfigurationError(f"'{name}' is not a property")
        holder: Ref[Any] = Ref(
            info.default(self._default_value) if initial is _UNSET else initial
        )

        def _store(value: Any) -> None:
            holder.value = value

        self.register(
            CallSignature(member=info.identity()),
            ReturnComputed(fn=lambda: holder.value),
        )
        if info.writable:
            self.register(
                CallSignature(member=info.setter_identity(), matchers=(AnyValue(),)),
                Callback(fn=_store, then=ReturnConstant(value=None)),
            )

    def reset(self) -> None:
        self._registry.reset()

    def _default_for(self, member: MemberId) -> Any:
        if member.kind is MemberKind.SETTER:
            return None
        info = self.member(member.name)
        return None if info is None else info.default(self._default_value)


@final
class _MockProxyImpl[T]:
    def __init__(self, target: type[T], controller: MockController[T]) -> None:
        object.__setattr__(self, "_target", target)
        object.__setattr__(self, "_controller", controller)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(
                f"'{type(self).__name__}' object has no attribute '{name}'"
            )
        info = self._controller.member(name)
        if info is None:
            raise AttributeError(
                f"'{self._target.__name__}' has no member '{name}'"
            )
        if info.is_property:
            return self._controller.get(info)

        def _mock_method(*args: Any, **kwargs: Any) -> Any:
            return self._controller.invoke(info, args, kwargs)

        _mock_method.__name__ = name
        return _mock_method

    def __setattr__(self, name: str, value: Any) -> None:
        info = None if name.startswith("_") else self._controller.member(name)
        if info is None or not info.is_property:
            raise AttributeError(f"cannot assign '{name}' on a mock")
        if not info.writable:
            raise AttributeError(f"property '{name}' is read-only")
        self._controller.set(info, value)

    def __repr__(self) -> str:
        return f"<Mock of {self._target.__qualname__}>"


@final
class Mock[T]:
    def __init__(
        self,
        target: type[T],
        *,
        behavior: MockBehavior = MockBehavior.LOOSE,
        default_value: DefaultValue = DefaultValue.EMPTY,
    ) -> None:
        self._ctrl = MockController(
            target, behavior=behavior, default_value=default_value
        )

    @property
    def object(self) -> T:
        return self._ctrl.mock

    def get_mock(self) -> T:
        return self._ctrl.mock

    def setup(self) -> SetupBuilder:
        return SetupBuilder(self._ctrl)

    def setup_property(self, name: str, initial: Any = _UNSET) -> None:
        self._ctrl.setup_property(name, initial)

    def reset(self) -> None:
        self._ctrl.reset()

    def __enter__(self) -> Mock[T]:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        _ = exc_type, exc_val, exc_tb
        self.reset()

    async def __aenter__(self) -> Mock[T]:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        _ = exc_type, exc_val, exc_tb
        self.reset()
