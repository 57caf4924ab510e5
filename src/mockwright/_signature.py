from __future__ import annotations

import enum
import inspect
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, final

from mockwright._behavior import Deferred, Value
from mockwright._defaults import DefaultValue, awaited_type, default_for
from mockwright._errors import ConfigurationError
from mockwright._matchers import (
    AnyRef,
    AnyValue,
    Exact,
    Matcher,
    MATCHER_TYPES,
    as_matcher,
    matches,
)
from mockwright._refs import Out, Ref, is_ref_annotation


class MemberKind(enum.Enum):
    METHOD = "method"
    GETTER = "getter"
    SETTER = "setter"


@final
@dataclass(frozen=True, slots=True)
class MemberId:
    name: str
    kind: MemberKind
    arity: int

    def __str__(self) -> str:
        match self.kind:
            case MemberKind.METHOD:
                return f"{self.name}/{self.arity}"
            case MemberKind.GETTER:
                return f"{self.name} (get)"
            case MemberKind.SETTER:
                return f"{self.name} (set)"


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class CallSignature:
    member: MemberId
    matchers: tuple[Matcher, ...] = ()
    slots: frozenset[int] = field(default_factory=frozenset)

    def matches(self, arguments: tuple[Any, ...]) -> bool:
        if len(arguments) != len(self.matchers):
            return False
        for position, (matcher, actual) in enumerate(
            zip(self.matchers, arguments, strict=True)
        ):
            if position in self.slots and not isinstance(matcher, AnyRef):
                # by-ref exact values compare against the slot's content
                if not isinstance(actual, Ref):
                    return False
                actual = actual.value
            if not matches(matcher, actual):
                return False
        return True


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class MemberInfo:
    """What the interface declares about one member."""

    name: str
    is_property: bool
    signature: inspect.Signature | None = None
    returns: Any = inspect.Parameter.empty
    is_async: bool = False
    slots: frozenset[int] = field(default_factory=frozenset)
    writable: bool = True

    @property
    def awaitable(self) -> bool:
        return self.is_async or awaited_type(self.returns)[0]

    def identity(self, arity: int | None = None) -> MemberId:
        if self.is_property:
            return MemberId(self.name, MemberKind.GETTER, 0)
        if self.signature is not None:
            arity = len(self.signature.parameters)
        return MemberId(self.name, MemberKind.METHOD, arity or 0)

    def setter_identity(self) -> MemberId:
        return MemberId(self.name, MemberKind.SETTER, 1)

    def bind(self, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> tuple[Any, ...]:
        if self.signature is None:
            if kwargs:
                raise TypeError(
                    f"{self.name}() takes no keyword arguments: {sorted(kwargs)}"
                )
            return tuple(args)
        bound = self.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple(bound.arguments[name] for name in self.signature.parameters)

    def accepts_slot(self, position: int) -> bool:
        if position in self.slots:
            return True
        if self.signature is None:
            return True
        parameter = list(self.signature.parameters.values())[position]
        return parameter.annotation is inspect.Parameter.empty

    def default(self, mode: DefaultValue) -> Any:
        awaitable, result_type = awaited_type(self.returns)
        if self.is_async or awaitable:
            return Deferred.settled(Value(default_for(result_type, mode)))
        return default_for(self.returns, mode)


def describe_member(target: type, name: str) -> MemberInfo | None:
    try:
        attribute = inspect.getattr_static(target, name)
    except AttributeError:
        annotation = _class_annotations(target).get(name, inspect.Parameter.empty)
        if annotation is inspect.Parameter.empty:
            return None
        return MemberInfo(name=name, is_property=True, returns=annotation)

    if isinstance(attribute, property):
        returns = inspect.Parameter.empty
        if attribute.fget is not None:
            returns = _signature_of(attribute.fget).return_annotation
        return MemberInfo(
            name=name,
            is_property=True,
            returns=returns,
            writable=attribute.fset is not None,
        )

    if isinstance(attribute, (staticmethod, classmethod)):
        function = attribute.__func__
        drop_first = isinstance(attribute, classmethod)
    elif callable(attribute):
        function = attribute
        drop_first = inspect.isfunction(attribute)
    else:
        annotation = _class_annotations(target).get(name, inspect.Parameter.empty)
        return MemberInfo(name=name, is_property=True, returns=annotation)

    try:
        signature = _signature_of(function)
    except (TypeError, ValueError):
        return MemberInfo(name=name, is_property=False)

    parameters = list(signature.parameters.values())
    if drop_first and parameters:
        parameters = parameters[1:]
    signature = signature.replace(parameters=parameters)
    return MemberInfo(
        name=name,
        is_property=False,
        signature=signature,
        returns=signature.return_annotation,
        is_async=inspect.iscoroutinefunction(function),
        slots=frozenset(
            position
            for position, parameter in enumerate(parameters)
            if is_ref_annotation(parameter.annotation)
        ),
    )


def build_call_signature(
    info: MemberInfo, args: tuple[Any, ...], kwargs: Mapping[str, Any]
) -> tuple[CallSignature, tuple[tuple[int, Any], ...]]:
    """Turn setup arguments into a call signature plus slot assignments."""
    try:
        values = info.bind(args, kwargs)
    except TypeError as exc:
        raise ConfigurationError(
            f"setup arguments do not fit '{info.name}': {exc}"
        ) from exc

    matchers: list[Matcher] = []
    outputs: list[tuple[int, Any]] = []
    slots: set[int] = set()
    for position, value in enumerate(values):
        is_slot = isinstance(value, (Out, Ref, AnyRef))
        if is_slot and not info.accepts_slot(position):
            raise ConfigurationError(
                f"parameter {position} of '{info.name}' is not a Ref slot"
            )
        match value:
            case Out(value=written):
                matchers.append(AnyRef())
                outputs.append((position, written))
            case Ref(value=current):
                matchers.append(Exact(value=current))
            case AnyRef():
                matchers.append(value)
            case _ if position in info.slots:
                if isinstance(value, AnyValue) and value.kind is None:
                    matchers.append(AnyRef())
                elif isinstance(value, MATCHER_TYPES) and not isinstance(value, Exact):
                    raise ConfigurationError(
                        f"Ref parameter {position} of '{info.name}' only accepts "
                        f"It.is_any_ref(), Out(...) or an exact value"
                    )
                else:
                    matchers.append(as_matcher(value))
            case _:
                matchers.append(as_matcher(value))
        if is_slot or position in info.slots:
            slots.add(position)

    signature = CallSignature(
        member=info.identity(len(values)),
        matchers=tuple(matchers),
        slots=frozenset(slots),
    )
    return signature, tuple(outputs)


def _signature_of(function: Any) -> inspect.Signature:
    try:
        return inspect.signature(function, eval_str=True)
    except (NameError, SyntaxError, TypeError):
        # locally defined names in string annotations cannot be resolved
        return inspect.signature(function)


def _class_annotations(target: type) -> dict[str, Any]:
    annotations: dict[str, Any] = {}
    for klass in reversed(target.__mro__):
        if klass is not object:
            annotations.update(inspect.get_annotations(klass))
    return annotations
