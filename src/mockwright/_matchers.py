from __future__ import annotations

import enum
import re
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Any, assert_never, final

from mockwright._errors import ConfigurationError, MatcherError
from mockwright._refs import Ref


class Range(enum.Enum):
    INCLUSIVE = "inclusive"
    EXCLUSIVE = "exclusive"


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class Exact:
    value: Any


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class Predicate:
    fn: Callable[[Any], object]
    description: str = "predicate"


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class InRange:
    low: Any
    high: Any
    kind: Range = Range.INCLUSIVE


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class Regex:
    pattern: re.Pattern[str]


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class AnyValue:
    kind: type | None = None


@final
@dataclass(frozen=True, kw_only=True, slots=True)
class AnyRef:
    pass


type Matcher = Exact | Predicate | InRange | Regex | AnyValue | AnyRef

MATCHER_TYPES = (Exact, Predicate, InRange, Regex, AnyValue, AnyRef)


def as_matcher(value: Any) -> Matcher:
    if isinstance(value, MATCHER_TYPES):
        return value
    return Exact(value=value)


def matches(matcher: Matcher, actual: Any) -> bool:
    match matcher:
        case Exact(value=expected):
            return actual is expected or bool(actual == expected)
        case Predicate(fn=fn, description=description):
            try:
                return bool(fn(actual))
            except Exception as exc:
                raise MatcherError(
                    f"{description} raised while matching {actual!r}: {exc!r}"
                ) from exc
        case InRange(low=low, high=high, kind=kind):
            try:
                if kind is Range.INCLUSIVE:
                    return bool(low <= actual <= high)
                return bool(low < actual < high)
            except TypeError as exc:
                raise MatcherError(
                    f"cannot compare {actual!r} against range [{low!r}, {high!r}]"
                ) from exc
        case Regex(pattern=pattern):
            if not isinstance(actual, str):
                return False
            return pattern.search(actual) is not None
        case AnyValue(kind=kind):
            return kind is None or isinstance(actual, kind)
        case AnyRef():
            return isinstance(actual, Ref)
        case _:
            assert_never(matcher)


@final
class It:
    """Constructors for argument matchers used in ``called_with``."""

    @staticmethod
    def is_any(kind: type | None = None) -> AnyValue:
        return AnyValue(kind=kind)

    @staticmethod
    def is_any_ref() -> AnyRef:
        return AnyRef()

    @staticmethod
    def matches(fn: Callable[[Any], object]) -> Predicate:
        if not callable(fn):
            raise ConfigurationError(f"predicate must be callable, got {fn!r}")
        return Predicate(fn=fn, description=getattr(fn, "__name__", "predicate"))

    @staticmethod
    def is_in_range(low: Any, high: Any, kind: Range = Range.INCLUSIVE) -> InRange:
        try:
            ordered = low <= high
        except TypeError as exc:
            raise ConfigurationError(
                f"range bounds {low!r} and {high!r} are not ordinal"
            ) from exc
        if not ordered:
            raise ConfigurationError(f"range low {low!r} is above high {high!r}")
        return InRange(low=low, high=high, kind=kind)

    @staticmethod
    def is_regex(pattern: str | re.Pattern[str], flags: int = 0) -> Regex:
        if isinstance(pattern, re.Pattern):
            if flags:
                pattern = re.compile(pattern.pattern, pattern.flags | flags)
            return Regex(pattern=pattern)
        try:
            return Regex(pattern=re.compile(pattern, flags))
        except re.error as exc:
            raise ConfigurationError(f"invalid pattern {pattern!r}: {exc}") from exc

    @staticmethod
    def is_in(values: Collection[Any]) -> Predicate:
        values = tuple(values)
        return Predicate(fn=lambda v: v in values, description=f"is_in{values!r}")

    @staticmethod
    def is_not_in(values: Collection[Any]) -> Predicate:
        values = tuple(values)
        return Predicate(
            fn=lambda v: v not in values, description=f"is_not_in{values!r}"
        )

    @staticmethod
    def is_not_none() -> Predicate:
        return Predicate(fn=lambda v: v is not None, description="is_not_none")
