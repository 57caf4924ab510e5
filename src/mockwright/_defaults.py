from __future__ import annotations

import builtins
import collections.abc as cabc
import enum
import inspect
import types
import typing
from collections.abc import Callable
from typing import Any


class DefaultValue(enum.Enum):
    """What an unmatched call returns."""

    EMPTY = "empty"
    NONE = "none"


_EMPTY_FACTORIES: dict[Any, Callable[[], Any]] = {
    bool: bool,
    int: int,
    float: float,
    complex: complex,
    str: str,
    bytes: bytes,
    bytearray: bytearray,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    cabc.Sequence: tuple,
    cabc.MutableSequence: list,
    cabc.Mapping: dict,
    cabc.MutableMapping: dict,
    cabc.Set: frozenset,
    cabc.MutableSet: set,
    cabc.Collection: tuple,
    cabc.Iterable: tuple,
    cabc.Iterator: lambda: iter(()),
}

_AWAITABLE_ORIGINS = (cabc.Awaitable, cabc.Coroutine)


def awaited_type(annotation: Any) -> tuple[bool, Any]:
    """Split ``Awaitable[T]``/``Coroutine[..., T]`` into ``(True, T)``."""
    origin = typing.get_origin(annotation)
    if origin in _AWAITABLE_ORIGINS:
        args = typing.get_args(annotation)
        return True, (args[-1] if args else Any)
    if annotation in _AWAITABLE_ORIGINS:
        return True, Any
    return False, annotation


def default_for(annotation: Any, mode: DefaultValue = DefaultValue.EMPTY) -> Any:
    if mode is DefaultValue.NONE:
        return None
    if annotation is inspect.Parameter.empty or annotation is None:
        return None
    if isinstance(annotation, str):
        return _default_for_name(annotation)

    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        # Optional[...] and other unions carry no single zero value
        return None
    if origin is typing.Annotated:
        return default_for(typing.get_args(annotation)[0], mode)
    if origin is tuple:
        args = typing.get_args(annotation)
        if not args or args[-1] is Ellipsis or args == ((),):
            return ()
        return tuple(default_for(arg, mode) for arg in args)
    if origin is not None:
        factory = _EMPTY_FACTORIES.get(origin)
        return factory() if factory else None

    factory = _EMPTY_FACTORIES.get(annotation)
    if factory is not None:
        return factory()
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return next(iter(annotation), None)
    return None


def _default_for_name(annotation: str) -> Any:
    text = annotation.strip()
    if "|" in text or text.startswith(("Optional[", "Union[")):
        return None
    name = text.split("[", 1)[0].rsplit(".", 1)[-1]
    candidate = getattr(builtins, name, None)
    if candidate is tuple or candidate is None:
        # element types of a string annotation are not resolved
        return () if candidate is tuple else None
    factory = _EMPTY_FACTORIES.get(candidate)
    return factory() if factory else None
