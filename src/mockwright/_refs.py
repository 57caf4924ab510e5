from __future__ import annotations

from dataclasses import dataclass
from typing import Any, final


@final
class Ref[T]:
    """Mutable slot standing in for an out/ref parameter.

    Callers pass a ``Ref`` where the interface declares a ``Ref[...]``
    parameter; setups may write into it and read its current ``value``.
    """

    __slots__ = ("value",)

    def __init__(self, value: T | None = None) -> None:
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


@final
@dataclass(frozen=True, slots=True)
class Out:
    """Setup-only marker: write ``value`` into the caller's slot."""

    value: Any


def is_ref_annotation(annotation: Any) -> bool:
    if isinstance(annotation, str):
        # unevaluated annotation, e.g. "Ref[str]" or "mockwright.Ref[Bar]"
        return annotation.split("[", 1)[0].rsplit(".", 1)[-1] == "Ref"
    return annotation is Ref or getattr(annotation, "__origin__", None) is Ref
