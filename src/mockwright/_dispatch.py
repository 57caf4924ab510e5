from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Mapping
from typing import Any, final

from mockwright._behavior import ExecutionResult, Thrown, Value, execute
from mockwright._errors import UnexpectedCallError
from mockwright._refs import Ref
from mockwright._registry import SetupFinder
from mockwright._signature import MemberId

logger = logging.getLogger(__name__)


class MockBehavior(enum.Enum):
    """How a mock answers calls that no setup accepts."""

    LOOSE = "loose"
    STRICT = "strict"


@final
class Dispatcher:
    def __init__(
        self,
        finder: SetupFinder,
        defaults: Callable[[MemberId], Any],
        behavior: MockBehavior = MockBehavior.LOOSE,
    ) -> None:
        self._finder = finder
        self._defaults = defaults
        self._behavior = behavior

    def dispatch(
        self,
        member: MemberId,
        arguments: tuple[Any, ...],
        slots: Mapping[int, Ref[Any]],
    ) -> ExecutionResult:
        try:
            behavior = self._finder.resolve(member, arguments)
        except Exception as exc:
            return Thrown(exc)

        if behavior is not None:
            return execute(behavior, arguments, slots)

        if self._behavior is MockBehavior.STRICT:
            logger.debug("strict mock rejected %s%r", member, arguments)
            return Thrown(
                UnexpectedCallError(
                    f"Unexpected call to '{member.name}' with args={arguments}. "
                    f"No setup matches this call."
                )
            )
        return Value(self._defaults(member))
