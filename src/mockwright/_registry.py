from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Protocol, final

from mockwright._behavior import Behavior
from mockwright._errors import ConfigurationError
from mockwright._signature import CallSignature, MemberId

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class SetupEntry:
    signature: CallSignature
    behavior: Behavior


class Registrar(Protocol):
    def register(self, signature: CallSignature, behavior: Behavior) -> SetupEntry: ...


class SetupFinder(Protocol):
    def resolve(
        self, member: MemberId, arguments: tuple[Any, ...]
    ) -> Behavior | None: ...


@final
class SetupRegistry:
    """Append-only setups of one mock; the newest matching entry wins."""

    def __init__(self) -> None:
        self._entries: defaultdict[MemberId, list[SetupEntry]] = defaultdict(list)

    def register(self, signature: CallSignature, behavior: Behavior) -> SetupEntry:
        if len(signature.matchers) != signature.member.arity:
            raise ConfigurationError(
                f"'{signature.member.name}' takes {signature.member.arity} "
                f"argument(s), but {len(signature.matchers)} matcher(s) were given"
            )
        entry = SetupEntry(signature, behavior)
        self._entries[signature.member].append(entry)
        logger.debug(
            "registered setup #%d for %s: %r",
            len(self._entries[signature.member]),
            signature.member,
            behavior,
        )
        return entry

    def resolve(self, member: MemberId, arguments: tuple[Any, ...]) -> Behavior | None:
        entries = self._entries.get(member, [])
        for index in range(len(entries) - 1, -1, -1):
            if entries[index].signature.matches(arguments):
                logger.debug("%s resolved to setup #%d", member, index + 1)
                return entries[index].behavior
        logger.debug("%s matched none of %d setup(s)", member, len(entries))
        return None

    def reset(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())
