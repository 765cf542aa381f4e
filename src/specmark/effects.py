# topmark:header:start
#
#   project      : SpecMark
#   file         : effects.py
#   file_relpath : src/specmark/effects.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Effect worklist collected while compiling clauses.

Each structured header may declare effects (``user-code``, ...). The
worklist records, per effect name, the clauses that declared it directly,
in document order. Headers compile when their clause exits, so a nested
clause declares its effects before its parent; each list is kept sorted by
`Clause.position` instead of arrival order. A later pass propagates effects
along the algorithm call graph; this module only collects its input.
"""

from __future__ import annotations

import bisect
from typing import TYPE_CHECKING, Final

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from specmark.clause import Clause
    from specmark.config.logging import SpecmarkLogger

logger: SpecmarkLogger = get_logger(__name__)

USER_CODE: Final[str] = "user-code"


def _position(clause: Clause) -> int:
    return clause.position


class EffectWorklist:
    """Map from effect name to declaring clauses, sorted by document position."""

    def __init__(self) -> None:
        self._by_effect: dict[str, list[Clause]] = {}

    def record(self, effect: str, clause: Clause) -> None:
        """Insert ``clause`` under ``effect`` at its document position."""
        bisect.insort(self._by_effect.setdefault(effect, []), clause, key=_position)
        logger.trace("Effect %r declared by %s", effect, clause.id)

    def clauses_for(self, effect: str) -> tuple[Clause, ...]:
        """Return the clauses that declared ``effect``, in document order."""
        return tuple(self._by_effect.get(effect, ()))

    def effects(self) -> tuple[str, ...]:
        """Return effect names ordered by their first declaring clause."""
        return tuple(self._ordered())

    def __contains__(self, effect: object) -> bool:
        return effect in self._by_effect

    def __iter__(self) -> Iterator[tuple[str, tuple[Clause, ...]]]:
        for effect in self._ordered():
            yield effect, tuple(self._by_effect[effect])

    def __len__(self) -> int:
        return len(self._by_effect)

    def _ordered(self) -> list[str]:
        return sorted(self._by_effect, key=lambda effect: self._by_effect[effect][0].position)
