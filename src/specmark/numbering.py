# topmark:header:start
#
#   project      : SpecMark
#   file         : numbering.py
#   file_relpath : src/specmark/numbering.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Section numbering for clauses and annexes.

`ClauseNumberer` is consulted once per clause, when the clause is entered,
with the clause's depth (the size of the clause stack at that moment) and
whether it is an annex. It keeps one integer counter per depth plus a
separate letter counter for top-level annexes:

    1, 1.1, 1.2, 2, 2.1, ... A, A.1, A.1.1, B, ...

Entering a clause at depth ``d`` increments ``counter[d]`` and discards every
deeper counter, so a new sibling never inherits a stale deeper number.
Introductions and the clauses nested in them never reach the numberer.

Annex letters continue past ``Z`` in bijective base-26 (``Z``, ``AA``, ``AB``,
... ``AZ``, ``BA``), the scheme used for spreadsheet columns.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from specmark.config.logging import get_logger
from specmark.diagnostic import DiagnosticKind, RuleId

if TYPE_CHECKING:
    from bs4 import Tag

    from specmark.config.logging import SpecmarkLogger
    from specmark.diagnostic import DiagnosticLog

logger: SpecmarkLogger = get_logger(__name__)


def annex_letter(index: int) -> str:
    """Return the letter label of the ``index``-th annex (1-based).

    Args:
        index (int): 1 for the first annex.

    Returns:
        str: ``"A"`` for 1, ``"Z"`` for 26, ``"AA"`` for 27, and so on.

    Raises:
        ValueError: If ``index`` is smaller than 1.
    """
    if index < 1:
        raise ValueError(f"annex index must be >= 1, got {index}")
    letters: list[str] = []
    n: int = index
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


class ClauseNumberer:
    """Stateful counter producing the number of the next entered clause.

    Args:
        diagnostics: Optional sink for ordering problems (an ordinary clause
            after an annex, an annex nested in an ordinary clause). Numbers are
            still produced when a problem is reported.
    """

    def __init__(self, diagnostics: DiagnosticLog | None = None) -> None:
        self._diagnostics: DiagnosticLog | None = diagnostics
        self._counters: list[int] = [0]
        self._annex_count: int = 0
        self._top_is_annex: bool = False

    def next(self, depth: int, *, is_annex: bool = False, node: Tag | None = None) -> str:
        """Return the number for a clause entered at ``depth``.

        Args:
            depth (int): 0 for a top-level clause, 1 for its children, ...
            is_annex (bool): Whether the clause is an ``emu-annex``.
            node (Tag | None): The clause element, used for diagnostics only.

        Returns:
            str: The dotted number, e.g. ``"3.2.1"`` or ``"A.1"``.
        """
        if depth < 0:
            raise ValueError(f"depth must be >= 0, got {depth}")
        if depth == 0:
            number: str = self._next_top_level(is_annex=is_annex, node=node)
        else:
            if is_annex and not self._top_is_annex:
                self._warn(RuleId.ANNEX_IN_CLAUSE, "annexes should not be nested in clauses", node)
            number = self._next_nested(depth)
        logger.trace("Numbered clause at depth %d (annex=%s): %s", depth, is_annex, number)
        return number

    def _next_top_level(self, *, is_annex: bool, node: Tag | None) -> str:
        del self._counters[1:]
        if is_annex:
            self._annex_count += 1
            self._top_is_annex = True
            return annex_letter(self._annex_count)
        if self._annex_count > 0:
            self._warn(RuleId.CLAUSE_AFTER_ANNEX, "clauses should not follow annexes", node)
        self._top_is_annex = False
        self._counters[0] += 1
        return str(self._counters[0])

    def _next_nested(self, depth: int) -> str:
        # Callers skipping levels get zero-padded intermediate counters.
        while len(self._counters) <= depth:
            self._counters.append(0)
        del self._counters[depth + 1 :]
        self._counters[depth] += 1
        head: str = annex_letter(self._annex_count) if self._top_is_annex else str(self._counters[0])
        return ".".join([head, *(str(c) for c in self._counters[1:])])

    def _warn(self, rule_id: str, message: str, node: Tag | None) -> None:
        if self._diagnostics is not None:
            self._diagnostics.warn(DiagnosticKind.NODE, rule_id, message, node=node)
