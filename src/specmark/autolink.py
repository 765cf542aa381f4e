# topmark:header:start
#
#   project      : SpecMark
#   file         : autolink.py
#   file_relpath : src/specmark/autolink.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Cross-link references to operations in registered text runs.

After the clause tree is complete, every aoid in the bibliography is known.
`autolink` then scans the text runs registered during compilation and
wraps whole-word occurrences of the aoids visible from each run's namespace
(the namespace itself plus its ancestors) in ``<emu-xref aoid="...">``.
A clause never links to its own aoid.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from bs4 import NavigableString

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from bs4.element import PageElement

    from specmark.config.logging import SpecmarkLogger
    from specmark.context import CompileContext
    from specmark.inline import TextRun

logger: SpecmarkLogger = get_logger(__name__)


def aoid_pattern(aoids: set[str]) -> re.Pattern[str] | None:
    """Return a regex matching any of ``aoids`` as a whole word, longest first.

    Returns:
        The compiled pattern, or None when ``aoids`` is empty.
    """
    if not aoids:
        return None
    alternatives: str = "|".join(re.escape(a) for a in sorted(aoids, key=lambda a: (-len(a), a)))
    return re.compile(rf"(?<![\w$%.:])(?:{alternatives})(?![\w$%])")


def _link_run(ctx: CompileContext, run: TextRun, pattern: re.Pattern[str]) -> int:
    text: str = str(run.node)
    pieces: list[PageElement] = []
    last: int = 0
    linked: int = 0
    own_aoid: str | None = run.clause.aoid if run.clause is not None else None
    for m in pattern.finditer(text):
        if m.group() == own_aoid:
            continue
        if m.start() > last:
            pieces.append(NavigableString(text[last : m.start()]))
        pieces.append(ctx.document.new_tag("emu-xref", m.group(), aoid=m.group()))
        last = m.end()
        linked += 1
    if not linked:
        return 0
    if last < len(text):
        pieces.append(NavigableString(text[last:]))
    run.node.replace_with(*pieces)
    return linked


def autolink(ctx: CompileContext) -> int:
    """Link aoid references in every registered text run.

    Args:
        ctx (CompileContext): A context whose clause tree has been compiled.

    Returns:
        int: The number of references linked.
    """
    total: int = 0
    for namespace, runs in ctx.text_runs.items():
        pattern: re.Pattern[str] | None = aoid_pattern(ctx.biblio.visible_aoids(namespace))
        if pattern is None:
            continue
        for run in runs:
            if run.node.parent is None:
                continue
            total += _link_run(ctx, run, pattern)
    logger.debug("Autolinked %d references", total)
    return total
