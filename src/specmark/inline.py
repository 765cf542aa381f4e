# topmark:header:start
#
#   project      : SpecMark
#   file         : inline.py
#   file_relpath : src/specmark/inline.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Inline text rendering.

Clause prose is written with a handful of lightweight conventions which the
inline renderer turns into markup:

    ``_x_``      -> ``<var>x</var>``
    `` `x` ``    -> ``<code>x</code>``
    ``*x*``      -> ``<emu-val>x</emu-val>``
    ``~x~``      -> ``<emu-const>x</emu-const>``
    ``|X|``      -> ``<emu-nt>X</emu-nt>``

`render_text_runs` visits the text nodes directly owned by one clause, hands
each non-blank run to an `InlineRenderer`, and splices the resulting
fragment back in place with the run's leading and trailing whitespace kept
verbatim. It never descends into opaque elements (preformatted and code
blocks, grammar, algorithm bodies, headers) or into nested clauses, which
render their own text when they exit.

Every plain text node that survives rendering is registered on the compile
context under the clause's namespace, for the autolinker.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Protocol

from bs4 import NavigableString, Tag

from specmark.config.logging import get_logger
from specmark.document.tree import is_text
from specmark.document.walker import CLAUSE_ELEMENTS

if TYPE_CHECKING:
    from bs4.element import PageElement

    from specmark.clause import Clause
    from specmark.config.logging import SpecmarkLogger
    from specmark.context import CompileContext

logger: SpecmarkLogger = get_logger(__name__)

OPAQUE_ELEMENTS: Final[frozenset[str]] = frozenset(
    {
        "pre",
        "code",
        "script",
        "style",
        "h1",
        "emu-alg",
        "emu-grammar",
        "emu-production",
        "emu-xref",
    }
)


class InlineRenderer(Protocol):
    """Turns one raw text run into an HTML fragment."""

    def render(self, text: str) -> str:
        """Return the rendered fragment for ``text`` (already trimmed)."""
        ...


_INLINE_RULES: Final[tuple[tuple[re.Pattern[str], str], ...]] = (
    (re.compile(r"`([^`]+)`"), r"<code>\1</code>"),
    (re.compile(r"(?<![\w$])_([A-Za-z$][A-Za-z0-9$]*)_(?![\w$])"), r"<var>\1</var>"),
    (re.compile(r"(?<![\w*])\*(?=\S)([^*]+?)(?<=\S)\*(?![\w*])"), r"<emu-val>\1</emu-val>"),
    (re.compile(r"(?<![\w~])~([^~\s][^~]*?)~(?![\w~])"), r"<emu-const>\1</emu-const>"),
    (re.compile(r"\|([A-Za-z][A-Za-z0-9]*)\|"), r"<emu-nt>\1</emu-nt>"),
)


class MarkdownishRenderer:
    """Default renderer for the lightweight prose conventions."""

    def render(self, text: str) -> str:
        """Escape ``text`` and apply the inline conventions."""
        out: str = html.escape(text, quote=False)
        for pattern, replacement in _INLINE_RULES:
            out = pattern.sub(replacement, out)
        return out


@dataclass(frozen=True)
class TextRun:
    """A text node registered for autolinking.

    Attributes:
        node: The text node (may later be detached by another pass).
        clause: The owning clause, or None for text outside any clause.
        namespace: The namespace references in this run resolve from.
        in_alg: True when the run sits inside an algorithm.
        current_id: The nearest enclosing element id.
    """

    node: NavigableString
    clause: Clause | None
    namespace: str
    in_alg: bool = False
    current_id: str | None = None


_BLANK: Final[re.Pattern[str]] = re.compile(r"\s*")
_EDGES: Final[re.Pattern[str]] = re.compile(r"(\s*)(.*?)(\s*)", re.DOTALL)


def _owned_text_nodes(node: Tag) -> list[NavigableString]:
    """Collect the text nodes under ``node``, skipping opaque elements and clauses."""
    found: list[NavigableString] = []
    for child in list(node.children):
        if isinstance(child, Tag):
            if child.name in OPAQUE_ELEMENTS or child.name in CLAUSE_ELEMENTS:
                continue
            found.extend(_owned_text_nodes(child))
        elif is_text(child) and isinstance(child, NavigableString):
            found.append(child)
    return found


def _render_run(
    ctx: CompileContext, text_node: NavigableString, renderer: InlineRenderer
) -> list[NavigableString]:
    """Render one text node in place; return the plain text nodes left behind."""
    text: str = str(text_node)
    m: re.Match[str] | None = _EDGES.fullmatch(text)
    if m is None:
        return [text_node]
    leading, body, trailing = m.group(1), m.group(2), m.group(3)
    rendered: str = renderer.render(body)
    if rendered == html.escape(body, quote=False):
        return [text_node]
    replacement: list[PageElement] = []
    if leading:
        replacement.append(NavigableString(leading))
    replacement.extend(ctx.document.parse_fragment(rendered))
    if trailing:
        replacement.append(NavigableString(trailing))
    text_node.replace_with(*replacement)
    return [n for n in replacement if is_text(n) and isinstance(n, NavigableString)]


def render_text_runs(
    ctx: CompileContext,
    root: Tag,
    *,
    clause: Clause | None = None,
    renderer: InlineRenderer | None = None,
    in_alg: bool = False,
    current_id: str | None = None,
) -> int:
    """Render and register the text runs owned by ``root``.

    Args:
        ctx (CompileContext): The compile context (document, text-run registry).
        root (Tag): The clause element (or the document root for text outside
            any clause).
        clause (Clause | None): The clause owning ``root``.
        renderer (InlineRenderer | None): The renderer; None only registers.
        in_alg (bool): Recorded on each registered run.
        current_id (str | None): Recorded on each registered run.

    Returns:
        int: The number of text runs registered.
    """
    namespace: str = clause.namespace if clause is not None else ctx.biblio.root_namespace
    registered: int = 0
    for text_node in _owned_text_nodes(root):
        if _BLANK.fullmatch(str(text_node)):
            continue
        survivors: list[NavigableString] = (
            [text_node] if renderer is None else _render_run(ctx, text_node, renderer)
        )
        for survivor in survivors:
            if _BLANK.fullmatch(str(survivor)):
                continue
            ctx.register_text_run(TextRun(survivor, clause, namespace, in_alg, current_id))
            registered += 1
    logger.trace("Registered %d text runs for %s", registered, clause.id if clause else "<root>")
    return registered
