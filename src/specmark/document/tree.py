# topmark:header:start
#
#   project      : SpecMark
#   file         : tree.py
#   file_relpath : src/specmark/document/tree.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document tree backed by BeautifulSoup, with source positions.

`Document` parses the authoring markup with the ``html.parser`` backend
(which records where each start tag begins) and keeps the original source
text. `Document.locate` recovers the offsets of an element's start and end
tags in that source, so header text can be sliced verbatim and parse errors
reported against the original line and column.

The navigation helpers mirror the DOM operations the compiler needs
(first element child, next element sibling, skipping wrappers).
"""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from bs4.element import PageElement

    from specmark.config.logging import SpecmarkLogger

logger: SpecmarkLogger = get_logger(__name__)

VOID_ELEMENTS: Final[frozenset[str]] = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "wbr"}
)


@dataclass(frozen=True)
class SourceLocation:
    """Offsets of an element in the original source.

    Attributes:
        start_tag_start: Offset of the ``<`` opening the start tag.
        start_tag_end: Offset just past the start tag's ``>``.
        end_tag_start: Offset of ``</`` closing the element, or None when the
            element has no end tag in the source.
    """

    start_tag_start: int
    start_tag_end: int
    end_tag_start: int | None


def _end_of_start_tag(source: str, start: int) -> int:
    """Return the offset just past the ``>`` closing the start tag at ``start``."""
    quote: str | None = None
    i: int = start + 1
    while i < len(source):
        ch: str = source[i]
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == ">":
            return i + 1
        i += 1
    return len(source)


def _matching_end_tag(source: str, name: str, start: int) -> int | None:
    """Return the offset of the end tag balancing an element opened before ``start``."""
    pattern: re.Pattern[str] = re.compile(
        rf"<(/?){re.escape(name)}(?=[\s/>])[^>]*>", re.IGNORECASE
    )
    depth: int = 1
    for m in pattern.finditer(source, start):
        if m.group(1):
            depth -= 1
            if depth == 0:
                return m.start()
        elif not m.group(0).endswith("/>"):
            depth += 1
    return None


class Document:
    """A parsed document plus its original source.

    Args:
        source: The authoring markup.
    """

    def __init__(self, source: str) -> None:
        self.source: str = source
        self.soup: BeautifulSoup = BeautifulSoup(source, "html.parser")
        self._line_starts: list[int] = [0] + [m.end() for m in re.finditer("\n", source)]

    # --- positions ---

    def line_and_column(self, offset: int) -> tuple[int, int]:
        """Map a source offset to a 1-based ``(line, column)`` pair."""
        offset = max(0, min(offset, len(self.source)))
        line_index: int = bisect.bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    def locate(self, tag: Tag) -> SourceLocation | None:
        """Return where ``tag`` sits in the original source.

        Returns None for elements that were created after parsing or whose
        recorded position does not point at their start tag.
        """
        line: int | None = tag.sourceline
        column: int | None = tag.sourcepos
        if line is None or column is None or line > len(self._line_starts):
            return None
        start: int = self._line_starts[line - 1] + column
        name: str = tag.name
        if self.source[start + 1 : start + 1 + len(name)].lower() != name:
            logger.debug("Recorded position of <%s> does not match the source", name)
            return None
        start_end: int = _end_of_start_tag(self.source, start)
        end_start: int | None = None
        if name not in VOID_ELEMENTS and not self.source[start:start_end].endswith("/>"):
            end_start = _matching_end_tag(self.source, name, start_end)
        return SourceLocation(start, start_end, end_start)

    def inner_source(self, tag: Tag) -> tuple[str, int] | None:
        """Return the verbatim source between ``tag``'s start and end tags.

        Returns:
            ``(text, offset)`` where ``offset`` is the source offset of the first
            character of ``text``, or None when the element cannot be located.
        """
        loc: SourceLocation | None = self.locate(tag)
        if loc is None or loc.end_tag_start is None:
            return None
        return self.source[loc.start_tag_end : loc.end_tag_start], loc.start_tag_end

    # --- construction ---

    def new_tag(self, name: str, text: str | None = None, **attrs: str) -> Tag:
        """Create a detached element owned by this document."""
        tag: Tag = self.soup.new_tag(name, attrs=attrs)
        if text is not None:
            tag.append(NavigableString(text))
        return tag

    def parse_fragment(self, html: str) -> list[PageElement]:
        """Parse ``html`` and return its top-level nodes, detached."""
        fragment = BeautifulSoup(html, "html.parser")
        return [node.extract() for node in list(fragment.contents)]

    def to_html(self) -> str:
        """Serialize the (possibly modified) tree."""
        return str(self.soup)


# --- navigation helpers ---


def is_text(node: PageElement) -> bool:
    """Return True for plain text nodes (not comments, doctypes or CDATA)."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def element_children(tag: Tag) -> list[Tag]:
    """Return the element children of ``tag``, in order."""
    return [child for child in tag.children if isinstance(child, Tag)]


def first_element_child(tag: Tag | None) -> Tag | None:
    """Return the first element child of ``tag``, if any."""
    if tag is None:
        return None
    children: list[Tag] = element_children(tag)
    return children[0] if children else None


def next_element_sibling(tag: Tag | None) -> Tag | None:
    """Return the next sibling of ``tag`` that is an element, if any."""
    if tag is None:
        return None
    sibling: PageElement | None = tag.next_sibling
    while sibling is not None and not isinstance(sibling, Tag):
        sibling = sibling.next_sibling
    return sibling


def traverse_while(
    node: Tag | None,
    step: Callable[[Tag | None], Tag | None],
    predicate: Callable[[Tag], bool],
    *,
    once: bool = False,
) -> Tag | None:
    """Follow ``step`` from ``node`` while ``predicate`` holds.

    With ``once=True`` at most one step is taken.

    Example:
        Skip ``<del>`` siblings: ``traverse_while(el, next_element_sibling,
        lambda t: t.name == "del")``.
    """
    while node is not None and predicate(node):
        node = step(node)
        if once:
            break
    return node


def has_class(tag: Tag, class_name: str) -> bool:
    """Return True if ``tag`` carries ``class_name`` in its class list."""
    classes: str | list[str] | None = tag.get("class")  # type: ignore[assignment]
    if classes is None:
        return False
    if isinstance(classes, str):
        classes = classes.split()
    return class_name in classes


def attr(tag: Tag, name: str) -> str | None:
    """Return attribute ``name`` as a string (None when absent)."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)
