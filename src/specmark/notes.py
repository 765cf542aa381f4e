# topmark:header:start
#
#   project      : SpecMark
#   file         : notes.py
#   file_relpath : src/specmark/notes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Notes and examples attached to clauses.

``<emu-note>`` and ``<emu-example>`` elements are collected onto the
innermost enclosing clause when they are entered, and built when that
clause exits, because their labels depend on how many siblings they have:

    * a single note renders as ``Note``; two or more as ``Note 1``, ``Note 2``...
    * editor's notes (``type="editor"``) always render as ``Editor's Note``;
    * examples follow the note rule on their own (``Example``, ``Example 1``...),
      with an optional ``caption`` appended to the label.

A note or example outside any clause is built immediately, unlabeled.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from specmark.config.logging import get_logger
from specmark.document.tree import attr

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bs4 import Tag

    from specmark.config.logging import SpecmarkLogger
    from specmark.document.tree import Document

logger: SpecmarkLogger = get_logger(__name__)


class NoteType(Enum):
    """The ``type`` attribute of an ``<emu-note>``."""

    NORMAL = "normal"
    EDITOR = "editor"


def _wrap_children(document: Document, node: Tag, name: str, class_name: str | None) -> Tag:
    attrs: dict[str, str] = {"class": class_name} if class_name else {}
    wrapper: Tag = document.new_tag(name, **attrs)
    for child in list(node.contents):
        wrapper.append(child.extract())
    node.append(wrapper)
    return wrapper


def _label_element(document: Document, name: str, label: str, target_id: str | None) -> Tag:
    attrs: dict[str, str] = {"class": "note"} if name == "span" else {}
    if target_id is None:
        return document.new_tag(name, label, **attrs)
    outer: Tag = document.new_tag(name, **attrs)
    outer.append(document.new_tag("a", label, href=f"#{target_id}"))
    return outer


class Note:
    """An ``<emu-note>`` awaiting its label.

    Args:
        document: The owning document (used to create elements).
        node: The ``<emu-note>`` element.
        note_type: Normal or editor's note.
    """

    def __init__(self, document: Document, node: Tag, note_type: NoteType = NoteType.NORMAL) -> None:
        self.document: Document = document
        self.node: Tag = node
        self.note_type: NoteType = note_type
        self.id: str | None = attr(node, "id")

    def label(self, number: int | None = None) -> str:
        """Return the label text for this note."""
        if self.note_type is NoteType.EDITOR:
            return "Editor's Note"
        return "Note" if number is None else f"Note {number}"

    def build(self, number: int | None = None) -> None:
        """Wrap the note body and prepend its label."""
        _wrap_children(self.document, self.node, "div", "note-contents")
        self.node.insert(0, _label_element(self.document, "span", self.label(number), self.id))
        logger.trace("Built %s", self.label(number))


class Example:
    """An ``<emu-example>`` awaiting its label.

    The optional ``caption`` attribute is appended to the label as
    ``Example 2: <caption>``.
    """

    def __init__(self, document: Document, node: Tag) -> None:
        self.document: Document = document
        self.node: Tag = node
        self.id: str | None = attr(node, "id")
        self.caption: str | None = attr(node, "caption")

    def label(self, number: int | None = None) -> str:
        """Return the label text for this example."""
        text: str = "Example" if number is None else f"Example {number}"
        if self.caption:
            text = f"{text}: {self.caption}"
        return text

    def build(self, number: int | None = None) -> None:
        """Wrap the example in a ``<figure>`` captioned with its label."""
        figure: Tag = _wrap_children(self.document, self.node, "figure", None)
        figure.insert(0, _label_element(self.document, "figcaption", self.label(number), self.id))
        logger.trace("Built %s", self.label(number))


def build_numbered(items: Sequence[Note] | Sequence[Example]) -> None:
    """Build ``items`` unlabeled when alone, numbered from 1 otherwise."""
    if len(items) == 1:
        items[0].build()
        return
    for index, item in enumerate(items, start=1):
        item.build(index)
