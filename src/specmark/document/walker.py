# topmark:header:start
#
#   project      : SpecMark
#   file         : walker.py
#   file_relpath : src/specmark/document/walker.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Depth-first document traversal emitting enter/exit events.

`walk` yields an ENTER event when it reaches a clause-like, note or
example element and the matching EXIT event once the element's subtree has
been visited, strictly in document order. Each element's children are
snapshotted before descending, so handlers may rewrite the subtree of the
element they are exiting.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Final

from bs4 import Tag

from specmark.document.tree import attr

if TYPE_CHECKING:
    from collections.abc import Iterator

CLAUSE_ELEMENTS: Final[frozenset[str]] = frozenset({"emu-intro", "emu-clause", "emu-annex"})
NOTE_ELEMENT: Final[str] = "emu-note"
EXAMPLE_ELEMENT: Final[str] = "emu-example"
ALG_ELEMENT: Final[str] = "emu-alg"

EVENT_ELEMENTS: Final[frozenset[str]] = CLAUSE_ELEMENTS | {NOTE_ELEMENT, EXAMPLE_ELEMENT}


class Phase(Enum):
    """Whether an event opens or closes an element."""

    ENTER = "enter"
    EXIT = "exit"


@dataclass(frozen=True)
class WalkEvent:
    """One traversal event.

    Attributes:
        phase: ENTER or EXIT.
        node: The element being entered or exited.
        in_alg: True when the element sits inside an ``emu-alg``.
        current_id: The id of the nearest enclosing element carrying one.
    """

    phase: Phase
    node: Tag
    in_alg: bool = False
    current_id: str | None = None


def walk(root: Tag) -> Iterator[WalkEvent]:
    """Yield enter/exit events for every event element under ``root``."""
    yield from _walk_children(root, in_alg=False, current_id=attr(root, "id"))


def _walk_children(parent: Tag, *, in_alg: bool, current_id: str | None) -> Iterator[WalkEvent]:
    for child in list(parent.children):
        if not isinstance(child, Tag):
            continue
        child_id: str | None = attr(child, "id") or current_id
        child_in_alg: bool = in_alg or child.name == ALG_ELEMENT
        if child.name in EVENT_ELEMENTS:
            yield WalkEvent(Phase.ENTER, child, in_alg, child_id)
            yield from _walk_children(child, in_alg=child_in_alg, current_id=child_id)
            yield WalkEvent(Phase.EXIT, child, in_alg, child_id)
        else:
            yield from _walk_children(child, in_alg=child_in_alg, current_id=child_id)
