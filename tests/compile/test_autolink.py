# topmark:header:start
#
#   project      : SpecMark
#   file         : test_autolink.py
#   file_relpath : tests/compile/test_autolink.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for operation cross-linking (`specmark.autolink`)."""

from __future__ import annotations

import re

from specmark.autolink import aoid_pattern, autolink
from specmark.biblio import OpEntry
from specmark.context import CompileContext
from specmark.document import Document
from specmark.inline import render_text_runs
from tests.conftest import parametrize


def test_empty_set_has_no_pattern() -> None:
    assert aoid_pattern(set()) is None


@parametrize(
    "text, expected",
    [
        ("call A.B now", ["A.B"]),
        ("A then A.B", ["A", "A.B"]),
        ("xA and A2 and .A and :A", []),
        ("($A) %A A%", []),
        ("(A)", ["A"]),
    ],
)
def test_pattern_matches_whole_words_longest_first(text: str, expected: list[str]) -> None:
    pattern: re.Pattern[str] | None = aoid_pattern({"A", "A.B"})
    assert pattern is not None
    assert [m.group() for m in pattern.finditer(text)] == expected


def _context(html: str) -> CompileContext:
    ctx = CompileContext(document=Document(html))
    for aoid in ("Foo", "FooBar"):
        ctx.biblio.add(OpEntry(aoid=aoid, ref_id=f"sec-{aoid.lower()}"), "spec")
    render_text_runs(ctx, ctx.document.soup)
    return ctx


def test_autolink_wraps_references() -> None:
    ctx = _context("<p>FooBar calls Foo and Foo2 and x.Foo</p>")

    assert autolink(ctx) == 2
    assert ctx.document.to_html() == (
        '<p><emu-xref aoid="FooBar">FooBar</emu-xref> calls '
        '<emu-xref aoid="Foo">Foo</emu-xref> and Foo2 and x.Foo</p>'
    )


def test_detached_runs_are_skipped() -> None:
    ctx = _context("<p>Foo</p>")
    for run in ctx.text_runs["spec"]:
        run.node.extract()

    assert autolink(ctx) == 0


def test_nothing_to_link() -> None:
    ctx = CompileContext(document=Document("<p>Foo</p>"))
    render_text_runs(ctx, ctx.document.soup)

    assert autolink(ctx) == 0
    assert ctx.document.to_html() == "<p>Foo</p>"
