# topmark:header:start
#
#   project      : SpecMark
#   file         : test_compile_document.py
#   file_relpath : tests/compile/test_compile_document.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""End-to-end tests for `specmark.compiler.compile_document`.

Each test compiles a small authoring document and checks the clause tree,
the bibliography, the effect worklist, the diagnostics and the serialized
HTML.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from specmark.compiler import compile_document
from specmark.core.errors import MissingHeaderError
from specmark.core.kinds import ClauseKind
from specmark.diagnostic import RuleId
from specmark.grammar.types import NamedType, Parameter
from tests.conftest import mark_integration
from tests.helpers import compile_html, find_clause, only, rule_ids

if TYPE_CHECKING:
    from specmark.biblio import ClauseEntry, OpEntry
    from specmark.compiler import CompileResult


NUMBERED_DOC = """\
<emu-intro id="sec-intro"><h1>Introduction</h1><p>Welcome.</p></emu-intro>
<emu-clause id="sec-one"><h1>One</h1></emu-clause>
<emu-clause id="sec-two"><h1>Two</h1></emu-clause>
<emu-clause id="sec-three"><h1>Three</h1>
  <emu-clause id="sec-three-a"><h1>Three A</h1></emu-clause>
  <emu-clause id="sec-three-b"><h1>Three B</h1></emu-clause>
</emu-clause>
<emu-clause id="sec-four"><h1>Four</h1>
  <emu-clause id="sec-four-a"><h1>Four A</h1></emu-clause>
</emu-clause>
"""

ANNEX_DOC = """\
<emu-clause id="sec-main"><h1>Main</h1></emu-clause>
<emu-annex id="annex-a" normative><h1>First Annex</h1>
  <emu-annex id="annex-a-1"><h1>Sub</h1>
    <emu-annex id="annex-a-1-1"><h1>Sub Sub</h1></emu-annex>
  </emu-annex>
</emu-annex>
<emu-annex id="annex-b"><h1>Second Annex</h1></emu-annex>
"""

EXAMPLE_OP_DOC = """\
<emu-clause id="sec-example-op" type="abstract operation">
  <h1>Example.Op ( _x_: a Number, _y_ [ , _z_: a String ] ): a Number</h1>
  <dl class="header">
    <dt>description</dt><dd>It does an example.</dd>
  </dl>
  <emu-alg>1. Return _x_.</emu-alg>
</emu-clause>
"""


@mark_integration
def test_clause_numbering() -> None:
    result: CompileResult = compile_html(NUMBERED_DOC)

    numbers: dict[str, str] = {
        cid: find_clause(result.clauses, cid).number
        for cid in (
            "sec-intro",
            "sec-one",
            "sec-two",
            "sec-three",
            "sec-three-a",
            "sec-three-b",
            "sec-four",
            "sec-four-a",
        )
    }
    assert numbers == {
        "sec-intro": "",
        "sec-one": "1",
        "sec-two": "2",
        "sec-three": "3",
        "sec-three-a": "3.1",
        "sec-three-b": "3.2",
        "sec-four": "4",
        "sec-four-a": "4.1",
    }
    assert len(result.diagnostics) == 0

    html: str = result.to_html()
    assert '<span class="secnum">3.2</span> Three B' in html
    assert "Introduction</h1>" in html
    assert '<h1><span class="secnum">' not in html.split("</emu-intro>")[0]

    entry: ClauseEntry | None = result.biblio.lookup_clause("sec-three-b")
    assert entry is not None
    assert (entry.number, entry.title) == ("3.2", "Three B")


@mark_integration
def test_clause_tree_shape_and_parent_links() -> None:
    result: CompileResult = compile_html(NUMBERED_DOC)

    assert [c.id for c in result.clauses] == [
        "sec-intro",
        "sec-one",
        "sec-two",
        "sec-three",
        "sec-four",
    ]
    three = find_clause(result.clauses, "sec-three")
    assert [c.id for c in three.subclauses] == ["sec-three-a", "sec-three-b"]
    assert three.subclauses[0].parent is three
    assert three.parent is None


@mark_integration
def test_clauses_inside_an_introduction_are_not_numbered() -> None:
    result: CompileResult = compile_html(
        '<emu-intro id="sec-intro"><h1>Introduction</h1>\n'
        '  <emu-clause id="sec-scope"><h1>Scope</h1></emu-clause>\n'
        "</emu-intro>\n"
        '<emu-clause id="sec-one"><h1>One</h1>\n'
        '  <emu-clause id="sec-one-a"><h1>One A</h1></emu-clause>\n'
        "</emu-clause>\n"
    )
    assert len(result.diagnostics) == 0

    scope = find_clause(result.clauses, "sec-scope")
    assert scope.number == ""
    assert scope.parent is find_clause(result.clauses, "sec-intro")
    assert find_clause(result.clauses, "sec-one").number == "1"
    assert find_clause(result.clauses, "sec-one-a").number == "1.1"

    entry: ClauseEntry | None = result.biblio.lookup_clause("sec-scope")
    assert entry is not None and entry.number == ""
    assert '<span class="secnum">' not in result.to_html().split("</emu-intro>")[0]


@mark_integration
def test_annex_numbering() -> None:
    result: CompileResult = compile_html(ANNEX_DOC)

    annex_a = find_clause(result.clauses, "annex-a")
    annex_a1 = find_clause(result.clauses, "annex-a-1")
    annex_a11 = find_clause(result.clauses, "annex-a-1-1")
    annex_b = find_clause(result.clauses, "annex-b")
    assert [annex_a.number, annex_a1.number, annex_a11.number, annex_b.number] == [
        "A",
        "A.1",
        "A.1.1",
        "B",
    ]
    assert annex_a.secnum_label() == "Annex A (normative)"
    assert annex_b.secnum_label() == "Annex B (informative)"
    assert annex_a1.secnum_label() == "A.1"
    assert len(result.diagnostics) == 0

    html: str = result.to_html()
    assert '<span class="annex-kind">(normative)</span>' in html
    assert '<span class="secnum">A.1.1</span> Sub Sub' in html


@mark_integration
def test_clause_after_annex_warns() -> None:
    result: CompileResult = compile_html(ANNEX_DOC + '<emu-clause id="sec-late"><h1>Late</h1></emu-clause>')
    assert rule_ids(result) == [RuleId.CLAUSE_AFTER_ANNEX]
    assert find_clause(result.clauses, "sec-late").number == "2"


@mark_integration
def test_aoid_attribute_forms() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-foo" aoid="Foo"><h1>Foo ( )</h1></emu-clause>\n'
        '<emu-clause id="sec-bar" aoid><h1>Bar</h1></emu-clause>\n'
    )
    foo: OpEntry | None = result.biblio.lookup_op("Foo")
    bar: OpEntry | None = result.biblio.lookup_op("sec-bar")
    assert foo is not None and foo.ref_id == "sec-foo"
    assert bar is not None and bar.ref_id == "sec-bar"
    assert foo.kind is None
    assert foo.signature is None


@mark_integration
def test_structured_header_signature() -> None:
    result: CompileResult = compile_html(EXAMPLE_OP_DOC)
    assert len(result.diagnostics) == 0

    op: OpEntry | None = result.biblio.lookup_op("Example.Op")
    assert op is not None
    assert op.ref_id == "sec-example-op"
    assert op.kind is ClauseKind.ABSTRACT_OPERATION
    assert op.signature is not None
    assert op.signature.parameters == (
        Parameter("x", NamedType("Number")),
        Parameter("y", None),
    )
    assert op.signature.optional_parameters == (Parameter("z", NamedType("String")),)
    assert op.signature.return_type == NamedType("Number")

    clause = find_clause(result.clauses, "sec-example-op")
    assert clause.aoid == "Example.Op"
    assert clause.title == "Example.Op ( x, y [ , z ] )"

    html: str = result.to_html()
    assert 'aoid="Example.Op"' in html
    assert "Example.Op ( <var>x</var>, <var>y</var> [ , <var>z</var> ] )</h1>" in html
    assert '<dl class="header">' not in html
    assert (
        "The abstract operation Example.Op takes arguments <var>x</var> (a Number) and "
        "<var>y</var> and optional argument <var>z</var> (a String) and returns a Number. "
        "It does an example. It performs the following steps when called:"
    ) in html


@mark_integration
def test_completion_union_is_reported_once_and_entry_kept() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-maybe" type="abstract operation">\n'
        "  <h1>MaybeThrow ( ): a Number or a throw completion</h1>\n"
        '  <dl class="header"></dl>\n'
        "</emu-clause>\n"
    )
    only(result.diagnostics.by_rule(RuleId.COMPLETION_UNION))
    assert result.biblio.lookup_op("MaybeThrow") is not None


@mark_integration
def test_duplicate_aoid() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-dup-1" aoid="Dup"><h1>Dup</h1></emu-clause>\n'
        '<emu-clause id="sec-dup-2" aoid="Dup"><h1>Dup again</h1></emu-clause>\n'
    )
    only(result.diagnostics.by_rule(RuleId.DUPLICATE_DEFINITION))

    op: OpEntry | None = result.biblio.lookup_op("Dup")
    assert op is not None and op.ref_id == "sec-dup-1"
    assert result.biblio.lookup_clause("sec-dup-1") is not None
    assert result.biblio.lookup_clause("sec-dup-2") is not None
    ops = [e for e in result.biblio.entries("spec") if e.type == "op"]
    assert len(ops) == 1


@mark_integration
def test_same_aoid_in_sibling_namespaces_is_not_a_duplicate() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-a" namespace="a"><h1>A</h1>'
        '<emu-clause id="sec-a-op" aoid="Op"><h1>Op</h1></emu-clause></emu-clause>\n'
        '<emu-clause id="sec-b" namespace="b"><h1>B</h1>'
        '<emu-clause id="sec-b-op" aoid="Op"><h1>Op</h1></emu-clause></emu-clause>\n'
    )
    assert result.diagnostics.by_rule(RuleId.DUPLICATE_DEFINITION) == []
    a_op: OpEntry | None = result.biblio.lookup_op("Op", "a")
    b_op: OpEntry | None = result.biblio.lookup_op("Op", "b")
    assert a_op is not None and a_op.ref_id == "sec-a-op"
    assert b_op is not None and b_op.ref_id == "sec-b-op"
    assert result.biblio.lookup_op("Op") is None


@mark_integration
def test_static_semantics_cannot_carry_user_code() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-ss"><h1>Static Semantics: Foo</h1></emu-clause>\n'
        '<emu-clause id="sec-rt"><h1>Runtime Semantics: Foo</h1></emu-clause>\n'
    )
    ss, rt = result.clauses
    assert not ss.can_have_effect("user-code")
    assert ss.can_have_effect("other-effect")
    assert rt.can_have_effect("user-code")


@mark_integration
def test_effects_are_collected_in_document_order() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-call" type="abstract operation">\n'
        "  <h1>Call ( _f_ )</h1>\n"
        '  <dl class="header"><dt>effects</dt><dd>user-code</dd></dl>\n'
        "</emu-clause>\n"
        '<emu-clause id="sec-weird" type="abstract operation">\n'
        "  <h1>Weird ( )</h1>\n"
        '  <dl class="header"><dt>effects</dt><dd>user-code, teleport</dd></dl>\n'
        "</emu-clause>\n"
    )
    assert [c.id for c in result.effects.clauses_for("user-code")] == ["sec-call", "sec-weird"]
    assert [c.id for c in result.effects.clauses_for("teleport")] == ["sec-weird"]
    only(result.diagnostics.by_rule(RuleId.UNKNOWN_EFFECT))

    call: OpEntry | None = result.biblio.lookup_op("Call")
    assert call is not None and call.effects == ("user-code",)


@mark_integration
def test_nested_clause_effects_follow_document_order() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-outer" type="abstract operation">\n'
        "  <h1>Outer ( _f_ )</h1>\n"
        '  <dl class="header"><dt>effects</dt><dd>user-code</dd></dl>\n'
        '  <emu-clause id="sec-inner" type="abstract operation">\n'
        "    <h1>Inner ( _g_ )</h1>\n"
        '    <dl class="header"><dt>effects</dt><dd>user-code</dd></dl>\n'
        "  </emu-clause>\n"
        "</emu-clause>\n"
        '<emu-clause id="sec-after" type="abstract operation">\n'
        "  <h1>After ( )</h1>\n"
        '  <dl class="header"><dt>effects</dt><dd>user-code</dd></dl>\n'
        "</emu-clause>\n"
    )
    declaring = result.effects.clauses_for("user-code")
    assert [c.id for c in declaring] == ["sec-outer", "sec-inner", "sec-after"]
    assert [c.position for c in declaring] == [0, 1, 2]


@mark_integration
def test_known_effects_come_from_config() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-weird" type="abstract operation">\n'
        "  <h1>Weird ( )</h1>\n"
        '  <dl class="header"><dt>effects</dt><dd>teleport</dd></dl>\n'
        "</emu-clause>\n",
        known_effects=["user-code", "teleport"],
    )
    assert result.diagnostics.by_rule(RuleId.UNKNOWN_EFFECT) == []


@mark_integration
def test_notes_are_labeled_by_count() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-notes"><h1>Notes</h1>\n'
        "  <emu-note><p>First.</p></emu-note>\n"
        '  <emu-note id="note-two"><p>Second.</p></emu-note>\n'
        '  <emu-note type="editor"><p>Fix me.</p></emu-note>\n'
        "</emu-clause>\n"
        '<emu-clause id="sec-one-note"><h1>One</h1><emu-note><p>Only.</p></emu-note></emu-clause>\n'
    )
    html: str = result.to_html()
    assert '<span class="note">Note 1</span>' in html
    assert '<span class="note"><a href="#note-two">Note 2</a></span>' in html
    assert '<span class="note">Editor\'s Note</span>' in html
    assert '<span class="note">Note</span><div class="note-contents"><p>Only.</p></div>' in html
    assert len(result.diagnostics) == 0

    notes_clause = find_clause(result.clauses, "sec-notes")
    assert len(notes_clause.notes) == 2
    assert len(notes_clause.editor_notes) == 1


@mark_integration
def test_invalid_note_type_is_reported_and_treated_as_normal() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-n"><h1>N</h1><emu-note type="bogus"><p>x</p></emu-note></emu-clause>'
    )
    only(result.diagnostics.by_rule(RuleId.INVALID_NOTE))
    assert '<span class="note">Note</span>' in result.to_html()


@mark_integration
def test_note_outside_clause_is_built_immediately() -> None:
    result: CompileResult = compile_html("<emu-note><p>Loose.</p></emu-note>")
    assert result.to_html() == (
        '<emu-note><span class="note">Note</span>'
        '<div class="note-contents"><p>Loose.</p></div></emu-note>'
    )


@mark_integration
def test_examples_are_labeled() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-ex"><h1>Ex</h1>\n'
        '  <emu-example caption="Simple"><p>a</p></emu-example>\n'
        "  <emu-example><p>b</p></emu-example>\n"
        "</emu-clause>\n"
    )
    html: str = result.to_html()
    assert "<figure><figcaption>Example 1: Simple</figcaption><p>a</p></figure>" in html
    assert "<figure><figcaption>Example 2</figcaption><p>b</p></figure>" in html


@mark_integration
def test_special_kinds_label() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-old" legacy normative-optional><h1>Old</h1></emu-clause>'
    )
    assert '<div class="attributes-tag">Normative Optional, Legacy</div>' in result.to_html()


@mark_integration
def test_missing_id_and_header_are_reported() -> None:
    result: CompileResult = compile_html(
        "<emu-clause><h1>No id</h1></emu-clause>\n"
        '<emu-clause id="sec-p"><p>No header.</p></emu-clause>\n'
        '<emu-clause id="sec-empty"></emu-clause>\n'
    )
    assert rule_ids(result) == [
        RuleId.MISSING_ID,
        RuleId.MISSING_HEADER,
        RuleId.MISSING_HEADER,
    ]
    assert find_clause(result.clauses, "sec-p").title == "UNKNOWN"
    entry: ClauseEntry | None = result.biblio.lookup_clause("sec-empty")
    assert entry is not None and entry.number == "3"


@mark_integration
def test_header_after_del_and_placeholder_span() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-x"><span id="old-id"></span><del>Old</del><h1>Current</h1></emu-clause>'
    )
    assert len(result.diagnostics) == 0
    assert find_clause(result.clauses, "sec-x").title == "Current"


@mark_integration
def test_strict_headers_raise() -> None:
    with pytest.raises(MissingHeaderError) as exc_info:
        compile_html('<emu-clause id="sec-empty"></emu-clause>', strict_headers=True)
    assert exc_info.value.clause_id == "sec-empty"


@mark_integration
def test_namespaces_scope_autolinks() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-outer" aoid="Outer"><h1>Outer</h1>\n'
        '  <emu-clause id="sec-inner" namespace="inner" aoid="Inner"><h1>Inner</h1>\n'
        "    <p>Calls Outer and Inner.</p>\n"
        "  </emu-clause>\n"
        "</emu-clause>\n"
        '<emu-clause id="sec-later"><h1>Later</h1><p>Calls Outer and Inner.</p></emu-clause>\n'
    )
    assert result.biblio.lookup_op("Inner") is None
    assert result.biblio.lookup_op("Inner", "inner") is not None
    assert result.biblio.lookup_op("Outer", "inner") is not None

    html: str = result.to_html()
    assert html.count('<emu-xref aoid="Outer">Outer</emu-xref>') == 2
    assert '<emu-xref aoid="Inner">' not in html


@mark_integration
def test_autolink_can_be_disabled() -> None:
    source = (
        '<emu-clause id="sec-foo" aoid="Foo"><h1>Foo</h1></emu-clause>\n'
        '<emu-clause id="sec-user"><h1>User</h1><p>See Foo.</p></emu-clause>\n'
    )
    assert '<emu-xref aoid="Foo">Foo</emu-xref>' in compile_html(source).to_html()
    assert "<emu-xref" not in compile_html(source, autolink=False).to_html()


@mark_integration
def test_root_namespace_from_config() -> None:
    result: CompileResult = compile_html(
        '<emu-clause id="sec-foo" aoid="Foo"><h1>Foo</h1></emu-clause>', namespace="intl"
    )
    assert result.biblio.root_namespace == "intl"
    assert result.biblio.lookup_op("Foo", "intl") is not None

    data = json.loads(result.biblio_json())
    assert data["root"] == "intl"
    assert [e["type"] for e in data["namespaces"][0]["entries"]] == ["op", "clause"]


@mark_integration
def test_independent_compiles_do_not_share_state() -> None:
    first: CompileResult = compile_document(EXAMPLE_OP_DOC)
    second: CompileResult = compile_document(EXAMPLE_OP_DOC)
    assert second.biblio.lookup_op("Example.Op") is not None
    assert second.diagnostics.by_rule(RuleId.DUPLICATE_DEFINITION) == []
    assert first.biblio is not second.biblio
