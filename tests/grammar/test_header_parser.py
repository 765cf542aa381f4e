# topmark:header:start
#
#   project      : SpecMark
#   file         : test_header_parser.py
#   file_relpath : tests/grammar/test_header_parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the structured header parser (`specmark.grammar.header_parser`).

Offsets are checked by slicing the original source: every recorded type
offset must point at the verbatim type text.
"""

from __future__ import annotations

from specmark.grammar.header_parser import (
    HeaderParseFailure,
    ParsedHeader,
    parse_header,
)
from tests.conftest import parametrize


def _ok(source: str) -> ParsedHeader:
    parsed: ParsedHeader | HeaderParseFailure = parse_header(source)
    assert isinstance(parsed, ParsedHeader), parsed
    return parsed


def test_single_line_header() -> None:
    source = "Example.Op ( _x_: a Number, _y_ [ , _z_: a String ] ): a Number"
    parsed: ParsedHeader = _ok(source)

    assert parsed.name == "Example.Op"
    assert [p.name for p in parsed.params] == ["x", "y"]
    assert [p.type for p in parsed.params] == ["a Number", None]
    assert [p.name for p in parsed.optional_params] == ["z"]
    assert parsed.optional_params[0].type == "a String"
    assert parsed.return_type == "a Number"
    assert parsed.prefix is None
    assert parsed.wrapping_tag is None

    for p in (*parsed.params, *parsed.optional_params):
        if p.type is not None:
            assert source[p.type_offset : p.type_offset + len(p.type)] == p.type
    assert parsed.return_type is not None
    assert (
        source[parsed.return_offset : parsed.return_offset + len(parsed.return_type)]
        == parsed.return_type
    )


def test_multiline_header_with_wrapped_parameter() -> None:
    source = (
        "\n"
        "  Foo (\n"
        "    _x_: a Number,\n"
        "    <del>_y_: a String,</del>\n"
        "    optional _z_: a String,\n"
        "  ): a Number\n"
    )
    parsed: ParsedHeader = _ok(source)

    assert parsed.name == "Foo"
    assert [(p.name, p.type, p.wrapping_tag) for p in parsed.params] == [
        ("x", "a Number", None),
        ("y", "a String", "del"),
    ]
    assert [(p.name, p.type) for p in parsed.optional_params] == [("z", "a String")]
    assert parsed.return_type == "a Number"


def test_prefix_and_empty_parameter_list() -> None:
    parsed: ParsedHeader = _ok("Static Semantics: StringValue ( )")
    assert parsed.prefix == "Static Semantics: "
    assert parsed.name == "StringValue"
    assert parsed.params == ()
    assert parsed.optional_params == ()
    assert parsed.return_type is None


def test_whole_header_wrapper() -> None:
    parsed: ParsedHeader = _ok("<ins>Foo ( _x_ )</ins>")
    assert parsed.wrapping_tag == "ins"
    assert parsed.name == "Foo"
    assert [p.name for p in parsed.params] == ["x"]


def test_record_type_commas_do_not_split_parameters() -> None:
    parsed: ParsedHeader = _ok(
        "Foo ( _r_: a Record with fields [[A]] (a Number), [[B]] (a String) )"
    )
    assert len(parsed.params) == 1
    assert parsed.params[0].type == "a Record with fields [[A]] (a Number), [[B]] (a String)"


@parametrize(
    "source, message, offset",
    [
        ("Foo", "expected '('", 3),
        ("Foo ( _x_", "unterminated parameter list", 9),
        ("Foo ( _x_ ) trailing", "unexpected text", 12),
        ("Foo ( optional _x_, _y_ )", "follows an optional parameter", None),
        ("Foo ( x )", "parameter name", 6),
        ("Foo ( _x_: )", "expected a type", None),
    ],
)
def test_failures_are_values(source: str, message: str, offset: int | None) -> None:
    parsed: ParsedHeader | HeaderParseFailure = parse_header(source)
    assert isinstance(parsed, HeaderParseFailure)
    assert message in parsed.message
    if offset is not None:
        assert parsed.offset == offset
