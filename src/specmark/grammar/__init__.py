# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/grammar/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Header and type-expression grammars."""

from __future__ import annotations

from specmark.grammar.header_parser import HeaderParseFailure, ParsedHeader, parse_header
from specmark.grammar.type_parser import TypeParser

__all__ = [
    "HeaderParseFailure",
    "ParsedHeader",
    "TypeParser",
    "parse_header",
]
