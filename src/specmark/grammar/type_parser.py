# topmark:header:start
#
#   project      : SpecMark
#   file         : type_parser.py
#   file_relpath : src/specmark/grammar/type_parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Recursive-descent parser for the prose type notation used in headers.

Supported forms (articles are optional and ignored):

    a Number                                   -> NamedType("Number")
    a List of Strings                          -> ListType(NamedType("String"))
    a Record with fields [[A]] (a Number) and [[B]] (a String)
    either a String, a Symbol, or undefined    -> UnionType(...)
    a Completion Record | a Number             -> UnionType(...)
    a Completion Record                        -> CompletionType(MIXED)
    a normal completion containing a Number    -> CompletionType(NORMAL, Number)
    a throw completion                         -> CompletionType(ABRUPT)

Inside ``List of`` the element is written in the plural and is singularized.
A union made only of completions collapses into a single `CompletionType`.
Failures raise `ParseError` with an offset into the parsed string. Prose
qualifiers such as ``but not a Number`` are not types and fail too.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from specmark.config.logging import get_logger
from specmark.core.errors import ParseError
from specmark.grammar.types import (
    CompletionKind,
    CompletionType,
    ListType,
    NamedType,
    RecordField,
    RecordType,
    UnionType,
)

if TYPE_CHECKING:
    from specmark.config.logging import SpecmarkLogger
    from specmark.grammar.types import Type

logger: SpecmarkLogger = get_logger(__name__)

_ALT_SEP: Final[re.Pattern[str]] = re.compile(r"\s*\|\s*|\s*,\s*(?:or\b\s*)?|\s+or\b\s*")
_EITHER: Final[re.Pattern[str]] = re.compile(r"either\s+")
_ARTICLE: Final[re.Pattern[str]] = re.compile(r"an?\s+")
_LIST_OF: Final[re.Pattern[str]] = re.compile(r"Lists?\s+of\s+")
_RECORD_WITH_FIELDS: Final[re.Pattern[str]] = re.compile(r"Records?\s+with\s+fields\s+")
_COMPLETION_RECORD: Final[re.Pattern[str]] = re.compile(r"Completion\s+Records?\b")
_COMPLETION: Final[re.Pattern[str]] = re.compile(
    r"(normal|abrupt|throw|return|break|continue)\s+completions?\b"
)
_CONTAINING: Final[re.Pattern[str]] = re.compile(r"\s+containing\s+")
_FIELD_NAME: Final[re.Pattern[str]] = re.compile(r"\[\[([^\]\s]+)\]\]")
_FIELD_SEP: Final[re.Pattern[str]] = re.compile(r"\s*(?:,\s*)?(?:and\s+)?(?=\[\[)")
_OPEN_PAREN: Final[re.Pattern[str]] = re.compile(r"\(")
_CLOSE_PAREN: Final[re.Pattern[str]] = re.compile(r"\)")
_WS: Final[re.Pattern[str]] = re.compile(r"\s+")
_NAME_WORD: Final[re.Pattern[str]] = re.compile(r"[^\s,|()]+")

_STOP_WORDS: Final[frozenset[str]] = frozenset({"or", "and", "but"})
_VERBATIM_DELIMITERS: Final[str] = "~*%"


def singularize(name: str) -> str:
    """Return the singular of a plural type name (``"Property Descriptors"``).

    Only the last word is changed. Literal names such as ``~empty~`` are kept.
    """
    if name[:1] in _VERBATIM_DELIMITERS:
        return name
    head, _, last = name.rpartition(" ")
    if last.endswith("ies") and len(last) > 3:
        last = last[:-3] + "y"
    elif last.endswith("s") and not last.endswith("ss"):
        last = last[:-1]
    return f"{head} {last}" if head else last


def make_union(alternatives: list[Type]) -> Type:
    """Combine alternatives into a single type.

    Nested unions are flattened. A single alternative is returned as is, and
    alternatives that are all completions collapse into one `CompletionType`
    keeping the first declared normal value type.
    """
    flat: list[Type] = []
    for alt in alternatives:
        if isinstance(alt, UnionType):
            flat.extend(alt.types)
        else:
            flat.append(alt)
    if len(flat) == 1:
        return flat[0]
    completions: list[CompletionType] = [t for t in flat if isinstance(t, CompletionType)]
    if len(completions) == len(flat):
        kinds: set[CompletionKind] = {c.completion for c in completions}
        merged: CompletionKind = kinds.pop() if len(kinds) == 1 else CompletionKind.MIXED
        value: Type | None = next((c.value for c in completions if c.value is not None), None)
        return CompletionType(merged, value)
    return UnionType(tuple(flat))


class TypeParser:
    """Parser for one type expression.

    Use the `parse` class method; instances hold the cursor for a single run.
    """

    def __init__(self, text: str) -> None:
        self.text: str = text
        self.pos: int = 0

    @classmethod
    def parse(cls, text: str) -> Type:
        """Compile ``text`` into a `Type`.

        Args:
            text (str): The type expression, e.g. ``"a List of Strings"``.

        Returns:
            Type: The compiled type tree.

        Raises:
            ParseError: If ``text`` is not a valid type expression; the offset
                is relative to ``text``.
        """
        parser = cls(text)
        parser._skip_ws()
        if parser._at_end():
            raise ParseError("expected a type", parser.pos)
        result: Type = parser._parse_alternatives(plural=False)
        parser._skip_ws()
        if not parser._at_end():
            raise ParseError(f"unexpected {parser.text[parser.pos]!r} in type", parser.pos)
        logger.trace("Parsed type %r -> %r", text, result)
        return result

    # --- cursor helpers ---

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _skip_ws(self) -> None:
        self._accept(_WS)

    def _accept(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        m: re.Match[str] | None = pattern.match(self.text, self.pos)
        if m is not None:
            self.pos = m.end()
        return m

    # --- grammar ---

    def _parse_alternatives(self, *, plural: bool) -> Type:
        alternatives: list[Type] = [self._parse_single(plural=plural)]
        while True:
            save: int = self.pos
            if self._accept(_ALT_SEP) is None:
                break
            if self._at_end():
                raise ParseError("expected a type after separator", self.pos)
            if self.text[self.pos] == ")":
                self.pos = save
                break
            alternatives.append(self._parse_single(plural=plural))
        return make_union(alternatives)

    def _parse_single(self, *, plural: bool) -> Type:
        self._skip_ws()
        start: int = self.pos
        if self._accept(_EITHER):
            return self._parse_alternatives(plural=plural)
        if not plural:
            self._accept(_ARTICLE)
        if self._accept(_LIST_OF):
            return ListType(self._parse_single(plural=True))
        if self._accept(_RECORD_WITH_FIELDS):
            return self._parse_record_fields()
        if self._accept(_COMPLETION_RECORD):
            return CompletionType(CompletionKind.MIXED)
        m: re.Match[str] | None = self._accept(_COMPLETION)
        if m is not None:
            if m.group(1) != "normal":
                return CompletionType(CompletionKind.ABRUPT)
            value: Type | None = None
            if self._accept(_CONTAINING):
                value = self._parse_single(plural=False)
            return CompletionType(CompletionKind.NORMAL, value)
        name: str = self._read_name()
        if not name:
            raise ParseError("expected a type", start)
        return NamedType(singularize(name) if plural else name)

    def _read_name(self) -> str:
        words: list[str] = []
        while True:
            save: int = self.pos
            if words and self._accept(_WS) is None:
                break
            m: re.Match[str] | None = _NAME_WORD.match(self.text, self.pos)
            if m is None or m.group() in _STOP_WORDS:
                self.pos = save
                break
            words.append(m.group())
            self.pos = m.end()
        return " ".join(words)

    def _parse_record_fields(self) -> RecordType:
        fields: list[RecordField] = []
        while True:
            self._skip_ws()
            name_match: re.Match[str] | None = self._accept(_FIELD_NAME)
            if name_match is None:
                raise ParseError("expected a record field name like [[Name]]", self.pos)
            self._skip_ws()
            if self._accept(_OPEN_PAREN) is None:
                raise ParseError("expected '(' after record field name", self.pos)
            field_type: Type = self._parse_alternatives(plural=False)
            self._skip_ws()
            if self._accept(_CLOSE_PAREN) is None:
                raise ParseError("expected ')' after record field type", self.pos)
            fields.append(RecordField(name_match.group(1), field_type))
            if self._accept(_FIELD_SEP) is None:
                break
        return RecordType(tuple(fields))
