# topmark:header:start
#
#   project      : SpecMark
#   file         : header_parser.py
#   file_relpath : src/specmark/grammar/header_parser.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Parser for structured algorithm headers.

A structured header is the raw source of an ``<h1>`` such as::

    Static Semantics: Example.Op ( _x_: a Number, _y_ [ , _z_: a String ] ): a Number

or its multi-line form::

    Example.Op (
      _x_: a Number,
      <del>_y_: a String,</del>
      optional _z_: a String,
    ): a Number

The parser recovers the name, the required and optional parameters (each
with an optional type string and the offset of that string), the return
type string, and any ``ins``/``del``/``mark`` wrapper around the whole header
or individual parameters. Type strings are *not* compiled here.

Failures are returned as a `HeaderParseFailure` value rather than raised,
because callers keep the literal header and carry on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from specmark.config.logging import SpecmarkLogger

logger: SpecmarkLogger = get_logger(__name__)

WRAPPING_TAGS: Final[tuple[str, ...]] = ("ins", "del", "mark")

_WS: Final[re.Pattern[str]] = re.compile(r"\s+")
_OPEN_WRAP: Final[re.Pattern[str]] = re.compile(r"<(ins|del|mark)>")
_PREFIX: Final[re.Pattern[str]] = re.compile(r"(?:Static|Runtime) Semantics:\s*")
_NAME: Final[re.Pattern[str]] = re.compile(r"[^\s(]+")
_OPTIONAL: Final[re.Pattern[str]] = re.compile(r"optional\s+")
_PARAM_NAME: Final[re.Pattern[str]] = re.compile(r"_([A-Za-z$][A-Za-z0-9$]*)_")
_COLON: Final[re.Pattern[str]] = re.compile(r"\s*:")
# A comma only ends a parameter type when what follows starts a new
# parameter, an optional group, or closes the list.
_PARAM_BOUNDARY: Final[re.Pattern[str]] = re.compile(
    r",\s*(?:<(?:ins|del|mark)>\s*)?(?:_[A-Za-z$]|optional\b|\[(?!\[)|\)|\]|</)"
)


@dataclass(frozen=True)
class ParsedParam:
    """One parameter as written in the header.

    Attributes:
        name: Parameter name without the surrounding underscores.
        type: The raw type string, or None when untyped.
        type_offset: Offset of ``type`` within the header source.
        wrapping_tag: ``"ins"``, ``"del"`` or ``"mark"`` when wrapped.
    """

    name: str
    type: str | None = None
    type_offset: int = 0
    wrapping_tag: str | None = None


@dataclass(frozen=True)
class ParsedHeader:
    """A successfully parsed structured header."""

    name: str
    params: tuple[ParsedParam, ...] = ()
    optional_params: tuple[ParsedParam, ...] = ()
    return_type: str | None = None
    return_offset: int = 0
    prefix: str | None = None
    wrapping_tag: str | None = None


@dataclass(frozen=True)
class HeaderParseFailure:
    """The header could not be parsed; ``offset`` is into the header source."""

    message: str
    offset: int


class _Failure(Exception):
    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.message: str = message
        self.offset: int = offset


class _HeaderScanner:
    """Cursor over one header source; see `parse_header`."""

    def __init__(self, source: str, start: int, end: int) -> None:
        self.source: str = source
        self.pos: int = start
        self.end: int = end

    def at_end(self) -> bool:
        return self.pos >= self.end

    def peek(self, n: int = 1) -> str:
        return self.source[self.pos : min(self.pos + n, self.end)]

    def skip_ws(self) -> None:
        self.accept(_WS)

    def accept(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        m: re.Match[str] | None = pattern.match(self.source, self.pos, self.end)
        if m is not None:
            self.pos = m.end()
        return m

    def expect(self, literal: str, message: str) -> None:
        if self.source.startswith(literal, self.pos) and self.pos + len(literal) <= self.end:
            self.pos += len(literal)
            return
        raise _Failure(message, self.pos)

    def parse(self) -> ParsedHeader:
        self.skip_ws()
        prefix_match: re.Match[str] | None = self.accept(_PREFIX)
        name_match: re.Match[str] | None = self.accept(_NAME)
        if name_match is None:
            raise _Failure("expected an algorithm name", self.pos)
        self.skip_ws()
        self.expect("(", f"expected '(' after {name_match.group()!r}")
        required, optional = self.parse_params()
        self.expect(")", "expected ')' to close the parameter list")
        return_type, return_offset = self.parse_return_type()
        return ParsedHeader(
            name=name_match.group(),
            params=tuple(required),
            optional_params=tuple(optional),
            return_type=return_type,
            return_offset=return_offset,
            prefix=prefix_match.group() if prefix_match else None,
        )

    def parse_params(self) -> tuple[list[ParsedParam], list[ParsedParam]]:
        required: list[ParsedParam] = []
        optional: list[ParsedParam] = []
        depth: int = 0
        while True:
            self.skip_ws()
            if self.at_end():
                raise _Failure("unterminated parameter list", self.pos)
            ch: str = self.peek()
            if ch == ")" and depth == 0:
                return required, optional
            if ch == ",":
                self.pos += 1
                continue
            if ch == "[" and self.peek(2) != "[[":
                depth += 1
                self.pos += 1
                continue
            if ch == "]":
                if depth == 0:
                    raise _Failure("unbalanced ']' in parameter list", self.pos)
                depth -= 1
                self.pos += 1
                continue
            param, is_optional = self.parse_param()
            if is_optional or depth > 0:
                optional.append(param)
            elif optional:
                raise _Failure(
                    f"required parameter _{param.name}_ follows an optional parameter",
                    self.pos,
                )
            else:
                required.append(param)

    def parse_param(self) -> tuple[ParsedParam, bool]:
        wrap_match: re.Match[str] | None = self.accept(_OPEN_WRAP)
        wrapping_tag: str | None = wrap_match.group(1) if wrap_match else None
        if wrap_match:
            self.skip_ws()
        is_optional: bool = self.accept(_OPTIONAL) is not None
        name_match: re.Match[str] | None = self.accept(_PARAM_NAME)
        if name_match is None:
            raise _Failure("expected a parameter name like _x_", self.pos)
        type_text: str | None = None
        type_offset: int = 0
        if self.accept(_COLON):
            type_text, type_offset = self.scan_param_type()
        if wrapping_tag is not None:
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
                self.skip_ws()
            self.expect(f"</{wrapping_tag}>", f"expected '</{wrapping_tag}>'")
        param = ParsedParam(
            name=name_match.group(1),
            type=type_text,
            type_offset=type_offset,
            wrapping_tag=wrapping_tag,
        )
        return param, is_optional

    def scan_param_type(self) -> tuple[str, int]:
        start: int = self.pos
        parens: int = 0
        i: int = self.pos
        while i < self.end:
            if self.source.startswith("[[", i):
                close: int = self.source.find("]]", i + 2, self.end)
                i = self.end if close < 0 else close + 2
                continue
            ch: str = self.source[i]
            if ch == "(":
                parens += 1
            elif ch == ")":
                if parens == 0:
                    break
                parens -= 1
            elif parens == 0:
                if ch in "[]" or self.source.startswith("</", i):
                    break
                if ch == "," and _PARAM_BOUNDARY.match(self.source, i, self.end):
                    break
            i += 1
        raw: str = self.source[start:i]
        stripped: str = raw.strip()
        if not stripped:
            raise _Failure("expected a type after ':'", start)
        self.pos = i
        return stripped, start + (len(raw) - len(raw.lstrip()))

    def parse_return_type(self) -> tuple[str | None, int]:
        self.skip_ws()
        if self.at_end():
            return None, 0
        if self.peek() != ":":
            raise _Failure("unexpected text after the parameter list", self.pos)
        self.pos += 1
        raw: str = self.source[self.pos : self.end]
        stripped: str = raw.strip()
        if not stripped:
            raise _Failure("expected a return type after ':'", self.pos)
        offset: int = self.pos + (len(raw) - len(raw.lstrip()))
        self.pos = self.end
        return stripped, offset


def _outer_wrapper(source: str) -> tuple[str | None, int, int]:
    """Return ``(tag, start, end)`` bounding the header content.

    When the whole header is wrapped in one ``ins``/``del``/``mark`` element,
    the bounds exclude the wrapper tags.
    """
    lead: int = len(source) - len(source.lstrip())
    trail: int = len(source.rstrip())
    m: re.Match[str] | None = _OPEN_WRAP.match(source, lead)
    if m is not None:
        closing: str = f"</{m.group(1)}>"
        if source.endswith(closing, 0, trail) and source.count(m.group(0)) == 1:
            return m.group(1), m.end(), trail - len(closing)
    return None, 0, len(source)


def parse_header(source: str) -> ParsedHeader | HeaderParseFailure:
    """Parse the raw source of a structured ``<h1>``.

    Args:
        source (str): The exact text between the header's start and end tags.

    Returns:
        ParsedHeader | HeaderParseFailure: The parsed header, or a failure
        carrying a message and an offset into ``source``.
    """
    wrapping_tag, start, end = _outer_wrapper(source)
    scanner = _HeaderScanner(source, start, end)
    try:
        parsed: ParsedHeader = scanner.parse()
    except _Failure as failure:
        logger.debug("Header parse failure at %d: %s", failure.offset, failure.message)
        return HeaderParseFailure(failure.message, failure.offset)
    if wrapping_tag is not None:
        parsed = ParsedHeader(
            name=parsed.name,
            params=parsed.params,
            optional_params=parsed.optional_params,
            return_type=parsed.return_type,
            return_offset=parsed.return_offset,
            prefix=parsed.prefix,
            wrapping_tag=wrapping_tag,
        )
    logger.trace("Parsed header %r", parsed)
    return parsed
