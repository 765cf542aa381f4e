# topmark:header:start
#
#   project      : SpecMark
#   file         : headers.py
#   file_relpath : src/specmark/headers.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Structured header compiler.

A clause header becomes *structured* when the ``<h1>`` is directly followed
(ignoring ``<del>`` markup and empty ``<span>``/``<a>`` placeholders) by a
``<dl class="header">``:

```html
<emu-clause id="sec-example-op" type="abstract operation">
  <h1>Example.Op ( _x_: a Number, _y_ [ , _z_: a String ] ): a Number</h1>
  <dl class="header">
    <dt>description</dt><dd>It adds things.</dd>
    <dt>effects</dt><dd>user-code</dd>
  </dl>
  <emu-alg>1. Return _x_.</emu-alg>
</emu-clause>
```

Compiling it:

    1. slices the ``<h1>`` source verbatim out of the document (offsets kept
       so problems map back to the original line and column);
    2. parses name, parameters and return type with
       `specmark.grammar.header_parser.parse_header`, and compiles every type
       string independently with `specmark.grammar.type_parser.TypeParser`;
    3. rewrites the ``<h1>`` (parameters as ``<var>``, return type dropped;
       syntax-directed operations lose the parameter list entirely);
    4. reads the description list and replaces it with a generated preamble
       paragraph;
    5. assigns the aoid, skip flags and effects on the clause, and appends
       each effect to the effect worklist.

Problems are reported as diagnostics; nothing here raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from bs4 import NavigableString

from specmark.config.logging import get_logger
from specmark.core.errors import ParseError
from specmark.core.kinds import ClauseKind
from specmark.diagnostic import DiagnosticKind, RuleId
from specmark.document.tree import (
    attr,
    element_children,
    first_element_child,
    has_class,
    next_element_sibling,
    traverse_while,
)
from specmark.grammar.header_parser import (
    HeaderParseFailure,
    ParsedHeader,
    ParsedParam,
    parse_header,
)
from specmark.grammar.type_parser import TypeParser
from specmark.grammar.types import Parameter, Signature

if TYPE_CHECKING:
    from bs4 import Tag
    from bs4.element import PageElement

    from specmark.clause import Clause
    from specmark.config.logging import SpecmarkLogger
    from specmark.context import CompileContext
    from specmark.grammar.types import Type

logger: SpecmarkLogger = get_logger(__name__)

UNKNOWN_NAME: Final[str] = "UNKNOWN"
UNPARSEABLE_ARGUMENTS: Final[str] = "UNPARSEABLE ARGUMENTS"

_STEPS_SENTENCE: Final[str] = "It performs the following steps when called:"
_PRODUCTIONS_SENTENCE: Final[str] = "It is defined piecewise over the following productions:"
_ENDS_WITH_LEAD_IN: Final[re.Pattern[str]] = re.compile(r"(?:steps|productions)[^.]*:\s*$")
_WRAPPED_WHOLE: Final[re.Pattern[str]] = re.compile(
    r"^<(ins|del|mark)>\s*(.*?)\s*</\1>$", re.DOTALL
)


# --- description list ---


@dataclass(frozen=True)
class HeaderMetadata:
    """Fields read from a structured header's description list.

    Attributes:
        description: The ``<dd>`` of ``description``, if present.
        for_: The ``<dd>`` of ``for`` (the receiver of a method), if present.
        effects: Declared effect names, in declaration order.
        redefinition: True when the clause redefines an operation declared elsewhere.
        skip_global_checks: Suppress spec-wide invariant checks for this clause.
        skip_return_checks: Suppress return-type checks for this clause.
    """

    description: Tag | None = None
    for_: Tag | None = None
    effects: tuple[str, ...] = ()
    redefinition: bool = False
    skip_global_checks: bool = False
    skip_return_checks: bool = False


def _is_placeholder(el: Tag) -> bool:
    return el.name == "del" or (el.name in ("span", "a") and not el.contents)


def extract_structured_header(header: Tag) -> Tag | None:
    """Return the ``<dl class="header">`` following ``header``, if any.

    ``<del>`` siblings and empty ``<span>``/``<a>`` placeholders are skipped, and
    an ``<ins>`` wrapping the list is looked through once.
    """
    candidate: Tag | None = traverse_while(
        next_element_sibling(header), next_element_sibling, _is_placeholder
    )
    candidate = traverse_while(
        candidate, first_element_child, lambda el: el.name == "ins", once=True
    )
    if candidate is None or candidate.name != "dl" or not has_class(candidate, "header"):
        return None
    return candidate


def _parse_flag(ctx: CompileContext, dd: Tag, name: str) -> bool:
    value: str = dd.get_text().strip()
    if value in ("true", "false"):
        return value == "true"
    ctx.diagnostics.warn(
        DiagnosticKind.CONTENTS,
        RuleId.HEADER_FORMAT,
        f'unknown value for "{name}" attribute (expected "true" or "false", got {value!r})',
        node=dd,
    )
    return False


def parse_structured_header_dl(
    ctx: CompileContext, kind: ClauseKind | None, dl: Tag
) -> HeaderMetadata:
    """Read the ``<dt>``/``<dd>`` pairs of a structured header.

    Unknown entries, duplicates, a missing ``<dd>``, malformed flags, unknown
    effect names and ``for`` misuse are reported; parsing continues with the
    remaining pairs where possible.
    """
    description: Tag | None = None
    for_: Tag | None = None
    effects: list[str] = []
    redefinition: bool | None = None
    skip_global_checks: bool | None = None
    skip_return_checks: bool | None = None
    seen: set[str] = set()

    children: list[Tag] = element_children(dl)
    i: int = 0
    while i < len(children):
        dt: Tag = children[i]
        if dt.name != "dt":
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_FORMAT,
                f"expecting header to have DT, but found {dt.name.upper()}",
                node=dt,
            )
            break
        dd: Tag | None = children[i + 1] if i + 1 < len(children) else None
        if dd is None or dd.name != "dd":
            found: str = "nothing" if dd is None else dd.name.upper()
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_FORMAT,
                f"expecting header to have DD, but found {found}",
                node=dd or dt,
            )
            break
        i += 2

        entry: str = " ".join(dt.get_text().split()).lower()
        if entry in seen:
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_FORMAT,
                f"duplicate {entry!r} attribute",
                node=dt,
            )
        seen.add(entry)

        if entry == "description":
            description = dd
        elif entry == "for":
            for_ = dd
        elif entry == "effects":
            for raw in dd.get_text().split(","):
                effect: str = raw.strip()
                if not effect:
                    continue
                if effect not in ctx.config.known_effects:
                    ctx.diagnostics.warn(
                        DiagnosticKind.CONTENTS,
                        RuleId.UNKNOWN_EFFECT,
                        f"unknown effect {effect!r}",
                        node=dd,
                    )
                effects.append(effect)
        elif entry == "redefinition":
            redefinition = _parse_flag(ctx, dd, entry)
        elif entry == "skip global checks":
            skip_global_checks = _parse_flag(ctx, dd, entry)
        elif entry == "skip return checks":
            skip_return_checks = _parse_flag(ctx, dd, entry)
        elif entry == "":
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_FORMAT,
                "missing value for structured header attribute",
                node=dt,
            )
        else:
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_FORMAT,
                f"unknown structured header entry type {entry!r}",
                node=dt,
            )

    if kind is not None and kind.is_method and for_ is None:
        ctx.diagnostics.warn(
            DiagnosticKind.NODE,
            RuleId.HEADER_FORMAT,
            f'expected {kind.value} to have a "for"',
            node=dl,
        )
    elif (kind is None or not kind.is_method) and for_ is not None:
        ctx.diagnostics.warn(
            DiagnosticKind.NODE,
            RuleId.HEADER_FORMAT,
            f'"for" is only valid on methods, not on {kind.value if kind else "untyped clauses"}',
            node=for_,
        )

    return HeaderMetadata(
        description=description,
        for_=for_,
        effects=tuple(effects),
        redefinition=bool(redefinition),
        skip_global_checks=bool(skip_global_checks),
        skip_return_checks=bool(skip_return_checks),
    )


# --- formatting ---


@dataclass(frozen=True)
class FormattedHeader:
    """Rendered pieces of a parsed header.

    Attributes:
        name: The operation name.
        header_html: New ``<h1>`` contents (without the return type).
        params_html: Parameter phrase for the preamble (``argument <var>x</var> ...``).
        return_type: The raw return type, if declared.
    """

    name: str
    header_html: str
    params_html: str
    return_type: str | None


def _wrap(tag: str | None, html: str) -> str:
    return html if tag is None else f"<{tag}>{html}</{tag}>"


def _join_phrases(items: list[str]) -> str:
    if len(items) <= 2:
        return " and ".join(items)
    return ", ".join(items[:-1]) + f", and {items[-1]}"


def _describe_params(params: tuple[ParsedParam, ...], optional: bool) -> str:
    if not params:
        return ""
    noun: str = "argument" if len(params) == 1 else "arguments"
    prefix: str = f"optional {noun}" if optional else noun
    items: list[str] = [
        _wrap(
            p.wrapping_tag,
            f"<var>{p.name}</var>" if p.type is None else f"<var>{p.name}</var> ({p.type})",
        )
        for p in params
    ]
    return f"{prefix} {_join_phrases(items)}"


def format_params(parsed: ParsedHeader) -> str:
    """Return the preamble phrase describing the parameters.

    Example: ``argument <var>x</var> (a Number) and optional argument <var>y</var>``;
    ``no arguments`` when the header declares none.
    """
    required: str = _describe_params(parsed.params, optional=False)
    optional: str = _describe_params(parsed.optional_params, optional=True)
    if required and optional:
        return f"{required} and {optional}"
    return required or optional or "no arguments"


def format_header(parsed: ParsedHeader) -> FormattedHeader:
    """Render a parsed header as ``Name ( x, y [ , z ] )`` with ``<var>`` parameters."""
    required: list[str] = [_wrap(p.wrapping_tag, f"<var>{p.name}</var>") for p in parsed.params]
    params_html: str = ", ".join(required)
    for index, p in enumerate(parsed.optional_params):
        separator: str = ", " if index > 0 or required else ""
        params_html += f" [ {_wrap(p.wrapping_tag, f'{separator}<var>{p.name}</var>')}"
    params_html += " ]" * len(parsed.optional_params)
    params_html = params_html.strip()
    inside: str = f" {params_html} " if params_html else " "
    body: str = f"{parsed.prefix or ''}{parsed.name} ({inside})"
    return FormattedHeader(
        name=parsed.name,
        header_html=_wrap(parsed.wrapping_tag, body),
        params_html=format_params(parsed),
        return_type=parsed.return_type,
    )


def _preamble_opening(kind: ClauseKind | None, name: str) -> str:
    if kind is None:
        return f"The {name}"
    if kind.is_method:
        return f"The {name} {kind.label} of "
    return f"The {kind.label} {name}"


def _next_significant(dl: Tag) -> Tag | None:
    return traverse_while(
        next_element_sibling(dl), next_element_sibling, lambda el: el.name == "emu-note"
    )


def format_preamble(
    ctx: CompileContext,
    dl: Tag,
    kind: ClauseKind | None,
    name: str,
    params_html: str,
    return_type: str | None,
    metadata: HeaderMetadata,
) -> list[Tag]:
    """Build the paragraph(s) replacing a structured header's description list.

    The sentence reads ``The <kind> <name> takes <params> and returns <type>.``
    (methods: ``The <name> <kind> of <for> takes ...``), followed by the
    description and, when an algorithm or grammar follows, the matching
    lead-in sentence unless the description already ends with one.
    """
    is_sdo: bool = kind is ClauseKind.SYNTAX_DIRECTED_OPERATION
    para: Tag = ctx.document.new_tag("p")
    opening: str = _preamble_opening(kind, name)
    for node in ctx.document.parse_fragment(opening):
        para.append(node)
    if kind is not None and kind.is_method and metadata.for_ is not None:
        for child in list(metadata.for_.contents):
            para.append(child.extract())
    sentence: str = f" takes {params_html}"
    if return_type is not None:
        sentence += f" and returns {return_type}"
    for node in ctx.document.parse_fragment(sentence + "."):
        para.append(node)

    description_text: str = ""
    if metadata.description is not None:
        description_text = metadata.description.get_text()
        para.append(NavigableString(" "))
        for child in list(metadata.description.contents):
            para.append(child.extract())

    following: Tag | None = _next_significant(dl)
    wants_lead_in: bool = (
        following is not None
        and following.name == ("emu-grammar" if is_sdo else "emu-alg")
        and not following.has_attr("replaces-step")
    )
    if wants_lead_in and not _ENDS_WITH_LEAD_IN.search(description_text):
        para.append(NavigableString(" " + (_PRODUCTIONS_SENTENCE if is_sdo else _STEPS_SENTENCE)))
    return [para]


# --- compilation ---


def _line_and_column_in(text: str, offset: int) -> tuple[int, int]:
    line: int = text.count("\n", 0, offset) + 1
    column: int = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def _compile_type(
    ctx: CompileContext,
    h1: Tag,
    raw: str,
    offset: int,
    header_source: str,
    source_offset: int | None,
) -> Type | None:
    try:
        return TypeParser.parse(raw)
    except ParseError as err:
        shifted: ParseError = err.shifted(offset)
        if source_offset is not None:
            line, column = ctx.line_and_column(source_offset + shifted.offset)
        else:
            line, column = _line_and_column_in(header_source, shifted.offset)
        ctx.diagnostics.warn(
            DiagnosticKind.CONTENTS,
            RuleId.TYPE_PARSING,
            err.message,
            node=h1,
            line=line,
            column=column,
        )
        return None


def build_signature(
    ctx: CompileContext,
    h1: Tag,
    parsed: ParsedHeader,
    header_source: str,
    source_offset: int | None,
) -> Signature:
    """Compile the parsed header into a `Signature`.

    Parameters wrapped in ``<del>`` are left out. A type that fails to parse
    is reported and compiled as None; the remaining types are unaffected.
    """

    def param(p: ParsedParam) -> Parameter:
        if p.type is None:
            return Parameter(p.name)
        return Parameter(
            p.name, _compile_type(ctx, h1, p.type, p.type_offset, header_source, source_offset)
        )

    return_type: Type | None = None
    if parsed.return_type is not None:
        return_type = _compile_type(
            ctx, h1, parsed.return_type, parsed.return_offset, header_source, source_offset
        )
    return Signature(
        parameters=tuple(param(p) for p in parsed.params if p.wrapping_tag != "del"),
        optional_parameters=tuple(
            param(p) for p in parsed.optional_params if p.wrapping_tag != "del"
        ),
        return_type=return_type,
    )


def _strip_parameter_list(contents: str) -> str:
    open_at: int = contents.find("(")
    if open_at < 0:
        return contents
    close_at: int = contents.rfind(")")
    rest: str = contents[close_at + 1 :] if close_at > open_at else ""
    stripped: str = (contents[:open_at] + rest).strip()
    m: re.Match[str] | None = _WRAPPED_WHOLE.match(stripped)
    if m is not None:
        stripped = f"<{m.group(1)}>{m.group(2)}</{m.group(1)}>"
    return stripped


def _set_contents(ctx: CompileContext, tag: Tag, html: str) -> None:
    tag.clear()
    nodes: list[PageElement] = ctx.document.parse_fragment(html)
    for node in nodes:
        tag.append(node)


def compile_structured_header(ctx: CompileContext, clause: Clause, h1: Tag, surrogate: Tag) -> bool:
    """Compile the structured header of ``clause``, if it has one.

    Args:
        ctx (CompileContext): The compile context.
        clause (Clause): The clause being exited.
        h1 (Tag): The clause's ``<h1>``.
        surrogate (Tag): The element standing in for the header among its
            siblings (the ``<ins>`` wrapping ``h1``, or ``h1`` itself).

    Returns:
        bool: True if a structured header was found and compiled.
    """
    dl: Tag | None = extract_structured_header(surrogate)
    if dl is None:
        return False
    kind: ClauseKind | None = clause.kind

    inner: tuple[str, int] | None = ctx.document.inner_source(h1)
    header_source: str
    source_offset: int | None
    if inner is not None:
        header_source, source_offset = inner
    else:
        header_source, source_offset = h1.decode_contents(), None

    parsed: ParsedHeader | HeaderParseFailure = parse_header(header_source)
    formatted: FormattedHeader | None = None
    if isinstance(parsed, HeaderParseFailure):
        line, column = (
            ctx.line_and_column(source_offset + parsed.offset)
            if source_offset is not None
            else _line_and_column_in(header_source, parsed.offset)
        )
        ctx.diagnostics.warn(
            DiagnosticKind.CONTENTS,
            RuleId.HEADER_FORMAT,
            f"failed to parse header: {parsed.message}",
            node=h1,
            line=line,
            column=column,
        )
    else:
        clause.signature = build_signature(ctx, h1, parsed, header_source, source_offset)
        formatted = format_header(parsed)

    name: str | None = formatted.name if formatted is not None else None
    if kind is ClauseKind.NUMERIC_METHOD and name is not None and "::" not in name:
        line, column = ctx.line_and_column(source_offset) if source_offset is not None else (1, 1)
        ctx.diagnostics.warn(
            DiagnosticKind.CONTENTS,
            RuleId.NUMERIC_METHOD_FOR,
            "numeric methods should be of the form `Type::operation`",
            node=h1,
            line=line,
            column=column,
        )

    if kind is ClauseKind.SYNTAX_DIRECTED_OPERATION:
        current: str = formatted.header_html if formatted is not None else h1.decode_contents()
        _set_contents(ctx, h1, _strip_parameter_list(current))
    elif formatted is not None:
        _set_contents(ctx, h1, formatted.header_html)

    metadata: HeaderMetadata = parse_structured_header_dl(ctx, kind, dl)
    if kind is None:
        if not attr(clause.node, "type"):
            ctx.diagnostics.warn(
                DiagnosticKind.NODE,
                RuleId.HEADER_TYPE,
                "clauses with structured headers should have a type",
                node=clause.node,
            )

    paras: list[Tag] = format_preamble(
        ctx,
        dl,
        kind,
        name or UNKNOWN_NAME,
        formatted.params_html if formatted is not None else UNPARSEABLE_ARGUMENTS,
        formatted.return_type if formatted is not None else None,
        metadata,
    )
    dl.replace_with(*paras)

    if not metadata.redefinition:
        if clause.node.has_attr("aoid"):
            ctx.diagnostics.warn(
                DiagnosticKind.ATTR,
                RuleId.HEADER_FORMAT,
                "nodes with structured headers should not include an AOID",
                node=clause.node,
                attr="aoid",
            )
        elif name is not None and kind is not None and kind.is_algorithm:
            clause.node["aoid"] = name
            clause.aoid = name

    clause.skip_global_checks = metadata.skip_global_checks
    clause.skip_return_checks = metadata.skip_return_checks
    for effect in metadata.effects:
        clause.effects.append(effect)
        ctx.effects.record(effect, clause)

    logger.debug("Compiled structured header of %s: %s", clause.id, name or UNKNOWN_NAME)
    return True
