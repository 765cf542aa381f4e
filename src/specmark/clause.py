# topmark:header:start
#
#   project      : SpecMark
#   file         : clause.py
#   file_relpath : src/specmark/clause.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Clause tree builder.

`Clause.enter` and `Clause.exit` are driven by the document walker for
every ``<emu-intro>``, ``<emu-clause>`` and ``<emu-annex>`` in document order.

On enter, a clause:
    * is numbered (introductions and clauses inside them never are), given
      its document position and pushed on the clause stack;
    * is appended to its parent's subclauses (or the context's top level);
    * resolves its namespace, aoid and kind, and locates its ``<h1>``.

On exit, it:
    * compiles its structured header, if any (`specmark.headers`);
    * builds its notes and examples, renders and registers its text;
    * prepends the special-kinds label and the section number;
    * adds exactly one clause entry, and at most one op entry, to the
      bibliography in its own namespace; then it is popped.

Clauses are mutated only while they are on top of the stack. A clause owns
its subclauses; the link back to its parent is a weak reference.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

from specmark.biblio import ClauseEntry, OpEntry
from specmark.config.logging import get_logger
from specmark.core.errors import MissingHeaderError
from specmark.core.kinds import ClauseKind, SpecialKind
from specmark.diagnostic import DiagnosticKind, RuleId
from specmark.document.tree import (
    attr,
    first_element_child,
    next_element_sibling,
    traverse_while,
)
from specmark.effects import USER_CODE
from specmark.grammar.types import is_completion_union
from specmark.headers import UNKNOWN_NAME, compile_structured_header
from specmark.inline import TextRun, render_text_runs
from specmark.notes import build_numbered

if TYPE_CHECKING:
    from bs4 import NavigableString, Tag

    from specmark.config.logging import SpecmarkLogger
    from specmark.context import CompileContext
    from specmark.document.walker import WalkEvent
    from specmark.grammar.types import Signature
    from specmark.notes import Example, Note

logger: SpecmarkLogger = get_logger(__name__)

STATIC_SEMANTICS_PREFIX = "Static Semantics:"


def _skippable_before_header(el: Tag) -> bool:
    # <del> and empty <span>s left behind for old ids
    return el.name == "del" or (el.name == "span" and first_element_child(el) is None)


def locate_header(node: Tag) -> tuple[Tag | None, Tag | None]:
    """Find the header of a clause element.

    Returns:
        ``(surrogate, h1)``: the first significant child (possibly an ``<ins>``
        wrapping the header) and the element found inside it, which is not
        necessarily an ``<h1>``. Both are None for an empty clause.
    """
    surrogate: Tag | None = traverse_while(
        first_element_child(node), next_element_sibling, _skippable_before_header
    )
    header: Tag | None = traverse_while(
        surrogate, first_element_child, lambda el: el.name == "ins", once=True
    )
    return surrogate, header


def _text_of(tag: Tag) -> str:
    return " ".join(tag.get_text().split())


class Clause:
    """A numbered, titled section of the document.

    Args:
        ctx: The compile context.
        node: The clause element.
        parent: The enclosing clause, or None for a top-level clause.
        number: The section number assigned on enter.
        position: The clause's index in document order among all clauses.

    Raises:
        MissingHeaderError: In strict header mode, when the clause has no ``<h1>``.
    """

    def __init__(
        self,
        ctx: CompileContext,
        node: Tag,
        parent: Clause | None,
        number: str,
        position: int = 0,
    ) -> None:
        self.node: Tag = node
        self.id: str = attr(node, "id") or ""
        self.number: str = number
        self.position: int = position
        self._parent: weakref.ref[Clause] | None = weakref.ref(parent) if parent else None
        self.subclauses: list[Clause] = []
        self.notes: list[Note] = []
        self.editor_notes: list[Note] = []
        self.examples: list[Example] = []
        self.effects: list[str] = []
        self.signature: Signature | None = None
        self.skip_global_checks: bool = False
        self.skip_return_checks: bool = False

        self.is_annex: bool = node.name == "emu-annex"
        self.in_intro: bool = node.name == "emu-intro" or (parent is not None and parent.in_intro)
        self.is_back_matter: bool = self.is_annex and node.has_attr("back-matter")
        self.is_normative: bool = not self.is_annex or node.has_attr("normative")

        enclosing: str = parent.namespace if parent else ctx.biblio.root_namespace
        declared_namespace: str | None = attr(node, "namespace")
        if declared_namespace:
            ctx.biblio.create_namespace(declared_namespace, enclosing)
            self.namespace: str = declared_namespace
        else:
            self.namespace = enclosing

        self.aoid: str | None = attr(node, "aoid")
        if self.aoid == "":
            self.aoid = self.id or None

        raw_kind: str | None = attr(node, "type") or None
        self.kind: ClauseKind | None = ClauseKind.parse(raw_kind)
        if raw_kind is not None and self.kind is None:
            ctx.diagnostics.warn(
                DiagnosticKind.ATTR,
                RuleId.HEADER_TYPE,
                f"unknown clause type {raw_kind!r}",
                node=node,
                attr="type",
            )

        self.special_kinds: tuple[SpecialKind, ...] = tuple(
            kind for kind in SpecialKind if node.has_attr(kind.value)
        )

        self.header_surrogate: Tag | None
        self.header: Tag | None
        self.header_surrogate, self.header = locate_header(node)
        if self.header is None:
            self._missing_header(ctx, "could not locate header element", node)
        elif self.header.name != "h1":
            found: str = self.header.name
            self._missing_header(
                ctx,
                f"could not locate header element; found <{found}> before any <h1>",
                self.header,
            )
            self.header = None
            self.header_surrogate = None

        self.title: str = _text_of(self.header) if self.header is not None else UNKNOWN_NAME
        self.title_html: str = (
            self.header.decode_contents().strip() if self.header is not None else UNKNOWN_NAME
        )

    def _missing_header(self, ctx: CompileContext, message: str, node: Tag) -> None:
        if ctx.config.strict_headers:
            raise MissingHeaderError(self.id or None, node)
        ctx.diagnostics.warn(DiagnosticKind.NODE, RuleId.MISSING_HEADER, message, node=node)

    def __repr__(self) -> str:
        return f"Clause(id={self.id!r}, number={self.number!r}, namespace={self.namespace!r})"

    # --- tree ---

    @property
    def parent(self) -> Clause | None:
        """The enclosing clause, if it is still alive."""
        return self._parent() if self._parent is not None else None

    # --- queries ---

    def can_have_effect(self, effect: str) -> bool:
        """Return False when ``effect`` can never apply to this clause.

        ``user-code`` only happens at runtime, so static semantics cannot have it.
        """
        return not (effect == USER_CODE and self.title.startswith(STATIC_SEMANTICS_PREFIX))

    def secnum_label(self) -> str:
        """Return the plain-text section label (``3.2``, ``Annex A (normative)``, or empty)."""
        if not self.number or self.is_back_matter:
            return ""
        if self._is_top_level_annex():
            kind: str = "normative" if self.is_normative else "informative"
            return f"Annex {self.number} ({kind})"
        return self.number

    def secnum_html(self) -> str:
        """Return the section label as the ``<span class="secnum">`` prepended to the header."""
        if not self.number or self.is_back_matter:
            return ""
        if self._is_top_level_annex():
            kind: str = "normative" if self.is_normative else "informative"
            return (
                f'<span class="secnum">Annex {self.number} '
                f'<span class="annex-kind">({kind})</span></span> '
            )
        return f'<span class="secnum">{self.number}</span> '

    def _is_top_level_annex(self) -> bool:
        return self.is_annex and (self.node.parent is None or self.node.parent.name != "emu-annex")

    # --- build steps ---

    def build_notes(self) -> None:
        """Label notes (numbered when there are several) and editor's notes (never numbered)."""
        if self.notes:
            build_numbered(self.notes)
        for note in self.editor_notes:
            note.build()

    def build_examples(self) -> None:
        """Label examples, numbered when there are several."""
        if self.examples:
            build_numbered(self.examples)

    def _prepend_special_kinds(self, ctx: CompileContext, event: WalkEvent) -> None:
        if not self.special_kinds:
            return
        text: str = ", ".join(kind.label for kind in self.special_kinds)
        tag: Tag = ctx.document.new_tag("div", text, **{"class": "attributes-tag"})
        self.node.insert(0, tag)
        contents: NavigableString = tag.contents[0]  # type: ignore[assignment]
        ctx.register_text_run(
            TextRun(contents, self, self.namespace, event.in_alg, event.current_id)
        )

    def _prepend_secnum(self, ctx: CompileContext) -> None:
        html: str = self.secnum_html()
        if not html or self.header is None:
            return
        for node in reversed(ctx.document.parse_fragment(html)):
            self.header.insert(0, node)

    def _add_biblio_entries(self, ctx: CompileContext) -> None:
        if self.aoid:
            if self.aoid in ctx.biblio.keys_for_namespace(self.namespace):
                ctx.diagnostics.warn(
                    DiagnosticKind.NODE,
                    RuleId.DUPLICATE_DEFINITION,
                    f"duplicate definition {self.aoid!r}",
                    node=self.node,
                )
            else:
                if self.signature is not None and is_completion_union(self.signature.return_type):
                    ctx.diagnostics.warn(
                        DiagnosticKind.NODE,
                        RuleId.COMPLETION_UNION,
                        "algorithms should return either completions or things which are not "
                        "completions, never both",
                        node=self.header or self.node,
                    )
                ctx.biblio.add(
                    OpEntry(
                        aoid=self.aoid,
                        ref_id=self.id,
                        kind=self.kind if self.kind is not None and self.kind.is_algorithm else None,
                        signature=self.signature,
                        effects=tuple(self.effects),
                        skip_global_checks=self.skip_global_checks,
                        skip_return_checks=self.skip_return_checks,
                    ),
                    self.namespace,
                )
        ctx.biblio.add(
            ClauseEntry(
                id=self.id,
                title=self.title,
                number=self.number,
                aoid=self.aoid,
                title_html=self.title_html,
            ),
            self.namespace,
        )

    # --- traversal hooks ---

    @classmethod
    def enter(cls, ctx: CompileContext, event: WalkEvent) -> Clause:
        """Create, number and push the clause for ``event.node``."""
        node: Tag = event.node
        if not attr(node, "id"):
            ctx.diagnostics.warn(
                DiagnosticKind.NODE, RuleId.MISSING_ID, "clause doesn't have an id", node=node
            )
        parent: Clause | None = ctx.current_clause
        number: str = ""
        if node.name != "emu-intro" and not (parent is not None and parent.in_intro):
            number = ctx.numberer.next(
                len(ctx.clause_stack), is_annex=node.name == "emu-annex", node=node
            )
        clause = cls(ctx, node, parent, number, position=ctx.clauses_entered)
        ctx.clauses_entered += 1
        if parent is not None:
            parent.subclauses.append(clause)
        else:
            ctx.subclauses.append(clause)
        ctx.clause_stack.append(clause)
        logger.trace("Entered %r", clause)
        return clause

    @classmethod
    def exit(cls, ctx: CompileContext, event: WalkEvent) -> Clause:
        """Finalize and pop the clause on top of the stack."""
        clause: Clause = ctx.clause_stack[-1]
        if clause.node is not event.node:
            raise RuntimeError(f"exit of <{event.node.name}> does not match {clause!r}")

        if clause.header is not None and clause.header_surrogate is not None:
            compile_structured_header(ctx, clause, clause.header, clause.header_surrogate)
            clause.title = _text_of(clause.header)
            clause.title_html = clause.header.decode_contents().strip()

        clause.build_examples()
        clause.build_notes()

        render_text_runs(
            ctx,
            clause.node,
            clause=clause,
            renderer=ctx.renderer if ctx.config.render_inline else None,
            in_alg=event.in_alg,
            current_id=event.current_id,
        )
        clause._prepend_special_kinds(ctx, event)
        clause._prepend_secnum(ctx)
        clause._add_biblio_entries(ctx)

        ctx.clause_stack.pop()
        logger.trace("Exited %r", clause)
        return clause
