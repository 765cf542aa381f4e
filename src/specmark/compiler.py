# topmark:header:start
#
#   project      : SpecMark
#   file         : compiler.py
#   file_relpath : src/specmark/compiler.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Compile driver.

`compile_document` runs one complete compile over an authoring document:

    1. parse the source into a `Document` and create a fresh `CompileContext`;
    2. walk the tree, dispatching enter/exit events to `Clause` and collecting
       notes and examples onto the innermost clause;
    3. render and register the text outside any clause;
    4. autolink operation references (when enabled).

The returned `CompileResult` gives access to the context (bibliography,
effect worklist, diagnostics, clause tree) and serializes the document.

Example:
    ```python
    result = compile_document(source)
    for diagnostic in result.diagnostics:
        print(diagnostic.rule_id, diagnostic.message)
    html = result.to_html()
    ```
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from specmark.autolink import autolink
from specmark.clause import Clause
from specmark.config.logging import get_logger
from specmark.config.model import Config
from specmark.context import CompileContext
from specmark.diagnostic import DiagnosticKind, RuleId
from specmark.document import Document, Phase, walk
from specmark.document.tree import attr
from specmark.document.walker import CLAUSE_ELEMENTS, EXAMPLE_ELEMENT, NOTE_ELEMENT
from specmark.inline import MarkdownishRenderer, render_text_runs
from specmark.notes import Example, Note, NoteType

if TYPE_CHECKING:
    from specmark.biblio import Biblio
    from specmark.config.logging import SpecmarkLogger
    from specmark.diagnostic import DiagnosticLog
    from specmark.document.walker import WalkEvent
    from specmark.effects import EffectWorklist
    from specmark.inline import InlineRenderer

logger: SpecmarkLogger = get_logger(__name__)


@dataclass
class CompileResult:
    """Outcome of `compile_document`."""

    context: CompileContext

    @property
    def biblio(self) -> Biblio:
        """The populated bibliography."""
        return self.context.biblio

    @property
    def effects(self) -> EffectWorklist:
        """The collected effect worklist."""
        return self.context.effects

    @property
    def diagnostics(self) -> DiagnosticLog:
        """Every diagnostic reported during the run."""
        return self.context.diagnostics

    @property
    def clauses(self) -> list[Clause]:
        """The top-level clauses, in document order."""
        return self.context.subclauses

    def to_html(self) -> str:
        """Serialize the compiled document."""
        return self.context.document.to_html()

    def biblio_json(self, *, indent: int | None = 2) -> str:
        """Return the bibliography as JSON."""
        return json.dumps(self.context.biblio.to_dict(), indent=indent)


def _enter_note(ctx: CompileContext, event: WalkEvent) -> None:
    raw_type: str | None = attr(event.node, "type")
    note_type: NoteType = NoteType.NORMAL
    if raw_type == NoteType.EDITOR.value:
        note_type = NoteType.EDITOR
    elif raw_type is not None:
        ctx.diagnostics.warn(
            DiagnosticKind.ATTR,
            RuleId.INVALID_NOTE,
            f'unknown note type {raw_type!r} (expected "editor" or no type)',
            node=event.node,
            attr="type",
        )
    note = Note(ctx.document, event.node, note_type)
    clause: Clause | None = ctx.current_clause
    if clause is None:
        note.build()
    elif note_type is NoteType.EDITOR:
        clause.editor_notes.append(note)
    else:
        clause.notes.append(note)


def _enter_example(ctx: CompileContext, event: WalkEvent) -> None:
    example = Example(ctx.document, event.node)
    clause: Clause | None = ctx.current_clause
    if clause is None:
        example.build()
    else:
        clause.examples.append(example)


def run_traversal(ctx: CompileContext) -> None:
    """Walk ``ctx.document`` and build the clause tree."""
    for event in walk(ctx.document.soup):
        name: str = event.node.name
        if name in CLAUSE_ELEMENTS:
            if event.phase is Phase.ENTER:
                Clause.enter(ctx, event)
            else:
                Clause.exit(ctx, event)
        elif event.phase is Phase.ENTER:
            if name == NOTE_ELEMENT:
                _enter_note(ctx, event)
            elif name == EXAMPLE_ELEMENT:
                _enter_example(ctx, event)


def compile_document(
    source: str,
    config: Config | None = None,
    renderer: InlineRenderer | None = None,
) -> CompileResult:
    """Compile an authoring document.

    Args:
        source (str): The authoring markup.
        config (Config | None): Run configuration (defaults when None).
        renderer (InlineRenderer | None): Inline renderer; `MarkdownishRenderer`
            when None.

    Returns:
        CompileResult: The compiled document and everything collected on the way.

    Raises:
        MissingHeaderError: When ``config.strict_headers`` is set and a clause
            has no header.
    """
    ctx = CompileContext(
        document=Document(source),
        config=config or Config(),
        renderer=renderer or MarkdownishRenderer(),
    )
    run_traversal(ctx)
    render_text_runs(
        ctx,
        ctx.document.soup,
        renderer=ctx.renderer if ctx.config.render_inline else None,
    )
    if ctx.config.autolink:
        autolink(ctx)
    logger.info(
        "Compiled %d top-level clauses with %d diagnostics",
        len(ctx.subclauses),
        len(ctx.diagnostics),
    )
    return CompileResult(ctx)
