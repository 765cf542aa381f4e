# topmark:header:start
#
#   project      : SpecMark
#   file         : context.py
#   file_relpath : src/specmark/context.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Per-run compile state.

A `CompileContext` is created at the start of every compile and threaded
through the traversal. It owns everything one run mutates: the bibliography,
the effect worklist, the diagnostics log, the clause stack and numberer,
the top-level clauses and the text runs registered for autolinking.
Nothing here is module-level, so independent compiles in one process never
share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from specmark.biblio import Biblio
from specmark.config.logging import get_logger
from specmark.config.model import Config
from specmark.diagnostic import DiagnosticLog
from specmark.effects import EffectWorklist
from specmark.numbering import ClauseNumberer

if TYPE_CHECKING:
    from specmark.clause import Clause
    from specmark.config.logging import SpecmarkLogger
    from specmark.document.tree import Document
    from specmark.inline import InlineRenderer, TextRun

logger: SpecmarkLogger = get_logger(__name__)


@dataclass
class CompileContext:
    """Mutable state of a single compile run.

    Attributes:
        document: The document being compiled.
        config: The frozen configuration for this run.
        renderer: The inline renderer, or None to skip inline rendering.
        diagnostics: Append-only diagnostics sink.
        biblio: The bibliography, rooted at ``config.namespace``.
        effects: The effect worklist.
        numberer: The clause numberer.
        clause_stack: Clauses entered but not yet exited, outermost first.
        subclauses: Top-level clauses in document order.
        clauses_entered: Number of clauses entered so far; the next clause's position.
        text_runs: Registered text runs, per namespace.
    """

    document: Document
    config: Config = field(default_factory=Config)
    renderer: InlineRenderer | None = None
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    biblio: Biblio = field(init=False)
    effects: EffectWorklist = field(default_factory=EffectWorklist)
    numberer: ClauseNumberer = field(init=False)
    clause_stack: list[Clause] = field(default_factory=lambda: [])
    subclauses: list[Clause] = field(default_factory=lambda: [])
    clauses_entered: int = 0
    text_runs: dict[str, list[TextRun]] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        self.biblio = Biblio(self.config.namespace)
        self.numberer = ClauseNumberer(self.diagnostics)

    @property
    def current_clause(self) -> Clause | None:
        """The innermost clause being compiled, if any."""
        return self.clause_stack[-1] if self.clause_stack else None

    @property
    def namespace(self) -> str:
        """The namespace of the innermost clause (the root namespace outside clauses)."""
        clause: Clause | None = self.current_clause
        return clause.namespace if clause is not None else self.biblio.root_namespace

    def register_text_run(self, run: TextRun) -> None:
        """Record ``run`` for autolinking under its namespace."""
        self.text_runs.setdefault(run.namespace, []).append(run)

    def line_and_column(self, offset: int) -> tuple[int, int]:
        """Map an offset in the document source to a 1-based line and column."""
        return self.document.line_and_column(offset)
