# topmark:header:start
#
#   project      : SpecMark
#   file         : model.py
#   file_relpath : src/specmark/diagnostic/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core diagnostic types for the SpecMark compiler.

Every problem found while compiling a document is reported as a
`Diagnostic` and appended to the run's `DiagnosticLog`. Reporting never
raises: a malformed clause still gets a number and biblio entries so the
rest of the document can be processed.

Sections:
    * DiagnosticLevel: severity levels with associated terminal colors.
    * DiagnosticKind: what a diagnostic points at (node, contents, attribute).
    * RuleId: stable identifiers for every rule the compiler reports.
    * Diagnostic: immutable structured diagnostic payload.
    * DiagnosticStats: aggregated per-level counts.
    * DiagnosticLog: the append-only sink owned by a compile context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from bs4 import Tag

    from specmark.config.logging import SpecmarkLogger


logger: SpecmarkLogger = get_logger(__name__)


class DiagnosticLevel(Enum):
    """Severity levels, ordered ERROR > WARNING > INFO."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> Callable[[str], str]:
        """Return the `yachalk` color function associated with this severity level.

        Intended for human-readable output only; machine formats should not use colors.

        Returns:
            Callable[[str], str]: The `yachalk` color function for this level.
        """
        return cast(
            "Callable[[str], str]",
            {
                DiagnosticLevel.INFO: chalk.blue,
                DiagnosticLevel.WARNING: chalk.yellow,
                DiagnosticLevel.ERROR: chalk.red_bright,
            }[self],
        )


class DiagnosticKind(Enum):
    """The part of the document a diagnostic refers to.

    ``NODE`` points at an element as a whole, ``CONTENTS`` at a position inside
    an element's source (line/column are then meaningful), and ``ATTR`` at one
    of the element's attributes.
    """

    NODE = "node"
    CONTENTS = "contents"
    ATTR = "attr"


class RuleId:
    """Rule identifiers reported by the compiler.

    Notes:
        Values are part of the output contract; renaming one is a breaking change.
    """

    # structural
    MISSING_ID: Final[str] = "missing-id"
    MISSING_HEADER: Final[str] = "missing-header"
    CLAUSE_AFTER_ANNEX: Final[str] = "clause-after-annex"
    ANNEX_IN_CLAUSE: Final[str] = "annex-in-clause"

    # parse
    HEADER_FORMAT: Final[str] = "header-format"
    TYPE_PARSING: Final[str] = "type-parsing"

    # semantic
    HEADER_TYPE: Final[str] = "header-type"
    NUMERIC_METHOD_FOR: Final[str] = "numeric-method-for"
    DUPLICATE_DEFINITION: Final[str] = "duplicate-definition"
    COMPLETION_UNION: Final[str] = "completion-union"
    UNKNOWN_EFFECT: Final[str] = "unknown-effect"
    INVALID_NOTE: Final[str] = "invalid-note"


@dataclass(frozen=True)
class Diagnostic:
    """Structured diagnostic with a severity, a rule id and an optional position.

    Attributes:
        level: Severity.
        kind: What the diagnostic points at.
        rule_id: One of the `RuleId` constants.
        message: Human-readable description.
        node: The element the diagnostic refers to, when known.
        attr: The attribute name for ``ATTR`` diagnostics.
        line: 1-based line in the original document source, when known.
        column: 1-based column in the original document source, when known.
    """

    level: DiagnosticLevel
    kind: DiagnosticKind
    rule_id: str
    message: str
    node: Tag | None = field(default=None, compare=False, repr=False)
    attr: str | None = None
    line: int | None = None
    column: int | None = None

    @property
    def location(self) -> str:
        """Return ``"line:column"`` (or ``"line"``) when known, else an empty string."""
        if self.line is None:
            return ""
        if self.column is None:
            return str(self.line)
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class DiagnosticStats:
    """Aggregated counts for diagnostics by severity level."""

    n_info: int
    n_warning: int
    n_error: int

    @property
    def total(self) -> int:
        """Return the total count of diagnostics."""
        return self.n_info + self.n_warning + self.n_error


@dataclass
class DiagnosticLog:
    """Append-only diagnostics sink for a single compile run.

    The compiler reports through `warn` (almost everything) and `error`;
    callers inspect the log after the run. Nothing here raises.
    """

    items: list[Diagnostic] = field(default_factory=lambda: [])

    def _add(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)
        logger.trace(
            "Adding [%s] %s: %r",
            diagnostic.level.value,
            diagnostic.rule_id,
            diagnostic.message,
        )

    def report(
        self,
        level: DiagnosticLevel,
        kind: DiagnosticKind,
        rule_id: str,
        message: str,
        *,
        node: Tag | None = None,
        attr: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> Diagnostic:
        """Append a diagnostic and return it.

        Args:
            level: Severity.
            kind: What the diagnostic points at.
            rule_id: The rule identifier.
            message: The diagnostic message.
            node: The offending element, if any.
            attr: Offending attribute name for ``ATTR`` diagnostics.
            line: 1-based line in the document source.
            column: 1-based column in the document source.

        Returns:
            The recorded diagnostic.
        """
        diagnostic = Diagnostic(
            level=level,
            kind=kind,
            rule_id=rule_id,
            message=message,
            node=node,
            attr=attr,
            line=line,
            column=column,
        )
        self._add(diagnostic)
        return diagnostic

    def info(
        self,
        kind: DiagnosticKind,
        rule_id: str,
        message: str,
        *,
        node: Tag | None = None,
        attr: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> Diagnostic:
        """Append an ``info`` diagnostic; see `report` for the arguments."""
        return self.report(
            DiagnosticLevel.INFO,
            kind,
            rule_id,
            message,
            node=node,
            attr=attr,
            line=line,
            column=column,
        )

    def warn(
        self,
        kind: DiagnosticKind,
        rule_id: str,
        message: str,
        *,
        node: Tag | None = None,
        attr: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> Diagnostic:
        """Append a ``warning`` diagnostic; see `report` for the arguments."""
        return self.report(
            DiagnosticLevel.WARNING,
            kind,
            rule_id,
            message,
            node=node,
            attr=attr,
            line=line,
            column=column,
        )

    def error(
        self,
        kind: DiagnosticKind,
        rule_id: str,
        message: str,
        *,
        node: Tag | None = None,
        attr: str | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> Diagnostic:
        """Append an ``error`` diagnostic; see `report` for the arguments."""
        return self.report(
            DiagnosticLevel.ERROR,
            kind,
            rule_id,
            message,
            node=node,
            attr=attr,
            line=line,
            column=column,
        )

    def by_rule(self, rule_id: str) -> list[Diagnostic]:
        """Return the diagnostics reported under ``rule_id``, in report order."""
        return [d for d in self.items if d.rule_id == rule_id]

    def stats(self) -> DiagnosticStats:
        """Return per-level counts for diagnostics in this log."""
        return compute_diagnostic_stats(self.items)

    def has_warning(self) -> bool:
        """Return True if the log contains warning diagnostics."""
        return any(d.level == DiagnosticLevel.WARNING for d in self.items)

    def has_error(self) -> bool:
        """Return True if the log contains error diagnostics."""
        return any(d.level == DiagnosticLevel.ERROR for d in self.items)

    def to_dict(self) -> dict[str, int]:
        """Return a JSON-friendly mapping of counts by severity.

        Returns:
            Mapping with keys ``"info"``, ``"warning"``, and ``"error"``.
        """
        stats: DiagnosticStats = self.stats()
        return {
            "info": stats.n_info,
            "warning": stats.n_warning,
            "error": stats.n_error,
        }

    def __iter__(self) -> Iterator[Diagnostic]:
        """Iterate over all diagnostics in insertion order."""
        return iter(self.items)

    def __len__(self) -> int:
        """Return the number of diagnostics stored in this log."""
        return len(self.items)


def compute_diagnostic_stats(diagnostics: Iterable[Diagnostic]) -> DiagnosticStats:
    """Return per-level counts for a sequence of diagnostics.

    Args:
        diagnostics: the diagnostics to count.

    Returns:
        Per-level counts.
    """
    items: list[Diagnostic] = list(diagnostics)
    n_info: int = sum(1 for d in items if d.level == DiagnosticLevel.INFO)
    n_warn: int = sum(1 for d in items if d.level == DiagnosticLevel.WARNING)
    n_err: int = sum(1 for d in items if d.level == DiagnosticLevel.ERROR)
    return DiagnosticStats(n_info=n_info, n_warning=n_warn, n_error=n_err)
