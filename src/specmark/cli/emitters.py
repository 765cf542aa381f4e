# topmark:header:start
#
#   project      : SpecMark
#   file         : emitters.py
#   file_relpath : src/specmark/cli/emitters.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Human-readable diagnostic rendering for the CLI.

Diagnostics are colored per severity with `yachalk` (see
`specmark.diagnostic.DiagnosticLevel.color`); `ClickConsole` strips the ANSI
codes again when color output is disabled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from yachalk import chalk

from specmark.diagnostic import compute_diagnostic_stats
from specmark.document.tree import attr

if TYPE_CHECKING:
    from collections.abc import Iterable

    from specmark.cli.console import ClickConsole
    from specmark.diagnostic import Diagnostic, DiagnosticStats


def format_diagnostic(diagnostic: Diagnostic, *, source_name: str, verbose: bool = False) -> str:
    """Return one diagnostic as ``file:line:col: level [rule] message``."""
    location: str = f"{source_name}:{diagnostic.location}" if diagnostic.location else source_name
    level: str = diagnostic.level.color(diagnostic.level.value)
    line: str = f"{chalk.bold(location)}: {level} [{diagnostic.rule_id}] {diagnostic.message}"
    if verbose and diagnostic.node is not None:
        node_name: str = diagnostic.node.name
        node_id: str | None = attr(diagnostic.node, "id")
        where: str = f"<{node_name} id={node_id!r}>" if node_id else f"<{node_name}>"
        if diagnostic.attr:
            where += f" @{diagnostic.attr}"
        line += chalk.dim(f"  ({where})")
    return line


def triage_summary(stats: DiagnosticStats) -> str:
    """Return a compact summary like ``1 error, 2 warnings``."""
    parts: list[str] = []
    if stats.n_error:
        parts.append(f"{stats.n_error} error" + ("s" if stats.n_error != 1 else ""))
    if stats.n_warning:
        parts.append(f"{stats.n_warning} warning" + ("s" if stats.n_warning != 1 else ""))
    if stats.n_info and not (stats.n_error or stats.n_warning):
        parts.append(f"{stats.n_info} info" + ("s" if stats.n_info != 1 else ""))
    return ", ".join(parts) if parts else "no diagnostics"


def render_diagnostics(
    console: ClickConsole,
    diagnostics: Iterable[Diagnostic],
    *,
    source_name: str,
    verbosity_level: int,
) -> None:
    """Print diagnostics and a summary line to the console's error stream.

    Nothing is printed when ``verbosity_level`` is negative (``--quiet``).
    """
    if verbosity_level < 0:
        return
    items: list[Diagnostic] = list(diagnostics)
    for diagnostic in items:
        console.print_err(
            format_diagnostic(diagnostic, source_name=source_name, verbose=verbosity_level > 1)
        )
    if items or verbosity_level > 0:
        console.print_err(f"{source_name}: {triage_summary(compute_diagnostic_stats(items))}")
