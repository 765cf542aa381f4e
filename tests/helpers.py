# topmark:header:start
#
#   project      : SpecMark
#   file         : helpers.py
#   file_relpath : tests/helpers.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Shared helpers for compiling documents and driving the CLI in tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from click.testing import CliRunner, Result

from specmark.cli.exit_codes import ExitCode
from specmark.cli.main import cli
from specmark.compiler import compile_document
from specmark.config import MutableConfig

if TYPE_CHECKING:
    from collections.abc import Sequence

    from specmark.clause import Clause
    from specmark.compiler import CompileResult
    from specmark.config import Config
    from specmark.diagnostic import Diagnostic


def make_config(**overrides: Any) -> Config:
    """Return a frozen `Config` built from defaults and overrides.

    Args:
        **overrides (Any): Keyword overrides applied to the mutable builder before freezing.

    Returns:
        Config: An immutable configuration snapshot.
    """
    m: MutableConfig = MutableConfig.from_defaults()
    for k, v in overrides.items():
        setattr(m, k, v)
    return m.freeze()


def compile_html(source: str, **overrides: Any) -> CompileResult:
    """Compile ``source`` with a config built from ``overrides``."""
    return compile_document(source, make_config(**overrides))


def rule_ids(result: CompileResult) -> list[str]:
    """Return the rule ids of every diagnostic, in report order."""
    return [d.rule_id for d in result.diagnostics]


def only(items: Sequence[Diagnostic]) -> Diagnostic:
    """Return the single diagnostic in ``items``, failing otherwise."""
    assert len(items) == 1, [d.message for d in items]
    return items[0]


def find_clause(clauses: Sequence[Clause], clause_id: str) -> Clause:
    """Depth-first search of a clause tree by id."""
    for clause in clauses:
        if clause.id == clause_id:
            return clause
        try:
            return find_clause(clause.subclauses, clause_id)
        except LookupError:
            continue
    raise LookupError(clause_id)


def run_cli(argv: Sequence[str]) -> Result:
    """Invoke the CLI without changing the working directory.

    Args:
        argv (Sequence[str]): CLI argument vector, e.g. ``["--no-color", "version"]``.

    Returns:
        Result: The `click.testing.Result` produced by `CliRunner.invoke`.
    """
    runner = CliRunner()
    return runner.invoke(cli, list(argv))


def assert_SUCCESS(result: Result) -> None:
    """Assert that the command exited successfully (code 0)."""
    assert result.exit_code == ExitCode.SUCCESS, result.output


def assert_FAILURE(result: Result) -> None:
    """Assert that the command exited with FAILURE (code 1)."""
    assert result.exit_code == ExitCode.FAILURE, result.output
