# topmark:header:start
#
#   project      : SpecMark
#   file         : build.py
#   file_relpath : src/specmark/cli/commands/build.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark `build` command.

Compiles one specification document and writes the resulting HTML (to a
file or stdout) and, optionally, the bibliography as JSON.

Configuration is merged from the built-in defaults, a ``specmark.toml`` (or
``pyproject.toml`` with ``[tool.specmark]``) next to the input, an explicit
``--config`` file, and finally the command-line flags.

Exit status:
    0 when the build succeeded; 1 when an error-level diagnostic was reported
    (or any warning when ``lint_spec`` is enabled) or the build failed.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from specmark.cli.cmd_common import get_console, get_effective_verbosity
from specmark.cli.emitters import render_diagnostics
from specmark.cli.errors import SpecmarkBuildError, SpecmarkIOError
from specmark.cli.exit_codes import ExitCode
from specmark.compiler import compile_document
from specmark.config.logging import get_logger
from specmark.config.model import MutableConfig
from specmark.core.errors import MissingHeaderError

if TYPE_CHECKING:
    from specmark.compiler import CompileResult
    from specmark.config.logging import SpecmarkLogger
    from specmark.config.model import Config

logger: SpecmarkLogger = get_logger(__name__)


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise SpecmarkIOError(f"cannot write {path}: {e}") from e


@click.command(
    name="build",
    help="Compile a specification document into HTML.",
)
@click.argument(
    "input_path",
    metavar="INPUT",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the compiled document to this file (default: stdout).",
)
@click.option(
    "--biblio",
    "biblio_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the bibliography as JSON to this file.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read configuration from this TOML file (overrides discovered config).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Fail when a clause has no header element.",
)
def build_command(
    *,
    input_path: Path,
    output_path: Path | None,
    biblio_path: Path | None,
    config_path: Path | None,
    strict: bool,
) -> None:
    """Compile INPUT and report diagnostics.

    Args:
        input_path (Path): The authoring document.
        output_path (Path | None): Destination for the compiled HTML.
        biblio_path (Path | None): Destination for the bibliography JSON.
        config_path (Path | None): Explicit configuration file.
        strict (bool): Enable strict header mode.
    """
    ctx: click.Context = click.get_current_context()
    console = get_console(ctx)
    vlevel: int = get_effective_verbosity(ctx)

    draft: MutableConfig = MutableConfig.load_merged(
        config_file=config_path,
        search_dir=input_path.resolve().parent,
    )
    if strict:
        draft.strict_headers = True
    config: Config = draft.freeze()
    logger.debug("Effective config: %r", config)

    try:
        source: str = input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecmarkIOError(f"cannot read {input_path}: {e}") from e

    try:
        result: CompileResult = compile_document(source, config)
    except MissingHeaderError as e:
        raise SpecmarkBuildError(str(e)) from e

    render_diagnostics(
        console,
        result.diagnostics,
        source_name=str(input_path),
        verbosity_level=vlevel,
    )

    html: str = result.to_html()
    if output_path is not None:
        _write_text(output_path, html)
    else:
        console.print(html, nl=False)
    if biblio_path is not None:
        _write_text(biblio_path, result.biblio_json())

    failed: bool = result.diagnostics.has_error() or (
        config.lint_spec and result.diagnostics.has_warning()
    )
    ctx.exit(ExitCode.FAILURE if failed else ExitCode.SUCCESS)
