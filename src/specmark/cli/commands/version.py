# topmark:header:start
#
#   project      : SpecMark
#   file         : version.py
#   file_relpath : src/specmark/cli/commands/version.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark `version` command.

Prints the current SpecMark version as installed in the active Python environment.
"""

from __future__ import annotations

import click

from specmark.cli.cmd_common import get_console, get_effective_verbosity
from specmark.constants import SPECMARK_VERSION


@click.command(
    name="version",
    help="Show the current version of SpecMark.",
)
def version_command() -> None:
    """Show the current version of SpecMark."""
    ctx: click.Context = click.get_current_context()
    console = get_console(ctx)
    if get_effective_verbosity(ctx) > 0:
        console.print(console.styled("SpecMark version:", bold=True, underline=True))
        console.print(f"    {console.styled(SPECMARK_VERSION, bold=True)}")
    else:
        console.print(console.styled(SPECMARK_VERSION, bold=True))
