# topmark:header:start
#
#   project      : SpecMark
#   file         : cmd_common.py
#   file_relpath : src/specmark/cli/cmd_common.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Helpers shared by CLI commands for reading group-level state."""

from __future__ import annotations

import click

from specmark.cli.console import ClickConsole


def get_console(ctx: click.Context) -> ClickConsole:
    """Return the console stored on the context, creating a default one if needed."""
    ctx.ensure_object(dict)
    console: ClickConsole | None = ctx.obj.get("console")
    if console is None:
        console = ClickConsole(enable_color=False)
        ctx.obj["console"] = console
    return console


def get_effective_verbosity(ctx: click.Context) -> int:
    """Return the program-output verbosity set by the group (0 when unset)."""
    ctx.ensure_object(dict)
    return int(ctx.obj.get("verbosity_level", 0))
