# topmark:header:start
#
#   project      : SpecMark
#   file         : errors.py
#   file_relpath : src/specmark/cli/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""CLI exceptions mapped to SpecMark exit codes.

Styling:
    Exceptions prefer the project console if available (see `show()`); if no
    console is present in the Click context, they fall back to Click's default
    styling.
"""

from __future__ import annotations

from typing import IO, Any

import click

from specmark.cli.exit_codes import ExitCode


class SpecmarkCliError(click.ClickException):
    """Base class for SpecMark CLI errors."""

    exit_code = ExitCode.FAILURE

    def format_message(self) -> str:
        """Return the plain error message text."""
        return str(getattr(self, "message", ""))

    def show(self, file: IO[Any] | None = None) -> None:
        """Display the error using the project console if available."""
        ctx: click.Context | None = click.get_current_context(silent=True)
        console = ctx.obj.get("console") if ctx is not None and isinstance(ctx.obj, dict) else None
        if console is None:
            super().show(file)
            return
        console.error(console.styled(f"Error: {self.format_message()}", fg="bright_red"))


class SpecmarkUsageError(SpecmarkCliError):
    """Error for command-line invocation errors (invalid flags/args)."""

    exit_code = ExitCode.USAGE_ERROR


class SpecmarkIOError(SpecmarkCliError):
    """Error for I/O errors reading or writing files."""


class SpecmarkBuildError(SpecmarkCliError):
    """The document could not be compiled (strict header mode)."""
