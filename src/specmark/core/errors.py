# topmark:header:start
#
#   project      : SpecMark
#   file         : errors.py
#   file_relpath : src/specmark/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions raised by SpecMark.

Almost every problem is reported as a diagnostic instead of raised; the
exceptions below cover the grammar internals and the one fatal path
(`MissingHeaderError` in strict header mode).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bs4 import Tag


class SpecmarkError(Exception):
    """Base class for SpecMark exceptions."""


class ParseError(SpecmarkError):
    """A grammar failure at a byte offset.

    The offset is relative to the string handed to the parser. Callers that
    parsed a substring shift it (`shifted`) before mapping it to a
    line/column in the surrounding document.

    Attributes:
        message: What went wrong.
        offset: 0-based offset into the parsed input.
    """

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(message)
        self.message: str = message
        self.offset: int = offset

    def shifted(self, delta: int) -> ParseError:
        """Return a copy of this error with ``delta`` added to its offset."""
        return ParseError(self.message, self.offset + delta)

    def __str__(self) -> str:
        return f"{self.message} (at offset {self.offset})"


class MissingHeaderError(SpecmarkError):
    """A clause has no locatable ``<h1>`` while strict header mode is on."""

    def __init__(self, clause_id: str | None, node: Tag | None = None) -> None:
        super().__init__(f"clause {clause_id or '<no id>'} has no header element")
        self.clause_id: str | None = clause_id
        self.node: Tag | None = node
