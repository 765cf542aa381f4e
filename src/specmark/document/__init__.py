# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/document/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Document tree access and traversal."""

from __future__ import annotations

from specmark.document.tree import Document, SourceLocation
from specmark.document.walker import Phase, WalkEvent, walk

__all__ = [
    "Document",
    "Phase",
    "SourceLocation",
    "WalkEvent",
    "walk",
]
