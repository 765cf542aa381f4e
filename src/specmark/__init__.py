# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark package.

SpecMark compiles section-structured specification markup into a numbered,
cross-referenced document. It builds the clause tree, compiles structured
algorithm headers into typed signatures, and exposes the resulting
bibliography and effect worklist. Entry point: `specmark.compiler.compile_document`.
"""

from __future__ import annotations
