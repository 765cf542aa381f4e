# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/diagnostic/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Diagnostics reported while compiling a document."""

from __future__ import annotations

from specmark.diagnostic.model import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticLevel,
    DiagnosticLog,
    DiagnosticStats,
    RuleId,
    compute_diagnostic_stats,
)

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticLevel",
    "DiagnosticLog",
    "DiagnosticStats",
    "RuleId",
    "compute_diagnostic_stats",
]
