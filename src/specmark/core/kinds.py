# topmark:header:start
#
#   project      : SpecMark
#   file         : kinds.py
#   file_relpath : src/specmark/core/kinds.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Closed enumerations for clause attributes.

``type="..."`` on a clause becomes a `ClauseKind`; the boolean attributes
``normative-optional``, ``legacy`` and ``deprecated`` become `SpecialKind`
members. Both are resolved once, when the clause is entered.
"""

from __future__ import annotations

from typing import Final

from specmark.core.enum_mixins import KeyedStrEnum


class ClauseKind(KeyedStrEnum):
    """The declared kind of an algorithm clause.

    The first five members are algorithm-like: a structured header of one of
    these kinds gets its name as aoid, and the op biblio entry records the
    kind. Methods are described by their receiver (``for``) instead.
    """

    ABSTRACT_OPERATION = ("abstract operation", "abstract operation")
    SYNTAX_DIRECTED_OPERATION = (
        "syntax-directed operation",
        "syntax-directed operation",
        ("sdo",),
    )
    HOST_DEFINED_ABSTRACT_OPERATION = (
        "host-defined abstract operation",
        "host-defined abstract operation",
    )
    IMPLEMENTATION_DEFINED_ABSTRACT_OPERATION = (
        "implementation-defined abstract operation",
        "implementation-defined abstract operation",
    )
    NUMERIC_METHOD = ("numeric method", "abstract operation")
    CONCRETE_METHOD = ("concrete method", "concrete method")
    INTERNAL_METHOD = ("internal method", "internal method")

    @property
    def is_algorithm(self) -> bool:
        """Return True for the kinds whose compiled name becomes the clause aoid."""
        return self in ALGORITHM_KINDS

    @property
    def is_method(self) -> bool:
        """Return True for kinds that take a receiver type (``for``)."""
        return self in (ClauseKind.CONCRETE_METHOD, ClauseKind.INTERNAL_METHOD)


ALGORITHM_KINDS: Final[frozenset[ClauseKind]] = frozenset(
    {
        ClauseKind.ABSTRACT_OPERATION,
        ClauseKind.SYNTAX_DIRECTED_OPERATION,
        ClauseKind.HOST_DEFINED_ABSTRACT_OPERATION,
        ClauseKind.IMPLEMENTATION_DEFINED_ABSTRACT_OPERATION,
        ClauseKind.NUMERIC_METHOD,
    }
)


class SpecialKind(KeyedStrEnum):
    """Boolean clause attributes rendered as a leading label."""

    NORMATIVE_OPTIONAL = ("normative-optional", "Normative Optional")
    LEGACY = ("legacy", "Legacy")
    DEPRECATED = ("deprecated", "Deprecated")
