# topmark:header:start
#
#   project      : SpecMark
#   file         : types.py
#   file_relpath : src/specmark/grammar/types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Type trees and signatures produced by the header compiler.

A `Type` is one of five frozen node classes, discriminated by their ``kind``
class attribute:

    * `NamedType`: a named or primitive type (``Number``, ``~unused~``).
    * `ListType`: ``a List of ...``.
    * `RecordType`: ``a Record with fields [[A]] (...) and [[B]] (...)``.
    * `UnionType`: two or more alternatives.
    * `CompletionType`: a Completion Record, optionally carrying the type of
      its normal value.

`Signature` groups the compiled parameters and return type of one
algorithm. All of these are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union


class CompletionKind(Enum):
    """Which completions a `CompletionType` admits."""

    NORMAL = "normal"
    ABRUPT = "abrupt"
    MIXED = "mixed"


@dataclass(frozen=True)
class NamedType:
    """A named or primitive type."""

    kind: ClassVar[str] = "named"

    name: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"kind": self.kind, "name": self.name}


@dataclass(frozen=True)
class ListType:
    """A List whose elements all have type ``element``."""

    kind: ClassVar[str] = "list"

    element: Type

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"kind": self.kind, "elements": self.element.to_dict()}


@dataclass(frozen=True)
class RecordField:
    """One ``[[Name]] (type)`` entry of a record type."""

    name: str
    type: Type

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"name": self.name, "type": self.type.to_dict()}


@dataclass(frozen=True)
class RecordType:
    """A Record with the given fields, in declaration order."""

    kind: ClassVar[str] = "record"

    fields: tuple[RecordField, ...]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"kind": self.kind, "fields": [f.to_dict() for f in self.fields]}


@dataclass(frozen=True)
class UnionType:
    """Two or more alternatives, flattened (no member is itself a union)."""

    kind: ClassVar[str] = "union"

    types: tuple[Type, ...]

    def has_completion(self) -> bool:
        """Return True if at least one member is a completion."""
        return any(isinstance(t, CompletionType) for t in self.types)

    def has_non_completion(self) -> bool:
        """Return True if at least one member is not a completion."""
        return any(not isinstance(t, CompletionType) for t in self.types)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"kind": self.kind, "types": [t.to_dict() for t in self.types]}


@dataclass(frozen=True)
class CompletionType:
    """A Completion Record.

    ``value`` is the type carried by a normal completion, when declared.
    """

    kind: ClassVar[str] = "completion"

    completion: CompletionKind
    value: Type | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        data: dict[str, Any] = {"kind": self.kind, "completionType": self.completion.value}
        if self.value is not None:
            data["typeOfValueIfNormal"] = self.value.to_dict()
        return data


Type = Union[NamedType, ListType, RecordType, UnionType, CompletionType]


def is_completion_union(t: Type | None) -> bool:
    """Return True for a union mixing completion and non-completion members."""
    return isinstance(t, UnionType) and t.has_completion() and t.has_non_completion()


@dataclass(frozen=True)
class Parameter:
    """A compiled algorithm parameter."""

    name: str
    type: Type | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {"name": self.name, "type": None if self.type is None else self.type.to_dict()}


@dataclass(frozen=True)
class Signature:
    """The compiled signature of one algorithm."""

    parameters: tuple[Parameter, ...] = field(default_factory=tuple)
    optional_parameters: tuple[Parameter, ...] = field(default_factory=tuple)
    return_type: Type | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "parameters": [p.to_dict() for p in self.parameters],
            "optionalParameters": [p.to_dict() for p in self.optional_parameters],
            "return": None if self.return_type is None else self.return_type.to_dict(),
        }
