# topmark:header:start
#
#   project      : SpecMark
#   file         : biblio.py
#   file_relpath : src/specmark/biblio.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Namespace-scoped bibliography registry.

The registry maps cross-reference keys to entries within a namespace.
Namespaces form a forest rooted at the whole-document namespace; each one
may name a parent, and lookups that miss locally fall back to the parent,
recursively. Insertions never propagate: an entry lives in exactly the
namespace it was added to.

Two entry shapes exist:

    * `ClauseEntry`, keyed by the clause ``id``;
    * `OpEntry`, keyed by the algorithm ``aoid``.

Clause ids and op aoids live in separate key spaces. A clause whose id
equals an op's aoid is not a collision; two ops sharing an aoid in one
namespace are (the clause tree builder checks `keys_for_namespace`
before adding an op).

Typical usage:
    ```python
    biblio = Biblio("spec")
    biblio.create_namespace("intl", "spec")
    biblio.add(OpEntry(aoid="ToNumber", ref_id="sec-tonumber"), "spec")
    assert biblio.lookup_op("ToNumber", "intl") is not None
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Union

from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from specmark.config.logging import SpecmarkLogger
    from specmark.core.kinds import ClauseKind
    from specmark.grammar.types import Signature

logger: SpecmarkLogger = get_logger(__name__)


@dataclass(frozen=True)
class ClauseEntry:
    """Biblio entry for a clause."""

    type: ClassVar[str] = "clause"

    id: str
    title: str
    number: str
    aoid: str | None = None
    title_html: str | None = None

    @property
    def key(self) -> str:
        """The lookup key (the clause id)."""
        return self.id

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        data: dict[str, Any] = {
            "type": self.type,
            "id": self.id,
            "aoid": self.aoid,
            "title": self.title,
            "number": self.number,
        }
        if self.title_html is not None:
            data["titleHTML"] = self.title_html
        return data


@dataclass(frozen=True)
class OpEntry:
    """Biblio entry for an algorithm (abstract operation, method, ...)."""

    type: ClassVar[str] = "op"

    aoid: str
    ref_id: str
    kind: ClauseKind | None = None
    signature: Signature | None = None
    effects: tuple[str, ...] = ()
    skip_global_checks: bool = False
    skip_return_checks: bool = False

    @property
    def key(self) -> str:
        """The lookup key (the aoid)."""
        return self.aoid

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        data: dict[str, Any] = {
            "type": self.type,
            "aoid": self.aoid,
            "refId": self.ref_id,
            "kind": None if self.kind is None else self.kind.key,
            "signature": None if self.signature is None else self.signature.to_dict(),
            "effects": list(self.effects),
        }
        if self.skip_global_checks:
            data["skipGlobalChecks"] = True
        if self.skip_return_checks:
            data["skipReturnChecks"] = True
        return data


BiblioEntry = Union[ClauseEntry, OpEntry]


@dataclass
class Namespace:
    """One registry namespace.

    ``parent`` is a name, not an object: it is only used for lookups.
    """

    name: str
    parent: str | None = None
    ops: dict[str, OpEntry] = field(default_factory=lambda: {})
    clauses: dict[str, ClauseEntry] = field(default_factory=lambda: {})
    order: list[BiblioEntry] = field(default_factory=lambda: [])


class Biblio:
    """Registry of biblio entries grouped by namespace.

    Args:
        root_namespace: Name of the whole-document namespace, created eagerly.
    """

    def __init__(self, root_namespace: str) -> None:
        self.root_namespace: str = root_namespace
        self._namespaces: dict[str, Namespace] = {root_namespace: Namespace(root_namespace)}

    # --- namespaces ---

    def create_namespace(self, name: str, parent: str | None) -> Namespace:
        """Register ``name`` with lookups falling back to ``parent``.

        Re-creating an existing namespace keeps its entries and parent.

        Args:
            name (str): The new namespace.
            parent (str | None): The fallback namespace, which must exist.

        Returns:
            Namespace: The (possibly pre-existing) namespace.

        Raises:
            KeyError: If ``parent`` is not a known namespace.
        """
        if name in self._namespaces:
            return self._namespaces[name]
        if parent is not None and parent not in self._namespaces:
            raise KeyError(f"unknown parent namespace {parent!r}")
        ns = Namespace(name=name, parent=parent)
        self._namespaces[name] = ns
        logger.debug("Created namespace %r (parent %r)", name, parent)
        return ns

    def namespaces(self) -> tuple[str, ...]:
        """Return every namespace name in creation order."""
        return tuple(self._namespaces)

    def parent_of(self, namespace: str) -> str | None:
        """Return the parent namespace name, or None for a root."""
        return self._get(namespace).parent

    def chain(self, namespace: str) -> Iterator[Namespace]:
        """Yield ``namespace`` and then each of its ancestors, nearest first."""
        current: str | None = namespace
        while current is not None:
            ns: Namespace = self._get(current)
            yield ns
            current = ns.parent

    def _get(self, namespace: str) -> Namespace:
        try:
            return self._namespaces[namespace]
        except KeyError:
            raise KeyError(f"unknown namespace {namespace!r}") from None

    # --- insertion ---

    def add(self, entry: BiblioEntry, namespace: str | None = None) -> None:
        """Insert ``entry`` into exactly ``namespace`` (default: the root).

        A later entry with the same key in the same namespace replaces the
        earlier one; duplicate detection is the caller's job.

        Raises:
            KeyError: If ``namespace`` is unknown.
        """
        ns: Namespace = self._get(namespace or self.root_namespace)
        if isinstance(entry, OpEntry):
            ns.ops[entry.aoid] = entry
        else:
            ns.clauses[entry.id] = entry
        ns.order.append(entry)
        logger.trace("Added %s entry %r to namespace %r", entry.type, entry.key, ns.name)

    def keys_for_namespace(self, namespace: str) -> set[str]:
        """Return the aoid keys present directly in ``namespace`` (no fallback)."""
        return set(self._get(namespace).ops)

    # --- lookup ---

    def lookup_op(self, aoid: str, namespace: str | None = None) -> OpEntry | None:
        """Resolve ``aoid`` from ``namespace``, falling back through its parents."""
        for ns in self.chain(namespace or self.root_namespace):
            if aoid in ns.ops:
                return ns.ops[aoid]
        return None

    def lookup_clause(self, clause_id: str, namespace: str | None = None) -> ClauseEntry | None:
        """Resolve a clause id from ``namespace``, falling back through its parents."""
        for ns in self.chain(namespace or self.root_namespace):
            if clause_id in ns.clauses:
                return ns.clauses[clause_id]
        return None

    def by_id(self, clause_id: str) -> ClauseEntry | None:
        """Find a clause entry by id in any namespace."""
        for ns in self._namespaces.values():
            if clause_id in ns.clauses:
                return ns.clauses[clause_id]
        return None

    def visible_aoids(self, namespace: str) -> set[str]:
        """Return every aoid resolvable from ``namespace``, including ancestors."""
        keys: set[str] = set()
        for ns in self.chain(namespace):
            keys.update(ns.ops)
        return keys

    def entries(self, namespace: str) -> tuple[BiblioEntry, ...]:
        """Return the entries added directly to ``namespace``, in insertion order."""
        return tuple(self._get(namespace).order)

    # --- export ---

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly export grouped by namespace, in insertion order."""
        return {
            "root": self.root_namespace,
            "namespaces": [
                {
                    "namespace": ns.name,
                    "parent": ns.parent,
                    "entries": [e.to_dict() for e in ns.order],
                }
                for ns in self._namespaces.values()
            ],
        }
