# topmark:header:start
#
#   project      : SpecMark
#   file         : enum_mixins.py
#   file_relpath : src/specmark/core/enum_mixins.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Keyed string enums for attribute values read from the document.

Markup attributes such as ``type="sdo"`` or ``legacy`` are string-keyed in
the source. `KeyedStrEnum` turns them into a closed set of members once, at
parse time, so the rest of the compiler branches on members rather than on
raw strings.

Example:
    ```python
    class Flavor(KeyedStrEnum):
        PLAIN = ("plain", "Plain")
        FANCY = ("fancy", "Fancy", ("deluxe",))

    assert Flavor.parse("Deluxe") is Flavor.FANCY
    assert Flavor.parse("nope") is None
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable

_KS = TypeVar("_KS", bound="KeyedStrEnum")


def _norm_token(s: str) -> str:
    """Normalize an attribute value so spelling variants compare equal."""
    return " ".join(s.strip().lower().replace("_", " ").replace("-", " ").split())


class KeyedStrEnum(str, Enum):
    """Enum where `.value` is the canonical markup spelling.

    Attributes:
        label (str): Human-readable label for the member.
        aliases (tuple[str, ...]): Alternative spellings accepted by `parse()`.
    """

    label: str
    aliases: tuple[str, ...]

    def __new__(
        cls: type[_KS],
        key: str,
        label: str,
        aliases: Iterable[str] = (),
    ) -> _KS:
        """Create a member with its canonical key, label and aliases.

        Args:
            key (str): The canonical spelling (stored as `.value`).
            label (str): The human-readable label.
            aliases (Iterable[str]): Optional alternative spellings.

        Returns:
            _KS: The newly created enum member.
        """
        obj: _KS = str.__new__(cls, key)
        obj._value_ = key
        obj.label = label
        obj.aliases = tuple(aliases)
        return obj

    @property
    def key(self) -> str:
        """Canonical spelling (same as `.value`)."""
        return str(self.value)

    @classmethod
    def parse(cls: type[_KS], raw: str | None) -> _KS | None:
        """Parse an attribute value into a member.

        Matches the canonical key, the member name and any alias. Matching is
        case-insensitive and treats ``-``, ``_`` and runs of spaces alike.

        Returns:
            The matching member, or ``None`` for ``None`` and unknown values.
        """
        if raw is None:
            return None
        token: str = _norm_token(raw)
        for m in cls:
            if token in (_norm_token(m.value), _norm_token(m.name)):
                return m
            if any(token == _norm_token(a) for a in m.aliases):
                return m
        return None
