# topmark:header:start
#
#   project      : SpecMark
#   file         : model.py
#   file_relpath : src/specmark/config/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration model and merge policy.

This module defines:
    - `Config`: an immutable, runtime snapshot handed to the compiler.
    - `MutableConfig`: a mutable builder used while loading and merging; it
      can be frozen into `Config` and thawed back for edits.

Scope:
    - *In scope*: data shapes, defaulting rules, merge policy
      (`MutableConfig.merge_with`), and freeze/thaw mechanics.
    - *Out of scope*: TOML parsing and file discovery, which live in
      `specmark.config.io`.

Tri-state fields:
    `MutableConfig` uses ``None`` for "not set by this layer", so merging a
    file over the defaults only overrides what the file actually declares.
    `freeze` resolves every remaining ``None`` to its default.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from specmark.config.io import (
    discover_config_file,
    extract_specmark_table,
    get_bool_or_none,
    get_str_list_or_none,
    get_str_or_none,
    get_table,
    load_toml_dict,
)
from specmark.config.keys import Toml
from specmark.config.logging import get_logger
from specmark.effects import USER_CODE

if TYPE_CHECKING:
    from specmark.config.io import TomlTable
    from specmark.config.logging import SpecmarkLogger

logger: SpecmarkLogger = get_logger(__name__)

DEFAULT_NAMESPACE: Final[str] = "spec"
DEFAULT_KNOWN_EFFECTS: Final[tuple[str, ...]] = (USER_CODE,)


# ------------------ Immutable runtime config ------------------


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable runtime configuration for one compile run.

    Attributes:
        namespace (str): Name of the whole-document biblio namespace.
        known_effects (tuple[str, ...]): Effect names accepted in structured
            headers; others are reported as ``unknown-effect``.
        strict_headers (bool): Raise `MissingHeaderError` for a clause without
            a locatable ``<h1>`` instead of warning.
        lint_spec (bool): Treat warnings as failures when computing the CLI
            exit code.
        render_inline (bool): Run the inline renderer over clause text.
        autolink (bool): Wrap references to known operations in cross-links.
        config_files (tuple[Path, ...]): The config files that were merged,
            in load order.
    """

    namespace: str = DEFAULT_NAMESPACE
    known_effects: tuple[str, ...] = DEFAULT_KNOWN_EFFECTS
    strict_headers: bool = False
    lint_spec: bool = False
    render_inline: bool = True
    autolink: bool = True
    config_files: tuple[Path, ...] = ()

    def thaw(self) -> MutableConfig:
        """Return a mutable copy of this frozen config.

        Returns:
            MutableConfig: A builder initialized from this snapshot.
        """
        return MutableConfig(
            namespace=self.namespace,
            known_effects=list(self.known_effects),
            strict_headers=self.strict_headers,
            lint_spec=self.lint_spec,
            render_inline=self.render_inline,
            autolink=self.autolink,
            config_files=list(self.config_files),
        )


# -------------------------- Mutable builder --------------------------


@dataclass
class MutableConfig:
    """Mutable configuration used while loading and merging.

    Every field except ``config_files`` is tri-state: ``None`` means the
    layer did not set it. See `Config` for the meaning of each field.
    """

    namespace: str | None = None
    known_effects: list[str] | None = None
    strict_headers: bool | None = None
    lint_spec: bool | None = None
    render_inline: bool | None = None
    autolink: bool | None = None
    config_files: list[Path] = field(default_factory=lambda: [])

    # ---------------------------- Build/freeze ----------------------------

    def freeze(self) -> Config:
        """Freeze this builder into an immutable `Config`, applying defaults."""
        effects: list[str] = (
            list(DEFAULT_KNOWN_EFFECTS) if self.known_effects is None else self.known_effects
        )
        return Config(
            namespace=self.namespace or DEFAULT_NAMESPACE,
            known_effects=tuple(dict.fromkeys(effects)),
            strict_headers=bool(self.strict_headers),
            lint_spec=bool(self.lint_spec),
            render_inline=True if self.render_inline is None else self.render_inline,
            autolink=True if self.autolink is None else self.autolink,
            config_files=tuple(self.config_files),
        )

    # --------------------------- Loaders/parsers --------------------------

    @classmethod
    def from_defaults(cls) -> MutableConfig:
        """Return a builder holding the built-in defaults."""
        return Config().thaw()

    @classmethod
    def from_toml_dict(cls, data: TomlTable, config_file: Path | None = None) -> MutableConfig:
        """Build a draft from a SpecMark TOML table.

        Unknown keys are ignored; values of the wrong type are logged and
        ignored.

        Args:
            data (TomlTable): The SpecMark table (``specmark.toml`` contents or
                ``[tool.specmark]``).
            config_file (Path | None): Where ``data`` came from, if a file.

        Returns:
            MutableConfig: A draft with only the declared fields set.
        """
        compile_table: TomlTable = get_table(data, Toml.SECTION_COMPILE)
        draft = cls(
            namespace=get_str_or_none(compile_table, Toml.KEY_NAMESPACE),
            known_effects=get_str_list_or_none(compile_table, Toml.KEY_KNOWN_EFFECTS),
            strict_headers=get_bool_or_none(compile_table, Toml.KEY_STRICT_HEADERS),
            lint_spec=get_bool_or_none(compile_table, Toml.KEY_LINT_SPEC),
            render_inline=get_bool_or_none(compile_table, Toml.KEY_RENDER_INLINE),
            autolink=get_bool_or_none(compile_table, Toml.KEY_AUTOLINK),
        )
        if config_file is not None:
            draft.config_files.append(config_file)
        logger.debug("Loaded config draft from %s: %r", config_file or "<dict>", draft)
        return draft

    @classmethod
    def from_toml_file(cls, path: Path) -> MutableConfig:
        """Load a draft from ``specmark.toml`` or a ``pyproject.toml``."""
        table: TomlTable = extract_specmark_table(path, load_toml_dict(path))
        return cls.from_toml_dict(table, config_file=path)

    @classmethod
    def load_merged(
        cls,
        *,
        config_file: Path | None = None,
        search_dir: Path | None = None,
    ) -> MutableConfig:
        """Merge defaults, a discovered config file and an explicit one.

        Precedence (last wins): defaults, the file discovered in
        ``search_dir``, then ``config_file``.

        Args:
            config_file (Path | None): A config file given explicitly.
            search_dir (Path | None): Directory searched for ``specmark.toml``
                or ``pyproject.toml``.

        Returns:
            MutableConfig: The merged draft.
        """
        merged: MutableConfig = cls.from_defaults()
        if search_dir is not None:
            discovered: Path | None = discover_config_file(search_dir)
            if discovered is not None and discovered != config_file:
                merged = merged.merge_with(cls.from_toml_file(discovered))
        if config_file is not None:
            merged = merged.merge_with(cls.from_toml_file(config_file))
        return merged

    # ------------------------------- Merging -------------------------------

    def merge_with(self, other: MutableConfig) -> MutableConfig:
        """Return a new draft where values set in ``other`` override this draft.

        Args:
            other (MutableConfig): The draft whose set fields win.

        Returns:
            MutableConfig: A new merged draft.
        """
        return MutableConfig(
            namespace=other.namespace if other.namespace is not None else self.namespace,
            known_effects=other.known_effects
            if other.known_effects is not None
            else self.known_effects,
            strict_headers=other.strict_headers
            if other.strict_headers is not None
            else self.strict_headers,
            lint_spec=other.lint_spec if other.lint_spec is not None else self.lint_spec,
            render_inline=other.render_inline
            if other.render_inline is not None
            else self.render_inline,
            autolink=other.autolink if other.autolink is not None else self.autolink,
            config_files=self.config_files + other.config_files,
        )
