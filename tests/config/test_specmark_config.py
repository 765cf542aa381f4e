# topmark:header:start
#
#   project      : SpecMark
#   file         : test_specmark_config.py
#   file_relpath : tests/config/test_specmark_config.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for configuration loading, merging and freezing.

Covers `specmark.config.io` (TOML loading and discovery) and
`specmark.config.model` (the mutable builder and the frozen `Config`).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from specmark.config import Config, MutableConfig
from specmark.config.io import discover_config_file, load_toml_dict
from specmark.config.model import DEFAULT_KNOWN_EFFECTS, DEFAULT_NAMESPACE

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults() -> None:
    """A builder with nothing set freezes to the built-in defaults."""
    cfg: Config = MutableConfig().freeze()
    assert cfg == Config()
    assert cfg.namespace == DEFAULT_NAMESPACE == "spec"
    assert cfg.known_effects == DEFAULT_KNOWN_EFFECTS == ("user-code",)
    assert cfg.render_inline is True
    assert cfg.autolink is True
    assert cfg.strict_headers is False
    assert cfg.lint_spec is False
    assert MutableConfig.from_defaults().freeze() == cfg


def test_from_toml_dict_reads_compile_table() -> None:
    draft: MutableConfig = MutableConfig.from_toml_dict(
        {
            "compile": {
                "namespace": " intl ",
                "known_effects": ["user-code", "io", "io"],
                "strict_headers": True,
                "autolink": False,
                "unknown_key": 1,
            }
        }
    )
    assert draft.lint_spec is None
    assert draft.render_inline is None

    cfg: Config = draft.freeze()
    assert cfg.namespace == "intl"
    assert cfg.known_effects == ("user-code", "io")
    assert cfg.strict_headers is True
    assert cfg.autolink is False
    assert cfg.config_files == ()


def test_wrong_types_are_ignored() -> None:
    """Values of the wrong type are dropped, leaving the defaults in place."""
    draft: MutableConfig = MutableConfig.from_toml_dict(
        {
            "compile": {
                "namespace": "",
                "known_effects": ["io", 3, "gc"],
                "strict_headers": "yes",
                "render_inline": 0,
            }
        }
    )
    assert draft.namespace is None
    assert draft.known_effects == ["io", "gc"]
    assert draft.strict_headers is None
    assert draft.render_inline is None
    assert MutableConfig.from_toml_dict({"compile": "not a table"}).freeze() == Config()


def test_explicit_empty_effect_list() -> None:
    cfg: Config = MutableConfig.from_toml_dict({"compile": {"known_effects": []}}).freeze()
    assert cfg.known_effects == ()


def test_merge_with_prefers_set_fields() -> None:
    base = MutableConfig(namespace="spec", lint_spec=True, known_effects=["user-code"])
    over = MutableConfig(namespace="intl", autolink=False)

    merged: MutableConfig = base.merge_with(over)
    assert merged.namespace == "intl"
    assert merged.lint_spec is True
    assert merged.autolink is False
    assert merged.known_effects == ["user-code"]
    # neither input changes
    assert base.namespace == "spec"
    assert over.lint_spec is None


def test_thaw_freeze_round_trip() -> None:
    cfg: Config = MutableConfig(namespace="ns", known_effects=["a", "b"], lint_spec=True).freeze()
    thawed: MutableConfig = cfg.thaw()
    assert thawed.known_effects == ["a", "b"]
    thawed.known_effects.append("c")
    assert cfg.known_effects == ("a", "b")
    assert thawed.freeze().known_effects == ("a", "b", "c")


def test_config_is_immutable() -> None:
    cfg = Config()
    with pytest.raises(AttributeError):
        cfg.namespace = "other"  # type: ignore[misc]


# --- files ---


def test_load_toml_dict_errors_return_empty(tmp_path: Path) -> None:
    bad: Path = tmp_path / "bad.toml"
    bad.write_text("this is = = not toml", encoding="utf-8")

    assert load_toml_dict(bad) == {}
    assert load_toml_dict(tmp_path / "missing.toml") == {}


def test_discovery_prefers_specmark_toml(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[tool.specmark.compile]\nnamespace = "from-pyproject"\n', encoding="utf-8"
    )
    assert discover_config_file(tmp_path) == tmp_path / "pyproject.toml"

    (tmp_path / "specmark.toml").write_text('[compile]\nnamespace = "own"\n', encoding="utf-8")
    assert discover_config_file(tmp_path) == tmp_path / "specmark.toml"


def test_pyproject_without_tool_table_is_not_a_config(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
    assert discover_config_file(tmp_path) is None


def test_from_toml_file_reads_pyproject_table(tmp_path: Path) -> None:
    pyproject: Path = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[project]\nname = "x"\n\n[tool.specmark.compile]\nlint_spec = true\n', encoding="utf-8"
    )
    cfg: Config = MutableConfig.from_toml_file(pyproject).freeze()
    assert cfg.lint_spec is True
    assert cfg.config_files == (pyproject,)


def test_load_merged_precedence(tmp_path: Path) -> None:
    """An explicit config file overrides the discovered one, which overrides defaults."""
    (tmp_path / "specmark.toml").write_text(
        '[compile]\nnamespace = "discovered"\nlint_spec = true\n', encoding="utf-8"
    )
    explicit: Path = tmp_path / "explicit.toml"
    explicit.write_text('[compile]\nnamespace = "explicit"\n', encoding="utf-8")

    cfg: Config = MutableConfig.load_merged(config_file=explicit, search_dir=tmp_path).freeze()
    assert cfg.namespace == "explicit"
    assert cfg.lint_spec is True
    assert cfg.config_files == (tmp_path / "specmark.toml", explicit)


def test_load_merged_does_not_read_a_file_twice(tmp_path: Path) -> None:
    own: Path = tmp_path / "specmark.toml"
    own.write_text('[compile]\nautolink = false\n', encoding="utf-8")

    cfg: Config = MutableConfig.load_merged(config_file=own, search_dir=tmp_path).freeze()
    assert cfg.autolink is False
    assert cfg.config_files == (own,)


def test_load_merged_without_files(tmp_path: Path) -> None:
    assert MutableConfig.load_merged(search_dir=tmp_path).freeze() == Config()
