# topmark:header:start
#
#   project      : SpecMark
#   file         : io.py
#   file_relpath : src/specmark/config/io.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Load TOML configuration sources.

Configuration is read from ``specmark.toml`` or from the ``[tool.specmark]``
table of ``pyproject.toml``. Parsing is done with `tomlkit` and returned as
plain ``dict`` structures; shape problems are logged and the offending key
is ignored, so a bad config file never stops a build.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import tomlkit
from tomlkit.exceptions import ParseError as TomlkitParseError

from specmark.config.keys import Toml
from specmark.config.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from specmark.config.logging import SpecmarkLogger

TomlTable = dict[str, Any]

logger: SpecmarkLogger = get_logger(__name__)


def load_toml_dict(path: Path) -> TomlTable:
    """Load and parse a TOML file from the filesystem.

    Args:
        path: Path to a TOML document.

    Returns:
        The parsed TOML content, or an empty dict when the file cannot be
        read or parsed (the error is logged).
    """
    try:
        text: str = path.read_text(encoding="utf-8")
        doc: tomlkit.TOMLDocument = tomlkit.parse(text)
        data_any: Any = doc.unwrap()
        return cast("TomlTable", data_any) if isinstance(data_any, dict) else {}
    except OSError as e:
        logger.error("Error loading TOML from %s: %s", path, e)
        return {}
    except TomlkitParseError as e:
        logger.error("Error decoding TOML from %s: %s", path, e)
        return {}


def extract_specmark_table(path: Path, data: TomlTable) -> TomlTable:
    """Return the SpecMark table of a parsed config file.

    For ``pyproject.toml`` this is ``[tool.specmark]`` (empty when absent);
    any other file is a SpecMark config file in its entirety.
    """
    if path.name != Toml.PYPROJECT_FILE_NAME:
        return data
    table: Any = data
    for key in Toml.PYPROJECT_TOOL_PATH:
        table = table.get(key) if isinstance(table, dict) else None
    return cast("TomlTable", table) if isinstance(table, dict) else {}


def discover_config_file(directory: Path) -> Path | None:
    """Return the config file to use for ``directory``, if any.

    ``specmark.toml`` wins over a ``pyproject.toml`` that has a
    ``[tool.specmark]`` table.
    """
    candidate: Path = directory / Toml.CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    pyproject: Path = directory / Toml.PYPROJECT_FILE_NAME
    if pyproject.is_file() and extract_specmark_table(pyproject, load_toml_dict(pyproject)):
        return pyproject
    return None


def get_table(table: TomlTable, key: str) -> TomlTable:
    """Return the sub-table ``key`` (empty when missing or not a table)."""
    value: Any = table.get(key)
    if isinstance(value, dict):
        return cast("TomlTable", value)
    if value is not None:
        logger.warning("Expected [%s] to be a table, got %r; ignoring", key, type(value).__name__)
    return {}


def get_bool_or_none(table: TomlTable, key: str) -> bool | None:
    """Return a boolean value, or None when missing or of the wrong type."""
    value: Any = table.get(key)
    if value is None or isinstance(value, bool):
        return value
    logger.warning("Expected %r to be a boolean, got %r; ignoring", key, value)
    return None


def get_str_or_none(table: TomlTable, key: str) -> str | None:
    """Return a non-empty string value, or None when missing or invalid."""
    value: Any = table.get(key)
    if value is None:
        return None
    if isinstance(value, str) and value.strip():
        return value.strip()
    logger.warning("Expected %r to be a non-empty string, got %r; ignoring", key, value)
    return None


def get_str_list_or_none(table: TomlTable, key: str) -> list[str] | None:
    """Return a list of strings, or None when missing or invalid.

    Non-string items are dropped with a warning.
    """
    value: Any = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        logger.warning("Expected %r to be a list of strings, got %r; ignoring", key, value)
        return None
    items: list[str] = []
    for item in cast("list[Any]", value):
        if isinstance(item, str):
            items.append(item)
        else:
            logger.warning("Ignoring non-string item %r in %r", item, key)
    return items
