# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/config/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Configuration handling for SpecMark.

Configuration is read from ``specmark.toml`` or from ``[tool.specmark]`` in
``pyproject.toml`` (see `specmark.config.io`), merged over the built-in
defaults by `MutableConfig`, and frozen into an immutable `Config` for the
compiler.
"""

from __future__ import annotations

from specmark.config.model import Config, MutableConfig

__all__ = [
    "Config",
    "MutableConfig",
]
