# topmark:header:start
#
#   project      : SpecMark
#   file         : keys.py
#   file_relpath : src/specmark/config/keys.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""TOML section names and keys used by SpecMark configuration.

The constants below define the external configuration schema as it appears
in ``specmark.toml`` and in ``[tool.specmark]`` inside ``pyproject.toml``.

Notes:
    - Values must match user-facing TOML keys exactly.
    - Renaming or removing a key is a breaking change.
"""

from __future__ import annotations

from typing import Final


class Toml:
    """TOML section names and keys."""

    CONFIG_FILE_NAME: Final[str] = "specmark.toml"
    PYPROJECT_FILE_NAME: Final[str] = "pyproject.toml"
    PYPROJECT_TOOL_PATH: Final[tuple[str, str]] = ("tool", "specmark")

    # [compile]
    SECTION_COMPILE: Final[str] = "compile"

    KEY_NAMESPACE: Final[str] = "namespace"
    KEY_KNOWN_EFFECTS: Final[str] = "known_effects"
    KEY_STRICT_HEADERS: Final[str] = "strict_headers"
    KEY_LINT_SPEC: Final[str] = "lint_spec"
    KEY_RENDER_INLINE: Final[str] = "render_inline"
    KEY_AUTOLINK: Final[str] = "autolink"
