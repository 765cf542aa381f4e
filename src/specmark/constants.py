# topmark:header:start
#
#   project      : SpecMark
#   file         : constants.py
#   file_relpath : src/specmark/constants.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark Constants."""

from __future__ import annotations

from importlib.metadata import version as get_version

SPECMARK_VERSION: str = get_version("specmark")
