# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/core/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Shared enumerations and errors used across SpecMark."""
