# topmark:header:start
#
#   project      : SpecMark
#   file         : __init__.py
#   file_relpath : src/specmark/cli/commands/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark CLI subcommands."""
