# topmark:header:start
#
#   project      : SpecMark
#   file         : exit_codes.py
#   file_relpath : src/specmark/cli/exit_codes.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exit codes used by the SpecMark CLI."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Standardized exit codes for the SpecMark CLI.

    Attributes:
        SUCCESS (int): The document compiled without failing diagnostics.
        FAILURE (int): An error-level diagnostic was reported (or a warning
            with ``lint_spec`` enabled), or the build could not run.
        USAGE_ERROR (int): Invalid command-line usage.
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE_ERROR = 2
