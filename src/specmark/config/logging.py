# topmark:header:start
#
#   project      : SpecMark
#   file         : logging.py
#   file_relpath : src/specmark/config/logging.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""SpecMark logging with an extra TRACE level.

The compiler logs every clause enter/exit, numbering decision and registry
insert at TRACE, so a full document build stays quiet unless
``SPECMARK_LOG_LEVEL=TRACE`` is exported. Records are colored by severity with
`yachalk`.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, Final, cast

from yachalk import chalk

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

TRACE_LEVEL: Final[int] = logging.DEBUG - 5

ENV_LOG_LEVEL: Final[str] = "SPECMARK_LOG_LEVEL"


class SpecmarkLogger(logging.Logger):
    """Logger class adding `trace()` for messages below DEBUG."""

    def trace(
        self,
        msg: object,
        *args: object,
        extra: Mapping[str, object] | None = None,
    ) -> None:
        """Log ``msg % args`` with severity TRACE.

        Args:
            msg (object): The message to be logged.
            *args (object): Arguments merged into ``msg``.
            extra (Mapping[str, object] | None): Optional extra record attributes.
        """
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(
                TRACE_LEVEL,
                msg=msg,
                args=args,
                extra=extra,
                stacklevel=2,
            )


if not hasattr(logging, "TRACE"):
    logging.addLevelName(TRACE_LEVEL, "TRACE")
    logging.TRACE = TRACE_LEVEL  # type: ignore

logging.setLoggerClass(SpecmarkLogger)


LOG_FORMAT = "[%(levelname)s] %(message)s"
DEBUG_LOG_FORMAT = "[%(levelname)s] [%(filename)s:%(lineno)d] [%(funcName)s] %(message)s"

_LEVEL_NAMES: Final[dict[str, int]] = {
    "TRACE": TRACE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
    "NOTSET": logging.NOTSET,
}


def _color_for(level: int) -> Callable[[str], str]:
    if level >= logging.CRITICAL:
        return chalk.red_bright
    if level >= logging.ERROR:
        return chalk.red
    if level >= logging.WARNING:
        return chalk.yellow
    if level >= logging.INFO:
        return chalk.green
    if level >= logging.DEBUG:
        return chalk.gray
    if level >= TRACE_LEVEL:
        return chalk.blue
    return chalk.dim.red


class ChalkFormatter(logging.Formatter):
    """Formatter coloring each record according to its severity."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the record and colorize the result.

        Args:
            record (logging.LogRecord): The record to format.

        Returns:
            str: The colorized message.
        """
        return _color_for(record.levelno)(super().format(record))


def parse_log_level(value: str | None) -> int | None:
    """Translate a level name (``"TRACE"``, ``"debug"``) or number (``"10"``) to an int.

    Returns ``None`` for empty or unknown values.
    """
    if not value:
        return None
    token: str = value.strip().upper()
    if token.isdigit():
        return int(token)
    return _LEVEL_NAMES.get(token)


def resolve_env_log_level() -> int | None:
    """Return the level requested through ``SPECMARK_LOG_LEVEL``, or None if unset."""
    return parse_log_level(os.environ.get(ENV_LOG_LEVEL))


def setup_logging(level: int | None = None) -> None:
    """Configure the root logger with a colored stdout handler.

    If ``level`` is None the environment is consulted through
    `resolve_env_log_level`; the fallback is CRITICAL so library use stays silent.
    """
    if level is None:
        level = resolve_env_log_level() or logging.CRITICAL

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ChalkFormatter(LOG_FORMAT if level >= logging.INFO else DEBUG_LOG_FORMAT))
    root_logger.addHandler(handler)
    root_logger.propagate = False


def get_logger(name: str) -> SpecmarkLogger:
    """Return the `SpecmarkLogger` registered under ``name``.

    Args:
        name (str): Logger name, usually ``__name__``.

    Returns:
        SpecmarkLogger: The logger instance.
    """
    return cast("SpecmarkLogger", logging.getLogger(name))
