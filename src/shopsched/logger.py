"""Verbosity-driven logging for the scheduling engine.

Engine modules log through one shared logger. The command line maps its
``--verbose`` count onto four levels:

- 0: errors only
- 1: ``changes`` - task placements, shifts and repairs
- 2: ``checks`` - every task and constraint the algorithms look at
- 3: ``debug`` - algorithm internals such as candidate starts
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

CHANGES_LEVEL = 25  # Between INFO and WARNING
CHECKS_LEVEL = 15  # Between DEBUG and INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0
VERBOSITY_CHANGES = 1
VERBOSITY_CHECKS = 2
VERBOSITY_DEBUG = 3

LOGGER_NAME = "shopsched"

_LEVEL_BY_VERBOSITY = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}

_PLAIN_FORMAT = "%(message)s"
_TAGGED_FORMAT = "[%(levelname)s] %(message)s"


class ShopSchedLogger(logging.Logger):
    """Logger with ``changes()`` and ``checks()`` beside the standard methods."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a placement, shift or repair (shown from verbosity 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a task or constraint being examined (shown from verbosity 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> ShopSchedLogger:
    """Return the shared shopsched logger.

    Every call hands back the same instance; configure it with setup_logger().
    """
    logging.setLoggerClass(ShopSchedLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, ShopSchedLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Point the shared logger at a stream with the given verbosity.

    Reconfiguring replaces the previous handler. Verbosity is clamped to
    0..3; at debug verbosity every line is tagged with its level name.

    Args:
        verbosity: 0=errors only, 1=changes, 2=checks, 3=debug
        stream: Output stream (defaults to sys.stderr)
    """
    verbosity = min(max(verbosity, VERBOSITY_SILENT), VERBOSITY_DEBUG)
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_BY_VERBOSITY[verbosity])

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    fmt = _TAGGED_FORMAT if verbosity == VERBOSITY_DEBUG else _PLAIN_FORMAT
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop all handlers and return to errors only.

    Tests call this between cases so no handler outlives its stream.
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def get_verbosity() -> int:
    """The verbosity matching the logger's current level."""
    level = get_logger().level
    for verbosity in (VERBOSITY_DEBUG, VERBOSITY_CHECKS, VERBOSITY_CHANGES):
        if level <= _LEVEL_BY_VERBOSITY[verbosity]:
            return verbosity
    return VERBOSITY_SILENT


def is_silent() -> bool:
    """Check whether only errors get through (verbosity 0).

    Returns:
        True if changes, checks and debug messages are all suppressed
    """
    return get_verbosity() == VERBOSITY_SILENT


def changes_enabled() -> bool:
    """Check whether changes messages are written (verbosity 1 and up).

    Returns:
        True if logger.changes() produces output
    """
    return get_logger().isEnabledFor(CHANGES_LEVEL)


def checks_enabled() -> bool:
    """Check whether checks messages are written (verbosity 2 and up).

    Returns:
        True if logger.checks() produces output
    """
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """Check whether debug messages are written (verbosity 3).

    Returns:
        True if logger.debug() produces output
    """
    return get_logger().isEnabledFor(logging.DEBUG)
