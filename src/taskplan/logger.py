"""Logging configuration for taskplan with custom verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

# Custom levels between the standard ones
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - verbosity 1
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - verbosity 2

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")


class TaskplanLogger(logging.Logger):
    """Logger with semantic verbosity methods.

    - changes(): verbosity 1 - assignments, computed normatives and start times
    - checks(): verbosity 2 - per-resource matching and availability decisions
    - debug(): verbosity 3 - calendar arithmetic and parsing details
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> TaskplanLogger:
    """Get the taskplan logger instance (singleton)."""
    logging.setLoggerClass(TaskplanLogger)
    logger = logging.getLogger("taskplan")
    assert isinstance(logger, TaskplanLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the taskplan logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=silent (errors only), 1=changes, 2=checks, 3=debug
        stream: Optional output stream (defaults to sys.stderr)
    """
    logger = get_logger()
    logger.handlers.clear()

    level_map = {
        0: logging.ERROR,
        1: CHANGES_LEVEL,
        2: CHECKS_LEVEL,
        3: logging.DEBUG,
    }
    logger.setLevel(level_map.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean state (used between tests)."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def changes_enabled() -> bool:
    """Check if changes-level logging is enabled (verbosity >= 1)."""
    return get_logger().isEnabledFor(CHANGES_LEVEL)


def debug_enabled() -> bool:
    """Check if debug-level logging is enabled (verbosity >= 3)."""
    return get_logger().isEnabledFor(logging.DEBUG)
