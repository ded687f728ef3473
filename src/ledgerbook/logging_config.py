"""Logging setup for the ledgerbook logger hierarchy."""

import logging
import sys
from typing import Any, Union

LOGGER_NAME = "ledgerbook"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Marks handlers installed here so a second call replaces instead of stacking.
_HANDLER_FLAG = "_ledgerbook_handler"


def configure_logging(level: Union[int, str] = logging.WARNING, stream: Any = None) -> None:
    """Install a single stderr handler on the ledgerbook logger (idempotent).

    Calling again swaps the handler, so the newest level and stream win.

    Args:
        level: Logging level or level name
        stream: Output stream, defaults to the current sys.stderr
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_FLAG, True)
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    root_logger.propagate = False


def reset_logging() -> None:
    """Remove installed handlers and restore defaults. For tests."""
    root_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root_logger.removeHandler(handler)
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
