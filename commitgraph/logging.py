"""Loggers for the graph pipeline.

Library modules only ask for a child of the ``commitgraph`` logger; handlers
are installed by the CLI through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "commitgraph"
CONSOLE_FORMAT = "[commitgraph] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``commitgraph.<name>``, or the package logger itself."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send package log records to stderr, plus ``log_file`` when given.

    Calling this again replaces the handlers from the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    logger.addHandler(_handler(logging.StreamHandler(), level, CONSOLE_FORMAT))
    if log_file is not None:
        logger.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT))
    return logger


__all__ = ["configure_logging", "get_logger"]
