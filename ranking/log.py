"""Logging configuration for the ranking tool."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that carry the raw HTTP conversation
_WIRE_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: int = logging.WARNING, wire_log: Path | None = None) -> logging.Logger:
    """Configure the ``ranking`` logger with a console handler.

    Args:
        level: Level for the tool's own messages.
        wire_log: Optional file receiving every request/response event of
            the HTTP client at DEBUG level.  Wire events never reach the
            console.

    Returns:
        The configured ``ranking`` logger.
    """
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    logger = logging.getLogger("ranking")
    stale = set(logger.handlers)
    for name in _WIRE_LOGGERS:
        stale.update(logging.getLogger(name).handlers)
    for handler in stale:
        handler.close()

    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    wire_handler: logging.Handler = console_handler
    wire_level = logging.WARNING
    if wire_log is not None:
        wire_log = Path(wire_log)
        wire_log.parent.mkdir(parents=True, exist_ok=True)
        wire_handler = logging.FileHandler(wire_log, encoding="utf-8")
        wire_handler.setLevel(logging.DEBUG)
        wire_handler.setFormatter(
            logging.Formatter(fmt="[%(asctime)s] [%(levelname)s] %(message)s", datefmt=_DATE_FORMAT)
        )
        wire_level = logging.DEBUG

    for name in _WIRE_LOGGERS:
        wire_logger = logging.getLogger(name)
        wire_logger.handlers.clear()
        wire_logger.propagate = False
        wire_logger.setLevel(wire_level)
        wire_logger.addHandler(wire_handler)

    return logger
