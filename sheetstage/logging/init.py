from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Labeled stdout logging for the staging engine.

Lines look like ``INFO loaded book.xlsx: sheets=2``; wizard hosts grep for
the INFO|WARN|ERROR|SUMMARY prefix. Module loggers (``sheetstage.session``,
``sheetstage.services.uploader`` ...) propagate into the ``sheetstage``
logger configured here, which does not propagate to root.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "set_level",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "sheetstage"
SUMMARY_LEVEL = 25  # INFO と WARNING の間

LABELS: dict[int, str] = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; DEBUG lines also name the emitting module."""

    def format(self, record: logging.LogRecord) -> str:
        label = LABELS.get(record.levelno, record.levelname)
        message = record.getMessage()
        if record.levelno < logging.INFO:
            message = f"[{record.name}] {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return f"{label} {message}"


def setup_logging(level: int = logging.INFO, stream: TextIO | None = None) -> logging.Logger:
    """Attach the labeled stdout handler to the ``sheetstage`` logger.

    Repeated calls return the already configured logger unchanged; use
    ``set_level`` to change verbosity afterwards.

    Args:
        level: Initial level of the logger and its handler
        stream: Output stream, stdout when omitted
    """
    global _configured
    if _configured is not None:
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _configured = logger
    set_level(level)
    return logger


def set_level(level: int) -> None:
    """Apply ``level`` to the logger and every handler it owns."""
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(line: str) -> None:
    """Emit a summary line at SUMMARY level.

    Accepts the output of ``render_summary_line`` as is; a leading
    ``SUMMARY `` is dropped so the label is not printed twice.
    """
    get_logger().log(SUMMARY_LEVEL, line.removeprefix("SUMMARY "))


def reset_logging() -> None:
    """Forget the configured logger (tests re-run setup with a fresh stdout)."""
    global _configured
    _configured = None
