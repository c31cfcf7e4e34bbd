"""Logging configuration for the job board.

Board modules log through ``logging.getLogger(__name__)``, so their loggers
live under the ``src`` package. The CLI logs through ``job_board``. Both
trees write to one shared console handler.
"""

import logging
import sys
from typing import TextIO

# Logger name for the application
LOGGER_NAME = "job_board"

# Every logger tree that gets the console handler
LOGGER_NAMES = (LOGGER_NAME, "src")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: logging.StreamHandler | None = None


def _parse_level(level: str | None) -> int:
    if level is None:
        return logging.INFO
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def configure_logging(
    level: str | None = None,
    stream: TextIO | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Attach the console handler and set the board's log level.

    Calling this again only changes the level, unless a different
    ``stream`` is given, in which case the handler is replaced.

    Args:
        level: Log level name; INFO when missing or unknown.
        stream: Where log lines go (defaults to stderr).
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The application logger.
    """
    global _handler

    log_level = _parse_level(level)
    target = stream if stream is not None else sys.stderr

    if _handler is not None and _handler.stream is not target:
        _detach()

    if _handler is None:
        _handler = logging.StreamHandler(target)
        _handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
        for name in LOGGER_NAMES:
            logger = logging.getLogger(name)
            logger.addHandler(_handler)
            # The console handler is the only sink; the root logger stays quiet.
            logger.propagate = False

    _handler.setLevel(log_level)
    for name in LOGGER_NAMES:
        logging.getLogger(name).setLevel(log_level)

    return logging.getLogger(LOGGER_NAME)


def _detach() -> None:
    global _handler

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        if _handler is not None:
            logger.removeHandler(_handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
    _handler = None


def reset_logging() -> None:
    """Remove the console handler and restore default logger settings."""
    _detach()
