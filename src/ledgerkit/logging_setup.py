"""Logging configuration for ledgerkit.

The CLI calls ``configure_logging`` once at startup. Library modules only call
``get_logger(__name__)`` and never attach handlers of their own.
"""

import logging
import os
import sys
from typing import IO, Optional

_PKG_LOGGER_NAME = "ledgerkit"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_handler: Optional[logging.StreamHandler] = None


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
        raise ValueError(f"Unknown log level '{level}'")
    env_val = os.environ.get("LEDGERKIT_LOG_LEVEL")
    if env_val:
        return _parse_level(env_val)
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """Attach a single stream handler to the package logger.

    Subsequent calls adjust the level and point the handler at the current
    stream.

    Args:
        level: Level as int or name. If None, LEDGERKIT_LOG_LEVEL is checked,
            then WARNING is used
        fmt: Optional format string
        stream: Output stream (defaults to stderr)

    Raises:
        ValueError: If the level name is not a logging level
    """
    global _handler
    numeric_level = _parse_level(level)
    logger = logging.getLogger(_PKG_LOGGER_NAME)

    if _handler is not None:
        _handler.setStream(stream if stream is not None else sys.stderr)
        logger.setLevel(numeric_level)
        return

    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    _handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    logger.addHandler(_handler)
    logger.setLevel(numeric_level)
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger, keeping the package logger silent until configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
