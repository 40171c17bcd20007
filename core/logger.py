"""Centralized logging utility with colored console output."""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


_loggers: dict[str, logging.Logger] = {}

DEFAULT_LEVEL_NAME = "INFO"


def _level_from_env() -> int:
    """Resolve the default level from LOG_LEVEL (falls back to INFO)."""
    name = os.getenv("LOG_LEVEL", DEFAULT_LEVEL_NAME).upper().strip()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get or create a logger with colored console output.

    Args:
        name: Logger name (typically __name__ of calling module).
        level: Optional logging level. Defaults to LOG_LEVEL env or INFO.

    Returns:
        Configured logger instance.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(level or _level_from_env())

    if not logger.handlers:
        console = Console(stderr=True)
        handler = RichHandler(
            console=console,
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
    _loggers[name] = logger
    return logger


def set_level(level: int) -> None:
    """Apply a level to every logger created so far (used by --verbose)."""
    for logger in _loggers.values():
        logger.setLevel(level)
