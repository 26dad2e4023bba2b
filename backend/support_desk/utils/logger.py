"""
Centralized logging configuration for the Support Desk service.

Console output is colour-coded per level and every module gets its own
named logger through `get_logger(__name__)`.
"""

import copy
import logging
import sys
from typing import Optional, Union


class ColoredFormatter(logging.Formatter):
    """Formatter with color-coded level names for console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    ICONS = {
        'DEBUG': '🔍',
        'INFO': '✅',
        'WARNING': '⚠️',
        'ERROR': '❌',
        'CRITICAL': '🚨',
    }

    def format(self, record):
        # Work on a copy so other handlers see the plain record
        record = copy.copy(record)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{self.BOLD}"
                f"{self.ICONS.get(levelname, '')} {levelname}{self.RESET}"
            )
        record.name = f"{self.BOLD}{record.name}{self.RESET}"
        return super().format(record)


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        from support_desk.core.config import get_settings
        level = get_settings().LOG_LEVEL
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def setup_logger(
    name: str,
    level: Optional[Union[int, str]] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level; defaults to the configured LOG_LEVEL
        format_string: Custom format string (optional)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    resolved = _resolve_level(level)
    logger.setLevel(resolved)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)

    if format_string is None:
        format_string = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'

    console_handler.setFormatter(
        ColoredFormatter(format_string, datefmt='%Y-%m-%d %H:%M:%S')
    )
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get or create a logger for the specified module."""
    return setup_logger(name)


def log_separator(logger: logging.Logger, char: str = "=", length: int = 80):
    """Log a separator line for visual clarity."""
    logger.info(char * length)
