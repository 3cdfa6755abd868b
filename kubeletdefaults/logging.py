"""Logging configuration for the kubeletdefaults package."""
import logging
import sys
from typing import Optional, TextIO

from .config import DEFAULT_LOG_FORMAT


def setup_logger(
    name: str,
    level: int = logging.INFO,
    fmt: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Set up a logger with the specified name and log level.

    Args:
        name: The name of the logger
        level: The logging level (default: logging.INFO)
        fmt: Log format, defaults to the package format
        stream: Output stream (default: stdout)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Don't add handlers if they're already configured
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setLevel(level)

        formatter = logging.Formatter(fmt or DEFAULT_LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
        handler.setFormatter(formatter)

        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger
