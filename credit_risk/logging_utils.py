"""Logger setup for the credit sweep."""

import logging
import os
import sys

__all__ = ["setup_logger"]


def setup_logger(
    name: str = "credit_risk",
    level: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        name: Logger name (package name by default)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); falls back to
            the LOG_LEVEL environment variable, then INFO
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    format_string = format_string or (
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(fmt=format_string, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(getattr(logging, level.upper()))

    return logger
