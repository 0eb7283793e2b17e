"""
scribeview.logging - Centralized logging configuration.

Provides a simple logging setup with optional verbose mode for debugging.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("scribeview")


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger for a module name."""
    if name == "scribeview" or name.startswith("scribeview."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the scribeview package.

    Args:
        verbose: If True, enable DEBUG level logging; otherwise WARNING level
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )
    logger.setLevel(level)
