"""
Logging setup for battlecore.

Modules log through logging.getLogger(__name__); this installs one
stream handler on the package logger. Calling it again only updates
the level.
"""

from __future__ import annotations
import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LEVEL = "WARNING"


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """
    Configure the "battlecore" logger.

    Args:
        level: Level name or number; defaults to BATTLECORE_LOG_LEVEL,
            then WARNING

    Returns:
        The package logger
    """
    if level is None:
        level = os.getenv("BATTLECORE_LOG_LEVEL", DEFAULT_LEVEL)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger("battlecore")
    logger.setLevel(level)

    # Prevent duplicate handlers if called multiple times
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
