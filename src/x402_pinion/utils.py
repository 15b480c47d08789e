"""
Shared helpers: package logger and small formatting utilities.
"""

import logging
from typing import Optional


logger = logging.getLogger("x402_pinion")


def setup_logger(level: str = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger.

    Calling this more than once only updates the level; handlers are not
    duplicated.

    Args:
        level: Logging level name (e.g. ``"DEBUG"``).
        fmt: Optional format string for the handler.

    Returns:
        The configured package logger.
    """
    logger.setLevel(level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(fmt or "%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    return logger


def mask_secret(value: Optional[str], visible: int = 8) -> str:
    """Return a log-safe prefix of a key, e.g. ``pk_abc12...``."""
    if not value:
        return ""
    return value[:visible] + "..."
