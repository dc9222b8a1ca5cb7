"""
Serving context logger.

Provides logging interface for serving context with automatic [serve] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[serve]"


def _log_info(message: str) -> None:
    """Log info message with [serve] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [serve] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [serve] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
