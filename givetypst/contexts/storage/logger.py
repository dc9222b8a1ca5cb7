"""
Storage context logger.

Provides logging interface for storage context with automatic [storage] prefix.
All storage modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[storage]"


def _log_warning(message: str) -> None:
    """Log warning message with [storage] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [storage] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_fetch_result(key: str, max_bytes: int, size: int, elapsed_time: float) -> None:
    """Log a completed fetch, noting when the object was cut at the size limit."""
    _log_debug(f"Fetched {key}: {size} bytes ({elapsed_time:.3f}s)")
    if size >= max_bytes:
        _log_warning(f"{key} reached the {max_bytes} byte limit; content may be truncated")
