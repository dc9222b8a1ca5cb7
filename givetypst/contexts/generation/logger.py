"""
Generation context logger.

Provides logging interface for generation context with automatic [generate] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[generate]"


def _log_info(message: str) -> None:
    """Log info message with [generate] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [generate] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [generate] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_request_failed(template_key: str, status_code: int, error: str) -> None:
    """Log a request that ended in an error response."""
    if status_code < 500:
        _log_info(f"Rejected request for {template_key or '<missing>'}: {status_code} {error}")
    else:
        _log_warning(f"Generation failed for {template_key}: {status_code} {error.splitlines()[0] if error else ''}")
