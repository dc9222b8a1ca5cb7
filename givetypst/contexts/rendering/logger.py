"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compilation_start(compiler_name: str, working_dir: Path, source_size: int, has_data: bool) -> None:
    """Log start of compilation with context."""
    _log_debug(f"Compiling with {compiler_name} in {working_dir}")
    _log_debug(f"  Source: {source_size} bytes")
    _log_debug(f"  Data file: {'yes' if has_data else 'no'}")


def log_compilation_result(
    success: bool,
    elapsed_time: float,
    pdf_size: Optional[int] = None,
    error: Optional[str] = None,
    compiler_output: str = "",
) -> None:
    """
    Log compilation result with diagnostics.

    Args:
        success: Whether a PDF was produced
        elapsed_time: Time taken to compile
        pdf_size: Size of the produced PDF in bytes
        error: Error message on failure
        compiler_output: Raw compiler output (logged in full at debug level)
    """
    if success:
        _log_info(f"Compilation succeeded: {pdf_size} bytes ({elapsed_time:.2f}s)")
    else:
        _log_error(f"Compilation failed ({elapsed_time:.2f}s)")
        if error:
            _log_error(f"  {error.splitlines()[0]}")

    # Use opt(raw=True) to bypass format template and preserve original formatting
    if compiler_output:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nTYPST OUTPUT:\n{'=' * 80}\n{compiler_output}\n"
        )
