"""
Generic logger setup utilities.

Provides reusable loguru configuration with provenance tracking.
Context-specific wrappers should be defined in contexts/{context}/logger.py.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"


def setup_logger(
    verbose: bool = False,
    serialize: bool = False,
    log_file: Optional[Path] = None,
    extra_provenance: Optional[dict] = None,
) -> None:
    """
    Configure loguru for the current process.

    Replaces loguru's default sink with a stdout sink (INFO, or DEBUG when
    verbose) and optionally a file sink that captures everything.

    Args:
        verbose: Log DEBUG messages to stdout
        serialize: Emit one JSON object per line on stdout (used by the server)
        log_file: Optional file that receives every message at DEBUG level
        extra_provenance: Additional key-value pairs for provenance header

    Example:
        from givetypst.utils.logger import setup_logger

        setup_logger(verbose=True, serialize=True, extra_provenance={"Bucket": bucket_url})
    """
    # Remove default logger
    logger.remove()

    level = "DEBUG" if verbose else "INFO"

    if serialize:
        logger.add(sys.stdout, level=level, serialize=True)
    else:
        for level_name, color in LEVEL_COLORS.items():
            logger.level(level_name, color=color)
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file is not None:
        log_file.parent.mkdir(exist_ok=True, parents=True)
        logger.add(log_file, format=FILE_FORMAT, level="DEBUG")

    log_provenance(extra_provenance)


def log_provenance(extra_context: Optional[dict] = None) -> None:
    """
    Log execution provenance at DEBUG level.

    Args:
        extra_context: Additional key-value pairs to log
    """
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    logger.debug(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.debug(f"{key}: {value}")
