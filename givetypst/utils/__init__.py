"""
Shared utilities for givetypst.

Common functionality used across contexts:
- Configuration loading
- Logger setup
"""

from givetypst.utils.config import ServerSettings, load_settings
from givetypst.utils.logger import setup_logger

__all__ = ["ServerSettings", "load_settings", "setup_logger"]
