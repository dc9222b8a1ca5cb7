"""
Temporary compilation workspaces.

Every compilation gets its own uniquely named directory. The directory and
everything in it are removed when the context exits, whatever the outcome.
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from givetypst.contexts.rendering.logger import _log_debug, _log_warning
from givetypst.exceptions import ResourceError

WORKSPACE_PREFIX = "typst-"

# Owner read/write only
FILE_PERMISSIONS = 0o600


def remove_workspace(work_dir: Path) -> None:
    """Remove a workspace directory. Failures are logged, never raised."""
    try:
        shutil.rmtree(work_dir)
        _log_debug(f"Removed workspace {work_dir}")
    except OSError as e:
        _log_warning(f"Failed to remove workspace {work_dir}: {e}")


@contextmanager
def compilation_workspace(prefix: str = WORKSPACE_PREFIX) -> Iterator[Path]:
    """
    Create a fresh temporary directory and remove it on exit.

    Args:
        prefix: Directory name prefix

    Yields:
        Path to the workspace directory

    Raises:
        ResourceError: If the directory cannot be created
    """
    try:
        work_dir = Path(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise ResourceError(f"failed to create temp dir: {e}", original_error=e) from e

    try:
        yield work_dir
    finally:
        remove_workspace(work_dir)


def write_private_file(path: Path, content: bytes) -> None:
    """Write content to path, creating the file with owner-only permissions."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_PERMISSIONS)
    with os.fdopen(fd, "wb") as f:
        f.write(content)
