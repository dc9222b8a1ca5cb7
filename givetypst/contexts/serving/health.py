"""Health reporting: is the compiler installed and is the bucket reachable?"""

from givetypst.contexts.rendering.compiler import TypstCompiler
from givetypst.contexts.serving.logger import _log_warning
from givetypst.contexts.storage.fetcher import ArtifactFetcher
from givetypst.exceptions import StorageError, UnhealthyError


def check_health(compiler: TypstCompiler, fetcher: ArtifactFetcher) -> None:
    """
    Run both health checks. Does not compile anything or read any object.

    Args:
        compiler: Compiler backend whose executable must be resolvable
        fetcher: Fetcher whose bucket must open

    Raises:
        UnhealthyError: "<compiler> not found" or "failed to open bucket"
    """
    # First, check if the typst command is available.
    if not compiler.is_available():
        _log_warning(f"Health check failed: {compiler.name} not found")
        raise UnhealthyError(f"{compiler.name} not found")

    # Next, check if we have access to the storage bucket.
    try:
        fetcher.check_bucket()
    except StorageError as e:
        _log_warning(f"Health check failed: {e}")
        raise UnhealthyError("failed to open bucket", original_error=e) from e
