"""
Size-bounded artifact fetching.

Each fetch opens its own bucket connection, reads a single key up to a byte
limit, and closes everything before returning. Objects larger than the limit
are truncated, not rejected: the limit bounds resource use per request.

The fetch timeout is a deadline for the whole call. Network buckets also
bound each socket operation by it, so a read stalls for at most one timeout
past the deadline.
"""

import time
from contextlib import closing
from dataclasses import dataclass
from typing import BinaryIO

from givetypst.contexts.storage.buckets import open_bucket
from givetypst.contexts.storage.logger import _log_debug, log_fetch_result
from givetypst.exceptions import StorageError
from givetypst.utils.config import DEFAULT_FETCH_TIMEOUT

READ_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class FetchedArtifact:
    """
    Raw bytes read from the bucket.

    Attributes:
        key: Bucket key that was read
        max_bytes: Size limit applied to the read
        content: Bytes read (at most max_bytes)
    """

    key: str
    max_bytes: int
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def _read_bounded(reader: BinaryIO, max_bytes: int, deadline: float) -> bytes:
    """Read up to max_bytes in chunks, failing once the monotonic deadline has passed."""
    chunks = []
    remaining = max_bytes
    while remaining > 0:
        if time.monotonic() > deadline:
            raise TimeoutError(f"deadline exceeded after {max_bytes - remaining} bytes")
        chunk = reader.read(min(READ_CHUNK_SIZE, remaining))
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _with_prefix(error: StorageError, prefix: str) -> StorageError:
    error.message = f"{prefix}: {error.message}"
    return error


class ArtifactFetcher:
    """
    Reads artifacts from the bucket at bucket_url.

    Args:
        bucket_url: Bucket URL (see givetypst.contexts.storage.buckets)
        timeout: Seconds allowed for opening the bucket and reading one key
    """

    def __init__(self, bucket_url: str, timeout: float = DEFAULT_FETCH_TIMEOUT):
        self.bucket_url = bucket_url
        self.timeout = timeout

    def fetch(self, key: str, max_bytes: int) -> FetchedArtifact:
        """
        Fetch key from the bucket, reading at most max_bytes.

        Args:
            key: Bucket key
            max_bytes: Maximum number of bytes to read

        Returns:
            FetchedArtifact with the (possibly truncated) content

        Raises:
            StorageUnavailableError: If the bucket cannot be opened
            ObjectNotFoundError: If the key does not exist or cannot be opened
            StorageError: If reading the object fails or the timeout elapses
        """
        start_time = time.time()
        deadline = time.monotonic() + self.timeout

        try:
            bucket = open_bucket(self.bucket_url, timeout=self.timeout)
        except StorageError as e:
            raise _with_prefix(e, "open bucket")

        with bucket:
            try:
                reader = bucket.open_reader(key)
            except StorageError as e:
                e.key = key
                raise _with_prefix(e, f"open key {key}")

            with closing(reader):
                try:
                    content = _read_bounded(reader, max_bytes, deadline)
                except Exception as e:
                    raise StorageError(f"read: {e}", key=key, original_error=e) from e

        log_fetch_result(key, max_bytes, len(content), time.time() - start_time)
        return FetchedArtifact(key=key, max_bytes=max_bytes, content=content)

    def check_bucket(self) -> None:
        """
        Open the bucket, probe it, and close it.

        Raises:
            StorageUnavailableError: If the bucket cannot be opened or reached
        """
        with open_bucket(self.bucket_url, timeout=self.timeout) as bucket:
            bucket.probe()
        _log_debug(f"Bucket reachable: {self.bucket_url}")
