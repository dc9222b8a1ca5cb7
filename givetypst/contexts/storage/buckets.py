"""
Bucket connectors.

A bucket is a key-addressable byte store opened from a URL:

    file:///srv/templates                      Local directory, keys are relative paths
    s3://my-bucket?region=eu-west-1            AWS S3
    s3://my-bucket?endpoint=http://minio:9000  S3-compatible endpoint (MinIO, R2, ...)

Every bucket also accepts a ``prefix`` query parameter that is prepended to all
keys. Buckets are cheap to open and are closed after each logical operation;
nothing here is shared across requests.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Dict, Optional
from urllib.parse import parse_qs, unquote, urlparse

from givetypst.exceptions import ObjectNotFoundError, StorageError, StorageUnavailableError


class Bucket(ABC):
    """Read-only view of a bucket. Use as a context manager to guarantee close()."""

    @abstractmethod
    def open_reader(self, key: str) -> BinaryIO:
        """
        Open a binary stream for key.

        Raises:
            ObjectNotFoundError: If the key does not exist or cannot be opened
        """

    @abstractmethod
    def probe(self) -> None:
        """
        Verify the bucket is reachable without reading any object.

        Raises:
            StorageUnavailableError: If the bucket cannot be reached
        """

    def close(self) -> None:
        """Release any connection held by the bucket."""

    def __enter__(self) -> "Bucket":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _join_prefix(prefix: str, key: str) -> str:
    k = str(key or "").lstrip("/")
    if not k:
        raise ObjectNotFoundError("key must be non-empty", key=key)
    return f"{prefix}{k}"


class FileBucket(Bucket):
    """
    Bucket backed by a local directory.

    Keys are treated as relative paths under root. Keys that resolve outside
    root are reported as not found.
    """

    def __init__(self, root: Path, prefix: str = ""):
        root = Path(root)
        if not root.is_dir():
            raise StorageUnavailableError(f"directory does not exist: {root}")
        self.root = root.resolve()
        self.prefix = prefix

    def _resolve_key(self, key: str) -> Path:
        relative = _join_prefix(self.prefix, key)
        try:
            path = (self.root / relative).resolve()
        except (ValueError, OSError) as e:
            # e.g. keys with embedded NUL bytes
            raise ObjectNotFoundError(f"invalid key {key!r}: {e}", key=key, original_error=e)
        try:
            path.relative_to(self.root)
        except ValueError:
            raise ObjectNotFoundError(f"key is outside the bucket: {key}", key=key)
        return path

    def open_reader(self, key: str) -> BinaryIO:
        path = self._resolve_key(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"object not found: {key}", key=key)
        try:
            return open(path, "rb")
        except OSError as e:
            raise ObjectNotFoundError(str(e), key=key, original_error=e)

    def probe(self) -> None:
        if not self.root.is_dir():
            raise StorageUnavailableError(f"directory does not exist: {self.root}")


class S3Bucket(Bucket):
    """
    Bucket backed by AWS S3 or an S3-compatible endpoint.

    Credentials are resolved via boto3's standard credential chain. Retries are
    disabled and connect/read timeouts are bounded by ``timeout``.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: str = "",
        endpoint: str = "",
        timeout: float = 30.0,
    ):
        import boto3
        from botocore.config import Config
        from botocore.exceptions import BotoCoreError

        if not bucket:
            raise StorageUnavailableError("s3 bucket name missing from URL")

        self.bucket = bucket
        self.prefix = prefix

        config = Config(
            connect_timeout=timeout,
            read_timeout=timeout,
            retries={"total_max_attempts": 1},
        )
        client_kwargs = {"config": config}
        if region:
            client_kwargs["region_name"] = region
        if endpoint:
            client_kwargs["endpoint_url"] = endpoint

        try:
            self._client = boto3.client("s3", **client_kwargs)
        except (BotoCoreError, ValueError) as e:
            # botocore raises ValueError for a malformed endpoint URL
            raise StorageUnavailableError(str(e), original_error=e)

    def open_reader(self, key: str) -> BinaryIO:
        from botocore.exceptions import BotoCoreError, ClientError

        k = _join_prefix(self.prefix, key)
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=k)
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            raise ObjectNotFoundError(f"s3://{self.bucket}/{k} ({code or e})", key=key, original_error=e)
        except BotoCoreError as e:
            raise StorageError(f"s3://{self.bucket}/{k} ({e})", key=key, original_error=e)
        return response["Body"]

    def probe(self) -> None:
        from botocore.exceptions import BotoCoreError, ClientError

        try:
            self._client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as e:
            raise StorageUnavailableError(f"s3://{self.bucket} ({e})", original_error=e)

    def close(self) -> None:
        self._client.close()


def _query_params(query: str) -> Dict[str, str]:
    return {name: values[-1] for name, values in parse_qs(query).items() if values}


def _normalize_prefix(prefix: Optional[str]) -> str:
    p = str(prefix or "").strip().lstrip("/")
    if p and not p.endswith("/"):
        p = p + "/"
    return p


def open_bucket(bucket_url: str, timeout: float = 30.0) -> Bucket:
    """
    Open a bucket from its URL.

    Args:
        bucket_url: Bucket URL (file:// or s3://)
        timeout: Connect/read timeout in seconds for network-backed buckets

    Returns:
        An open Bucket; close it (or use it as a context manager) when done

    Raises:
        StorageUnavailableError: If the URL is invalid or the bucket cannot be opened
    """
    parsed = urlparse(str(bucket_url or ""))
    params = _query_params(parsed.query)
    prefix = _normalize_prefix(params.get("prefix"))

    if parsed.scheme == "file":
        path = unquote(parsed.path)
        if not path:
            raise StorageUnavailableError(f"file bucket URL has no path: {bucket_url}")
        return FileBucket(Path(path), prefix=prefix)

    if parsed.scheme == "s3":
        return S3Bucket(
            bucket=parsed.netloc,
            prefix=prefix,
            region=params.get("region", ""),
            endpoint=params.get("endpoint", ""),
            timeout=timeout,
        )

    raise StorageUnavailableError(f"unsupported bucket URL scheme: {parsed.scheme or bucket_url!r}")
