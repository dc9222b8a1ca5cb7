"""
Storage Context

Responsibilities:
- Opens buckets from URLs (local directories, S3)
- Fetches artifacts with a byte limit and a per-fetch timeout
- Probes bucket reachability for health checks

Owns: Bucket connections, size-bounded reads
Never: Caches artifacts or shares connections across requests
"""

from givetypst.contexts.storage.buckets import Bucket, FileBucket, S3Bucket, open_bucket
from givetypst.contexts.storage.fetcher import ArtifactFetcher, FetchedArtifact

__all__ = ["ArtifactFetcher", "Bucket", "FetchedArtifact", "FileBucket", "S3Bucket", "open_bucket"]
