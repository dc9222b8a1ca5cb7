"""
Template data resolution.

Data reaches the template from exactly one of two places: inline in the
request, or as a JSON file in the bucket referenced by key. Neither is fine
(templates may not need data); both is a validation error.
"""

import json
from typing import Any, Dict, Optional

from givetypst.contexts.generation.logger import _log_debug
from givetypst.contexts.storage.fetcher import ArtifactFetcher
from givetypst.exceptions import DataFormatError, ValidationError

CONFLICTING_DATA_SOURCES = "cannot specify both 'data' and 'dataKey'"


def _reject_constant(name: str):
    raise ValueError(f"invalid constant {name!r}")


def parse_json_object(raw: bytes, key: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Parse raw bytes as a JSON object.

    The JSON literal null parses to None (no data). NaN/Infinity and
    non-object values are rejected.

    Args:
        raw: JSON bytes
        key: Bucket key the bytes came from, kept on the error for diagnostics

    Returns:
        Parsed object, or None for null

    Raises:
        DataFormatError: If raw is not a JSON object
    """
    try:
        value = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        raise DataFormatError(f"invalid JSON: {e}", key=key, original_error=e) from e

    if value is not None and not isinstance(value, dict):
        raise DataFormatError(
            f"invalid JSON: expected an object, got {type(value).__name__}", key=key
        )
    return value


class DataResolver:
    """
    Resolves the data for one request.

    Args:
        fetcher: Fetcher for the bucket holding data files
        max_data_size: Maximum number of bytes read from a data file
    """

    def __init__(self, fetcher: ArtifactFetcher, max_data_size: int):
        self.fetcher = fetcher
        self.max_data_size = max_data_size

    def resolve(
        self, inline_data: Optional[Dict[str, Any]], data_key: Optional[str]
    ) -> Optional[Dict[str, Any]]:
        """
        Pick the data source and return the data.

        Args:
            inline_data: Object sent in the request body (None if absent)
            data_key: Bucket key of a JSON data file (empty/None if absent)

        Returns:
            The data object, or None when the request carries no data

        Raises:
            ValidationError: If both sources are set
            StorageError: If the data file cannot be fetched
            DataFormatError: If the data file is not a JSON object
        """
        if inline_data is not None and data_key:
            raise ValidationError(CONFLICTING_DATA_SOURCES)

        if data_key:
            artifact = self.fetcher.fetch(data_key, self.max_data_size)
            _log_debug(f"Resolved data from {data_key} ({artifact.size} bytes)")
            return parse_json_object(artifact.content, key=data_key)

        # May be None, which is valid.
        return inline_data
