"""Unit tests for data source resolution."""

import pytest

from givetypst.contexts.generation.data_resolver import DataResolver, parse_json_object
from givetypst.contexts.storage.fetcher import ArtifactFetcher
from givetypst.exceptions import DataFormatError, ObjectNotFoundError, ValidationError


def _resolver(bucket_url: str, max_data_size: int = 10 * 1024 * 1024) -> DataResolver:
    return DataResolver(ArtifactFetcher(bucket_url), max_data_size)


@pytest.mark.unit
def test_resolve_from_data_key(make_bucket):
    resolver = _resolver(make_bucket({"data.json": b'{"name": "John", "age": 30}'}))

    data = resolver.resolve(None, "data.json")

    assert data["name"] == "John"
    assert data["age"] == 30
    assert isinstance(data["age"], int)


@pytest.mark.unit
def test_resolve_inline_data_passes_through(make_bucket):
    resolver = _resolver(make_bucket({}))
    inline = {"items": [{"qty": 2, "price": 1.5}], "paid": False}

    assert resolver.resolve(inline, None) is inline
    assert resolver.resolve(inline, "") is inline


@pytest.mark.unit
def test_resolve_no_data(make_bucket):
    resolver = _resolver(make_bucket({}))

    assert resolver.resolve(None, None) is None
    assert resolver.resolve(None, "") is None


@pytest.mark.unit
def test_both_sources_rejected_before_storage(tmp_path):
    """Conflicting sources fail validation even when the bucket does not exist."""
    resolver = _resolver((tmp_path / "missing").as_uri())

    with pytest.raises(ValidationError, match="cannot specify both 'data' and 'dataKey'"):
        resolver.resolve({"foo": "bar"}, "data.json")


@pytest.mark.unit
def test_empty_inline_object_still_conflicts(make_bucket):
    resolver = _resolver(make_bucket({"data.json": b"{}"}))

    with pytest.raises(ValidationError):
        resolver.resolve({}, "data.json")


@pytest.mark.unit
def test_data_key_not_found(make_bucket):
    resolver = _resolver(make_bucket({}))

    with pytest.raises(ObjectNotFoundError):
        resolver.resolve(None, "nonexistent.json")


@pytest.mark.unit
def test_data_key_invalid_json(make_bucket):
    resolver = _resolver(make_bucket({"bad.json": b"not valid json"}))

    with pytest.raises(DataFormatError) as exc_info:
        resolver.resolve(None, "bad.json")

    assert str(exc_info.value).startswith("invalid JSON:")
    assert exc_info.value.key == "bad.json"
    assert exc_info.value.original_error is not None


@pytest.mark.unit
def test_data_truncated_by_limit_is_invalid(make_bucket):
    """A data file cut at the size limit no longer parses."""
    resolver = _resolver(make_bucket({"data.json": b'{"name": "John", "age": 30}'}), max_data_size=10)

    with pytest.raises(DataFormatError, match="invalid JSON"):
        resolver.resolve(None, "data.json")


@pytest.mark.unit
@pytest.mark.parametrize("raw", [b"[1, 2, 3]", b'"text"', b"42", b'{"value": NaN}', b"{\"a\": Infinity}"])
def test_parse_json_object_rejects_non_objects(raw):
    with pytest.raises(DataFormatError, match="invalid JSON"):
        parse_json_object(raw)


@pytest.mark.unit
def test_parse_json_null_is_no_data():
    assert parse_json_object(b"null") is None


@pytest.mark.unit
def test_parse_json_nested_object():
    data = parse_json_object(b'{"customer": {"name": "Ada", "tags": ["a", "b"]}, "total": 12.5}')

    assert data == {"customer": {"name": "Ada", "tags": ["a", "b"]}, "total": 12.5}
