"""Unit tests for server settings resolution."""

from dataclasses import FrozenInstanceError

import pytest

from givetypst.utils.config import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DATA_SIZE,
    DEFAULT_MAX_TEMPLATE_SIZE,
    DEFAULT_PORT,
    ENV_VARS,
    ServerSettings,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without any givetypst environment variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_default_limits():
    """Zero or missing limits fall back to the defaults."""
    settings = ServerSettings(bucket_url="file:///tmp/test", max_template_size=0, max_data_size=0)

    assert settings.max_template_size == DEFAULT_MAX_TEMPLATE_SIZE == 1024 * 1024
    assert settings.max_data_size == DEFAULT_MAX_DATA_SIZE == 10 * 1024 * 1024
    assert settings.fetch_timeout == DEFAULT_FETCH_TIMEOUT


@pytest.mark.unit
def test_negative_limits_use_defaults():
    settings = ServerSettings(max_template_size=-1, max_data_size=-5, fetch_timeout=-1)

    assert settings.max_template_size == DEFAULT_MAX_TEMPLATE_SIZE
    assert settings.max_data_size == DEFAULT_MAX_DATA_SIZE
    assert settings.fetch_timeout == DEFAULT_FETCH_TIMEOUT


@pytest.mark.unit
def test_custom_limits():
    """Positive limits are kept as given."""
    settings = ServerSettings(bucket_url="file:///tmp/test", max_template_size=500, max_data_size=1000)

    assert settings.max_template_size == 500
    assert settings.max_data_size == 1000


@pytest.mark.unit
def test_settings_are_frozen():
    settings = ServerSettings()

    with pytest.raises(FrozenInstanceError):
        settings.max_data_size = 1


@pytest.mark.unit
def test_unknown_compiler_backend():
    with pytest.raises(ValueError, match="Unknown compiler backend"):
        ServerSettings(compiler="remote")


@pytest.mark.unit
def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("BUCKET_URL", "s3://templates?region=eu-west-1")
    monkeypatch.setenv("MAX_TEMPLATE_SIZE", "2048")
    monkeypatch.setenv("MAX_DATA_SIZE", "4096")

    settings = load_settings()

    assert settings.bucket_url == "s3://templates?region=eu-west-1"
    assert settings.max_template_size == 2048
    assert settings.max_data_size == 4096
    assert settings.port == DEFAULT_PORT


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["abc", "0", "-10", ""])
def test_invalid_size_env_is_ignored(monkeypatch, raw):
    monkeypatch.setenv("MAX_TEMPLATE_SIZE", raw)

    settings = load_settings()

    assert settings.max_template_size == DEFAULT_MAX_TEMPLATE_SIZE


@pytest.mark.unit
def test_port_env_overrides_flag(monkeypatch):
    monkeypatch.setenv("PORT", "9090")

    settings = load_settings(port=7000)

    assert settings.port == 9090


@pytest.mark.unit
def test_invalid_port_env_keeps_flag(monkeypatch):
    monkeypatch.setenv("PORT", "not-a-number")

    settings = load_settings(port=7000)

    assert settings.port == 7000


@pytest.mark.unit
def test_config_file_with_env_override(tmp_path, monkeypatch):
    config_path = tmp_path / "givetypst.yaml"
    config_path.write_text(
        "bucket_url: file:///srv/templates\n"
        "max_data_size: 2048\n"
        "compiler: container\n"
        "unrelated_key: ignored\n"
    )
    monkeypatch.setenv("MAX_DATA_SIZE", "4096")

    settings = load_settings(config_path)

    assert settings.bucket_url == "file:///srv/templates"
    assert settings.compiler == "container"
    assert settings.max_data_size == 4096


@pytest.mark.unit
def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


@pytest.mark.unit
def test_none_overrides_are_ignored(monkeypatch):
    monkeypatch.setenv("GIVETYPST_COMPILER", "container")

    settings = load_settings(compiler=None)

    assert settings.compiler == "container"
