"""
Server configuration.

Settings are resolved once at startup, in increasing order of precedence:

1. Built-in defaults
2. An optional YAML config file (keys match ServerSettings field names)
3. Environment variables (a .env file in the working directory is loaded first)
4. Explicit overrides passed by the CLI

The result is a frozen ServerSettings that is passed to every component
constructor; nothing reads configuration after startup.

Examples:
    >>> settings = load_settings()                                   # env only
    >>> settings = load_settings(Path("givetypst.yaml"), port=9000)  # file + CLI override
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

DEFAULT_PORT = 8080
DEFAULT_MAX_TEMPLATE_SIZE = 1024 * 1024  # 1 MiB
DEFAULT_MAX_DATA_SIZE = 10 * 1024 * 1024  # 10 MiB
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_COMPILE_TIMEOUT = 60.0
DEFAULT_TYPST_BINARY = "typst"
DEFAULT_TYPST_IMAGE = "ghcr.io/typst/typst:0.14.2"

COMPILER_BACKENDS = ("local", "container")

# Environment variable -> (settings field, parser)
ENV_VARS = {
    "BUCKET_URL": ("bucket_url", str),
    "PORT": ("port", int),
    "MAX_TEMPLATE_SIZE": ("max_template_size", int),
    "MAX_DATA_SIZE": ("max_data_size", int),
    "FETCH_TIMEOUT": ("fetch_timeout", float),
    "COMPILE_TIMEOUT": ("compile_timeout", float),
    "GIVETYPST_COMPILER": ("compiler", str),
    "TYPST_BINARY": ("typst_binary", str),
    "TYPST_IMAGE": ("container_image", str),
}


@dataclass(frozen=True)
class ServerSettings:
    """
    Immutable per-process configuration.

    Size ceilings and timeouts that are zero or negative fall back to their
    defaults, so callers can pass 0 to mean "unset".

    Attributes:
        bucket_url: URL of the bucket holding templates and data (file:// or s3://)
        max_template_size: Maximum number of template bytes read from the bucket
        max_data_size: Maximum number of data bytes read from the bucket
        fetch_timeout: Seconds allowed for a single bucket fetch
        compile_timeout: Seconds allowed for a single typst invocation
        port: HTTP port to listen on
        verbose: Debug-level logging
        compiler: Compiler backend, "local" or "container"
        typst_binary: Name or path of the typst executable (local backend)
        container_image: Image used by the container backend
    """

    bucket_url: str = ""
    max_template_size: int = DEFAULT_MAX_TEMPLATE_SIZE
    max_data_size: int = DEFAULT_MAX_DATA_SIZE
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    compile_timeout: float = DEFAULT_COMPILE_TIMEOUT
    port: int = DEFAULT_PORT
    verbose: bool = False
    compiler: str = "local"
    typst_binary: str = DEFAULT_TYPST_BINARY
    container_image: str = DEFAULT_TYPST_IMAGE

    def __post_init__(self):
        # Apply defaults if not set.
        if not self.max_template_size or self.max_template_size <= 0:
            object.__setattr__(self, "max_template_size", DEFAULT_MAX_TEMPLATE_SIZE)
        if not self.max_data_size or self.max_data_size <= 0:
            object.__setattr__(self, "max_data_size", DEFAULT_MAX_DATA_SIZE)
        if not self.fetch_timeout or self.fetch_timeout <= 0:
            object.__setattr__(self, "fetch_timeout", DEFAULT_FETCH_TIMEOUT)
        if not self.compile_timeout or self.compile_timeout <= 0:
            object.__setattr__(self, "compile_timeout", DEFAULT_COMPILE_TIMEOUT)
        if self.compiler not in COMPILER_BACKENDS:
            raise ValueError(
                f"Unknown compiler backend: {self.compiler!r} (expected one of {', '.join(COMPILER_BACKENDS)})"
            )


def _parse_env_value(name: str, raw: str, parser) -> Optional[Any]:
    """
    Parse a single environment value.

    Numeric values that fail to parse, or size/timeout values that are not
    positive, are ignored so the default (or file value) stays in effect.
    """
    raw = raw.strip()
    if not raw:
        return None
    if parser is str:
        return raw
    try:
        value = parser(raw)
    except ValueError:
        return None
    if name != "PORT" and value <= 0:
        return None
    return value


def load_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Load a YAML config file and keep only keys that are ServerSettings fields.

    Args:
        config_path: Path to a YAML file

    Returns:
        Dict of recognized settings

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    loaded = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True) or {}
    known = {f.name for f in fields(ServerSettings)}
    return {key: value for key, value in loaded.items() if key in known}


def load_env_settings() -> Dict[str, Any]:
    """Read recognized environment variables (after loading .env) into a settings dict."""
    load_dotenv()

    values = {}
    for env_name, (field_name, parser) in ENV_VARS.items():
        raw = os.getenv(env_name)
        if raw is None:
            continue
        parsed = _parse_env_value(env_name, raw, parser)
        if parsed is not None:
            values[field_name] = parsed
    return values


def load_settings(config_path: Optional[Path] = None, **overrides) -> ServerSettings:
    """
    Build ServerSettings from config file, environment, and explicit overrides.

    Args:
        config_path: Optional YAML config file
        **overrides: Explicit values (None values are ignored)

    Returns:
        Frozen ServerSettings
    """
    values: Dict[str, Any] = {}
    if config_path is not None:
        values.update(load_config_file(Path(config_path)))
    env_values = load_env_settings()
    values.update(env_values)
    values.update({key: value for key, value in overrides.items() if value is not None})

    # PORT from the environment wins over the --port flag (container platforms inject it)
    if "port" in env_values:
        values["port"] = env_values["port"]

    return ServerSettings(**values)
