"""Server configuration and settings.

This module provides the configuration model and I/O functions for the
HTTP file server. Configuration is stored in
~/.config/httpfs/server.toml; every field is optional and command-line
options take precedence over it.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from httpfs.core.paths import get_server_config_path

logger = logging.getLogger(__name__)

# Backend type alias
Backend = Literal["os", "memory"]


class ServerConfig(BaseModel):
    """Configuration of the HTTP file server.

    Attributes:
        bind: Address to listen on.
        port: TCP port to listen on (0 picks a free port).
        root: Host directory served by the "os" backend.
        backend: "os" serves ``root``; "memory" serves an empty MemFS.
        directory_listing: Render an HTML index for directories.
        index_file: File served for a directory when present.
    """

    model_config = ConfigDict(extra="forbid")

    bind: Annotated[str, Field(min_length=1, description="Listen address")] = "127.0.0.1"
    port: Annotated[int, Field(ge=0, le=65535, description="TCP port (0-65535)")] = 8000
    root: Annotated[str | None, Field(description="Served host directory")] = None
    backend: Annotated[Backend, Field(description="Backing filesystem")] = "os"
    directory_listing: Annotated[bool, Field(description="Render directory indexes")] = True
    index_file: Annotated[str, Field(min_length=1, description="Directory index file")] = (
        "index.html"
    )


class ServerConfigError(Exception):
    """Base exception for server configuration errors."""


class ServerConfigNotFoundError(ServerConfigError):
    """Raised when the server config file is not found."""


class ServerConfigParseError(ServerConfigError):
    """Raised when the server config file cannot be parsed."""


def load_server_config(path: Path | None = None) -> ServerConfig:
    """Load server configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.

    Returns:
        Validated ServerConfig object.

    Raises:
        ServerConfigNotFoundError: If the config file doesn't exist.
        ServerConfigParseError: If the TOML syntax is invalid.
        ServerConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_server_config_path()

    if not config_path.exists():
        raise ServerConfigNotFoundError(f"Server config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ServerConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ServerConfigError(f"Failed to read server config: {e}") from e

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as e:
        raise ServerConfigError(f"Invalid server config content: {e}") from e


def load_server_config_or_default(path: Path | None = None) -> ServerConfig:
    """Load server configuration, falling back to defaults when absent.

    Only a missing file falls back; a broken file still raises.

    Raises:
        ServerConfigParseError: If the TOML syntax is invalid.
        ServerConfigError: If the content doesn't match the schema.
    """
    try:
        return load_server_config(path)
    except ServerConfigNotFoundError:
        logger.debug("No server config found, using defaults")
        return ServerConfig()


def save_server_config(config: ServerConfig, path: Path | None = None) -> Path:
    """Save server configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The ServerConfig object to save.
        path: Path to save the config. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ServerConfigError: If the file cannot be written.
    """
    config_path = path or get_server_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null; unset fields are omitted
    data: dict[str, Any] = config.model_dump(exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ServerConfigError(f"Failed to write server config: {e}") from e

    return config_path
