"""Location of the httpfs server config.

httpfs keeps a single file, ``server.toml``, in its config directory.
The directory honours ``XDG_CONFIG_HOME`` and falls back to
``~/.config/httpfs``.
"""

import os
from pathlib import Path

APP_NAME = "httpfs"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Return the directory that holds ``server.toml``.

    An empty ``XDG_CONFIG_HOME`` counts as unset.
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_server_config_path() -> Path:
    """Return the path ``httpfs serve`` reads when no --config is given."""
    return get_config_dir() / "server.toml"


def ensure_config_dir() -> Path:
    """Create the config directory so ``serve --save`` can write into it.

    Returns:
        The config directory.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create config directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create config directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path
