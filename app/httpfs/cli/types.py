"""Shared helpers for CLI commands.

This module builds the HttpFS adapters the commands operate on and
turns construction failures into CLI errors.
"""

from pathlib import Path

import typer

from httpfs.adapter import HttpFS
from httpfs.core.config import ServerConfig
from httpfs.filesystem.memfs import MemFS
from httpfs.filesystem.osfs import OSFS
from httpfs.utils.formatting import print_error


def open_rooted(root: Path) -> HttpFS:
    """Open an adapter over a host directory.

    Args:
        root: Host directory that becomes the virtual root.

    Returns:
        HttpFS over an OSFS rooted at ``root``.

    Raises:
        typer.Exit: If the root is missing or not a directory.
    """
    try:
        return HttpFS(OSFS(root))
    except OSError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def open_configured(config: ServerConfig) -> tuple[HttpFS, str]:
    """Open the adapter described by a server configuration.

    Args:
        config: Server configuration; ``root`` defaults to the current
            directory for the "os" backend.

    Returns:
        Tuple of (adapter, human-readable description of what is served).

    Raises:
        typer.Exit: If the root directory cannot be opened.
    """
    if config.backend == "memory":
        return HttpFS(MemFS()), "in-memory filesystem"
    root = Path(config.root or ".")
    fs = open_rooted(root)
    return fs, str(root.resolve())
