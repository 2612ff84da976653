"""Serve command.

Serves a host directory (or an empty in-memory filesystem) over HTTP.
Settings come from ~/.config/httpfs/server.toml when present;
command-line options override them.
"""

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from httpfs.cli.types import open_configured
from httpfs.core.config import (
    ServerConfig,
    ServerConfigError,
    load_server_config,
    load_server_config_or_default,
    save_server_config,
)
from httpfs.core.paths import ensure_config_dir
from httpfs.server import make_server
from httpfs.utils.formatting import print_error, print_info, print_success


def serve(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to serve (default: config root or current directory)."),
    ] = None,
    bind: Annotated[
        str | None,
        typer.Option("--bind", "-b", help="Address to listen on."),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="TCP port to listen on."),
    ] = None,
    memory: Annotated[
        bool,
        typer.Option("--memory", help="Serve an empty in-memory filesystem."),
    ] = False,
    no_listing: Annotated[
        bool,
        typer.Option("--no-listing", help="Disable directory listings."),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to a server.toml file."),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Write the effective settings to the config file and exit."),
    ] = False,
) -> None:
    """Serve a directory over HTTP."""
    try:
        if config_path is not None and not save:
            config = load_server_config(config_path)
        else:
            config = load_server_config_or_default(config_path)
    except ServerConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    overrides: dict[str, Any] = {}
    if root is not None:
        overrides["root"] = str(root)
        overrides["backend"] = "os"
    if bind is not None:
        overrides["bind"] = bind
    if port is not None:
        overrides["port"] = port
    if memory:
        overrides["backend"] = "memory"
    if no_listing:
        overrides["directory_listing"] = False

    try:
        config = ServerConfig.model_validate({**config.model_dump(), **overrides})
    except ValidationError as e:
        print_error(f"Invalid server settings: {e}")
        raise typer.Exit(code=1) from e

    if save:
        _save(config, config_path)
        return

    fs, description = open_configured(config)

    quiet = bool(ctx.obj and ctx.obj.get("quiet"))
    if not quiet:
        # Request log lines go through the root handler installed by the main callback
        logging.getLogger("httpfs.server").setLevel(logging.INFO)

    try:
        server = make_server(fs, config)
    except OSError as e:
        print_error(f"Cannot listen on {config.bind}:{config.port}: {e}")
        raise typer.Exit(code=1) from e

    host, bound_port = server.server_address[:2]
    print_info(f"Serving {description} on http://{host}:{bound_port}/")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print_info("Shutting down.")
    finally:
        server.server_close()


def _save(config: ServerConfig, config_path: Path | None) -> None:
    if config_path is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    try:
        saved_path = save_server_config(config, config_path)
    except ServerConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Server config saved: {saved_path}")
