"""CLI package for httpfs.

This package contains the Typer application and all subcommands.
"""

from httpfs.cli.main import app

__all__ = ["app"]
