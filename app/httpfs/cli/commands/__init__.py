"""CLI commands for httpfs.

This package contains all subcommand implementations.
"""

from httpfs.cli.commands import ls, rm, serve

__all__ = ["ls", "rm", "serve"]
