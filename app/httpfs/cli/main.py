"""Main CLI application entry point.

Defines the Typer application, global options, and logging setup.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from httpfs import __version__
from httpfs.cli.commands import ls, rm, serve
from httpfs.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="httpfs",
    help="Serve any virtual filesystem over HTTP.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"httpfs version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records through Rich on stderr.

    Args:
        verbose: Log everything down to DEBUG.
        quiet: Only log errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """httpfs - Serve any virtual filesystem over HTTP.

    Serve a host directory or an in-memory filesystem, list it, and
    remove trees from it with the same semantics the server uses.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    configure_logging(verbose=verbose, quiet=quiet)


# Register commands
app.command(name="serve")(serve.serve)
app.command(name="rm")(rm.rm)
app.command(name="ls")(ls.ls)


if __name__ == "__main__":
    app()
