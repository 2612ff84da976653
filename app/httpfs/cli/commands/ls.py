"""Directory listing command."""

import json
from pathlib import Path
from typing import Annotated

import typer

from httpfs.cli.types import open_rooted
from httpfs.errors import ErrorKind, error_kind
from httpfs.filesystem.models import EntryInfo, clean_path
from httpfs.utils.formatting import (
    console,
    create_entry_table,
    format_entry_row,
    print_error,
    print_info,
)


def ls(
    path: Annotated[
        str,
        typer.Argument(help="Virtual directory to list."),
    ] = "/",
    root: Annotated[
        Path,
        typer.Option("--root", "-r", help="Host directory that acts as the virtual root."),
    ] = Path("."),
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """List a directory the way the server sees it."""
    fs = open_rooted(root)

    try:
        info = fs.stat(path)
        entries = fs.read_dir(path) if info.is_dir else [info]
    except OSError as e:
        if error_kind(e) is ErrorKind.NOT_FOUND:
            print_error(f"No such file or directory: {clean_path(path)}")
        else:
            print_error(f"Cannot list {clean_path(path)}: {e}")
        raise typer.Exit(code=1) from e

    if json_output:
        console.print_json(json.dumps([_entry_to_dict(e) for e in entries]))
        return

    if not entries:
        print_info(f"{clean_path(path)} is empty.")
        return

    table = create_entry_table(clean_path(path))
    for entry in entries:
        table.add_row(*format_entry_row(entry))
    console.print(table)


def _entry_to_dict(entry: EntryInfo) -> dict[str, object]:
    return {
        "name": entry.name,
        "is_dir": entry.is_dir,
        "size": entry.size,
        "mode": oct(entry.perm),
        "mtime": entry.mtime.isoformat(),
    }
