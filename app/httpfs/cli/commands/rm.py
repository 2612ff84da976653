"""Recursive removal command.

Removes files and directory trees below a served root, one result
per path.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from httpfs.cleanup import RemovalOperator, RemovalResult
from httpfs.cli.types import open_rooted
from httpfs.filesystem.models import clean_path
from httpfs.utils.formatting import console, print_info, print_success, print_warning


def rm(
    paths: Annotated[
        list[str],
        typer.Argument(help="Virtual paths to remove (relative to --root)."),
    ],
    root: Annotated[
        Path,
        typer.Option("--root", "-r", help="Host directory that acts as the virtual root."),
    ],
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be removed."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Remove files and directories recursively.

    Paths that do not exist are reported as already absent, not as
    failures. The first error inside a tree stops that tree; other
    paths are still processed.

    Examples:
        httpfs rm --root /srv/www /old-release
        httpfs rm --root /srv/www /tmp /cache --dry-run
    """
    fs = open_rooted(root)

    _print_removal_plan(paths, dry_run)

    # Confirm unless --yes or --dry-run
    if not dry_run and not yes:
        confirmed = typer.confirm(
            f"\nProceed with removing {len(paths)} path(s)?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    operator = RemovalOperator(fs, dry_run=dry_run)
    results = operator.delete(paths)

    _print_removal_results(results)

    if any(not r.success for r in results):
        raise typer.Exit(code=1)


# === Private helper functions ===


def _print_removal_plan(paths: list[str], dry_run: bool) -> None:
    """Display planned removals."""
    label = "Planned Removals (dry-run)" if dry_run else "Planned Removals"
    table = Table(title=label, show_lines=False)
    table.add_column("Path", style="bold")

    for path in paths:
        table.add_row(clean_path(path))

    console.print(table)


def _print_removal_results(results: list[RemovalResult]) -> None:
    """Display removal results."""
    table = Table(title="Removal Results", show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Status", width=10)
    table.add_column("Details", style="dim")

    for r in results:
        if r.dry_run:
            status = "[info]dry-run[/]"
            detail = "Would remove" if r.existed else "Already absent"
        elif r.success:
            status = "[success]removed[/]"
            detail = "" if r.existed else "Already absent"
        else:
            status = "[error]failed[/]"
            detail = r.error or "Unknown error"
        table.add_row(r.path, status, detail)

    console.print(table)

    success_count = sum(1 for r in results if r.success)
    fail_count = sum(1 for r in results if not r.success and not r.dry_run)
    dry_count = sum(1 for r in results if r.dry_run)

    if dry_count:
        print_info(f"Dry-run: {dry_count} path(s) would be removed.")
    elif fail_count:
        print_warning(f"{success_count} succeeded, {fail_count} failed")
    else:
        print_success(f"All {success_count} path(s) processed successfully.")
