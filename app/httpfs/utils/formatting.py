"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from httpfs.filesystem.models import EntryInfo

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "dim": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
        "entry.dir": "bold #69B9A1",
        "entry.file": "#ffffff",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format a byte count as a human-readable string."""
    if not size_bytes:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def create_entry_table(title: str) -> Table:
    """Create a pre-configured table for directory entries.

    Args:
        title: Table title.

    Returns:
        Rich Table with Name, Type, Size, Mode and Modified columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Type", width=9)
    table.add_column("Size", style="info", justify="right")
    table.add_column("Mode", style="muted")
    table.add_column("Modified", style="muted")
    return table


def format_entry_row(entry: EntryInfo) -> tuple[str, str, str, str, str]:
    """Format a directory entry as a table row with Rich markup."""
    if entry.is_dir:
        name = f"[entry.dir]{entry.name}/[/]"
        kind = "directory"
        size = "-"
    else:
        name = f"[entry.file]{entry.name}[/]"
        kind = "file"
        size = format_size(entry.size)
    modified = entry.mtime.strftime("%Y-%m-%d %H:%M")
    return (name, kind, size, entry.mode_string, modified)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
