"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from drupalctl.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_key_value_table(
    title: str,
    key_header: str = "Key",
    value_header: str = "Value",
) -> Table:
    """Create a pre-configured two-column table.

    Args:
        title: Table title.
        key_header: Header of the left column.
        value_header: Header of the right column.

    Returns:
        Rich Table with a styled key column and a free-form value column.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column(key_header, style="info", no_wrap=True)
    table.add_column(value_header, style="text")
    return table


def format_flag(value: bool) -> str:
    """Format a boolean flag with color markup."""
    if value:
        return "[success]yes[/]"
    return "[muted]no[/]"


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
