"""CLI output utilities for consistent messaging.

Messages are escaped before styling: URLs, paths, and tool output may
contain text that rich would otherwise read as markup.
"""

from rich.console import Console
from rich.markup import escape

_console = Console(highlight=False)


def success(message: str) -> None:
    """Print a success message with green checkmark."""
    _console.print(f"[green]✓[/green] {escape(message)}")


def error(message: str) -> None:
    """Print an error message with red X."""
    _console.print(f"[red]✗[/red] {escape(message)}")


def info(message: str) -> None:
    """Print a progress line (no prefix, no markup)."""
    _console.print(message, markup=False)


def dim(message: str) -> None:
    """Print a dimmed message (for verbose detail)."""
    _console.print(f"[dim]{escape(message)}[/dim]")
