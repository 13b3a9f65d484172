"""Console helpers shared by the CLI tools."""

import functools
import sys
from typing import Any, Callable, List, Optional

from rich.console import Console
from rich.table import Table

# Status output goes to stderr, stdout is reserved for tool output
console = Console(stderr=True)


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[cyan]{message}[/cyan]")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓ {message}[/green]")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]{message}[/yellow]")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]✗ {message}[/bold red]")


def create_table(title: Optional[str] = None, columns: Optional[List[str]] = None) -> Table:
    """
    Create a rich table with the shared style.

    Args:
        title: Table title
        columns: Column headers to add

    Returns:
        rich Table
    """
    table = Table(title=title, header_style="bold magenta", show_lines=False)
    for column in columns or []:
        table.add_column(column)
    return table


def print_table(table: Table) -> None:
    """Print a rich table."""
    console.print(table)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Exit with status 1 on unhandled errors instead of a traceback."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            warning("Interrupted")
            sys.exit(130)
        except Exception as e:
            error(str(e))
            sys.exit(1)

    return wrapper
