"""
CLI utility helpers: consoles and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from launchpad.core.errors import LaunchpadError

console = Console()
err_console = Console(stderr=True)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def fail(error: BaseException, *, code: int = 1) -> typer.Exit:
    """Print *error* to stderr and return the ``typer.Exit`` to raise."""
    if isinstance(error, LaunchpadError):
        label = f"{type(error).__name__}/{error.category.value}"
        message = error.message
    else:
        label = type(error).__name__
        message = str(error)
    err_console.print(f"[bold red]Error[/bold red] ({label}): {message}", highlight=False)
    return typer.Exit(code=code)


def print_rows(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render homogeneous dicts as a table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False)
    columns = list(rows[0].keys())
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for row in rows:
        table.add_row(*[_cell(row.get(col)) for col in columns])
    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]-[/dim]"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)
