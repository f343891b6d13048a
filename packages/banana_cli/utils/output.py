"""Output formatting utilities"""

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Handles output formatting for JSON and human-readable modes"""

    def __init__(self, json_mode: bool = False, console: Console | None = None):
        """Initialize output formatter

        Args:
            json_mode: Enable JSON output mode
            console: Rich console instance (for human mode)
        """
        self.json_mode = json_mode
        self.console = console or Console()

    def success(self, message: str, data: Any = None) -> None:
        """Output success message

        Args:
            message: Success message
            data: Optional data to include
        """
        if self.json_mode:
            output = {
                "status": "success",
                "message": message,
                "data": data
            }
            print(json.dumps(output, indent=2))
        else:
            self.console.print(f"[green]✓[/green] {message}")
            if data and isinstance(data, dict):
                for key, value in data.items():
                    self.console.print(f"  {key}: {value}")

    def error(self, message: str, details: str | None = None) -> None:
        """Output error message

        Args:
            message: Error message
            details: Optional error details
        """
        if self.json_mode:
            output = {
                "status": "error",
                "message": message,
                "details": details
            }
            print(json.dumps(output, indent=2), file=sys.stderr)
        else:
            err = Console(stderr=True)
            err.print(f"[red]✗[/red] {message}")
            if details:
                err.print(f"  {details}")

    def table(self, title: str, columns: list[str], rows: list[list[Any]]) -> None:
        """Output rows as a rich table, or a list of objects in JSON mode"""
        if self.json_mode:
            print(json.dumps([dict(zip(columns, row)) for row in rows], indent=2))
            return
        table = Table(title=title)
        for column in columns:
            table.add_column(column, justify="right")
        for row in rows:
            table.add_row(*(str(value) for value in row))
        self.console.print(table)
