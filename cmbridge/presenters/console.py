"""
Console presenter for terminal output.

Implements human-readable output formatting for the CLI.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click


class ConsolePresenter:
    """
    Console output presenter.

    Writes through click so that output is captured by CliRunner and
    colors are stripped when not writing to a terminal.
    """

    def print(self, message: str = "") -> None:
        click.echo(message)

    def print_error(self, message: str) -> None:
        """Print an error message to stderr."""
        click.secho(f"Error: {message}", fg="red", err=True)

    def print_warning(self, message: str) -> None:
        click.secho(f"Warning: {message}", fg="yellow", err=True)

    def print_success(self, message: str) -> None:
        click.secho(message, fg="green")

    def print_table(self, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        """
        Print a formatted table.

        Args:
            headers: Column headers
            rows: Table rows
        """
        if not rows:
            return

        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = "  ".join(str(h).ljust(widths[i]) for i, h in enumerate(headers))
        click.secho(header_line.rstrip(), bold=True)
        click.echo("-" * len(header_line.rstrip()))

        for row in rows:
            row_line = "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            click.echo(row_line.rstrip())

    def print_key_value(self, key: str, value: Any, indent: int = 0) -> None:
        click.echo(f"{' ' * indent}{key}: {value}")
