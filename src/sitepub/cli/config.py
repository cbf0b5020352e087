"""
CLI: ``sitepub config`` — configuration inspection.
"""

from __future__ import annotations

import json

import typer
from pydantic import SecretStr

from sitepub.cli.utils import console, err_console

app = typer.Typer(no_args_is_help=True)

_MASK = "**********"


def _display_value(value: object) -> object:
    if isinstance(value, SecretStr):
        return _MASK if value.get_secret_value() else ""
    return value


@app.command("show")
def show_config(
    format: str = typer.Option("table", "--format", "-f", help="Output format: table, json, env"),
) -> None:
    """Show the effective settings. Account keys are masked."""
    from sitepub.core.settings import get_settings

    settings = get_settings()
    values = {key: _display_value(getattr(settings, key)) for key in type(settings).model_fields}

    if format == "json":
        console.print_json(json.dumps(values, default=str))
        return

    if format == "env":
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key.endswith(("_account_name", "_account_key")):
                typer.echo(f"{key.upper()}={value}")
            else:
                typer.echo(f"SITEPUB_{key.upper()}={value}")
        return

    if format != "table":
        err_console.print(f"[red]Unknown format:[/red] {format} (expected table, json or env)")
        raise typer.Exit(1)

    from rich.table import Table

    table = Table(title="sitepub settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in values.items():
        table.add_row(key, "[dim]unset[/dim]" if value is None else str(value))
    console.print(table)
