"""
CLI utility helpers — result rendering and exit codes.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from sitepub.results import (
    BuildResult,
    LinkFixResult,
    OverallStatus,
    PublishResult,
    RunResult,
)

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLE = {
    OverallStatus.PASSED: "green",
    OverallStatus.FAILED: "red",
    OverallStatus.ERROR: "red bold",
    OverallStatus.SKIPPED: "dim",
    OverallStatus.PENDING: "yellow",
}


def styled_status(status: OverallStatus) -> str:
    style = _STATUS_STYLE.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def print_steps(result: RunResult, *, title: str) -> None:
    """Render the steps of a run as a Rich table."""
    table = Table(title=title)
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Time")
    table.add_column("Detail", overflow="fold")

    for step in result.steps:
        table.add_row(
            step.name,
            styled_status(step.status),
            f"{step.duration_seconds:.1f}s" if step.completed_at else "—",
            step.error or step.detail or "—",
        )
    console.print(table)


def print_links(links: LinkFixResult, *, verbose: bool = False) -> None:
    """Render link fixing totals, and the changed pages when ``verbose``."""
    console.print(f"  {links.summary()}")
    if verbose:
        for page in links.pages:
            if page.changed:
                console.print(f"    [cyan]{page.path}[/cyan]: {page.replacements}")
    for entry in links.unresolved:
        err_console.print(f"  [yellow]unresolved[/yellow] {entry}")


def print_build_result(result: BuildResult, *, verbose: bool = False) -> None:
    """Pretty-print a BuildResult."""
    print_steps(result, title="Build")
    if result.links is not None:
        print_links(result.links, verbose=verbose)
    if result.stage_dir:
        console.print(f"  staged:  {result.stage_dir}")
    if result.archive_path:
        console.print(f"  archive: {result.archive_path}")
    _print_footer(result)


def print_publish_result(result: PublishResult) -> None:
    """Pretty-print a PublishResult."""
    print_steps(result, title=f"Publish ({result.environment})")
    if result.uploads:
        table = Table(title="Uploads")
        table.add_column("Target", style="bold")
        table.add_column("Account")
        table.add_column("Container")
        table.add_column("Status")
        table.add_column("Time")
        table.add_column("Error", overflow="fold")
        for upload in result.uploads:
            table.add_row(
                upload.target,
                upload.account_name,
                upload.container,
                styled_status(upload.status),
                f"{upload.duration_seconds:.1f}s",
                upload.error or "—",
            )
        console.print(table)
    _print_footer(result)


def _print_footer(result: RunResult) -> None:
    if result.error:
        err_console.print(f"[bold red]Error[/bold red]: {result.error}")
    console.print(f"\n{styled_status(result.overall_status)} {result.summary}")


def finish(result: RunResult, *, as_json: bool = False) -> None:
    """Dump ``result`` as JSON when asked and exit 1 unless it passed."""
    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    if not result.ok:
        raise typer.Exit(code=1)
