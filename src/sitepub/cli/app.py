"""
Root Typer application for the sitepub CLI.

Commands mirror the documentation Makefile: ``build`` / ``fixlinks`` /
``package`` / ``clean`` produce the site, ``publish`` uploads it, and
``config`` shows the effective settings.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="sitepub",
    help="sitepub — build, link-fix and publish mkdocs documentation sites.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("sitepub")
        except PackageNotFoundError:
            from sitepub import __version__ as v
        typer.echo(f"sitepub {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Log level (default: SITEPUB_LOG_LEVEL or INFO).",
    ),
    json_logs: bool | None = typer.Option(
        None, "--json-logs/--console-logs", help="Log format (default: JSON unless stderr is a TTY).",
    ),
) -> None:
    """sitepub CLI — build, fix links, package and publish."""
    from sitepub.core.logging import configure_logging
    from sitepub.core.settings import get_settings

    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=json_logs if json_logs is not None else settings.json_logs,
    )


# ── Command registration ─────────────────────────────────────────────────

from sitepub.cli.build import build, clean, fixlinks, package  # noqa: E402
from sitepub.cli.config import app as config_app  # noqa: E402
from sitepub.cli.publish import publish  # noqa: E402

app.command("build")(build)
app.command("fixlinks")(fixlinks)
app.command("package")(package)
app.command("publish")(publish)
app.command("clean")(clean)
app.add_typer(config_app, name="config", help="Configuration inspection.")
