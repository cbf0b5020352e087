"""
CLI: ``sitepub publish`` — upload the staged site to blob storage.

Usage::

    sitepub publish dev                            # .build/ → dev-euw
    sitepub publish prod                           # .build/ → prod-euw, prod-use
    sitepub publish prod --archive site.zip        # unzip a CI artifact first
    sitepub publish dev --dry-run                  # resolve targets only

Credentials are read from ``DEV_EUW_ACCOUNT_NAME`` / ``DEV_EUW_ACCOUNT_KEY``
(and the ``PROD_EUW_*`` / ``PROD_USE_*`` pairs) in the environment or ``.env``.
"""

from __future__ import annotations

from pathlib import Path

import typer

from sitepub.build.config import PublishEnvironment
from sitepub.cli.utils import console, finish, print_publish_result


def publish(
    environment: PublishEnvironment = typer.Argument(..., help="Target environment: dev or prod."),
    path: Path | None = typer.Option(None, "--path", "-p", help="Directory to upload (default: build dir)."),
    archive: Path | None = typer.Option(None, "--archive", "-a", help="Zip artifact to extract into the path first."),
    container: str | None = typer.Option(None, "--container", help="Blob container."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve targets without uploading."),
    json_out: bool = typer.Option(False, "--json", help="Output results as JSON."),
) -> None:
    """Upload the staged site to every target of an environment."""
    from sitepub.build.config import PublishConfig
    from sitepub.build.workflow import PublishRunner
    from sitepub.core.settings import get_settings

    settings = get_settings()
    config = PublishConfig.from_settings(
        settings,
        environment=environment,
        path=path,
        archive=archive,
        container=container,
        dry_run=dry_run,
    )

    if not json_out:
        label = " (dry run)" if dry_run else ""
        console.print(f"[bold]sitepub publish {environment.value}[/]{label} — run_id: {config.run_id}")

    result = PublishRunner(config, settings).run()

    if not json_out:
        print_publish_result(result)
    finish(result, as_json=json_out)
