"""
CLI: ``sitepub build | fixlinks | package | clean`` — producing the site.

Usage::

    sitepub build                          # mkdocs build → fixlinks → stage
    sitepub build --version v1 --archive   # versioned copy under /<base>/v1/, zipped to dist/
    sitepub fixlinks --dry-run             # report link changes in site/
    sitepub package                        # stage + zip an existing site/
    sitepub clean                          # remove site/, .build/ and dist/site.zip
"""

from __future__ import annotations

from pathlib import Path

import typer

from sitepub.cli.utils import console, finish, print_build_result


def build(
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-C", help="Directory holding mkdocs.yml."),
    config_file: Path | None = typer.Option(None, "--config-file", "-f", help="mkdocs configuration file."),
    site_dir: Path | None = typer.Option(None, "--site-dir", help="mkdocs output directory."),
    build_dir: Path | None = typer.Option(None, "--build-dir", help="Staging directory."),
    base_path: str | None = typer.Option(None, "--base-path", "-b", help="URL prefix (default: from site_url)."),
    version: str | None = typer.Option(None, "--version", help="Version segment appended to the prefix."),
    strict: bool = typer.Option(False, "--strict", help="Fail on mkdocs warnings."),
    archive: bool = typer.Option(False, "--archive", help="Zip the staged tree."),
    keep_site: bool = typer.Option(False, "--keep-site", help="Copy instead of moving the site when staging."),
    dirty: bool = typer.Option(False, "--dirty", help="Only rebuild changed files."),
    json_out: bool = typer.Option(False, "--json", help="Output results as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List rewritten pages."),
) -> None:
    """Build the site, fix its links and stage it for publishing."""
    from sitepub.build.config import BuildConfig
    from sitepub.build.workflow import BuildRunner
    from sitepub.core.settings import get_settings

    config = BuildConfig.from_settings(
        get_settings(),
        project_dir=project_dir,
        config_file=config_file,
        site_dir=site_dir,
        build_dir=build_dir,
        base_path=base_path,
        version=version,
        strict=strict,
        archive=archive,
        keep_site=keep_site,
        clean=not dirty,
    )

    if not json_out:
        console.print(f"[bold]sitepub build[/] — run_id: {config.run_id}")

    result = BuildRunner(config).run()

    if not json_out:
        print_build_result(result, verbose=verbose)
    finish(result, as_json=json_out)


def fixlinks(
    site_dir: Path | None = typer.Option(None, "--site-dir", "-s", help="Generated site to rewrite."),
    base_path: str | None = typer.Option(None, "--base-path", "-b", help="URL prefix (default: from site_url)."),
    version: str | None = typer.Option(None, "--version", help="Version segment appended to the prefix."),
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-C", help="Directory holding mkdocs.yml."),
    config_file: Path | None = typer.Option(None, "--config-file", "-f", help="mkdocs configuration file."),
    rooted_prefix: list[str] = typer.Option(
        [], "--rooted-prefix", help="Root-absolute path owned by the site. Repeatable.",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report changes without writing."),
    json_out: bool = typer.Option(False, "--json", help="Output results as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="List rewritten pages."),
) -> None:
    """Rewrite links in an already generated site."""
    from sitepub.build.workflow import run_fixlinks
    from sitepub.core.settings import get_settings

    settings = get_settings()
    result = run_fixlinks(
        site_dir=site_dir or settings.site_dir,
        base_path=base_path if base_path is not None else settings.base_path,
        version=version or settings.version,
        project_dir=project_dir,
        config_file=config_file or settings.config_file,
        rooted_prefixes=rooted_prefix or list(settings.rooted_prefixes),
        dry_run=dry_run,
    )

    if not json_out:
        print_build_result(result, verbose=verbose or dry_run)
    finish(result, as_json=json_out)


def package(
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-C", help="Directory holding the site."),
    site_dir: Path | None = typer.Option(None, "--site-dir", help="Generated site."),
    build_dir: Path | None = typer.Option(None, "--build-dir", help="Staging directory."),
    base_path: str | None = typer.Option(None, "--base-path", "-b", help="URL prefix (default: from site_url)."),
    version: str | None = typer.Option(None, "--version", help="Version segment appended to the prefix."),
    archive: bool = typer.Option(True, "--archive/--no-archive", help="Zip the staged tree."),
    keep_site: bool = typer.Option(False, "--keep-site", help="Copy instead of moving the site."),
    json_out: bool = typer.Option(False, "--json", help="Output results as JSON."),
) -> None:
    """Stage an existing site under the build directory and zip it."""
    from sitepub.build.config import BuildConfig
    from sitepub.build.workflow import BuildRunner
    from sitepub.core.settings import get_settings

    config = BuildConfig.from_settings(
        get_settings(),
        project_dir=project_dir,
        site_dir=site_dir,
        build_dir=build_dir,
        base_path=base_path,
        version=version,
        run_mkdocs=False,
        fix_links=False,
        archive=archive,
        keep_site=keep_site,
    )
    result = BuildRunner(config).run()

    if not json_out:
        print_build_result(result)
    finish(result, as_json=json_out)


def clean(
    project_dir: Path = typer.Option(Path("."), "--project-dir", "-C", help="Project directory."),
) -> None:
    """Remove the generated site, the staging directory and the zip artifact."""
    from sitepub.build.config import BuildConfig
    from sitepub.build.packager import clean as remove_trees
    from sitepub.core.settings import get_settings

    config = BuildConfig.from_settings(get_settings(), project_dir=project_dir)
    removed = remove_trees(config.site_path, config.build_path, config.archive_path)

    if not removed:
        console.print("[dim]Nothing to clean.[/dim]")
    for path in removed:
        console.print(f"[green]✓[/green] removed {path}")
