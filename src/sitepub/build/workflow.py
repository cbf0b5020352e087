"""Pipeline runners for sitepub.

``BuildRunner`` and ``PublishRunner`` turn a config into a structured
result, running their steps strictly in sequence::

    BuildRunner:    mkdocs → fixlinks → stage → archive
    PublishRunner:  extract → upload (one pyazblob call per target)

A step that raises a :class:`SitepubError` stops the run. The error is
recorded on the failing ``StepResult`` and on the run result instead of
propagating, so callers (the CLI, CI wrappers) decide how to report it and
which exit code to use. Unexpected exceptions are not caught.

Key Concepts:
    BuildRunner: ``BuildConfig`` → ``BuildResult``.
    PublishRunner: ``PublishConfig`` + settings → ``PublishResult``.
    run_fixlinks(): Link fixing on its own, as a one-step build run.

Tags:
    workflow, orchestration, build, publish, runner
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from sitepub.build.config import BuildConfig, PublishConfig
from sitepub.build.mkdocs import MkdocsBuilder, load_mkdocs_config
from sitepub.build.packager import Packager
from sitepub.build.publisher import BlobPublisher
from sitepub.core.errors import SitepubError
from sitepub.core.logging import LogContext, get_logger
from sitepub.core.settings import SitepubSettings
from sitepub.links.rewriter import LinkRewriter
from sitepub.results import (
    BuildResult,
    OverallStatus,
    PublishResult,
    RunResult,
    StepResult,
)

logger = get_logger(__name__)


def _skipped(name: str, reason: str = "") -> StepResult:
    step = StepResult(name=name, detail=reason)
    step.mark_complete(OverallStatus.SKIPPED)
    return step


def _run_step(result: RunResult, name: str, fn: Callable[[], StepResult]) -> StepResult:
    """Run one step and record it on ``result``; failures are recorded, then re-raised."""
    logger.debug("step.started", step=name)
    try:
        step = fn()
    except SitepubError as e:
        if e.context.step is None:
            e.context.step = name
        failed = StepResult(name=name, error=e.message)
        failed.mark_complete(OverallStatus.FAILED)
        result.steps.append(failed)
        raise
    result.steps.append(step)
    logger.debug("step.complete", step=name, status=step.status.value)
    return step


def _record_error(result: RunResult, error: SitepubError, event: str) -> None:
    error.with_context(run_id=result.run_id)
    result.error = error.message
    result.error_detail = error.to_dict()
    logger.error(event, **error.to_dict())


# ---------------------------------------------------------------------------
# Build
# ---------------------------------------------------------------------------


class BuildRunner:
    """Orchestrates a full build run.

    Parameters
    ----------
    config
        Build configuration.
    builder
        mkdocs builder; defaults to one for ``config.project_dir``.
    packager
        Staging/archive helper.

    Example::

        config = BuildConfig(version="v1", archive=True)
        result = BuildRunner(config).run()
        print(result.summary)
    """

    def __init__(
        self,
        config: BuildConfig,
        builder: MkdocsBuilder | None = None,
        packager: Packager | None = None,
    ) -> None:
        self.config = config
        self.builder = builder or MkdocsBuilder(config.project_dir, config.config_file)
        self.packager = packager or Packager()

    def run(self) -> BuildResult:
        """Execute the build.

        Returns
        -------
        BuildResult
            Step results, link fixing report and output locations.
        """
        config = self.config
        result = BuildResult(run_id=config.run_id, site_dir=str(config.site_path))

        with LogContext(run_id=config.run_id):
            try:
                base_path = config.resolved_base_path(self._mkdocs_config())
                result.base_path = base_path
                logger.info("build.started", base_path=base_path, site_dir=str(config.site_path))

                if config.run_mkdocs:
                    _run_step(result, "mkdocs", self._build)
                else:
                    result.steps.append(_skipped("mkdocs", "disabled"))

                if config.fix_links:
                    _run_step(result, "fixlinks", lambda: self._fix_links(result, base_path))
                else:
                    result.steps.append(_skipped("fixlinks", "disabled"))

                if config.stage and not config.dry_run:
                    stage_dir = config.stage_dir(base_path)
                    _run_step(result, "stage", lambda: self._stage(stage_dir))
                    result.stage_dir = str(stage_dir)
                else:
                    result.steps.append(_skipped("stage", "dry run" if config.dry_run else "disabled"))

                if config.archive and not config.dry_run:
                    step = _run_step(result, "archive", self._archive)
                    result.archive_path = step.data.get("archive")
                else:
                    result.steps.append(_skipped("archive", "dry run" if config.dry_run else "disabled"))

            except SitepubError as e:
                _record_error(result, e, "build.failed")
            finally:
                result.mark_complete()

            logger.info("build.complete", status=result.overall_status.value, summary=result.summary)
        return result

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _mkdocs_config(self) -> dict[str, Any]:
        """mkdocs.yml contents; optional when only fixing links with an explicit prefix."""
        path = self.config.config_path
        if not path.exists() and not self.config.run_mkdocs:
            return {}
        try:
            return load_mkdocs_config(path)
        except SitepubError as e:
            if e.context.step is None:
                e.context.step = "config"
            raise

    def _build(self) -> StepResult:
        return self.builder.build(self.config.site_dir, strict=self.config.strict, clean=self.config.clean)

    def _fix_links(self, result: BuildResult, base_path: str) -> StepResult:
        step = StepResult(name="fixlinks")
        rewriter = LinkRewriter(base_path, self.config.rooted_prefixes)
        links = rewriter.rewrite_tree(self.config.site_path, dry_run=self.config.dry_run)
        result.links = links
        step.data = {
            "pages": links.files_scanned,
            "changed": links.files_changed,
            "replacements": links.replacements,
            "unresolved": links.unresolved,
        }
        step.detail = links.summary()
        step.mark_complete()
        return step

    def _stage(self, stage_dir: Path) -> StepResult:
        return self.packager.stage(
            self.config.site_path,
            self.config.build_path,
            stage_dir,
            keep_site=self.config.keep_site,
        )

    def _archive(self) -> StepResult:
        return self.packager.archive(self.config.build_path, self.config.archive_path)


def run_fixlinks(
    site_dir: Path,
    base_path: str | None = None,
    version: str | None = None,
    project_dir: Path = Path("."),
    config_file: Path = Path("mkdocs.yml"),
    rooted_prefixes: list[str] | None = None,
    dry_run: bool = False,
) -> BuildResult:
    """Rewrite links in an existing site tree without building or staging.

    When ``base_path`` is omitted it is derived from ``site_url`` in
    ``mkdocs.yml``. A dry run reports what would change without writing.
    """
    config = BuildConfig(
        project_dir=project_dir,
        config_file=config_file,
        site_dir=site_dir,
        base_path=base_path,
        version=version,
        rooted_prefixes=rooted_prefixes if rooted_prefixes is not None else ["/img"],
        run_mkdocs=False,
        stage=False,
        archive=False,
        dry_run=dry_run,
    )
    return BuildRunner(config).run()


# ---------------------------------------------------------------------------
# Publish
# ---------------------------------------------------------------------------


class PublishRunner:
    """Orchestrates uploading a staged site to an environment's targets.

    Parameters
    ----------
    config
        Publish configuration.
    settings
        Settings holding the account names and keys.
    """

    def __init__(
        self,
        config: PublishConfig,
        settings: SitepubSettings,
        publisher: BlobPublisher | None = None,
        packager: Packager | None = None,
    ) -> None:
        self.config = config
        self.settings = settings
        self.publisher = publisher or BlobPublisher()
        self.packager = packager or Packager()

    def run(self) -> PublishResult:
        """Execute the publish run."""
        config = self.config
        result = PublishResult(
            run_id=config.run_id,
            environment=config.environment.value,
            path=str(config.path),
            dry_run=config.dry_run,
        )

        with LogContext(run_id=config.run_id, environment=config.environment.value):
            try:
                if config.archive is not None:
                    _run_step(result, "extract", self._extract)
                else:
                    result.steps.append(_skipped("extract", "no archive"))

                _run_step(result, "upload", lambda: self._upload(result))

            except SitepubError as e:
                _record_error(result, e, "publish.failed")
            finally:
                result.mark_complete()

            logger.info("publish.complete", status=result.overall_status.value, summary=result.summary)
        return result

    def _extract(self) -> StepResult:
        assert self.config.archive is not None
        return self.packager.extract(self.config.archive, self.config.path)

    def _upload(self, result: PublishResult) -> StepResult:
        step = StepResult(name="upload")
        targets = self.config.targets(self.settings)
        result.uploads = self.publisher.publish(self.config.path, targets, dry_run=self.config.dry_run)

        failed = [u for u in result.uploads if u.status == OverallStatus.FAILED]
        step.data = {"targets": [u.target for u in result.uploads]}
        if failed:
            step.error = failed[0].error
            step.detail = f"upload to {failed[0].target} failed"
            step.mark_complete(OverallStatus.FAILED)
        elif self.config.dry_run:
            step.detail = "dry run: " + ", ".join(t.name for t in targets)
            step.mark_complete(OverallStatus.SKIPPED)
        else:
            step.detail = f"uploaded to {len(result.uploads)} target(s)"
            step.mark_complete()
        return step


__all__ = ["BuildRunner", "PublishRunner", "run_fixlinks"]
