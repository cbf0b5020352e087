"""Result models for sitepub.

Pydantic v2 models that capture structured outcomes of every pipeline step.
Individual results (one rewritten page, one upload) roll up into step
results, which roll up into a ``BuildResult`` or ``PublishResult``. The CLI
prints them as tables or dumps them with ``model_dump_json()``; CI only
looks at the exit code derived from ``overall_status``.

Key Concepts:
    OverallStatus: PASSED, FAILED, ERROR, SKIPPED, PENDING.
    StepResult: One pipeline step (mkdocs, fixlinks, stage, archive, upload).
    PageRewrite / LinkFixResult: Per-page and per-tree link fixing outcome.
    UploadResult: One ``pyazblob upload`` invocation.
    BuildResult / PublishResult: Whole runs; ``mark_complete()`` finalises
        timestamps, duration, status and summary.

Tags:
    results, models, pydantic, status, reporting
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _elapsed(started_at: str, completed_at: str) -> float:
    start = datetime.fromisoformat(started_at)
    end = datetime.fromisoformat(completed_at)
    return (end - start).total_seconds()


class OverallStatus(str, Enum):
    """Overall status of a step or run."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"
    PENDING = "PENDING"


# ---------------------------------------------------------------------------
# Link fixing
# ---------------------------------------------------------------------------


class PageRewrite(BaseModel):
    """Outcome of rewriting a single HTML page."""

    path: str
    replacements: int = 0
    unresolved: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.replacements > 0


class LinkFixResult(BaseModel):
    """Outcome of rewriting every page of a site tree."""

    site_dir: str
    base_path: str
    dry_run: bool = False
    pages: list[PageRewrite] = Field(default_factory=list)

    @property
    def files_scanned(self) -> int:
        return len(self.pages)

    @property
    def files_changed(self) -> int:
        return sum(1 for p in self.pages if p.changed)

    @property
    def replacements(self) -> int:
        return sum(p.replacements for p in self.pages)

    @property
    def unresolved(self) -> list[str]:
        return [f"{p.path}: {ref}" for p in self.pages for ref in p.unresolved]

    def summary(self) -> str:
        verb = "would change" if self.dry_run else "changed"
        return (
            f"{self.files_scanned} pages scanned, {self.files_changed} {verb}, "
            f"{self.replacements} references rewritten to {self.base_path}"
        )


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


class StepResult(BaseModel):
    """Result of one pipeline step."""

    name: str
    status: OverallStatus = OverallStatus.PENDING
    started_at: str = Field(default_factory=_now)
    completed_at: str | None = None
    duration_seconds: float = 0.0
    detail: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None

    def mark_complete(self, status: OverallStatus | None = None) -> None:
        """Finalise timestamps; status defaults to PASSED unless an error was recorded."""
        self.completed_at = _now()
        self.duration_seconds = _elapsed(self.started_at, self.completed_at)
        if status is not None:
            self.status = status
        elif self.error:
            self.status = OverallStatus.FAILED
        else:
            self.status = OverallStatus.PASSED


class UploadResult(BaseModel):
    """Result of uploading a directory to one publish target."""

    target: str
    account_name: str
    container: str
    path: str
    status: OverallStatus = OverallStatus.PENDING
    exit_code: int | None = None
    duration_seconds: float = 0.0
    stdout: str = ""
    stderr: str = ""
    error: str | None = None


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


class RunResult(BaseModel):
    """Fields shared by build and publish runs."""

    run_id: str
    started_at: str = Field(default_factory=_now)
    completed_at: str | None = None
    duration_seconds: float = 0.0
    steps: list[StepResult] = Field(default_factory=list)
    overall_status: OverallStatus = OverallStatus.PENDING
    summary: str = ""
    error: str | None = None
    error_detail: dict[str, Any] | None = None

    def step(self, name: str) -> StepResult | None:
        """Return the step called ``name`` if it ran."""
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def _finalise(self) -> None:
        self.completed_at = _now()
        self.duration_seconds = _elapsed(self.started_at, self.completed_at)
        if self.error:
            self.overall_status = OverallStatus.ERROR
        elif any(s.status in (OverallStatus.FAILED, OverallStatus.ERROR) for s in self.steps):
            self.overall_status = OverallStatus.FAILED
        elif not self.steps or all(s.status == OverallStatus.SKIPPED for s in self.steps):
            self.overall_status = OverallStatus.SKIPPED
        else:
            self.overall_status = OverallStatus.PASSED

    @property
    def ok(self) -> bool:
        return self.overall_status in (OverallStatus.PASSED, OverallStatus.SKIPPED)


class BuildResult(RunResult):
    """Result of a build run: mkdocs → fixlinks → stage → archive."""

    base_path: str = "/"
    site_dir: str = ""
    stage_dir: str | None = None
    archive_path: str | None = None
    links: LinkFixResult | None = None

    def mark_complete(self) -> None:
        """Finalise run: compute duration, status, summary."""
        self._finalise()
        passed = sum(1 for s in self.steps if s.status == OverallStatus.PASSED)
        self.summary = (
            f"build {self.overall_status.value}: {passed}/{len(self.steps)} steps passed "
            f"(base path {self.base_path}) in {self.duration_seconds:.1f}s"
        )


class PublishResult(RunResult):
    """Result of a publish run across one or more targets."""

    environment: str
    path: str = ""
    dry_run: bool = False
    uploads: list[UploadResult] = Field(default_factory=list)

    def mark_complete(self) -> None:
        """Finalise run: compute duration, status, summary."""
        self._finalise()
        if not self.error and any(
            u.status in (OverallStatus.FAILED, OverallStatus.ERROR) for u in self.uploads
        ):
            self.overall_status = OverallStatus.FAILED
        done = sum(1 for u in self.uploads if u.status == OverallStatus.PASSED)
        targets = ", ".join(u.target for u in self.uploads) or "no targets"
        self.summary = (
            f"publish {self.environment} {self.overall_status.value}: "
            f"{done}/{len(self.uploads)} uploads ({targets}) in {self.duration_seconds:.1f}s"
        )


__all__ = [
    "BuildResult",
    "LinkFixResult",
    "OverallStatus",
    "PageRewrite",
    "PublishResult",
    "RunResult",
    "StepResult",
    "UploadResult",
]
