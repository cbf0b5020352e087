"""Staging and archiving of the generated site.

The publishable tree mirrors the URL prefix: a site served under
``/blacksheep/v1/`` is staged as ``.build/blacksheep/v1/`` so that uploading
``.build/`` to the storage container's root lands every file at its URL.

Output Structure::

    dist/
    └── site.zip            (optional, paths relative to .build/)
    .build/
    └── blacksheep/
        ├── index.html
        ├── assets/
        └── getting-started/
            └── index.html

Tags:
    packaging, zip, staging, artifacts
"""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path

from sitepub.core.errors import PackageError
from sitepub.core.logging import get_logger
from sitepub.results import StepResult

logger = get_logger(__name__)


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True


def _count_files(root: Path) -> int:
    return sum(1 for p in root.rglob("*") if p.is_file())


class Packager:
    """Moves a generated site into the staging tree and zips it."""

    def stage(
        self,
        site_dir: Path,
        build_dir: Path,
        stage_dir: Path,
        keep_site: bool = False,
    ) -> StepResult:
        """Recreate ``build_dir`` and move (or copy) the site into ``stage_dir``.

        Parameters
        ----------
        site_dir
            Generated site.
        build_dir
            Staging root; removed and recreated.
        stage_dir
            Destination inside ``build_dir``.
        keep_site
            Copy instead of moving, leaving ``site_dir`` populated.
        """
        step = StepResult(name="stage")

        if not site_dir.is_dir():
            raise PackageError(f"Site directory not found: {site_dir}").with_context(
                step="stage", path=str(site_dir)
            )
        if _is_within(site_dir, build_dir):
            raise PackageError(
                f"Site directory {site_dir} must not be inside the build directory {build_dir}"
            ).with_context(step="stage")
        if not _is_within(stage_dir, build_dir):
            raise PackageError(
                f"Stage directory {stage_dir} is outside the build directory {build_dir}"
            ).with_context(step="stage")

        try:
            if build_dir.exists():
                shutil.rmtree(build_dir)
            stage_dir.mkdir(parents=True, exist_ok=True)

            for child in sorted(site_dir.iterdir()):
                target = stage_dir / child.name
                if keep_site:
                    if child.is_dir():
                        shutil.copytree(child, target)
                    else:
                        shutil.copy2(child, target)
                else:
                    shutil.move(str(child), str(target))
        except OSError as e:
            raise PackageError(f"Staging into {stage_dir} failed: {e}", cause=e).with_context(
                step="stage", path=str(stage_dir)
            ) from e

        files = _count_files(stage_dir)
        step.data = {"stage_dir": str(stage_dir), "files": files, "copied": keep_site}
        step.detail = f"{files} files staged in {stage_dir}"
        step.mark_complete()
        logger.info("package.staged", stage_dir=str(stage_dir), files=files, copied=keep_site)
        return step

    def archive(self, build_dir: Path, archive_path: Path) -> StepResult:
        """Zip everything under ``build_dir`` into ``archive_path``.

        Entries are stored relative to ``build_dir`` in sorted order. The
        archive must live outside ``build_dir``, which is uploaded as is.
        """
        step = StepResult(name="archive")

        if not build_dir.is_dir():
            raise PackageError(f"Build directory not found: {build_dir}").with_context(
                step="archive", path=str(build_dir)
            )
        if _is_within(archive_path, build_dir):
            raise PackageError(
                f"Archive {archive_path} must not be inside the build directory {build_dir}"
            ).with_context(step="archive")

        files = sorted(p for p in build_dir.rglob("*") if p.is_file())
        if not files:
            raise PackageError(f"Nothing to archive in {build_dir}").with_context(step="archive")

        try:
            archive_path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for path in files:
                    zf.write(path, path.relative_to(build_dir).as_posix())
        except OSError as e:
            raise PackageError(f"Cannot write archive {archive_path}: {e}", cause=e).with_context(
                step="archive", path=str(archive_path)
            ) from e

        step.data = {
            "archive": str(archive_path),
            "entries": len(files),
            "bytes": archive_path.stat().st_size,
        }
        step.detail = f"{len(files)} files archived to {archive_path}"
        step.mark_complete()
        logger.info("package.archived", archive=str(archive_path), entries=len(files))
        return step

    def extract(self, archive: Path, dest: Path) -> StepResult:
        """Unpack a site archive into ``dest``.

        Raises
        ------
        PackageError
            The archive is missing, corrupt, or has entries escaping ``dest``.
        """
        step = StepResult(name="extract")

        if not archive.is_file():
            raise PackageError(f"Archive not found: {archive}").with_context(
                step="extract", path=str(archive)
            )

        dest.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(archive) as zf:
                names = zf.namelist()
                for name in names:
                    if not _is_within(dest / name, dest):
                        raise PackageError(
                            f"Archive entry {name!r} escapes the destination"
                        ).with_context(step="extract", path=str(archive))
                zf.extractall(dest)
        except zipfile.BadZipFile as e:
            raise PackageError(f"Not a zip archive: {archive}", cause=e).with_context(
                step="extract", path=str(archive)
            ) from e

        step.data = {"archive": str(archive), "dest": str(dest), "entries": len(names)}
        step.detail = f"{len(names)} entries extracted to {dest}"
        step.mark_complete()
        logger.info("package.extracted", archive=str(archive), dest=str(dest), entries=len(names))
        return step


def clean(*paths: Path) -> list[Path]:
    """Remove generated trees; returns the paths that existed."""
    removed = []
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
            removed.append(path)
        elif path.exists():
            path.unlink()
            removed.append(path)
    for path in removed:
        logger.info("package.removed", path=str(path))
    return removed


__all__ = ["Packager", "clean"]
