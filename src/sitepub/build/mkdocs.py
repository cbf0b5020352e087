"""Static site generation with mkdocs.

Runs ``mkdocs build`` as a child process (``python -m mkdocs``) so the
documentation project's own theme and plugin versions are used, and reads
``mkdocs.yml`` with PyYAML to discover ``site_url`` (the default URL prefix).

mkdocs configuration files routinely contain tags that ``yaml.safe_load``
rejects: ``!!python/name:material.extensions.emoji.to_svg`` for Material
extensions and ``!ENV [VAR, default]`` for environment lookups. The loader
below keeps python tags as their dotted-name strings and resolves ``!ENV``
against the process environment, which is all the pipeline needs.

Tags:
    mkdocs, build, subprocess, yaml
"""

from __future__ import annotations

import importlib.util
import os
import subprocess
import sys
from pathlib import Path
from typing import Any

import yaml

from sitepub.core.errors import BuildError, ConfigError, ToolExecutionError, ToolNotFoundError
from sitepub.core.logging import get_logger
from sitepub.results import StepResult

logger = get_logger(__name__)


class _MkdocsLoader(yaml.SafeLoader):
    """SafeLoader that tolerates mkdocs-specific tags."""


def _python_tag(loader: yaml.SafeLoader, suffix: str, node: yaml.Node) -> str:
    return suffix


def _env_tag(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    if isinstance(node, yaml.ScalarNode):
        return os.environ.get(loader.construct_scalar(node))
    names = loader.construct_sequence(node)
    if len(names) == 1:
        return os.environ.get(names[0])
    # last item is the default
    for name in names[:-1]:
        if name in os.environ:
            return os.environ[name]
    return names[-1] if names else None


_MkdocsLoader.add_multi_constructor("tag:yaml.org,2002:python/name:", _python_tag)
_MkdocsLoader.add_multi_constructor("tag:yaml.org,2002:python/object/apply:", _python_tag)
_MkdocsLoader.add_constructor("!ENV", _env_tag)


def load_mkdocs_config(path: Path) -> dict[str, Any]:
    """Load ``mkdocs.yml`` into a plain dict.

    Raises
    ------
    ConfigError
        If the file is missing, unreadable, or not a YAML mapping.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"mkdocs configuration not found: {path}", cause=e) from e
    except OSError as e:
        raise ConfigError(f"Cannot read mkdocs configuration {path}", cause=e) from e

    try:
        data = yaml.load(text, Loader=_MkdocsLoader)  # noqa: S506 - SafeLoader subclass
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def count_pages(site_dir: Path) -> int:
    """Number of HTML pages in a generated tree."""
    return sum(1 for p in Path(site_dir).rglob("*.html") if p.is_file())


class MkdocsBuilder:
    """Runs ``mkdocs build`` for a documentation project.

    Parameters
    ----------
    project_dir
        Working directory for the build; made absolute so paths handed to
        mkdocs do not depend on the caller's working directory.
    config_file
        Path to ``mkdocs.yml`` (relative paths resolve against project_dir).
    timeout
        Seconds before the build is abandoned.

    Example::

        builder = MkdocsBuilder(Path("."))
        step = builder.build(Path("site"), strict=True)
        print(step.detail)
    """

    def __init__(
        self,
        project_dir: Path = Path("."),
        config_file: Path = Path("mkdocs.yml"),
        timeout: int = 600,
    ) -> None:
        self.project_dir = Path(project_dir).absolute()
        config_file = Path(config_file)
        self.config_file = config_file if config_file.is_absolute() else self.project_dir / config_file
        self.timeout = timeout

    @staticmethod
    def is_available() -> bool:
        """Check whether mkdocs is importable by this interpreter."""
        return importlib.util.find_spec("mkdocs") is not None

    def command(self, site_dir: Path, strict: bool = False, clean: bool = True) -> list[str]:
        """Command line used for the build."""
        cmd = [
            sys.executable, "-m", "mkdocs", "build",
            "--config-file", str(self.config_file),
            "--site-dir", str(site_dir),
        ]
        cmd.append("--clean" if clean else "--dirty")
        if strict:
            cmd.append("--strict")
        return cmd

    def build(self, site_dir: Path, strict: bool = False, clean: bool = True) -> StepResult:
        """Generate the site into ``site_dir``.

        Raises
        ------
        ToolNotFoundError
            mkdocs is not installed.
        ToolExecutionError
            mkdocs exited non-zero.
        BuildError
            The build timed out or produced no pages.
        """
        step = StepResult(name="mkdocs")

        if not self.config_file.exists():
            raise ConfigError(f"mkdocs configuration not found: {self.config_file}").with_context(
                step="mkdocs", path=str(self.config_file)
            )
        if not self.is_available():
            raise ToolNotFoundError("mkdocs", "Install it with: pip install sitepub[docs]")

        site_path = site_dir if site_dir.is_absolute() else self.project_dir / site_dir
        cmd = self.command(site_path, strict=strict, clean=clean)
        logger.info("mkdocs.build_started", config=str(self.config_file), site_dir=str(site_path))

        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=str(self.project_dir),
            )
        except subprocess.TimeoutExpired as e:
            raise BuildError(f"mkdocs build timed out after {self.timeout}s", cause=e).with_context(
                step="mkdocs"
            ) from e

        if proc.returncode != 0:
            logger.error("mkdocs.build_failed", returncode=proc.returncode, stderr=proc.stderr[-2000:])
            raise ToolExecutionError(cmd, proc.returncode, proc.stderr).with_context(step="mkdocs")

        pages = count_pages(site_path) if site_path.is_dir() else 0
        if pages == 0:
            raise BuildError(f"mkdocs produced no HTML pages in {site_path}").with_context(
                step="mkdocs", path=str(site_path)
            )

        step.data = {"pages": pages, "site_dir": str(site_path)}
        step.detail = f"{pages} pages built into {site_dir}"
        step.mark_complete()
        logger.info("mkdocs.build_complete", pages=pages, duration=step.duration_seconds)
        return step


__all__ = ["MkdocsBuilder", "count_pages", "load_mkdocs_config"]
