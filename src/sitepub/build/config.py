"""Configuration models for the build and publish pipelines.

``BuildConfig`` drives ``BuildRunner`` (mkdocs → fixlinks → stage →
archive) and ``PublishConfig`` drives ``PublishRunner`` (extract → upload).
Both are Pydantic v2 models created from :class:`SitepubSettings` with
keyword overrides from the CLI on top.

Publish environments map to fixed target lists, mirroring the CI workflow
that uploads to the development account on every release and to both
production regions from ``main``::

    dev   → dev-euw                (DEV_EUW_ACCOUNT_NAME / DEV_EUW_ACCOUNT_KEY)
    prod  → prod-euw, prod-use     (PROD_EUW_* / PROD_USE_*)

Override precedence: kwargs > settings (env vars, ``.env``) > field defaults.

Tags:
    config, settings, pydantic, build, publish
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, SecretStr, model_validator

from sitepub.core.errors import MissingConfigError
from sitepub.core.settings import SitepubSettings
from sitepub.links.urls import base_path_from_site_url, normalize_base_path


def _new_run_id() -> str:
    return uuid.uuid4().hex[:12]


class BuildConfig(BaseModel):
    """Configuration for a build run.

    Relative paths are resolved against ``project_dir``.

    Example::

        config = BuildConfig(project_dir=Path("docs-repo"), version="v1")
        config.resolved_base_path({"site_url": "https://www.neoteroi.dev/blacksheep/"})
        # '/blacksheep/v1/'
    """

    # Layout
    project_dir: Path = Field(default=Path("."), description="Directory holding mkdocs.yml")
    config_file: Path = Field(default=Path("mkdocs.yml"), description="mkdocs configuration file")
    site_dir: Path = Field(default=Path("site"), description="mkdocs output directory")
    build_dir: Path = Field(default=Path(".build"), description="Staging directory")
    dist_dir: Path = Field(default=Path("dist"), description="Directory receiving the zip artifact")

    # URL prefix
    base_path: str | None = Field(
        default=None,
        description="URL prefix; taken from mkdocs site_url when unset",
    )
    version: str | None = Field(default=None, description="Version segment appended to the prefix")
    rooted_prefixes: list[str] = Field(default_factory=lambda: ["/img"])

    # Steps
    run_mkdocs: bool = Field(default=True, description="Run mkdocs build")
    fix_links: bool = Field(default=True, description="Rewrite links in the generated HTML")
    stage: bool = Field(default=True, description="Move the site under build_dir/<prefix>")
    archive: bool = Field(default=False, description="Zip the staged tree")

    # Options
    strict: bool = Field(default=False, description="Pass --strict to mkdocs")
    clean: bool = Field(default=True, description="Let mkdocs clean site_dir first")
    keep_site: bool = Field(default=False, description="Copy instead of move when staging")
    archive_name: str = Field(default="site.zip")
    dry_run: bool = Field(default=False, description="Report link changes without writing pages")

    run_id: str = Field(default="", description="Unique run identifier (auto-generated)")

    @model_validator(mode="after")
    def _set_defaults(self) -> BuildConfig:
        if not self.run_id:
            self.run_id = _new_run_id()
        return self

    @classmethod
    def from_settings(cls, settings: SitepubSettings, **overrides: Any) -> BuildConfig:
        """Create config from settings; ``None`` overrides are ignored."""
        values: dict[str, Any] = {
            "config_file": settings.config_file,
            "site_dir": settings.site_dir,
            "build_dir": settings.build_dir,
            "dist_dir": settings.dist_dir,
            "base_path": settings.base_path,
            "version": settings.version,
            "archive_name": settings.archive_name,
            "rooted_prefixes": list(settings.rooted_prefixes),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def path(self, value: Path) -> Path:
        """Resolve ``value`` against ``project_dir``."""
        return value if value.is_absolute() else self.project_dir / value

    @property
    def config_path(self) -> Path:
        return self.path(self.config_file)

    @property
    def site_path(self) -> Path:
        return self.path(self.site_dir)

    @property
    def build_path(self) -> Path:
        return self.path(self.build_dir)

    @property
    def archive_path(self) -> Path:
        return self.path(self.dist_dir) / self.archive_name

    def resolved_base_path(self, mkdocs_config: dict[str, Any] | None = None) -> str:
        """Return the normalised prefix, including the version segment."""
        if self.base_path is not None:
            base = self.base_path
        else:
            base = base_path_from_site_url((mkdocs_config or {}).get("site_url"))
        return normalize_base_path(base, self.version)

    def stage_dir(self, base_path: str) -> Path:
        """Directory under ``build_dir`` that mirrors the URL prefix."""
        relative = base_path.strip("/")
        return self.build_path / relative if relative else self.build_path


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------


class PublishEnvironment(str, Enum):
    """Publish environment."""

    DEV = "dev"
    PROD = "prod"


@dataclass(frozen=True)
class TargetSpec:
    """A storage account slot and the secret prefix holding its credentials."""

    name: str
    secret_prefix: str

    @property
    def name_variable(self) -> str:
        return f"{self.secret_prefix.upper()}_ACCOUNT_NAME"

    @property
    def key_variable(self) -> str:
        return f"{self.secret_prefix.upper()}_ACCOUNT_KEY"


DEV_EUW = TargetSpec(name="dev-euw", secret_prefix="dev_euw")
PROD_EUW = TargetSpec(name="prod-euw", secret_prefix="prod_euw")
PROD_USE = TargetSpec(name="prod-use", secret_prefix="prod_use")

ENVIRONMENTS: dict[PublishEnvironment, tuple[TargetSpec, ...]] = {
    PublishEnvironment.DEV: (DEV_EUW,),
    PublishEnvironment.PROD: (PROD_EUW, PROD_USE),
}


class PublishTarget(BaseModel):
    """A resolved upload destination."""

    name: str
    account_name: str
    account_key: SecretStr
    container: str = "$web"


class PublishConfig(BaseModel):
    """Configuration for a publish run.

    Example::

        config = PublishConfig(environment=PublishEnvironment.PROD, archive=Path("dist/site.zip"))
    """

    environment: PublishEnvironment = PublishEnvironment.DEV
    path: Path = Field(default=Path(".build"), description="Directory to upload")
    archive: Path | None = Field(
        default=None,
        description="Zip artifact to extract into path before uploading",
    )
    container: str = Field(default="$web", description="Blob container")
    dry_run: bool = Field(default=False, description="Resolve targets without uploading")
    run_id: str = Field(default="", description="Unique run identifier (auto-generated)")

    @model_validator(mode="after")
    def _set_defaults(self) -> PublishConfig:
        if not self.run_id:
            self.run_id = _new_run_id()
        return self

    @classmethod
    def from_settings(cls, settings: SitepubSettings, **overrides: Any) -> PublishConfig:
        """Create config from settings; ``None`` overrides are ignored."""
        values: dict[str, Any] = {
            "path": settings.build_dir,
            "container": settings.container,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def targets(self, settings: SitepubSettings) -> list[PublishTarget]:
        """Resolve the environment's targets; raises if credentials are missing."""
        resolved = []
        for slot in ENVIRONMENTS[self.environment]:
            account_name, account_key = settings.credentials(slot.secret_prefix)
            if not account_name:
                raise MissingConfigError(slot.name_variable).with_context(target=slot.name)
            if account_key is None or not account_key.get_secret_value():
                raise MissingConfigError(slot.key_variable).with_context(target=slot.name)
            resolved.append(
                PublishTarget(
                    name=slot.name,
                    account_name=account_name,
                    account_key=account_key,
                    container=self.container,
                )
            )
        return resolved


__all__ = [
    "BuildConfig",
    "ENVIRONMENTS",
    "PublishConfig",
    "PublishEnvironment",
    "PublishTarget",
    "TargetSpec",
]
