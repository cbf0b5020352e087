"""Process-wide settings for sitepub.

Settings are read from ``SITEPUB_*`` environment variables and a ``.env``
file in the working directory, the same file the documentation Makefile
includes. Publish credentials keep the secret names used by the CI
workflow (``DEV_EUW_ACCOUNT_NAME``, ``PROD_EUW_ACCOUNT_KEY``, ...), and the
version prefix can also come from a bare ``VERSION`` variable::

    VERSION=v1 sitepub fixlinks

Override precedence: CLI options > environment / ``.env`` > ``mkdocs.yml``
> field defaults.

Examples:
    >>> from sitepub.core.settings import SitepubSettings
    >>> settings = SitepubSettings(site_dir="public")
    >>> settings.site_dir
    PosixPath('public')

Tags:
    settings, configuration, pydantic, environment, sitepub
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SitepubSettings(BaseSettings):
    """Settings shared by every sitepub command.

    Fields
    ──────
    config_file     : mkdocs configuration file
    site_dir        : Directory mkdocs renders into
    build_dir       : Staging directory for the publishable tree
    base_path       : URL prefix of the published site (from site_url if unset)
    version         : Optional version segment appended to the base path
    dist_dir        : Directory receiving the zip artifact, outside build_dir
    archive_name    : Zip file written inside dist_dir
    container       : Blob container receiving the upload
    rooted_prefixes : Root-absolute paths that still belong to the site
    log_level       : Structlog log level
    json_logs       : Force JSON log lines (auto-detected when unset)
    """

    model_config = SettingsConfigDict(
        env_prefix="SITEPUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ── Build ────────────────────────────────────────────────────
    config_file: Path = Path("mkdocs.yml")
    site_dir: Path = Path("site")
    build_dir: Path = Path(".build")
    dist_dir: Path = Path("dist")
    base_path: str | None = None
    version: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SITEPUB_VERSION", "VERSION", "version"),
    )
    archive_name: str = "site.zip"
    rooted_prefixes: list[str] = Field(default_factory=lambda: ["/img"])

    # ── Publish ──────────────────────────────────────────────────
    container: str = "$web"

    dev_euw_account_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DEV_EUW_ACCOUNT_NAME", "dev_euw_account_name"),
    )
    dev_euw_account_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DEV_EUW_ACCOUNT_KEY", "dev_euw_account_key"),
    )
    prod_euw_account_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROD_EUW_ACCOUNT_NAME", "prod_euw_account_name"),
    )
    prod_euw_account_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("PROD_EUW_ACCOUNT_KEY", "prod_euw_account_key"),
    )
    prod_use_account_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PROD_USE_ACCOUNT_NAME", "prod_use_account_name"),
    )
    prod_use_account_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("PROD_USE_ACCOUNT_KEY", "prod_use_account_key"),
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    def credentials(self, prefix: str) -> tuple[str | None, SecretStr | None]:
        """Return ``(account_name, account_key)`` for a secret prefix such as ``dev_euw``."""
        return (
            getattr(self, f"{prefix}_account_name"),
            getattr(self, f"{prefix}_account_key"),
        )


_settings_cache: SitepubSettings | None = None


def get_settings(*, _force_reload: bool = False) -> SitepubSettings:
    """Load, validate, and cache the process settings."""
    global _settings_cache
    if _settings_cache is None or _force_reload:
        _settings_cache = SitepubSettings()
    return _settings_cache


__all__ = ["SitepubSettings", "get_settings"]
