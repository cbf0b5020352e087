"""sitepub build — generate, fix, package and publish a documentation site.

Key Concepts:
    BuildConfig / PublishConfig: Pydantic models created from settings.
    MkdocsBuilder: ``python -m mkdocs build`` via subprocess.
    Packager: Stages the site under ``.build/<prefix>/`` and zips it.
    BlobPublisher: ``pyazblob upload`` via subprocess, one call per target.
    BuildRunner / PublishRunner: Sequential runners returning result models.

Architecture::

    ┌──────────┐   ┌──────────┐   ┌─────────┐   ┌─────────┐   ┌──────────┐
    │  mkdocs  │ → │ fixlinks │ → │  stage  │ → │ archive │ → │ publish  │
    │  build   │   │ (links/) │   │ .build/ │   │ site.zip│   │ pyazblob │
    └──────────┘   └──────────┘   └─────────┘   └─────────┘   └──────────┘

Example:
    >>> from sitepub.build import BuildConfig
    >>> BuildConfig(base_path="blacksheep", version="v1").resolved_base_path()
    '/blacksheep/v1/'
"""

from __future__ import annotations

from sitepub.build.config import (
    BuildConfig,
    PublishConfig,
    PublishEnvironment,
    PublishTarget,
)
from sitepub.build.mkdocs import MkdocsBuilder, load_mkdocs_config
from sitepub.build.packager import Packager, clean
from sitepub.build.publisher import BlobPublisher
from sitepub.build.workflow import BuildRunner, PublishRunner, run_fixlinks

__all__ = [
    "BlobPublisher",
    "BuildConfig",
    "BuildRunner",
    "MkdocsBuilder",
    "Packager",
    "PublishConfig",
    "PublishEnvironment",
    "PublishRunner",
    "PublishTarget",
    "clean",
    "load_mkdocs_config",
    "run_fixlinks",
]
