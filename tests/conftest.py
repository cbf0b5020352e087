"""
Shared pytest fixtures for sitepub tests.

This module provides:
- Environment isolation (no SITEPUB_* / credential variables, no ``.env``)
- Structlog reset between tests
- A small mkdocs-material style site tree and a matching mkdocs.yml

No external tool (mkdocs, pyazblob) is needed: tests that exercise the
subprocess wrappers patch ``subprocess.run`` / ``shutil.which``.
"""

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

# Ensure sitepub package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


_ENV_VARS = [
    "VERSION",
    "DEV_EUW_ACCOUNT_NAME",
    "DEV_EUW_ACCOUNT_KEY",
    "PROD_EUW_ACCOUNT_NAME",
    "PROD_EUW_ACCOUNT_KEY",
    "PROD_USE_ACCOUNT_NAME",
    "PROD_USE_ACCOUNT_KEY",
]


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Run every test in an empty working directory with a clean environment."""
    import sitepub.core.settings as settings_module

    for key in list(os.environ):
        if key.startswith("SITEPUB_"):
            monkeypatch.delenv(key, raising=False)
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_settings_cache", None)
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def publish_credentials(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Credentials for every publish target, as CI provides them."""
    values = {
        "DEV_EUW_ACCOUNT_NAME": "neoteroidev",
        "DEV_EUW_ACCOUNT_KEY": "dev-secret-key",
        "PROD_EUW_ACCOUNT_NAME": "neoteroieuw",
        "PROD_EUW_ACCOUNT_KEY": "euw-secret-key",
        "PROD_USE_ACCOUNT_NAME": "neoteroiuse",
        "PROD_USE_ACCOUNT_KEY": "use-secret-key",
    }
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    return values


# =============================================================================
# Site fixtures
# =============================================================================


ROOT_PAGE = """<!doctype html>
<html lang="en">
<head>
  <link rel="canonical" href="https://www.neoteroi.dev/blacksheep/">
  <link rel="icon" href="img/favicon.png">
  <link rel="stylesheet" href="assets/stylesheets/main.css">
</head>
<body>
  <a href="." title="BlackSheep" class="md-header__button md-logo">Home</a>
  <a href="getting-started/">Getting started</a>
  <a href="#install">Install</a>
  <a href="https://github.com/Neoteroi/BlackSheep">GitHub</a>
  <a href="/rodi/">Rodi</a>
  <img src="/img/logo.png" alt="logo">
  <script id="__config" type="application/json">{"base": ".", "features": [], "search": "assets/javascripts/workers/search.js"}</script>
  <script src="assets/javascripts/bundle.js"></script>
</body>
</html>
"""

NESTED_PAGE = """<!doctype html>
<html lang="en">
<head>
  <link rel="stylesheet" href='../assets/stylesheets/main.css'>
</head>
<body>
  <a href="..">Home</a>
  <a href="../routing/#query">Routing</a>
  <img src="../img/diagram.png" alt="diagram">
  <script>var __md_scope = {base: "..", worker: "../assets/javascripts/workers/search.js"}</script>
</body>
</html>
"""

DEEP_PAGE = """<!doctype html>
<html lang="en">
<body>
  <a href="../../">Home</a>
  <a href="../authorization/">Authorization</a>
  <script src="../../assets/javascripts/bundle.js"></script>
</body>
</html>
"""

MKDOCS_YML = """site_name: BlackSheep
site_url: https://www.neoteroi.dev/blacksheep/
theme:
  name: material
markdown_extensions:
  - pymdownx.emoji:
      emoji_index: !!python/name:material.extensions.emoji.twemoji
      emoji_generator: !!python/name:material.extensions.emoji.to_svg
"""


def write_site(site_dir: Path) -> Path:
    """Create the three-page sample site under ``site_dir``."""
    (site_dir / "getting-started").mkdir(parents=True, exist_ok=True)
    (site_dir / "guides" / "authentication").mkdir(parents=True, exist_ok=True)
    (site_dir / "assets" / "javascripts").mkdir(parents=True, exist_ok=True)

    (site_dir / "index.html").write_text(ROOT_PAGE, encoding="utf-8")
    (site_dir / "getting-started" / "index.html").write_text(NESTED_PAGE, encoding="utf-8")
    (site_dir / "guides" / "authentication" / "index.html").write_text(DEEP_PAGE, encoding="utf-8")
    (site_dir / "assets" / "javascripts" / "bundle.js").write_text("console.log(1);\n", encoding="utf-8")
    return site_dir


@pytest.fixture
def make_site() -> Callable[[Path], Path]:
    """Factory writing the sample site into a directory."""
    return write_site


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """A generated site at ``<tmp>/site``."""
    return write_site(tmp_path / "site")


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A documentation project: mkdocs.yml plus an already generated site."""
    (tmp_path / "mkdocs.yml").write_text(MKDOCS_YML, encoding="utf-8")
    write_site(tmp_path / "site")
    return tmp_path
