"""
sitepub — build, link-fix and publish mkdocs documentation sites.

The pipeline generates a site with ``mkdocs build``, rewrites every
site-relative link so the pages work under a URL prefix such as
``/blacksheep/`` or ``/blacksheep/v1/``, stages the result under
``.build/<prefix>/``, optionally zips it, and uploads it to Azure blob
storage with ``pyazblob``.

Entry point::

    sitepub --help

Packages:
    sitepub.core   — settings, structured logging, error hierarchy
    sitepub.links  — URL classification and HTML link rewriting
    sitepub.build  — mkdocs builder, packager, publisher, runners
    sitepub.cli    — Typer commands
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
