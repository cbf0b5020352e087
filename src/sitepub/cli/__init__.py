"""
CLI layer for sitepub.

Provides a Typer application whose commands delegate to the runners in
``sitepub.build``. This package handles only terminal transport: argument
parsing, coloured output and exit codes.

Entry point::

    sitepub --help
"""

from sitepub.cli.app import app

__all__ = ["app"]
