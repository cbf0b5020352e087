"""Allow ``python -m sitepub``."""

from sitepub.cli.app import app

app(prog_name="sitepub")
