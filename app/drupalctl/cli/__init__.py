"""CLI package for drupalctl.

This package contains the Typer application and all subcommands.
"""

from drupalctl.cli.main import app

__all__ = ["app"]
