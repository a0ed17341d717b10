"""CLI commands for drupalctl.

This package contains all subcommand implementations.
"""

from drupalctl.cli.commands import advisory, assemble, config, normalize, resolve, stamp

__all__ = ["advisory", "assemble", "config", "normalize", "resolve", "stamp"]
