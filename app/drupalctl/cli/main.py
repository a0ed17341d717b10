"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from drupalctl import __version__
from drupalctl.cli.commands import advisory, assemble, config, normalize, resolve, stamp
from drupalctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="drupalctl",
    help="Drupal site assembly hooks for package installs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"drupalctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> int:
    """Route log records to stderr at the level the global flags select.

    Returns:
        The level that was set.
    """
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )
    return level


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """drupalctl - Drupal site assembly hooks for package installs.

    Places Drupal packages into the site skeleton, keeps custom site
    data across core reinstalls, stamps descriptor files, and manages
    per-package revision branches.
    """
    configure_logging(verbose, quiet)
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(resolve.app, name="resolve")
app.add_typer(normalize.app, name="normalize")
app.add_typer(stamp.app, name="stamp")
app.add_typer(advisory.app, name="advisory")
app.add_typer(assemble.app, name="assemble")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
