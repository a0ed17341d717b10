"""Resolve command implementation.

Shows where a package would be installed in the site skeleton.
"""

from pathlib import Path
from typing import Annotated

import typer

from drupalctl.core.config import require_config
from drupalctl.core.placement import PlacementResolver, PlacementRuleSet
from drupalctl.models.package import LIBRARY_TYPE, PackageIdentity
from drupalctl.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Show the install path of a package.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def resolve_package(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Package name as vendor/project."),
    ],
    package_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Declared package type."),
    ] = LIBRARY_TYPE,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file (TOML or composer.json)."),
    ] = None,
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-d", help="Project directory."),
    ] = Path("."),
) -> None:
    """Show where a package would be installed.

    Examples:
        drupalctl resolve --name drupal/views --type drupal-module
        drupalctl resolve --name ckeditor/ckeditor
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        identity = PackageIdentity(name=name, type=package_type)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    config = require_config(config_path, project_dir)
    resolver = PlacementResolver(PlacementRuleSet.from_config(config))
    target = resolver.resolve(identity)

    if target is None:
        fallback = Path(config.vendor_dir) / identity.vendor / identity.project
        print_info(f"(host default) {fallback.as_posix()}")
        return

    console.print(target.as_posix())
