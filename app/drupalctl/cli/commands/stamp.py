"""Stamp command implementation.

Appends provenance metadata to the descriptor files of an installed package.
"""

from pathlib import Path
from typing import Annotated

import typer

from drupalctl.core.descriptor import MetadataStamper
from drupalctl.models.package import MODULE_TYPE, PackageIdentity
from drupalctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Stamp descriptor files of an installed package.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def stamp_package(
    ctx: typer.Context,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Package name as vendor/project."),
    ],
    path: Annotated[
        Path,
        typer.Option("--path", "-p", help="Installed package directory."),
    ],
    package_version: Annotated[
        str,
        typer.Option("--package-version", help="Installed version."),
    ],
    package_type: Annotated[
        str,
        typer.Option("--type", "-t", help="Declared package type."),
    ] = MODULE_TYPE,
    source_url: Annotated[
        str | None,
        typer.Option("--source-url", "-u", help="Repository address of the package."),
    ] = None,
) -> None:
    """Stamp the descriptor files below a package directory.

    Files that already carry a version and all provenance fields are
    left untouched, so running the command twice changes nothing.

    Examples:
        drupalctl stamp --name drupal/views --path core/sites/all/modules/contrib/views \\
            --package-version 7.3.0 --source-url https://packages.drupal.org/7
    """
    if ctx.invoked_subcommand is not None:
        return

    if not path.is_dir():
        print_error(f"Package directory not found: {path}")
        raise typer.Exit(code=1)

    try:
        identity = PackageIdentity(
            name=name, type=package_type, version=package_version, source_url=source_url
        )
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    rewritten = MetadataStamper().stamp_package(identity, path)
    if not rewritten:
        print_info("No descriptor files needed stamping.")
        return

    for file in rewritten:
        console.print(f"  [muted]{file}[/]")
    print_success(f"Stamped {len(rewritten)} descriptor file(s).")
