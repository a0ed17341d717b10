"""Normalize command implementation.

Shows the canonical comparison tuple and the display form of a version.
"""

from typing import Annotated

import typer

from drupalctl.core.versions import display_version, normalize_version
from drupalctl.models.package import LIBRARY_TYPE, PackageIdentity
from drupalctl.utils.formatting import console, create_key_value_table, print_error

app = typer.Typer(
    help="Show the normalized forms of a version string.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def normalize(
    ctx: typer.Context,
    raw: Annotated[
        str,
        typer.Option("--raw", "-r", help="Version string to normalize."),
    ],
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Package name used for the display form."),
    ] = "drupal/example",
    source_url: Annotated[
        str | None,
        typer.Option("--source-url", "-u", help="Repository address of the package."),
    ] = None,
    plain: Annotated[
        bool,
        typer.Option("--plain", "-p", help="Print the tuple only."),
    ] = False,
) -> None:
    """Normalize a version string.

    Examples:
        drupalctl normalize --raw 7.x-1.10
        drupalctl normalize --raw 1.2.0 --source-url https://packages.drupal.org/7
    """
    if ctx.invoked_subcommand is not None:
        return

    normalized = normalize_version(raw)
    tuple_text = ".".join(str(part) for part in normalized)
    if plain:
        console.print(tuple_text)
        return

    try:
        identity = PackageIdentity(name=name, type=LIBRARY_TYPE, version=raw, source_url=source_url)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    table = create_key_value_table(f"Version {raw}", "Form", "Value")
    table.add_row("Tuple", tuple_text)
    table.add_row("Display", display_version(identity))
    console.print(table)
