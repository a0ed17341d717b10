"""Advisory command implementation.

Checks whether an upgrade passes a published security release.
"""

from typing import Annotated

import typer

from drupalctl.core.releases import ReleaseHistoryClient, is_security_advisory
from drupalctl.core.versions import major_version
from drupalctl.utils.formatting import console, print_info, print_warning

app = typer.Typer(
    help="Check an upgrade against the published security releases.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def check_advisory(
    ctx: typer.Context,
    project: Annotated[
        str,
        typer.Option("--project", "-p", help="Project short name (e.g., views)."),
    ],
    from_version: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Previously installed version."),
    ] = None,
    to_version: Annotated[
        str,
        typer.Option("--to", "-t", help="Newly installed version."),
    ] = "",
    major: Annotated[
        str | None,
        typer.Option("--major", "-m", help="Major series; derived from --to if omitted."),
    ] = None,
) -> None:
    """Check if an upgrade is a security advisory upgrade.

    Exits with code 0 when the upgrade crosses a security release and
    with code 2 when it does not.

    Examples:
        drupalctl advisory --project views --from 7.x-3.10 --to 7.x-3.11
    """
    if ctx.invoked_subcommand is not None:
        return

    series = major or major_version(to_version)
    if not to_version:
        print_warning("No target version given.")
        raise typer.Exit(code=2)

    if is_security_advisory(ReleaseHistoryClient(), project, series, from_version, to_version):
        console.print(
            f"[security]Security upgrade:[/] {project} {from_version or '(none)'} -> {to_version}"
        )
        return

    print_info(f"{project} {from_version or '(none)'} -> {to_version} is not a security upgrade.")
    raise typer.Exit(code=2)
