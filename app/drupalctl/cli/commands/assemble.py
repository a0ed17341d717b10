"""Assemble command implementation.

Runs the install lifecycle for every package of an assembly plan.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from drupalctl.core.config import ConfigError, require_config
from drupalctl.core.host import PackageOutcome, PlanRunner, load_plan
from drupalctl.core.lifecycle import Lifecycle
from drupalctl.core.preservation import PreservationError
from drupalctl.core.releases import ReleaseHistoryClient
from drupalctl.core.workflow import BranchDecision, WorkflowError
from drupalctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Install the packages of an assembly plan.",
    invoke_without_command=True,
)

_DECISION_STYLES: dict[BranchDecision, str] = {
    BranchDecision.KEPT: "kept",
    BranchDecision.RETAINED: "warning",
    BranchDecision.REMOVED: "removed",
    BranchDecision.SKIPPED: "muted",
}


def _format_decision(decision: BranchDecision | None) -> str:
    if decision is None:
        return "[muted]-[/]"
    style = _DECISION_STYLES[decision]
    return f"[{style}]{decision.value}[/]"


def _create_results_table(outcomes: list[PackageOutcome], project_dir: Path) -> Table:
    """Create a table summarizing a run.

    Args:
        outcomes: Package outcomes in install order.
        project_dir: Project directory paths are shown relative to.

    Returns:
        Rich Table with one row per package.
    """
    table = Table(
        title="Assembly Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Package", no_wrap=True)
    table.add_column("Path")
    table.add_column("Patches", justify="right")
    table.add_column("Branch")

    for outcome in outcomes:
        try:
            shown = outcome.path.relative_to(project_dir)
        except ValueError:
            shown = outcome.path
        table.add_row(
            outcome.name,
            f"[muted]{shown.as_posix()}[/]",
            str(outcome.patches),
            _format_decision(outcome.decision),
        )
    return table


@app.callback(invoke_without_command=True)
def assemble(
    ctx: typer.Context,
    plan_path: Annotated[
        Path,
        typer.Option("--plan", "-p", help="Assembly plan (TOML with [[package]] entries)."),
    ],
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file (TOML or composer.json)."),
    ] = None,
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-d", help="Project directory."),
    ] = Path("."),
) -> None:
    """Install every package of an assembly plan.

    Each package goes through the full lifecycle: branch preparation,
    placement, custom path preservation, descriptor stamping, patching
    and branch cleanup.

    Examples:
        drupalctl assemble --plan plan.toml
        drupalctl assemble --plan plan.toml --config composer.json
    """
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(config_path, project_dir)
    try:
        plan = load_plan(plan_path)
    except ConfigError as e:
        print_error(f"Failed to load plan: {e}")
        raise typer.Exit(code=1) from e

    if not plan.packages:
        print_info("Plan contains no packages.")
        return

    project_root = project_dir.resolve()
    lifecycle = Lifecycle(config, project_root, fetch_releases=ReleaseHistoryClient())

    try:
        outcomes = PlanRunner(lifecycle).run(plan)
    except (WorkflowError, PreservationError, FileNotFoundError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    console.print(_create_results_table(outcomes, project_root))
    print_success(f"Assembled {len(outcomes)} package(s).")
