"""Configuration commands.

Shows the effective installer configuration and writes a default one.
"""

from pathlib import Path
from typing import Annotated

import typer

from drupalctl.core.config import ConfigError, find_config_file, require_config, save_config
from drupalctl.core.paths import PROJECT_CONFIG_FILENAME
from drupalctl.models.config import InstallerConfig
from drupalctl.utils.formatting import (
    console,
    create_key_value_table,
    format_flag,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Show or initialize the installer configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


def _format_rules(rules: dict[str, str]) -> str:
    if not rules:
        return "[muted](none)[/]"
    lines = [f"{pattern} -> {target or '[muted](project)[/]'}" for pattern, target in rules.items()]
    return "\n".join(lines)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file (TOML or composer.json)."),
    ] = None,
    project_dir: Annotated[
        Path,
        typer.Option("--project-dir", "-d", help="Project directory."),
    ] = Path("."),
) -> None:
    """Show the effective configuration, environment overrides included."""
    config = require_config(config_path, project_dir)
    source = config_path or find_config_file(project_dir)
    print_info(f"Configuration source: {source or '(defaults)'}")

    table = create_key_value_table("Installer Configuration", "Option", "Value")
    table.add_row("drupal-root", config.root)
    table.add_row("drupal-sites", config.sites)
    table.add_row("drupal-site", config.site)
    table.add_row("drupal-modules", _format_rules(config.modules))
    table.add_row("drupal-themes", _format_rules(config.themes))
    table.add_row("drupal-libraries", _format_rules(config.libraries))
    table.add_row("drupal-custom", "\n".join(config.preserved_paths))
    table.add_row("drupal-default-bucket", config.default_bucket)
    table.add_row("vendor-dir", config.vendor_dir)
    table.add_row("patches", ", ".join(sorted(config.patches)) or "[muted](none)[/]")
    console.print(table)

    git = config.git
    git_table = create_key_value_table("Git", "Option", "Value")
    git_table.add_row("commit", format_flag(git.commit))
    git_table.add_row("commit-prefix", git.commit_prefix or "[muted](none)[/]")
    git_table.add_row("path", git.path)
    git_table.add_row("base-branch", git.base_branch or "[muted](disabled)[/]")
    git_table.add_row("branch-prefix", git.branch_prefix)
    git_table.add_row("auto-push", format_flag(git.auto_push))
    git_table.add_row("auto-remove", format_flag(git.auto_remove))
    git_table.add_row("remote", git.remote)
    git_table.add_row("security", format_flag(git.security))
    console.print(git_table)


@app.command()
def init(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output path for the configuration file."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing configuration."),
    ] = False,
) -> None:
    """Write a default drupalctl.toml."""
    output_path = output or Path(PROJECT_CONFIG_FILENAME)

    if output_path.exists():
        if not force:
            print_error(f"Configuration already exists: {output_path}")
            print_info("Use --force to overwrite or specify a different path with --output.")
            raise typer.Exit(code=1)
        print_warning(f"Overwriting existing configuration: {output_path}")

    try:
        saved_path = save_config(InstallerConfig(), output_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Configuration written to {saved_path}")
