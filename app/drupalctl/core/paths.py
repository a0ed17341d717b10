"""Path conventions for drupalctl.

User-level settings follow the XDG Base Directory Specification; project
configuration is looked up in the working directory.

XDG defaults:
- Config: ~/.config/drupalctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "drupalctl"

# Project configuration files, in lookup order
PROJECT_CONFIG_FILENAME = "drupalctl.toml"
COMPOSER_FILENAME = "composer.json"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the user configuration directory path.

    Returns:
        Path to ~/.config/drupalctl/ (or XDG_CONFIG_HOME/drupalctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/drupalctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_project_config_candidates(project_dir: Path | None = None) -> list[Path]:
    """List project configuration files in lookup order.

    Args:
        project_dir: Directory to search. Defaults to the current directory.

    Returns:
        ``drupalctl.toml`` followed by ``composer.json``.
    """
    base = project_dir if project_dir is not None else Path.cwd()
    return [base / PROJECT_CONFIG_FILENAME, base / COMPOSER_FILENAME]
