"""Installer configuration I/O.

Loads the installer options from ``drupalctl.toml`` or from the
``extra`` section of ``composer.json``, layers environment overrides on
top, and writes a default configuration file.
"""

import json
import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from drupalctl.core.paths import get_project_config_candidates
from drupalctl.models.config import GitSettings, InstallerConfig

logger = logging.getLogger(__name__)

# Environment variables overriding git options after load
ENV_OVERRIDES: dict[str, str] = {
    "COMPOSER_GIT_REMOTE": "remote",
    "COMPOSER_GIT_COMMIT_PREFIX": "commit_prefix",
    "COMPOSER_GIT_SECURITY": "security",
    "COMPOSER_GIT_AUTO_REMOVE": "auto_remove",
}
FLAG_OVERRIDES = frozenset({"security", "auto_remove"})


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when a configuration file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when configuration content is invalid."""


def _read_options(path: Path) -> dict[str, Any]:
    try:
        if path.suffix == ".json":
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            # composer.json keeps installer options under "extra"
            if isinstance(data, dict) and "extra" in data:
                data = data["extra"]
        else:
            with open(path, "rb") as f:
                data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigParseError(f"Invalid configuration syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read configuration {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigValidationError(f"Configuration in {path} must be a table")
    return data


def _is_truthy(value: str) -> bool:
    return value not in ("", "0")


def apply_env_overrides(
    config: InstallerConfig,
    environ: Mapping[str, str] | None = None,
) -> InstallerConfig:
    """Apply environment overrides to the git options.

    Flag variables are true unless empty or ``"0"``.

    Args:
        config: Loaded configuration.
        environ: Environment to read. Defaults to ``os.environ``.

    Returns:
        Configuration with overrides applied.
    """
    env = os.environ if environ is None else environ
    updates: dict[str, Any] = {}
    for variable, option in ENV_OVERRIDES.items():
        if variable not in env:
            continue
        value = env[variable]
        updates[option] = _is_truthy(value) if option in FLAG_OVERRIDES else value
        logger.debug("git.%s overridden by %s", option, variable)

    if not updates:
        return config
    git: GitSettings = config.git.model_copy(update=updates)
    return config.model_copy(update={"git": git})


def find_config_file(project_dir: Path | None = None) -> Path | None:
    """Locate the project configuration file.

    Args:
        project_dir: Directory to search. Defaults to the current directory.

    Returns:
        First existing candidate, or None.
    """
    for candidate in get_project_config_candidates(project_dir):
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Path | None = None,
    *,
    project_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InstallerConfig:
    """Load and validate the installer configuration.

    Without an explicit path the project directory is searched; when no
    file exists the defaults are used.

    Args:
        path: Configuration file (``.toml`` or composer-style ``.json``).
        project_dir: Directory to search when no path is given.
        environ: Environment for overrides. Defaults to ``os.environ``.

    Returns:
        Validated configuration with environment overrides applied.

    Raises:
        ConfigError: If an explicit path does not exist or cannot be read.
        ConfigParseError: If the file syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or find_config_file(project_dir)
    if path is not None and not path.exists():
        raise ConfigError(f"Configuration not found: {path}")

    data: dict[str, Any] = {}
    if config_path is not None:
        logger.debug("Loading configuration from %s", config_path)
        data = _read_options(config_path)

    try:
        config = InstallerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration content: {e}") from e

    return apply_env_overrides(config, environ)


def config_to_dict(config: InstallerConfig) -> dict[str, Any]:
    """Convert a configuration to its file form, using the hyphenated option names."""
    return config.model_dump(by_alias=True, mode="json")


def save_config(config: InstallerConfig, path: Path) -> Path:
    """Save a configuration as TOML.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        config: Configuration to save.
        path: Destination file.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(mode="wb", dir=path.parent, delete=False, suffix=".tmp") as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write configuration: {e}") from e

    return path


def require_config(path: Path | None = None, project_dir: Path | None = None) -> InstallerConfig:
    """Load the configuration or exit with a helpful error message.

    This is a convenience wrapper around load_config() that handles
    common error cases by printing user-friendly messages and exiting.

    Args:
        path: Optional explicit configuration file.
        project_dir: Directory to search when no path is given.

    Returns:
        Loaded and validated configuration.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    import typer

    from drupalctl.utils.formatting import print_error, print_info

    try:
        return load_config(path, project_dir=project_dir)
    except ConfigValidationError as e:
        print_error(f"Invalid configuration: {e}")
        print_info("Run 'drupalctl config init' to write a default configuration.")
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(f"Failed to load configuration: {e}")
        raise typer.Exit(code=1) from e
