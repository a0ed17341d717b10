"""Minimal host for command-line runs.

Plays the package manager's part for ``drupalctl assemble``: reads an
assembly plan, replaces each package directory with its extracted
contents, applies configured local patches, and signals the lifecycle
phases in order.
"""

import logging
import shutil
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from drupalctl.core.config import ConfigError, ConfigParseError, ConfigValidationError
from drupalctl.core.lifecycle import Lifecycle, Phase
from drupalctl.core.workflow import VCS_DIR, BranchDecision
from drupalctl.models.plan import AssemblyPlan
from drupalctl.utils.shell import CommandRunner, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PackageOutcome:
    """What a run did with one package.

    Attributes:
        name: Package name.
        path: Directory the package was installed to.
        patches: Number of patches applied.
        decision: Branch retention decision, if one was made.
    """

    name: str
    path: Path
    patches: int = 0
    decision: BranchDecision | None = None


def load_plan(path: Path) -> AssemblyPlan:
    """Load and validate an assembly plan.

    Args:
        path: TOML plan file.

    Returns:
        Validated plan.

    Raises:
        ConfigError: If the file cannot be read.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read plan {path}: {e}") from e

    try:
        return AssemblyPlan.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid plan content: {e}") from e


def replace_tree(source: Path, target: Path) -> None:
    """Replace a package directory with freshly extracted contents.

    Live VCS metadata in the target survives the replacement.

    Args:
        source: Extracted package contents.
        target: Install directory.

    Raises:
        FileNotFoundError: If the source directory does not exist.
    """
    if not source.is_dir():
        raise FileNotFoundError(f"Package source not found: {source}")

    if target.exists():
        for entry in target.iterdir():
            if entry.name == VCS_DIR:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    target.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, target, dirs_exist_ok=True, ignore=shutil.ignore_patterns(VCS_DIR))


def _patch_entries(patches: Any) -> list[tuple[str, str]]:
    """Normalize configured patches to (description, location) pairs.

    Accepts a ``{description: location}`` mapping or a list of
    ``{"description": ..., "url": ...}`` tables.
    """
    if isinstance(patches, dict):
        return [(str(desc), str(loc)) for desc, loc in patches.items()]
    entries: list[tuple[str, str]] = []
    if isinstance(patches, list):
        for item in patches:
            if isinstance(item, dict) and "url" in item:
                entries.append((str(item.get("description", "")), str(item["url"])))
    return entries


class PlanRunner:
    """Drives a lifecycle through an assembly plan."""

    def __init__(
        self,
        lifecycle: Lifecycle,
        runner: CommandRunner | None = None,
    ) -> None:
        """Initialize the plan runner.

        Args:
            lifecycle: Lifecycle of the run.
            runner: Command runner used to apply patches.
        """
        self.lifecycle = lifecycle
        self._runner: CommandRunner = runner or run_command

    def _apply_patches(self, name: str, package_path: Path) -> list[tuple[str, str]]:
        applied: list[tuple[str, str]] = []
        project_dir = self.lifecycle.context.project_dir
        for description, location in _patch_entries(self.lifecycle.config.patches.get(name)):
            patch_file = project_dir / location
            if "://" in location or not patch_file.is_file():
                logger.warning("Skipping patch %s for %s: not a local file", location, name)
                continue
            result = self._runner(
                ["patch", "-p1", "--forward", "-i", str(patch_file.resolve())],
                cwd=str(package_path),
                timeout=None,
            )
            if not result.success:
                logger.warning(
                    "Patch %s failed for %s: %s", location, name, result.stderr.strip()
                )
                continue
            logger.info("Applied patch %s (%s) to %s", location, description, name)
            applied.append((location, description))
        return applied

    def run(self, plan: AssemblyPlan) -> list[PackageOutcome]:
        """Install every planned package and end the run.

        Args:
            plan: Packages to install, in order.

        Returns:
            One outcome per package.

        Raises:
            WorkflowError: On uncommitted changes or a missing base branch.
            PreservationError: If a preserved path cannot be moved.
            FileNotFoundError: If a package source directory is missing.
        """
        lifecycle = self.lifecycle
        project_dir = lifecycle.context.project_dir
        outcomes: list[PackageOutcome] = []

        for planned in plan.packages:
            identity = planned.to_identity()
            lifecycle.dispatch(Phase.BEFORE_PACKAGE, identity)

            target = lifecycle.install_path(identity)
            replace_tree(project_dir / planned.source, target)

            lifecycle.dispatch(Phase.AFTER_PACKAGE, identity)
            applied = self._apply_patches(identity.name, target)
            for url, description in applied:
                lifecycle.dispatch(Phase.AFTER_PATCH, identity, url=url, description=description)
            lifecycle.dispatch(Phase.AFTER_ALL_PATCHES, identity)

            outcomes.append(
                PackageOutcome(
                    name=identity.name,
                    path=target,
                    patches=len(applied),
                    decision=lifecycle.decisions.get(identity.name),
                )
            )

        lifecycle.finish()
        return outcomes
