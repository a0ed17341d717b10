"""Lifecycle dispatch.

The host drives every package operation through a fixed sequence of
phases and calls :meth:`Lifecycle.dispatch` for each one. Each phase
runs an explicit, ordered list of handlers; all state the handlers share
lives in the :class:`RunContext`.

Phases per package::

    BEFORE_PACKAGE -> (host installs) -> AFTER_PACKAGE
        -> AFTER_PATCH (once per applied patch) -> AFTER_ALL_PATCHES

:meth:`Lifecycle.finish` ends the run.
"""

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any

from drupalctl.core.context import RunContext
from drupalctl.core.descriptor import MetadataStamper
from drupalctl.core.git import GitClient
from drupalctl.core.placement import PlacementResolver, PlacementRuleSet
from drupalctl.core.preservation import PreservationTransaction, harden_site_permissions
from drupalctl.core.releases import ReleaseFetcher
from drupalctl.core.workflow import BranchDecision, RevisionWorkflow
from drupalctl.models.config import InstallerConfig
from drupalctl.models.package import PackageIdentity
from drupalctl.utils.shell import CommandRunner

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    """Lifecycle phases the host signals."""

    BEFORE_PACKAGE = "before-package"
    AFTER_PACKAGE = "after-package"
    AFTER_PATCH = "after-patch"
    AFTER_ALL_PATCHES = "after-all-patches"


PhaseHandler = Callable[..., None]


def _tracked(identity: PackageIdentity) -> bool:
    """Packages that get a branch: site extensions and plain libraries."""
    return identity.is_extension or identity.is_library


class Lifecycle:
    """Wires placement, preservation, stamping and the revision workflow to the host phases.

    Attributes:
        config: Installer configuration for the run.
        context: Per-run state.
        resolver: Placement resolver.
        stamper: Descriptor stamper.
        workflow: Revision workflow.
        handlers: Ordered handlers per phase.
        decisions: Branch retention decision per package name.
    """

    def __init__(
        self,
        config: InstallerConfig,
        project_dir: Path,
        *,
        runner: CommandRunner | None = None,
        fetch_releases: ReleaseFetcher | None = None,
        stamper: MetadataStamper | None = None,
        scratch_parent: Path | None = None,
    ) -> None:
        """Initialize a run.

        Args:
            config: Installer configuration.
            project_dir: Project working tree; configured paths are relative to it.
            runner: Command runner for git. Defaults to real subprocesses.
            fetch_releases: Release history source for security classification.
            stamper: Descriptor stamper. Defaults to one stamping the current date.
            scratch_parent: Where the preservation scratch directory is created.
        """
        self.config = config
        self.context = RunContext(
            project_dir=project_dir,
            vendor_dir=config.vendor_dir,
            preservation=PreservationTransaction(scratch_parent),
        )
        self.resolver = PlacementResolver(PlacementRuleSet.from_config(config))
        self.stamper = stamper or MetadataStamper()
        self.workflow = RevisionWorkflow(
            config.git,
            GitClient(project_dir, runner),
            fetch_releases,
        )
        self.decisions: dict[str, BranchDecision] = {}
        self.handlers: dict[Phase, list[PhaseHandler]] = {
            Phase.BEFORE_PACKAGE: [
                self._guard_clean_tree,
                self._snapshot_descriptors,
                self._save_custom_paths,
                self._prepare_branch,
            ],
            Phase.AFTER_PACKAGE: [
                self._restore_custom_paths,
                self._stamp_descriptors,
                self._commit_package,
                self._cleanup_unpatched_branch,
            ],
            Phase.AFTER_PATCH: [self._commit_patch],
            Phase.AFTER_ALL_PATCHES: [self._cleanup_patched_branch],
        }

    def install_path(self, identity: PackageIdentity) -> Path:
        """Install directory of a package for this run."""
        return self.context.install_path(identity, self.resolver)

    def dispatch(self, phase: Phase, identity: PackageIdentity, **kwargs: Any) -> None:
        """Run every handler of a phase, in order.

        Args:
            phase: Phase the host signals.
            identity: Package the phase is for.
            **kwargs: Phase arguments (``url`` and ``description`` for AFTER_PATCH).

        Raises:
            WorkflowError: On uncommitted changes or a missing base branch.
            PreservationError: If a preserved path cannot be moved.
        """
        logger.debug("%s name=%s, type=%s", phase.value, identity.name, identity.type)
        for handler in self.handlers[phase]:
            handler(identity, **kwargs)

    def finish(self) -> None:
        """End the run by returning to the base branch."""
        self.workflow.finish()

    # -- BEFORE_PACKAGE -----------------------------------------------------------

    def _guard_clean_tree(self, identity: PackageIdentity) -> None:
        self.workflow.ensure_clean_tree()

    def _snapshot_descriptors(self, identity: PackageIdentity) -> None:
        if not identity.is_extension:
            return
        path = self.install_path(identity)
        self.context.snapshots[identity.full_name] = self.stamper.snapshot(path)

    def _save_custom_paths(self, identity: PackageIdentity) -> None:
        if not (identity.is_extension and identity.is_root):
            return
        logger.info("Saving custom paths")
        project_dir = self.context.project_dir
        harden_site_permissions(project_dir / self.config.sites_dir)
        self.context.preservation.begin_save(
            [project_dir / path for path in self.config.preserved_paths]
        )

    def _prepare_branch(self, identity: PackageIdentity) -> None:
        if not _tracked(identity):
            return
        self.workflow.before(identity, self.install_path(identity), self.context)

    # -- AFTER_PACKAGE ------------------------------------------------------------

    def _restore_custom_paths(self, identity: PackageIdentity) -> None:
        if not (identity.is_extension and identity.is_root):
            return
        if self.context.preservation.records:
            logger.info("Restoring custom paths")
        self.context.preservation.restore()

    def _stamp_descriptors(self, identity: PackageIdentity) -> None:
        if not identity.is_extension or identity.is_root:
            return
        self.stamper.stamp_package(
            identity,
            self.install_path(identity),
            self.context.snapshots.get(identity.full_name),
        )

    def _commit_package(self, identity: PackageIdentity) -> None:
        if not _tracked(identity):
            return
        self.workflow.after(identity, self.install_path(identity))

    def _cleanup_unpatched_branch(self, identity: PackageIdentity) -> None:
        if not _tracked(identity) or self.config.has_patches(identity.name):
            return
        self.decisions[identity.name] = self.workflow.after_all(identity, self.context)

    # -- AFTER_PATCH / AFTER_ALL_PATCHES ------------------------------------------

    def _commit_patch(self, identity: PackageIdentity, url: str, description: str = "") -> None:
        if not identity.is_extension:
            return
        self.workflow.after_patch(identity, self.install_path(identity), url, description)

    def _cleanup_patched_branch(self, identity: PackageIdentity) -> None:
        if not _tracked(identity) or not self.config.has_patches(identity.name):
            return
        self.decisions[identity.name] = self.workflow.after_all(identity, self.context)
