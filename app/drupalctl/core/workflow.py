"""Per-package revision workflow.

Each package operation gets its own branch, created from a base branch
before the host replaces the package and committed afterwards (once for
the install, once per applied patch). When all patches are in, the
branch is kept, pushed or pruned.

Only two conditions stop a run: uncommitted changes in the working tree
before a package is touched, and a configured base branch that does not
exist. Every other git failure is logged and the run carries on.
"""

import logging
import shutil
from enum import Enum
from pathlib import Path

from drupalctl.core.context import RunContext
from drupalctl.core.git import GitClient
from drupalctl.core.releases import ReleaseFetcher, is_security_advisory
from drupalctl.core.versions import display_version, major_version
from drupalctl.models.config import GitSettings
from drupalctl.models.package import DRUPAL_VENDOR, PackageIdentity

logger = logging.getLogger(__name__)

# Directory name of live VCS metadata inside a package
VCS_DIR = ".git"

# Appended to branches whose upgrade crosses a security release
SECURITY_SUFFIX = "-SA"


class WorkflowError(Exception):
    """Raised when the run must stop to protect the working tree."""


class BranchDecision(str, Enum):
    """Outcome of the branch retention decision.

    Attributes:
        SKIPPED: No base branch is configured.
        KEPT: The branch carries changes worth keeping.
        REMOVED: The branch was deleted.
        RETAINED: The branch could be removed but auto-remove is off.
    """

    SKIPPED = "skipped"
    KEPT = "kept"
    REMOVED = "removed"
    RETAINED = "retained"


class RevisionWorkflow:
    """Drives the branch of every package through one run.

    Attributes:
        settings: Git options for the run.
        git: Git command wrapper.
    """

    def __init__(
        self,
        settings: GitSettings,
        git: GitClient,
        fetch_releases: ReleaseFetcher | None = None,
    ) -> None:
        """Initialize the workflow.

        Args:
            settings: Git options for the run.
            git: Git command wrapper bound to the project working tree.
            fetch_releases: Release history source; without one no upgrade
                is classified as security-relevant.
        """
        self.settings = settings
        self.git = git
        self._fetch_releases = fetch_releases

    # -- guards ---------------------------------------------------------------

    def ensure_clean_tree(self) -> None:
        """Stop the run if the working tree has uncommitted changes.

        Raises:
            WorkflowError: If ``git diff HEAD`` reports changes.
        """
        if self.git.has_diff():
            msg = (
                "There are uncommitted changes which will be removed. "
                "Please commit all uncommitted changes first."
            )
            raise WorkflowError(msg)

    def verify_base_branch(self) -> None:
        """Stop the run if the configured base branch does not exist.

        Raises:
            WorkflowError: If the base branch cannot be resolved.
        """
        base = self.settings.base_branch
        if not self.git.branch_exists(base):
            msg = f'Specified base-branch "{base}" does not exist'
            raise WorkflowError(msg)

    # -- naming ---------------------------------------------------------------

    def branch_name(self, identity: PackageIdentity, context: RunContext) -> str:
        """Name of the package's branch, computed once per run.

        The name is the prefix and project (underscores as dashes), the
        display version when known, and ``-SA`` for security upgrades.
        """
        key = identity.full_name
        if key in context.branch_names:
            return context.branch_names[key]

        version = display_version(identity)
        name = f"{self.settings.branch_prefix}{identity.project}".replace("_", "-")
        if version:
            name += f"-{version}"
        if identity.vendor == DRUPAL_VENDOR and self.is_security_upgrade(identity, context):
            name += SECURITY_SUFFIX

        context.branch_names[key] = name
        return name

    def is_security_upgrade(self, identity: PackageIdentity, context: RunContext) -> bool:
        """Check if upgrading from the previously installed version crosses a security release."""
        if self._fetch_releases is None:
            return False
        version = display_version(identity)
        return is_security_advisory(
            self._fetch_releases,
            identity.project,
            major_version(version),
            context.previous_version(identity),
            version,
        )

    # -- phases ---------------------------------------------------------------

    def before(self, identity: PackageIdentity, package_path: Path, context: RunContext) -> None:
        """Prepare a package's branch before the host replaces it.

        Creates the package branch from the base branch and switches to it,
        then restores VCS metadata a previous run moved aside.

        Raises:
            WorkflowError: If the base branch does not exist.
        """
        if self.settings.base_branch:
            self.verify_base_branch()
            branch = self.branch_name(identity, context)
            logger.info("Creating branch %s in GIT.", branch)
            self.git.create_branch(branch, self.settings.base_branch)

        self._restore_vcs_metadata(package_path)

    def after(self, identity: PackageIdentity, package_path: Path) -> None:
        """Move VCS metadata aside and commit the installed package."""
        self._backup_vcs_metadata(package_path)

        if not self.settings.commit:
            return

        version = display_version(identity)
        logger.info("Committing %s with version %s to GIT.", identity.name, version)
        self.git.commit_all(
            package_path,
            f"{self.settings.commit_prefix}Update package {identity.name} to version {version}",
        )

    def after_patch(
        self,
        identity: PackageIdentity,
        package_path: Path,
        url: str,
        description: str,
    ) -> None:
        """Commit the changes of one applied patch."""
        if not self.settings.commit:
            return

        logger.info(
            "Committing patch %s (%s) for package %s to GIT.", url, description, identity.name
        )
        self.git.commit_all(
            package_path,
            f"{self.settings.commit_prefix}Applied patch {url} ({description}) "
            f"for {identity.name}.",
        )

    def after_all(self, identity: PackageIdentity, context: RunContext) -> BranchDecision:
        """Keep, push or remove the package branch once all patches are in.

        A branch identical to the base branch is always eligible for
        removal. A differing branch is kept unless security enforcement is
        on and the branch is not a security branch.

        Raises:
            WorkflowError: If the base branch does not exist.
        """
        base = self.settings.base_branch
        if not base:
            return BranchDecision.SKIPPED

        self.verify_base_branch()
        branch = self.branch_name(identity, context)
        logger.debug("Branch cleanup for %s", branch)

        differs = self.git.has_diff(base, branch)
        if differs:
            # Discard leftovers of a failed patch commit.
            self.git.reset_hard()

        if differs and (not self.settings.security or branch.endswith(SECURITY_SUFFIX)):
            logger.debug(
                "Keeping branch %s, git.security=%s", branch, self.settings.security
            )
            if self.settings.auto_push:
                logger.info("Pushing %s to %s to GIT.", branch, self.settings.remote)
                self.git.push(self.settings.remote, branch, force=True)
            return BranchDecision.KEPT

        if not self.settings.auto_remove:
            return BranchDecision.RETAINED

        logger.info("Removing local branch %s from GIT.", branch)
        self.git.checkout(base)
        self.git.delete_branch(branch)

        if self.settings.auto_push:
            logger.info(
                "Removing upstream branch %s from GIT remote %s.", branch, self.settings.remote
            )
            self.git.delete_remote_branch(self.settings.remote, branch)

        return BranchDecision.REMOVED

    def finish(self) -> None:
        """Return to the base branch at the end of a run."""
        if self.settings.base_branch:
            self.git.checkout(self.settings.base_branch)

    # -- VCS metadata -----------------------------------------------------------

    def _restore_vcs_metadata(self, package_path: Path) -> None:
        if not self.settings.path:
            return
        live = package_path / VCS_DIR
        backup = package_path / self.settings.path
        if live.exists() or not backup.exists():
            return
        try:
            backup.rename(live)
        except OSError as e:
            logger.warning("Cannot restore %s from %s: %s", live, backup, e)
            return
        logger.info("Restored %s from %s.", live, backup)

    def _backup_vcs_metadata(self, package_path: Path) -> None:
        if not self.settings.path:
            return
        live = package_path / VCS_DIR
        backup = package_path / self.settings.path
        if not live.exists():
            return
        logger.info("Moving %s to %s.", live, backup)
        try:
            if backup.exists():
                shutil.rmtree(backup)
            live.rename(backup)
        except OSError as e:
            logger.warning("Cannot move %s to %s: %s", live, backup, e)
