"""Per-run state shared by all lifecycle phases.

Everything a run accumulates between phases (resolved paths, descriptor
snapshots, branch names, preserved directories) lives in one
``RunContext`` so that phase ordering is explicit. A context is never
shared between runs.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from drupalctl.core.descriptor import Snapshot
from drupalctl.core.placement import PlacementResolver
from drupalctl.core.preservation import PreservationTransaction
from drupalctl.models.package import PackageIdentity

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """State of one install/update run.

    Attributes:
        project_dir: Directory all configured paths are relative to.
        vendor_dir: Host default location, relative to the project directory.
        install_paths: Resolved install directories by lower-cased package name.
        snapshots: Descriptor snapshots taken before each package was replaced.
        branch_names: Computed branch names by lower-cased package name.
        preservation: Directories saved around the site skeleton reinstall.
    """

    project_dir: Path
    vendor_dir: str = "vendor"
    install_paths: dict[str, Path] = field(default_factory=dict)
    snapshots: dict[str, Snapshot] = field(default_factory=dict)
    branch_names: dict[str, str] = field(default_factory=dict)
    preservation: PreservationTransaction = field(default_factory=PreservationTransaction)

    def install_path(self, identity: PackageIdentity, resolver: PlacementResolver) -> Path:
        """Resolve a package's install directory once per run.

        Falls back to ``<vendor_dir>/<vendor>/<project>`` when no rule applies.

        Args:
            identity: Package to locate.
            resolver: Placement resolver.

        Returns:
            Absolute install directory.
        """
        key = identity.full_name
        cached = self.install_paths.get(key)
        if cached is not None:
            return cached

        relative = resolver.resolve(identity)
        if relative is not None:
            logger.info("Installing %s in %s.", key, relative)
            path = self.project_dir / relative
        else:
            path = self.project_dir / self.vendor_dir / identity.vendor / identity.project

        self.install_paths[key] = path
        return path

    def previous_version(self, identity: PackageIdentity) -> str | None:
        """Version recorded in the package's descriptors before it was replaced."""
        for info in self.snapshots.get(identity.full_name, {}).values():
            if info.version:
                return info.version
        return None
