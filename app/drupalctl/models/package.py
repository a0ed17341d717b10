"""Package identity model.

This module defines the immutable description of a package as reported
by the host package manager for a single lifecycle event.
"""

from dataclasses import dataclass, field

# Vendor of the ecosystem-branded packages (core and contributed projects)
DRUPAL_VENDOR = "drupal"

# The site skeleton package installed at the configured root
ROOT_PACKAGE = "drupal/drupal"

# Reserved type prefix for host plugins, always placed by the host itself
PLUGIN_TYPE_PREFIX = "composer"

MODULE_TYPE = "drupal-module"
THEME_TYPE = "drupal-theme"
LIBRARY_TYPE = "library"
METAPACKAGE_TYPE = "metapackage"


@dataclass(frozen=True, slots=True)
class PackageIdentity:
    """Represents a package the host is installing or updating.

    Attributes:
        name: Package name as ``vendor/project``.
        type: Declared package type (e.g., 'drupal-module', 'library').
        version: Pretty version string reported by the host (e.g., '7.1.7', 'dev-7.x-1.x').
        source_url: Address of the repository the package came from, if known.
    """

    name: str
    type: str = field(default=LIBRARY_TYPE)
    version: str = field(default="")
    source_url: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate package identity after initialization."""
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if self.name.count("/") != 1 or self.name.startswith("/") or self.name.endswith("/"):
            msg = f"Package name must be 'vendor/project', got {self.name!r}"
            raise ValueError(msg)

    @property
    def full_name(self) -> str:
        """Lower-cased ``vendor/project`` used for matching and caching."""
        return self.name.lower()

    @property
    def vendor(self) -> str:
        """Lower-cased vendor part of the name."""
        return self.full_name.split("/", 1)[0]

    @property
    def project(self) -> str:
        """Lower-cased project part of the name."""
        return self.full_name.split("/", 1)[1]

    @property
    def type_prefix(self) -> str:
        """Leading segment of the type (``drupal`` for ``drupal-module``)."""
        return self.type.split("-", 1)[0]

    @property
    def is_root(self) -> bool:
        """Check if this is the site skeleton package."""
        return self.full_name == ROOT_PACKAGE

    @property
    def is_plugin(self) -> bool:
        """Check if this is a host plugin, which is never relocated."""
        return self.type_prefix == PLUGIN_TYPE_PREFIX

    @property
    def is_library(self) -> bool:
        """Check if the package declares the generic library type."""
        return self.type == LIBRARY_TYPE

    @property
    def is_drupal(self) -> bool:
        """Check if the package belongs to the Drupal ecosystem by vendor or type."""
        return self.vendor == DRUPAL_VENDOR or self.type_prefix == DRUPAL_VENDOR

    @property
    def is_extension(self) -> bool:
        """Check if the package gets site placement, stamping and preservation.

        Plugins, metapackages, libraries and non-Drupal packages are excluded;
        libraries still take part in the revision workflow.
        """
        if self.is_library or self.is_plugin or self.type == METAPACKAGE_TYPE:
            return False
        return self.is_drupal
