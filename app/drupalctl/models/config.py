"""Configuration models for the installer.

This module defines the Pydantic models for the options the installer
reads from the project configuration (``drupalctl.toml`` or the ``extra``
section of ``composer.json``). Option names are the hyphenated keys used
in those files; Python code may use the field names instead.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Default bucket for modules and themes that match no rule
DefaultBucket = Literal["custom", "project"]


class GitSettings(BaseModel):
    """Revision-control options for the per-package branch workflow.

    Attributes:
        commit: Commit installed and patched packages.
        commit_prefix: Text prepended to every commit message.
        path: Subdirectory name a package's own ``.git`` is moved to after install.
        base_branch: Branch package branches are created from. Empty disables branching.
        branch_prefix: Prefix of every package branch name.
        auto_push: Push kept branches and delete removed ones on the remote.
        auto_remove: Delete branches that are not kept.
        remote: Remote name used for pushes.
        security: Only keep differing branches that carry a security release.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    commit: Annotated[bool, Field(description="Commit package changes")] = False
    commit_prefix: Annotated[
        str, Field(alias="commit-prefix", description="Commit message prefix")
    ] = ""
    path: Annotated[str, Field(description="Backup directory name for package VCS metadata")] = (
        ".git-drupal"
    )
    base_branch: Annotated[
        str, Field(alias="base-branch", description="Branch to create package branches from")
    ] = ""
    branch_prefix: Annotated[
        str, Field(alias="branch-prefix", description="Package branch name prefix")
    ] = "composer-"
    auto_push: Annotated[bool, Field(alias="auto-push", description="Push branches")] = False
    auto_remove: Annotated[
        bool, Field(alias="auto-remove", description="Remove branches that are not kept")
    ] = True
    remote: Annotated[str, Field(description="Remote to push to")] = "origin"
    security: Annotated[bool, Field(description="Keep only security branches")] = False


def _default_modules() -> dict[str, str]:
    return {"drupal/*": "contrib"}


def _default_libraries() -> dict[str, str]:
    return {"ckeditor/*": ""}


class InstallerConfig(BaseModel):
    """Complete installer configuration.

    Attributes:
        root: Install root of the site skeleton.
        sites: Sites collection subpath below the root.
        site: Active site name below the sites collection.
        modules: Placement rules for modules (``vendor/project`` or ``vendor/*`` to bucket).
        themes: Placement rules for themes.
        libraries: Placement rules for libraries (name to override, empty keeps the project name).
        custom: Extra paths that must survive a reinstall of the site skeleton.
        default_bucket: Bucket for modules and themes that match no rule.
        vendor_dir: Directory the host places packages in when no rule applies.
        patches: Patches configured per package name.
        git: Revision-control options.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    root: Annotated[str, Field(alias="drupal-root", description="Install root")] = "core"
    sites: Annotated[str, Field(alias="drupal-sites", description="Sites collection")] = "sites"
    site: Annotated[str, Field(alias="drupal-site", description="Active site")] = "all"
    modules: Annotated[
        dict[str, str],
        Field(alias="drupal-modules", default_factory=_default_modules),
    ]
    themes: Annotated[
        dict[str, str],
        Field(alias="drupal-themes", default_factory=_default_modules),
    ]
    libraries: Annotated[
        dict[str, str],
        Field(alias="drupal-libraries", default_factory=_default_libraries),
    ]
    custom: Annotated[list[str], Field(alias="drupal-custom", default_factory=list)]
    default_bucket: Annotated[
        DefaultBucket, Field(alias="drupal-default-bucket", description="Fallback bucket")
    ] = "custom"
    vendor_dir: Annotated[str, Field(alias="vendor-dir", description="Host placement root")] = (
        "vendor"
    )
    patches: Annotated[dict[str, Any], Field(default_factory=dict)]
    git: Annotated[GitSettings, Field(default_factory=GitSettings)]

    @field_validator("libraries", mode="before")
    @classmethod
    def accept_library_list(cls, value: object) -> object:
        """Accept the legacy list form, where every name keeps its project name."""
        if isinstance(value, list):
            return {str(name): "" for name in value}
        return value

    @field_validator("modules", "themes", "libraries", mode="after")
    @classmethod
    def lowercase_rule_keys(cls, value: dict[str, str]) -> dict[str, str]:
        """Rule keys match lower-cased package names."""
        return {key.lower(): target for key, target in value.items()}

    @property
    def sites_dir(self) -> str:
        """The site data directory, ``<root>/<sites>``."""
        return f"{self.root}/{self.sites}"

    @property
    def preserved_paths(self) -> list[str]:
        """Paths to keep across a site skeleton reinstall, site data directory last."""
        paths = list(self.custom)
        if self.sites_dir not in paths:
            paths.append(self.sites_dir)
        return paths

    def has_patches(self, package_name: str) -> bool:
        """Check if patches are configured for a package."""
        return bool(self.patches.get(package_name))
