"""Assembly plan models.

An assembly plan lists the packages a command-line run installs, in
order, each with the directory holding its extracted contents.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from drupalctl.models.package import LIBRARY_TYPE, PackageIdentity


class PlannedPackage(BaseModel):
    """One package operation in an assembly plan.

    Attributes:
        name: Package name as ``vendor/project``.
        type: Declared package type.
        version: Pretty version string.
        source: Directory with the extracted package contents.
        source_url: Repository address the package came from.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    name: Annotated[str, Field(min_length=3, description="Package name")]
    type: Annotated[str, Field(description="Package type")] = LIBRARY_TYPE
    version: Annotated[str, Field(description="Package version")] = ""
    source: Annotated[str, Field(description="Extracted package directory")]
    source_url: Annotated[
        str | None, Field(alias="source-url", description="Repository address")
    ] = None

    def to_identity(self) -> PackageIdentity:
        """Build the package identity the lifecycle works with."""
        return PackageIdentity(
            name=self.name,
            type=self.type,
            version=self.version,
            source_url=self.source_url,
        )


class AssemblyPlan(BaseModel):
    """Ordered package operations of one run.

    Attributes:
        packages: Packages to install, in order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    packages: Annotated[
        list[PlannedPackage], Field(alias="package", default_factory=list)
    ]
