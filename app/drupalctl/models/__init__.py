"""Data models for drupalctl.

This module exports the core data structures used throughout the application.
"""

from drupalctl.models.config import DefaultBucket, GitSettings, InstallerConfig
from drupalctl.models.descriptor import DescriptorInfo, StampMetadata
from drupalctl.models.package import PackageIdentity
from drupalctl.models.plan import AssemblyPlan, PlannedPackage
from drupalctl.models.release import Release, ReleaseHistory

__all__ = [
    "AssemblyPlan",
    "DefaultBucket",
    "DescriptorInfo",
    "GitSettings",
    "InstallerConfig",
    "PackageIdentity",
    "PlannedPackage",
    "Release",
    "ReleaseHistory",
    "StampMetadata",
]
