"""Unit tests for package identity.

Tests for name validation and the derived classification properties.
"""

import pytest
from drupalctl.models.package import PackageIdentity


class TestPackageIdentity:
    """Tests for PackageIdentity dataclass."""

    def test_name_parts_lowercased(self) -> None:
        """Vendor, project and full name are lower-cased."""
        identity = PackageIdentity(name="Drupal/Views_UI", type="drupal-module")
        assert identity.full_name == "drupal/views_ui"
        assert identity.vendor == "drupal"
        assert identity.project == "views_ui"
        assert identity.type_prefix == "drupal"

    @pytest.mark.parametrize("name", ["", "views", "a/b/c", "/views", "drupal/"])
    def test_invalid_names(self, name: str) -> None:
        """Names must be exactly vendor/project."""
        with pytest.raises(ValueError):
            PackageIdentity(name=name)

    def test_is_frozen(self) -> None:
        """Identities are immutable."""
        identity = PackageIdentity(name="drupal/views")
        with pytest.raises(AttributeError):
            identity.version = "1.0"  # type: ignore[misc]

    def test_defaults(self) -> None:
        """Type defaults to library with no version or source."""
        identity = PackageIdentity(name="acme/thing")
        assert identity.type == "library"
        assert identity.version == ""
        assert identity.source_url is None


class TestClassification:
    """Tests for the gating properties."""

    def test_root_package(self) -> None:
        """drupal/drupal is the root and an extension."""
        identity = PackageIdentity(name="drupal/drupal", type="drupal-core")
        assert identity.is_root
        assert identity.is_extension

    def test_plugin(self) -> None:
        """composer-* types are plugins and never extensions."""
        identity = PackageIdentity(name="drupal/tangler", type="composer-plugin")
        assert identity.is_plugin
        assert not identity.is_extension

    def test_library(self) -> None:
        """Libraries are not extensions even from the drupal vendor."""
        identity = PackageIdentity(name="drupal/some-lib", type="library")
        assert identity.is_library
        assert not identity.is_extension

    def test_metapackage(self) -> None:
        """Metapackages are skipped."""
        identity = PackageIdentity(name="drupal/core-recommended", type="metapackage")
        assert not identity.is_extension

    def test_drupal_type_from_other_vendor(self) -> None:
        """A drupal-* type makes any vendor's package an extension."""
        identity = PackageIdentity(name="acme/widgets", type="drupal-module")
        assert identity.is_drupal
        assert identity.is_extension

    def test_other_vendor_other_type(self) -> None:
        """Unrelated packages are left to the host."""
        identity = PackageIdentity(name="symfony/yaml", type="symfony-bundle")
        assert not identity.is_drupal
        assert not identity.is_extension
