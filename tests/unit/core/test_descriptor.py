"""Unit tests for descriptor stamping.

Tests for descriptor parsing, stamp formatting and idempotent stamping.
"""

from datetime import date
from pathlib import Path

import pytest
from drupalctl.core.descriptor import (
    MetadataStamper,
    extract_version,
    format_stamp,
    iter_descriptor_files,
    needs_stamp,
    parse_descriptor,
)
from drupalctl.models.descriptor import DescriptorInfo, StampMetadata
from drupalctl.models.package import PackageIdentity

VIEWS_INFO = 'name = Views\ndescription = "Create customized lists."\ncore = 7.x\n'


@pytest.fixture
def stamper() -> MetadataStamper:
    """Stamper with a fixed date and timestamp."""
    return MetadataStamper(today=date(2024, 3, 1), timestamp=1709251200)


@pytest.fixture
def views() -> PackageIdentity:
    """A contributed module from the per-series endpoint."""
    return PackageIdentity(
        name="drupal/views",
        type="drupal-module",
        version="3.14.0",
        source_url="https://packages.drupal.org/7",
    )


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """Installed views tree with two descriptor files."""
    root = tmp_path / "views"
    (root / "modules" / "views_ui").mkdir(parents=True)
    (root / "views.info").write_text(VIEWS_INFO)
    (root / "modules" / "views_ui" / "views_ui.info").write_text("name = Views UI\n")
    (root / "README.txt").write_text("not a descriptor\n")
    return root


class TestParsing:
    """Tests for descriptor reading helpers."""

    def test_iter_descriptor_files_sorted(self, views_dir: Path) -> None:
        """Only .info files are yielded, in sorted order."""
        files = list(iter_descriptor_files(views_dir))
        assert files == [
            views_dir / "modules" / "views_ui" / "views_ui.info",
            views_dir / "views.info",
        ]

    def test_iter_missing_dir(self, tmp_path: Path) -> None:
        """A missing directory yields nothing."""
        assert list(iter_descriptor_files(tmp_path / "missing")) == []

    def test_parse_fields_and_date(self, tmp_path: Path) -> None:
        """Quoted and unquoted values and the stamp date are read."""
        path = tmp_path / "x.info"
        path.write_text(
            'name = X\nversion = "7.x-1.0"\n\n; Information added by tool on 2023-01-02\n'
        )
        info = parse_descriptor(path)
        assert info is not None
        assert info.fields == {"name": "X", "version": "7.x-1.0"}
        assert info.date == "2023-01-02"

    def test_parse_empty_file(self, tmp_path: Path) -> None:
        """An empty descriptor parses to nothing."""
        path = tmp_path / "empty.info"
        path.write_text("")
        assert parse_descriptor(path) is None

    def test_extract_version_last_wins(self) -> None:
        """The last non-empty version line counts."""
        assert extract_version('version = ""\nversion = "7.x-1.2"\n') == "7.x-1.2"
        assert extract_version("name = X\n") is None


class TestFormatStamp:
    """Tests for format_stamp function."""

    def test_key_order(self) -> None:
        """Blank line, comment, then version, project, datestamp."""
        block = format_stamp(
            StampMetadata(version="7.x-1.0", date="2024-03-01", project="x", datestamp="1")
        )
        assert block.splitlines() == [
            "",
            "; Information added by drupalctl packaging script on 2024-03-01",
            'version = "7.x-1.0"',
            'project = "x"',
            'datestamp = "1"',
        ]

    def test_optional_keys_omitted(self) -> None:
        """Unset provenance keys are not written."""
        block = format_stamp(StampMetadata(version="1.0", date="2024-03-01"))
        assert "project" not in block
        assert "datestamp" not in block


class TestNeedsStamp:
    """Tests for the stamp skip condition."""

    def test_missing_version(self) -> None:
        """Files without a version are always stamped."""
        meta = StampMetadata(version="1.0", date="2024-03-01")
        assert needs_stamp("name = X\n", None, meta)

    def test_version_and_all_provenance(self) -> None:
        """A fully stamped file is skipped."""
        meta = StampMetadata(version="1.0", date="d", project="x", datestamp="1")
        old = DescriptorInfo(fields={"version": "1.0", "project": "x", "datestamp": "1"})
        assert not needs_stamp('version = "1.0"\n', old, meta)

    def test_missing_provenance(self) -> None:
        """A versioned file lacking a provenance key is re-stamped."""
        meta = StampMetadata(version="1.0", date="d", project="x", datestamp="1")
        old = DescriptorInfo(fields={"version": "1.0", "project": "x"})
        assert needs_stamp('version = "1.0"\n', old, meta)


class TestMetadataStamper:
    """Tests for MetadataStamper.stamp_package."""

    def test_stamps_every_descriptor(
        self, stamper: MetadataStamper, views: PackageIdentity, views_dir: Path
    ) -> None:
        """Both descriptors gain a stamp block; content is appended."""
        rewritten = stamper.stamp_package(views, views_dir)

        assert len(rewritten) == 2
        text = (views_dir / "views.info").read_text()
        assert text.startswith(VIEWS_INFO)
        assert 'version = "7.x-3.14"' in text
        assert 'project = "views"' in text
        assert 'datestamp = "1709251200"' in text
        assert "on 2024-03-01" in text

    def test_second_run_is_noop(
        self, stamper: MetadataStamper, views: PackageIdentity, views_dir: Path
    ) -> None:
        """Stamping twice changes nothing the second time."""
        stamper.stamp_package(views, views_dir)
        after_first = {p: p.read_bytes() for p in iter_descriptor_files(views_dir)}

        rewritten = stamper.stamp_package(views, views_dir)

        assert rewritten == []
        assert {p: p.read_bytes() for p in iter_descriptor_files(views_dir)} == after_first

    def test_restamps_missing_provenance(
        self, stamper: MetadataStamper, views: PackageIdentity, tmp_path: Path
    ) -> None:
        """A release-packaged file without a datestamp gets one."""
        root = tmp_path / "views"
        root.mkdir()
        (root / "views.info").write_text('name = Views\nversion = "7.x-3.14"\nproject = "views"\n')

        rewritten = stamper.stamp_package(views, root)

        assert rewritten == [root / "views.info"]
        assert 'datestamp = "1709251200"' in (root / "views.info").read_text()

    def test_merges_snapshot_for_same_version(
        self, views: PackageIdentity, views_dir: Path
    ) -> None:
        """Provenance missing from new metadata is taken from the old snapshot."""
        path = views_dir / "views.info"
        path.write_text(VIEWS_INFO + 'version = "7.x-3.14"\nproject = "views_legacy"\n')
        stamper = MetadataStamper(today=date(2024, 3, 1), timestamp=1)
        snapshot = stamper.snapshot(views_dir)
        path.write_text(VIEWS_INFO)

        partial = StampMetadata(version="7.x-3.14", date="2024-03-01", datestamp="1")
        stamper.stamp_package(views, views_dir, snapshot, partial)

        text = path.read_text()
        assert 'project = "views_legacy"' in text
        assert 'datestamp = "1"' in text

    def test_no_merge_for_dev_versions(self, tmp_path: Path) -> None:
        """Development versions never inherit old provenance."""
        root = tmp_path / "views"
        root.mkdir()
        path = root / "views.info"
        path.write_text('version = "7.x-3.x-dev"\nproject = "old"\n')
        stamper = MetadataStamper(today=date(2024, 3, 1), timestamp=1)
        snapshot = stamper.snapshot(root)
        path.write_text("name = Views\n")

        identity = PackageIdentity(name="drupal/views", type="drupal-module", version="7.x-3.x-dev")
        meta = StampMetadata(version="7.x-3.x-dev", date="2024-03-01")
        stamper.stamp_package(identity, root, snapshot, meta)

        assert "project" not in path.read_text()

    def test_missing_directory(self, stamper: MetadataStamper, views: PackageIdentity) -> None:
        """A missing install directory stamps nothing."""
        assert stamper.stamp_package(views, Path("/nonexistent/views")) == []

    def test_metadata_for(self, stamper: MetadataStamper, views: PackageIdentity) -> None:
        """Metadata carries the display version and provenance."""
        meta = stamper.metadata_for(views)
        assert meta == StampMetadata(
            version="7.x-3.14", date="2024-03-01", project="views", datestamp="1709251200"
        )
