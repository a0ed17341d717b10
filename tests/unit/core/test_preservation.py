"""Unit tests for the preservation transaction.

Tests for saving paths around a destructive reinstall and restoring them.
"""

import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from drupalctl.core.preservation import (
    SETTINGS_FILENAME,
    PreservationError,
    PreservationTransaction,
    harden_site_permissions,
)


def _snapshot_tree(root: Path) -> dict[str, bytes | None]:
    """Map every entry below root to its bytes (None for directories)."""
    tree: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        key = path.relative_to(root).as_posix()
        tree[key] = None if path.is_dir() else path.read_bytes()
    return tree


@pytest.fixture
def site_tree(project_dir: Path) -> Path:
    """A site skeleton with a data directory and a custom module."""
    sites = project_dir / "core" / "sites"
    (sites / "default" / "files").mkdir(parents=True)
    (sites / "default" / SETTINGS_FILENAME).write_text("<?php $db = 'x';\n")
    (sites / "default" / "files" / "logo.png").write_bytes(b"\x89PNG\x00\x01")
    custom = project_dir / "core" / "modules" / "custom" / "mymod"
    custom.mkdir(parents=True)
    (custom / "mymod.info").write_text('name = "My module"\n')
    return project_dir


class TestBeginSave:
    """Tests for PreservationTransaction.begin_save."""

    def test_moves_existing_paths(self, site_tree: Path, scratch_parent: Path) -> None:
        """Saved paths disappear from their original location."""
        transaction = PreservationTransaction(scratch_parent)
        sites = site_tree / "core" / "sites"

        records = transaction.begin_save([sites])

        assert not sites.exists()
        assert len(records) == 1
        assert records[0].backup_path.parent == transaction.scratch_dir
        assert (records[0].backup_path / "default" / SETTINGS_FILENAME).exists()

    def test_skips_missing_paths(self, project_dir: Path, scratch_parent: Path) -> None:
        """Paths that do not exist are not recorded."""
        transaction = PreservationTransaction(scratch_parent)
        records = transaction.begin_save([project_dir / "missing"])
        assert records == []
        assert transaction.records == []

    def test_empty_is_noop(self, scratch_parent: Path) -> None:
        """Saving nothing creates no scratch directory."""
        transaction = PreservationTransaction(scratch_parent)
        assert transaction.begin_save([]) == []
        assert transaction.scratch_dir is None
        assert list(scratch_parent.iterdir()) == []

    def test_single_scratch_dir_per_run(self, site_tree: Path, scratch_parent: Path) -> None:
        """Every save of a run shares one scratch directory."""
        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save([site_tree / "core" / "sites"])
        transaction.begin_save([site_tree / "core" / "modules" / "custom"])
        assert len(list(scratch_parent.iterdir())) == 1

    def test_name_collision_uses_hashed_dir(self, project_dir: Path, scratch_parent: Path) -> None:
        """Two paths with the same basename get distinct backups."""
        first = project_dir / "a" / "custom"
        second = project_dir / "b" / "custom"
        first.mkdir(parents=True)
        second.mkdir(parents=True)
        (first / "one.txt").write_text("1")
        (second / "two.txt").write_text("2")

        transaction = PreservationTransaction(scratch_parent)
        records = transaction.begin_save([first, second])

        assert records[0].backup_path == transaction.scratch_dir / "custom"
        assert records[1].backup_path != records[0].backup_path
        assert records[1].backup_path.name == "custom"
        assert records[1].backup_path.parent.parent == transaction.scratch_dir

    def test_failed_move_raises(self, site_tree: Path, scratch_parent: Path) -> None:
        """A failed move aborts loudly."""
        transaction = PreservationTransaction(scratch_parent)
        with (
            patch("drupalctl.core.preservation.shutil.move", side_effect=OSError("denied")),
            pytest.raises(PreservationError, match="Cannot save"),
        ):
            transaction.begin_save([site_tree / "core" / "sites"])


class TestRestore:
    """Tests for PreservationTransaction.restore."""

    def test_round_trip_is_byte_identical(self, site_tree: Path, scratch_parent: Path) -> None:
        """restore(begin_save(P)) leaves every path as it was."""
        paths = [site_tree / "core" / "sites", site_tree / "core" / "modules" / "custom"]
        before = {path: _snapshot_tree(path) for path in paths}

        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save(paths)
        transaction.restore()

        for path in paths:
            assert _snapshot_tree(path) == before[path]

    def test_nested_custom_path_survives(self, site_tree: Path, scratch_parent: Path) -> None:
        """A custom directory inside the site data directory is not lost."""
        sites = site_tree / "core" / "sites"
        custom = sites / "all" / "modules" / "custom"
        (custom / "mymod").mkdir(parents=True)
        (custom / "mymod" / "mymod.module").write_text("<?php\n")
        before = _snapshot_tree(sites)

        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save([custom, sites])
        (sites / "all" / "modules").mkdir(parents=True)
        (sites / "README.txt").write_text("fresh")
        transaction.restore()

        assert _snapshot_tree(sites) == before
        assert list(scratch_parent.iterdir()) == []

    def test_replaces_reinstalled_content(self, site_tree: Path, scratch_parent: Path) -> None:
        """Freshly installed content at the original path is discarded."""
        sites = site_tree / "core" / "sites"
        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save([sites])

        (sites / "example").mkdir(parents=True)
        (sites / "example" / "README.txt").write_text("fresh")
        transaction.restore()

        assert not (sites / "example").exists()
        assert (sites / "default" / "files" / "logo.png").read_bytes() == b"\x89PNG\x00\x01"

    def test_removes_scratch_dir(self, site_tree: Path, scratch_parent: Path) -> None:
        """No scratch directory is left behind."""
        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save([site_tree / "core" / "sites"])
        transaction.restore()

        assert transaction.scratch_dir is None
        assert transaction.records == []
        assert list(scratch_parent.iterdir()) == []

    def test_without_records_is_noop(self, scratch_parent: Path) -> None:
        """Restoring before any save does nothing."""
        transaction = PreservationTransaction(scratch_parent)
        assert transaction.restore() == []

    def test_restore_recreates_parent(self, site_tree: Path, scratch_parent: Path) -> None:
        """A reinstall that dropped the parent directory is tolerated."""
        custom = site_tree / "core" / "modules" / "custom"
        transaction = PreservationTransaction(scratch_parent)
        transaction.begin_save([custom])
        (site_tree / "core" / "modules").rmdir()

        transaction.restore()

        assert (custom / "mymod" / "mymod.info").exists()


class TestHardenSitePermissions:
    """Tests for harden_site_permissions function."""

    def test_sets_modes(self, site_tree: Path) -> None:
        """Site directories become 0755 and settings files 0644."""
        site = site_tree / "core" / "sites" / "default"
        site.chmod(0o555)
        (site / SETTINGS_FILENAME).chmod(0o444)

        harden_site_permissions(site_tree / "core" / "sites")

        assert stat.S_IMODE(site.stat().st_mode) == 0o755
        assert stat.S_IMODE((site / SETTINGS_FILENAME).stat().st_mode) == 0o644

    def test_missing_dir_is_ignored(self, project_dir: Path) -> None:
        """A missing sites directory is not an error."""
        harden_site_permissions(project_dir / "nope")
