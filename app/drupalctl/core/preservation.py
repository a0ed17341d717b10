"""Preservation of user-owned directories across a destructive reinstall.

Before the site skeleton is replaced, every configured path that must
survive is moved (not copied) into a scratch directory; after the
replacement the fresh copies are discarded and the saved ones moved
back. The scratch directory is created lazily, once per run, and
removed after a restore.
"""

import contextlib
import hashlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Site directories the host may leave read-only, and the settings file inside each
SITE_DIR_MODE = 0o755
SETTINGS_FILENAME = "settings.php"
SETTINGS_FILE_MODE = 0o644


class PreservationError(Exception):
    """Raised when a preserved path cannot be moved; the run must stop."""


@dataclass(frozen=True, slots=True)
class PreservationRecord:
    """Where a preserved path was saved.

    Attributes:
        original_path: Path that is replaced by the reinstall.
        backup_path: Location of the saved copy in the scratch directory.
    """

    original_path: Path
    backup_path: Path


def harden_site_permissions(sites_dir: Path) -> None:
    """Make site directories and their settings files writable again.

    The host may leave them read-only, which makes the destructive replace
    unable to delete them. Failures are ignored.

    Args:
        sites_dir: The site data directory (``<root>/<sites>``).
    """
    if not sites_dir.is_dir():
        return
    for entry in sites_dir.iterdir():
        if not entry.is_dir():
            continue
        with contextlib.suppress(OSError):
            entry.chmod(SITE_DIR_MODE)
        with contextlib.suppress(OSError):
            (entry / SETTINGS_FILENAME).chmod(SETTINGS_FILE_MODE)


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class PreservationTransaction:
    """Saves paths before a reinstall and restores them afterwards.

    One instance lives for a whole run, so records from several saves
    share a single scratch directory and never collide.

    Attributes:
        records: Saved paths, in save order.
    """

    def __init__(self, scratch_parent: Path | None = None) -> None:
        """Initialize an empty transaction.

        Args:
            scratch_parent: Directory to create the scratch directory in.
                Defaults to the system temporary directory.
        """
        self._scratch_parent = scratch_parent
        self._scratch_dir: Path | None = None
        self.records: list[PreservationRecord] = []

    @property
    def scratch_dir(self) -> Path | None:
        """The scratch directory, or None before the first save."""
        return self._scratch_dir

    def _ensure_scratch_dir(self) -> Path:
        if self._scratch_dir is None:
            parent = str(self._scratch_parent) if self._scratch_parent is not None else None
            self._scratch_dir = Path(tempfile.mkdtemp(prefix="dci", suffix=".bak", dir=parent))
            logger.debug("Ensuring %s", self._scratch_dir)
        return self._scratch_dir

    def _backup_path_for(self, path: Path) -> Path:
        scratch = self._ensure_scratch_dir()
        candidate = scratch / path.name
        taken = {record.backup_path for record in self.records}
        if candidate in taken or candidate.exists():
            digest = hashlib.md5(str(path).encode("utf-8")).hexdigest()
            nested = scratch / digest
            nested.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensuring %s", nested)
            candidate = nested / path.name
        return candidate

    def begin_save(self, paths: list[Path]) -> list[PreservationRecord]:
        """Move every existing path into the scratch directory.

        Missing paths are skipped. An empty list is a no-op and creates
        no scratch directory.

        Args:
            paths: Paths that must survive the reinstall.

        Returns:
            Records created by this call.

        Raises:
            PreservationError: If a path cannot be moved.
        """
        created: list[PreservationRecord] = []
        for path in paths:
            if not os.path.lexists(path):
                continue

            backup = self._backup_path_for(path)
            logger.info("Saving %s to %s", path, backup)
            try:
                shutil.move(str(path), str(backup))
            except OSError as e:
                msg = f"Cannot save {path} to {backup}: {e}"
                raise PreservationError(msg) from e

            record = PreservationRecord(original_path=path, backup_path=backup)
            self.records.append(record)
            created.append(record)
        return created

    def restore(self, records: list[PreservationRecord] | None = None) -> list[PreservationRecord]:
        """Move saved paths back, replacing whatever was installed there.

        Records are restored in reverse save order, so a path saved from
        inside another saved path goes back after its parent. The scratch
        directory is removed once no records remain. Without any records
        this is a no-op.

        Args:
            records: Records to restore. Defaults to all records of the run.

        Returns:
            The records that were restored.

        Raises:
            PreservationError: If a saved path cannot be moved back.
        """
        pending = list(self.records if records is None else records)
        if not pending:
            return []

        for record in reversed(pending):
            logger.info("Restoring %s from %s", record.original_path, record.backup_path)
            try:
                if os.path.lexists(record.original_path):
                    _remove_path(record.original_path)
                record.original_path.parent.mkdir(parents=True, exist_ok=True)
                shutil.move(str(record.backup_path), str(record.original_path))
            except OSError as e:
                msg = f"Cannot restore {record.original_path} from {record.backup_path}: {e}"
                raise PreservationError(msg) from e
            self.records.remove(record)

        if not self.records and self._scratch_dir is not None:
            shutil.rmtree(self._scratch_dir, ignore_errors=True)
            self._scratch_dir = None
        return pending
