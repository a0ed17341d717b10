"""Descriptor file reading and provenance stamping.

Installed packages carry ``.info`` descriptor files. Packages fetched
from source control lack the ``version``/``project``/``datestamp`` lines
the release packaging adds, so they are appended here. Stamping is
idempotent: a file that already carries a version and every provenance
field the new stamp would add is left untouched.
"""

import logging
import re
import time
from collections.abc import Iterator
from datetime import date
from pathlib import Path

from drupalctl.core.versions import display_version, is_dev_version
from drupalctl.models.descriptor import DescriptorInfo, StampMetadata
from drupalctl.models.package import PackageIdentity

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".info"

# Tool named in the stamp comment line
STAMP_TOOL = "drupalctl packaging script"

# Provenance keys whose absence forces a re-stamp even when a version exists
PROVENANCE_KEYS: tuple[str, ...] = ("project", "datestamp")

_FIELD_RE = re.compile(r'^\s*(\w+)\s*=\s*"?([^"\n]*)"?')
_DATE_COMMENT_RE = re.compile(r"^;.*on (\d\d\d\d-\d\d-\d\d)")
_VERSION_RE = re.compile(r'^\s*version\s*=\s*"?([^"\s]*)"?', re.MULTILINE)

# Snapshots of descriptor files, keyed by file path
Snapshot = dict[Path, DescriptorInfo]


def iter_descriptor_files(root: Path) -> Iterator[Path]:
    """Yield descriptor files below a directory, in sorted order.

    A missing directory yields nothing.

    Args:
        root: Installed package directory.
    """
    if not root.is_dir():
        return
    for path in sorted(root.rglob(f"*{DESCRIPTOR_SUFFIX}")):
        if path.is_file():
            yield path


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Cannot read descriptor %s: %s", path, e)
        return None


def parse_descriptor(path: Path) -> DescriptorInfo | None:
    """Parse the key/value pairs and stamp date of a descriptor file.

    Args:
        path: Descriptor file.

    Returns:
        Parsed info, or None if the file is unreadable or carries nothing.
    """
    text = _read_text(path)
    if not text:
        return None

    fields: dict[str, str] = {}
    stamp_date: str | None = None
    for line in text.splitlines():
        if match := _FIELD_RE.match(line):
            fields[match.group(1)] = match.group(2)
        elif match := _DATE_COMMENT_RE.match(line):
            stamp_date = match.group(1)

    if not fields and stamp_date is None:
        return None
    return DescriptorInfo(fields=fields, date=stamp_date)


def extract_version(text: str) -> str | None:
    """Last non-empty ``version`` value in descriptor text, if any."""
    versions = [value for value in _VERSION_RE.findall(text) if value]
    return versions[-1] if versions else None


def format_stamp(metadata: StampMetadata) -> str:
    """Render the block appended to a descriptor file.

    Keys are always written in the order version, project, datestamp.
    """
    lines = [
        "",
        f"; Information added by {STAMP_TOOL} on {metadata.date}",
        f'version = "{metadata.version}"',
    ]
    if metadata.project is not None:
        lines.append(f'project = "{metadata.project}"')
    if metadata.datestamp is not None:
        lines.append(f'datestamp = "{metadata.datestamp}"')
    return "\n".join(lines) + "\n"


def needs_stamp(text: str, old: DescriptorInfo | None, metadata: StampMetadata) -> bool:
    """Decide whether a descriptor must be stamped.

    A file is stamped when it has no version at all, or when the stamp
    would add a provenance field the file lacks.
    """
    if extract_version(text) is None:
        return True
    for key in PROVENANCE_KEYS:
        if metadata.has(key) and (old is None or not old.has(key)):
            return True
    return False


class MetadataStamper:
    """Appends provenance metadata to a package's descriptor files.

    Example:
        >>> stamper = MetadataStamper()
        >>> snapshot = stamper.snapshot(Path("core/sites/all/modules/contrib/views"))
        >>> stamper.stamp_package(identity, Path("core/sites/all/modules/contrib/views"), snapshot)
    """

    def __init__(self, today: date | None = None, timestamp: int | None = None) -> None:
        """Initialize the stamper.

        Args:
            today: Stamp date. Defaults to the current date at stamp time.
            timestamp: Stamp datestamp. Defaults to the current time at stamp time.
        """
        self._today = today
        self._timestamp = timestamp

    def snapshot(self, package_path: Path) -> Snapshot:
        """Read every descriptor below a package directory.

        Taken before an update so the stamp can tell which fields an
        earlier install already carried.

        Args:
            package_path: Installed package directory; missing means empty.

        Returns:
            Parsed descriptors keyed by file path.
        """
        snapshot: Snapshot = {}
        for path in iter_descriptor_files(package_path):
            info = parse_descriptor(path)
            if info is not None:
                snapshot[path] = info
        return snapshot

    def metadata_for(self, identity: PackageIdentity) -> StampMetadata:
        """Build the provenance stamped for a package."""
        today = self._today or date.today()
        timestamp = self._timestamp if self._timestamp is not None else int(time.time())
        return StampMetadata(
            version=display_version(identity),
            date=today.isoformat(),
            project=identity.project,
            datestamp=str(timestamp),
        )

    def stamp_package(
        self,
        identity: PackageIdentity,
        installed_path: Path,
        snapshot: Snapshot | None = None,
        metadata: StampMetadata | None = None,
    ) -> list[Path]:
        """Stamp every descriptor file of an installed package.

        Args:
            identity: Installed package.
            installed_path: Directory the package was installed to.
            snapshot: Descriptors read before the install, if any.
            metadata: Provenance to stamp. Defaults to :meth:`metadata_for`. Fields
                left unset here are taken from the snapshot when the version
                is unchanged.

        Returns:
            Files that were rewritten.
        """
        base = metadata or self.metadata_for(identity)
        previous = snapshot or {}
        rewritten: list[Path] = []

        for path in iter_descriptor_files(installed_path):
            text = _read_text(path)
            if text is None:
                continue

            if not needs_stamp(text, parse_descriptor(path), base):
                continue

            stamp = base
            earlier = previous.get(path)
            if (
                earlier is not None
                and not is_dev_version(base.version)
                and earlier.version == base.version
            ):
                stamp = base.merged_over(earlier)

            logger.info("Rewriting %s with version %s", path, stamp.version)
            with path.open("a", encoding="utf-8") as f:
                f.write(format_stamp(stamp))
            rewritten.append(path)

        return rewritten
