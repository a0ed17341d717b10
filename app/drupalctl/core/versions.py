"""Version normalization.

Converts the version strings seen across the ecosystem (semantic
versions, ``7.x-1.2`` branch-style versions, stability suffixes) into a
canonical tuple that orders correctly under plain tuple comparison, and
renders package versions in the project's display form.

Canonical layout::

    (n1, n2, n3, n4[, ...], stability[, stability_number])

Numeric parts are right-padded to four components, then the stability
ordinal is appended (dev=0, unstable=1, alpha=2, beta=3, rc=4, stable=5),
followed by the number attached to the stability word when there is one.
An unparseable version is the all-zero 4-tuple, which sorts below every
parsed version.
"""

import itertools
import re
from urllib.parse import urlparse

from drupalctl.models.package import DRUPAL_VENDOR, ROOT_PACKAGE, PackageIdentity

STABILITIES: tuple[str, ...] = ("dev", "unstable", "alpha", "beta", "rc")
STABLE = len(STABILITIES)
BASE_WIDTH = 4

# Host serving per-core-series package endpoints, e.g. https://packages.drupal.org/8
DISTRIBUTION_HOST = "packages.drupal.org"

_STABILITY_GROUP = "|".join(STABILITIES)
_TOKEN_RE = re.compile(rf"(?:{_STABILITY_GROUP})?[0-9]+")
_STABILITY_RE = re.compile(rf"({_STABILITY_GROUP})([0-9]+)?")
_SEMVER_RE = re.compile(r"(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?(?P<extra>-[\w\d]+)?")
_LEADING_V_RE = re.compile(r"^v(?=\d)")
_MAJOR_RE = re.compile(r"\d+")

VersionTuple = tuple[int, ...]

ZERO_VERSION: VersionTuple = (0,) * BASE_WIDTH


def normalize_version(raw: str | None) -> VersionTuple:
    """Convert a version string to its canonical, comparable tuple.

    Args:
        raw: Version string in any supported notation.

    Returns:
        Canonical tuple; ``ZERO_VERSION`` when nothing can be parsed.

    Example:
        >>> normalize_version("7.x-1.10")
        (7, 1, 10, 0, 5)
        >>> normalize_version("1.0.0-rc1")
        (1, 0, 0, 0, 4, 1)
    """
    version = (raw or "").lower()
    tokens = _TOKEN_RE.findall(version)
    if not tokens:
        return ZERO_VERSION

    numbers = [int(token) for token in tokens if token.isdigit()]
    numbers.extend([0] * (BASE_WIDTH - len(numbers)))

    stability = _STABILITY_RE.search(version)
    if stability:
        numbers.append(STABILITIES.index(stability.group(1)))
        if stability.group(2):
            numbers.append(int(stability.group(2)))
    elif version.endswith(".x"):
        # Branch versions such as 7.x-1.x are development snapshots.
        numbers.append(STABILITIES.index("dev"))
    else:
        numbers.append(STABLE)

    return tuple(numbers)


def compare_versions(left: VersionTuple, right: VersionTuple) -> int:
    """Compare two canonical tuples after zero-padding the shorter one.

    Returns:
        Negative if ``left`` sorts first, zero if equal, positive otherwise.
    """
    for a, b in itertools.zip_longest(left, right, fillvalue=0):
        if a != b:
            return -1 if a < b else 1
    return 0


def is_dev_version(version: str) -> bool:
    """Check if a version names a development release."""
    return "dev" in version.lower()


def major_version(version: str) -> str | None:
    """Leading number of a display version (``7`` for ``7.x-1.2``)."""
    match = _MAJOR_RE.match(version)
    return match.group(0) if match else None


def distribution_series(source_url: str | None) -> str | None:
    """Core series of the endpoint a package came from, if it is a per-series endpoint.

    Args:
        source_url: Repository address, e.g. ``https://packages.drupal.org/7``.

    Returns:
        The series (``"7"``) or None for any other source.
    """
    if not source_url:
        return None
    parsed = urlparse(source_url)
    if parsed.hostname != DISTRIBUTION_HOST:
        return None
    series = parsed.path.strip("/")
    return series or None


def display_version(identity: PackageIdentity) -> str:
    """Render a package version the way the project's own tooling writes it.

    - Root package: ``MAJOR.MINOR[.PATCH]`` (core versions have two numbers).
    - Ecosystem packages: ``SERIES.x-MAJOR.MINOR[.PATCH][-EXTRA]``, where the
      series comes from the source endpoint when known and from the first
      number otherwise (legacy three-number versions like ``7.1.7``).
    - Everything else: a leading ``v`` is dropped and ``/`` becomes ``-``.
    - ``dev-`` branch versions pass through with the prefix removed.
    """
    version = identity.version
    series = distribution_series(identity.source_url)

    if version.startswith("dev-"):
        branch = version[len("dev-") :]
        return f"{series}.x-{branch}" if series else branch

    if identity.vendor != DRUPAL_VENDOR:
        return _LEADING_V_RE.sub("", version).replace("/", "-")

    match = _SEMVER_RE.search(version)
    if not match:
        return version

    major, minor, patch, extra = match.group("major", "minor", "patch", "extra")
    if identity.full_name == ROOT_PACKAGE:
        result = f"{major}.{minor}"
        if patch and patch != "0":
            result += f".{patch}"
    elif series:
        result = f"{series}.x-{major}.{minor}"
        if patch and patch != "0":
            result += f".{patch}"
    else:
        result = f"{major}.x-{minor}"
        if patch:
            result += f".{patch}"
    return result + (extra or "")
