"""Release history lookup and security-release detection.

Release lists are published per project and major version as XML at
``https://updates.drupal.org/release-history/<project>/<major>.x``. Any
failure to fetch or parse one is treated as "no known releases".
"""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Callable

import requests

from drupalctl.core.versions import compare_versions, is_dev_version, normalize_version
from drupalctl.models.release import Release, ReleaseHistory

logger = logging.getLogger(__name__)

RELEASE_HISTORY_URL = "https://updates.drupal.org/release-history/{project}/{major}.x"
USER_AGENT = "drupalctl"
REQUEST_TIMEOUT = 2.0

# Fetches the release history of a project for a major version
ReleaseFetcher = Callable[[str, str], ReleaseHistory]


def parse_release_history(raw_xml: str | bytes, project: str, major: str) -> ReleaseHistory:
    """Parse a release history document.

    Args:
        raw_xml: XML document body.
        project: Project the document was requested for.
        major: Major version the document was requested for.

    Returns:
        Parsed history; empty if the document is invalid or has no project data.
    """
    empty = ReleaseHistory(project=project, major=major)
    try:
        root = ET.fromstring(raw_xml)
    except ET.ParseError as e:
        logger.warning("Invalid release history for %s %s.x: %s", project, major, e)
        return empty

    if root.find("short_name") is None:
        return empty

    releases: list[Release] = []
    for release in root.iterfind("releases/release"):
        version = (release.findtext("version") or "").strip()
        if not version:
            continue
        terms: dict[str, list[str]] = {}
        for term in release.iterfind("terms/term"):
            name = (term.findtext("name") or "").strip()
            terms.setdefault(name, []).append((term.findtext("value") or "").strip())
        releases.append(
            Release(version=version, terms={name: tuple(values) for name, values in terms.items()})
        )

    return ReleaseHistory(project=project, major=major, releases=tuple(releases))


class ReleaseHistoryClient:
    """Fetches release histories over HTTP.

    Attributes:
        url_template: URL with ``{project}`` and ``{major}`` placeholders.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url_template: str = RELEASE_HISTORY_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url_template: URL with ``{project}`` and ``{major}`` placeholders.
            timeout: Request timeout in seconds.
            session: Session to reuse. A new one is created if omitted.
        """
        self.url_template = url_template
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, project: str, major: str) -> ReleaseHistory:
        """Fetch the release history for a project's major version.

        Args:
            project: Project short name.
            major: Major version (e.g., "7").

        Returns:
            Parsed history; empty on any network or HTTP failure.
        """
        url = self.url_template.format(project=project, major=major)
        try:
            response = self._session.get(
                url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
            )
        except requests.RequestException as e:
            logger.warning("Cannot fetch release history %s: %s", url, e)
            return ReleaseHistory(project=project, major=major)

        if response.status_code != 200:
            logger.debug("Release history %s returned HTTP %d", url, response.status_code)
            return ReleaseHistory(project=project, major=major)

        return parse_release_history(response.content, project, major)

    __call__ = fetch


def crosses_security_release(
    history: ReleaseHistory,
    old_version: str | None,
    new_version: str,
) -> bool:
    """Check if an upgrade passes a security release.

    The upgrade crosses a security release when the old version sorts
    strictly below it and the new version at or above it.

    Args:
        history: Release history to search.
        old_version: Previously installed version; unknown sorts below everything.
        new_version: Newly installed version.
    """
    old = normalize_version(old_version)
    new = normalize_version(new_version)
    for release in history.security_releases:
        boundary = normalize_version(release.version)
        if compare_versions(old, boundary) < 0 <= compare_versions(new, boundary):
            logger.debug(
                "Upgrade %s -> %s crosses security release %s",
                old_version,
                new_version,
                release.version,
            )
            return True
    return False


def is_security_advisory(
    fetch: ReleaseFetcher,
    project: str,
    major: str | None,
    old_version: str | None,
    new_version: str,
) -> bool:
    """Classify an upgrade as security-relevant.

    Development versions are never security releases; neither is an
    upgrade whose major version is unknown.

    Args:
        fetch: Release history source.
        project: Project short name.
        major: Major version series of the new version.
        old_version: Previously installed version, if known.
        new_version: Newly installed version.
    """
    if is_dev_version(new_version) or not major:
        return False
    history = fetch(project, major)
    if not history:
        return False
    return crosses_security_release(history, old_version, new_version)
