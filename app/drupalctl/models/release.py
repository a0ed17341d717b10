"""Release history models.

Structures for the release list published for a project and major
version, used to detect upgrades that cross a security release.
"""

from dataclasses import dataclass, field

# Term name and value marking a security release
RELEASE_TYPE_TERM = "Release type"
SECURITY_UPDATE = "Security update"


@dataclass(frozen=True, slots=True)
class Release:
    """A single published release.

    Attributes:
        version: Release version string (e.g., '7.x-1.3').
        terms: Classification terms, term name to values.
    """

    version: str
    terms: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def is_security(self) -> bool:
        """Check if the release is classified as a security update."""
        return SECURITY_UPDATE in self.terms.get(RELEASE_TYPE_TERM, ())


@dataclass(frozen=True, slots=True)
class ReleaseHistory:
    """Release list for one project and major version.

    An empty history stands for "no known releases", which is also what
    an unreachable or unparseable source yields.

    Attributes:
        project: Project short name.
        major: Major version series the list covers.
        releases: Releases in source order.
    """

    project: str
    major: str
    releases: tuple[Release, ...] = ()

    @property
    def security_releases(self) -> tuple[Release, ...]:
        """Releases classified as security updates."""
        return tuple(r for r in self.releases if r.is_security)

    def __bool__(self) -> bool:
        return bool(self.releases)
