"""Package placement.

Maps a package to its directory inside the site tree from ordered
placement rules. Exact ``vendor/project`` rules always take precedence
over ``vendor/*`` rules; precedence is encoded in the order rules are
tried rather than in branching logic.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

from drupalctl.models.config import InstallerConfig
from drupalctl.models.package import MODULE_TYPE, THEME_TYPE, PackageIdentity

logger = logging.getLogger(__name__)


class MatchKind(int, Enum):
    """How a rule pattern matches a package name, in priority order."""

    EXACT = 0
    VENDOR = 1


class Category(str, Enum):
    """Rule table a package is looked up in."""

    MODULES = "modules"
    THEMES = "themes"
    LIBRARIES = "libraries"


# Package types that get module/theme placement
CATEGORY_BY_TYPE: dict[str, Category] = {
    MODULE_TYPE: Category.MODULES,
    THEME_TYPE: Category.THEMES,
}


@dataclass(frozen=True, slots=True)
class PlacementRule:
    """A single placement rule.

    Attributes:
        kind: Whether the pattern is a full name or a vendor wildcard.
        pattern: Lower-cased ``vendor/project`` or ``vendor/*``.
        target: Bucket name (modules, themes) or name override (libraries).
    """

    kind: MatchKind
    pattern: str
    target: str

    def matches(self, identity: PackageIdentity) -> bool:
        """Check if the rule applies to a package."""
        if self.kind is MatchKind.EXACT:
            return self.pattern == identity.full_name
        return self.pattern == f"{identity.vendor}/*"


def build_rules(table: dict[str, str]) -> tuple[PlacementRule, ...]:
    """Turn a ``pattern -> target`` table into rules sorted by priority.

    Args:
        table: Rule table as written in configuration.

    Returns:
        Exact rules first, then vendor wildcards, each group in table order.
    """
    rules = [
        PlacementRule(
            kind=MatchKind.VENDOR if pattern.endswith("/*") else MatchKind.EXACT,
            pattern=pattern.lower(),
            target=target,
        )
        for pattern, target in table.items()
    ]
    return tuple(sorted(rules, key=lambda rule: rule.kind))


@dataclass(frozen=True, slots=True)
class PlacementRuleSet:
    """All placement rules plus the site layout they resolve against.

    Attributes:
        root: Configured install root.
        sites: Sites collection subpath.
        site: Active site name.
        rules: Ordered rules per category.
        default_bucket: Bucket for modules and themes no rule matches.
    """

    root: str = "core"
    sites: str = "sites"
    site: str = "all"
    rules: dict[Category, tuple[PlacementRule, ...]] = field(default_factory=dict)
    default_bucket: str = "custom"

    @classmethod
    def from_config(cls, config: InstallerConfig) -> "PlacementRuleSet":
        """Build the rule set from installer configuration."""
        return cls(
            root=config.root,
            sites=config.sites,
            site=config.site,
            rules={
                Category.MODULES: build_rules(config.modules),
                Category.THEMES: build_rules(config.themes),
                Category.LIBRARIES: build_rules(config.libraries),
            },
            default_bucket=config.default_bucket,
        )

    @property
    def site_path(self) -> PurePosixPath:
        """``root/sites/site``, the base of all site placements."""
        return PurePosixPath(self.root, self.sites, self.site)

    def lookup(self, category: Category, identity: PackageIdentity) -> PlacementRule | None:
        """First rule of a category matching a package, or None."""
        for rule in self.rules.get(category, ()):
            if rule.matches(identity):
                return rule
        return None


class PlacementResolver:
    """Computes the install path of a package.

    Module and theme placement is evaluated first and always wins when it
    produces a path; the library table only applies to packages that got
    no module/theme placement. ``None`` means "no opinion": the caller
    falls back to the host's default location.

    Example:
        >>> resolver = PlacementResolver(PlacementRuleSet.from_config(InstallerConfig()))
        >>> resolver.resolve(PackageIdentity("drupal/views", "drupal-module"))
        PurePosixPath('core/sites/all/modules/contrib/views')
    """

    def __init__(self, rules: PlacementRuleSet) -> None:
        """Initialize the resolver.

        Args:
            rules: Rule set to resolve against.
        """
        self._rules = rules

    @property
    def rules(self) -> PlacementRuleSet:
        """The rule set in use."""
        return self._rules

    def resolve(self, identity: PackageIdentity) -> PurePosixPath | None:
        """Resolve the install path of a package.

        Args:
            identity: Package to place.

        Returns:
            Path relative to the project directory, or None to defer to the host.
        """
        if identity.is_plugin:
            return None

        if identity.is_root:
            return PurePosixPath(self._rules.root)

        return self._resolve_extension(identity) or self._resolve_library(identity)

    def _resolve_extension(self, identity: PackageIdentity) -> PurePosixPath | None:
        category = CATEGORY_BY_TYPE.get(identity.type)
        if category is None:
            return None

        rule = self._rules.lookup(category, identity)
        bucket = rule.target if rule is not None and rule.target else self._rules.default_bucket
        return self._rules.site_path / category.value / bucket / identity.project

    def _resolve_library(self, identity: PackageIdentity) -> PurePosixPath | None:
        rule = self._rules.lookup(Category.LIBRARIES, identity)
        if rule is None:
            return None
        return self._rules.site_path / Category.LIBRARIES.value / (rule.target or identity.project)
