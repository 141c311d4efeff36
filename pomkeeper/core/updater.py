"""Update orchestration for one POM.

:class:`VersionUpdater` walks the governed sites of a
:class:`~pomkeeper.models.ProjectModel` in a fixed order:

1. ``dependencyManagement`` entries,
2. plain dependencies,
3. version properties,
4. the parent reference,

and processes each one completely (eligibility, catalog lookup, candidate
filtering, selection, text patch) before moving to the next. Every patch
is applied to the buffer left behind by the previous one.

Sites that are left alone are recorded in :attr:`VersionUpdater.skips`
and logged; only run-level failures (catalog errors, malformed parent
ranges, I/O) raise.

Typical usage::

    document = PomDocument.from_file("pom.xml")
    model = PomReader().read("pom.xml")
    with HTTPClient() as http:
        updater = VersionUpdater(document, MavenRepositoryCatalog(http))
        changes = use_latest_versions(updater, model, Policy())
    document.save()
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Mapping, Optional, Sequence

from pomkeeper.core.catalog import VersionCatalog
from pomkeeper.core.eligibility import CoordinateFilter
from pomkeeper.core.patcher import (
    DependencyLocator,
    Locator,
    ParentLocator,
    PatchTarget,
    PomDocument,
    PropertyLocator,
    apply_patch,
)
from pomkeeper.core.properties import decide_property_update, resolve_property_links
from pomkeeper.core.selector import Policy, Selection, choose_version
from pomkeeper.models.coordinate import (
    AppliedChange,
    Coordinate,
    Site,
    SiteKind,
    SkipDiagnostic,
    SkipReason,
)
from pomkeeper.models.project import DependencyDecl, ProjectModel
from pomkeeper.models.version import is_snapshot
from pomkeeper.models.version_range import parse_version_spec
from pomkeeper.utils.logger import get_logger

logger = get_logger("updater")

__all__ = [
    "ProcessingSwitches",
    "VersionUpdater",
    "update_properties",
    "use_latest_versions",
    "use_next_versions",
]

# Reasons logged at info; every other skip is logged at debug
_INFO_REASONS = frozenset(
    {
        SkipReason.REACTOR_EXCLUDED,
        SkipReason.NOT_SNAPSHOT,
        SkipReason.NO_CANDIDATE,
        SkipReason.PROPERTY_CONFLICT,
        SkipReason.NO_PARENT,
        SkipReason.VERSION_RANGE,
    }
)


@dataclass(frozen=True)
class ProcessingSwitches:
    """Which kinds of site a run touches."""

    dependencies: bool = True
    dependency_management: bool = True
    parent: bool = False
    properties: bool = False


class VersionUpdater:
    """Applies version updates to a single :class:`PomDocument`.

    Args:
        document: Text buffer that receives every patch.
        catalog: Source of known versions.
        coordinate_filter: Reactor and include/exclude gate (default:
            everything eligible).
        switches: Site kinds processed by :meth:`run`.
        property_links: Explicit property name to ``groupId:artifactId`` links.
        auto_link: Link properties to dependencies written as ``${name}``.
        include_properties: Property names to process (empty means all).
        exclude_properties: Property names never processed.
    """

    def __init__(
        self,
        document: PomDocument,
        catalog: VersionCatalog,
        coordinate_filter: Optional[CoordinateFilter] = None,
        *,
        switches: Optional[ProcessingSwitches] = None,
        property_links: Optional[Mapping[str, Sequence[str]]] = None,
        auto_link: bool = True,
        include_properties: Sequence[str] = (),
        exclude_properties: Sequence[str] = (),
    ) -> None:
        self.document = document
        self.catalog = catalog
        self.coordinate_filter = coordinate_filter or CoordinateFilter()
        self.switches = switches or ProcessingSwitches()
        self.property_links = dict(property_links or {})
        self.auto_link = auto_link
        self.include_properties = tuple(include_properties)
        self.exclude_properties = tuple(exclude_properties)
        self.skips: List[SkipDiagnostic] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(
        self,
        model: ProjectModel,
        policy: Policy,
        switches: Optional[ProcessingSwitches] = None,
    ) -> List[AppliedChange]:
        """Process every governed site of ``model`` under ``policy``.

        :attr:`skips` is reset and refilled for this run.

        Raises:
            CatalogError: Known versions could not be retrieved.
            VersionRangeError: The parent version is a malformed range.
        """
        switches = switches or self.switches
        self.skips = []
        changes: List[AppliedChange] = []

        if switches.dependency_management:
            for dependency in model.dependency_management:
                self._collect(changes, self._process_dependency(dependency, policy))
        if switches.dependencies:
            for dependency in model.dependencies:
                self._collect(changes, self._process_dependency(dependency, policy))
        if switches.properties:
            changes.extend(self._process_properties(model, policy))
        if switches.parent:
            self._collect(changes, self._process_parent(model, policy))

        logger.debug(
            "Run finished: %d change(s), %d site(s) skipped", len(changes), len(self.skips)
        )
        return changes

    # ------------------------------------------------------------------
    # Sites (private)
    # ------------------------------------------------------------------

    def _process_dependency(
        self, dependency: DependencyDecl, policy: Policy
    ) -> Optional[AppliedChange]:
        coordinate = dependency.coordinate
        kind = SiteKind.DEPENDENCY_MANAGEMENT if dependency.managed else SiteKind.DEPENDENCY
        site = Site(kind, coordinate=coordinate, profile_id=dependency.profile_id)

        if not dependency.version or not dependency.raw_version:
            self._skip(site, SkipReason.NO_VERSION, f"No explicit version for {coordinate}")
            return None

        reason = self.coordinate_filter.check(coordinate)
        if reason is SkipReason.REACTOR_EXCLUDED:
            self._skip(site, reason, f"Ignoring reactor dependency: {coordinate}")
            return None
        if policy.process_snapshots_only and not is_snapshot(dependency.version):
            self._skip(
                site, SkipReason.NOT_SNAPSHOT, f"Ignoring non-snapshot dependency: {coordinate}"
            )
            return None
        if reason is not None:
            self._skip(site, reason, f"Ignoring dependency not selected for update: {coordinate}")
            return None

        logger.debug("Looking for newer versions of %s", coordinate)
        return self._update_site(
            site,
            coordinate,
            current=dependency.version,
            locator=DependencyLocator(coordinate),
            policy=policy,
        )

    def _process_parent(self, model: ProjectModel, policy: Policy) -> Optional[AppliedChange]:
        parent = model.parent
        if parent is None:
            self._skip(
                Site(SiteKind.PARENT), SkipReason.NO_PARENT, "Project does not have a parent"
            )
            return None

        coordinate = parent.coordinate
        site = Site(SiteKind.PARENT, coordinate=coordinate)
        if self.coordinate_filter.reactor.is_internally_produced(coordinate):
            self._skip(
                site, SkipReason.REACTOR_EXCLUDED, "Project's parent is part of the reactor"
            )
            return None
        if policy.process_snapshots_only and not is_snapshot(parent.version):
            self._skip(
                site, SkipReason.NOT_SNAPSHOT, f"Ignoring non-snapshot parent {coordinate.key}"
            )
            return None
        reason = self.coordinate_filter.check(coordinate)
        if reason is not None:
            self._skip(site, reason, f"Ignoring parent not selected for update: {coordinate.key}")
            return None

        # Malformed specifications abort the run
        spec = parse_version_spec(parent.version)
        if spec.is_range:
            self._skip(
                site,
                SkipReason.VERSION_RANGE,
                f"Parent version {parent.version} is a range; leaving unchanged",
            )
            return None

        change = self._update_site(
            site,
            coordinate,
            current=parent.version,
            locator=ParentLocator(),
            policy=policy,
        )
        if change is not None:
            logger.info("Updating parent from %s to %s", change.old_value, change.new_value)
        return change

    def _process_properties(self, model: ProjectModel, policy: Policy) -> List[AppliedChange]:
        links = resolve_property_links(
            model,
            self.property_links,
            self.auto_link,
            self.include_properties,
            self.exclude_properties,
        )
        for prop in model.properties:
            if prop not in links:
                self._skip(
                    Site(SiteKind.PROPERTY, property_name=prop.name, profile_id=prop.profile_id),
                    SkipReason.NOT_INCLUDED,
                    f"Property {prop.reference}: excluded by the property filters",
                )

        changes: List[AppliedChange] = []
        for prop, associations in links.items():
            site = Site(SiteKind.PROPERTY, property_name=prop.name, profile_id=prop.profile_id)
            decision = decide_property_update(
                prop, associations, self.catalog, self.coordinate_filter, policy
            )
            if decision.reason is not None:
                self._skip(site, decision.reason, decision.message)
                continue
            change = self._patch(
                site,
                prop.value,
                decision.new_value,
                PropertyLocator(prop.name, prop.profile_id),
            )
            if change is not None:
                logger.info(
                    "Updated %s from %s to %s", prop.reference, prop.value, decision.new_value
                )
                changes.append(change)
        return changes

    # ------------------------------------------------------------------
    # Helpers (private)
    # ------------------------------------------------------------------

    def _update_site(
        self,
        site: Site,
        coordinate: Coordinate,
        *,
        current: str,
        locator: Locator,
        policy: Policy,
    ) -> Optional[AppliedChange]:
        known = self.catalog.get_known_versions(coordinate)
        target = choose_version(current, known, policy)
        if target is None:
            self._skip(
                site,
                SkipReason.NO_CANDIDATE,
                f"No eligible newer version of {coordinate} than {current}",
            )
            return None

        change = self._patch(site, current, target.raw, locator)
        if change is not None and site.kind is not SiteKind.PARENT:
            logger.info("Updated %s to version %s", coordinate, target.raw)
        return change

    def _patch(
        self, site: Site, old: str, new: str, locator: Locator
    ) -> Optional[AppliedChange]:
        if apply_patch(self.document, PatchTarget(locator, old, new)):
            return AppliedChange(site=site, old_value=old, new_value=new)
        self._skip(
            site,
            SkipReason.PATCH_MISS,
            f"Could not find {old} at {site.label} in the POM text; leaving unchanged",
        )
        return None

    def _skip(self, site: Site, reason: SkipReason, message: str) -> None:
        self.skips.append(SkipDiagnostic(site=site, reason=reason, message=message))
        if reason in _INFO_REASONS:
            logger.info(message)
        else:
            logger.debug(message)

    @staticmethod
    def _collect(changes: List[AppliedChange], change: Optional[AppliedChange]) -> None:
        if change is not None:
            changes.append(change)


# ---------------------------------------------------------------------------
# Entry functions
# ---------------------------------------------------------------------------


def use_latest_versions(
    updater: VersionUpdater, model: ProjectModel, policy: Policy
) -> List[AppliedChange]:
    """Move every eligible site to its newest allowed version."""
    return updater.run(model, replace(policy, selection=Selection.LATEST))


def use_next_versions(
    updater: VersionUpdater, model: ProjectModel, policy: Policy
) -> List[AppliedChange]:
    """Move every eligible site one step forward."""
    return updater.run(model, replace(policy, selection=Selection.NEXT))


def update_properties(
    updater: VersionUpdater, model: ProjectModel, policy: Policy
) -> List[AppliedChange]:
    """Update version properties and the parent reference only."""
    switches = ProcessingSwitches(
        dependencies=False,
        dependency_management=False,
        parent=True,
        properties=True,
    )
    return updater.run(model, policy, switches)
