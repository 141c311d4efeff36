"""Property linkage: which coordinates does a version property govern?

A property such as ``<jackson.version>2.15.0</jackson.version>`` is usually
shared by several dependencies written as ``<version>${jackson.version}</version>``.
Each of those dependencies is an :class:`~pomkeeper.models.Association`
of the property. Associations come from two places:

* explicit links configured by the user (``property_links``), and
* auto-linking, which scans every dependency whose raw version is exactly
  ``${name}``.

Changing the property changes every associated dependency at once, so the
update is all-or-nothing: every association must be eligible and must
independently pick the *same* literal version. Anything else leaves the
property as it is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from pomkeeper.core.catalog import VersionCatalog
from pomkeeper.core.eligibility import CoordinateFilter
from pomkeeper.core.selector import Policy, choose_version
from pomkeeper.models.coordinate import (
    Association,
    Coordinate,
    PropertyDecl,
    SkipReason,
)
from pomkeeper.models.project import DependencyDecl, ProjectModel
from pomkeeper.models.version import is_snapshot
from pomkeeper.utils.logger import get_logger

logger = get_logger("properties")

__all__ = ["PropertyDecision", "resolve_property_links", "decide_property_update"]


@dataclass(frozen=True)
class PropertyDecision:
    """Outcome of :func:`decide_property_update`.

    Exactly one of ``new_value`` and ``reason`` is set.
    """

    prop: PropertyDecl
    new_value: Optional[str] = None
    reason: Optional[SkipReason] = None
    message: str = ""

    @property
    def changed(self) -> bool:
        return self.new_value is not None


def _declaring_scope(model: ProjectModel, name: str, dependency: DependencyDecl) -> Optional[str]:
    """Profile whose ``name`` property a dependency actually resolves to."""
    if dependency.profile_id is not None:
        for prop in model.properties:
            if prop.name == name and prop.profile_id == dependency.profile_id:
                return dependency.profile_id
    return None


def _add(associations: List[Association], association: Association) -> None:
    if all(a.coordinate.key != association.coordinate.key for a in associations):
        associations.append(association)


def resolve_property_links(
    model: ProjectModel,
    explicit_links: Optional[Mapping[str, Sequence[str]]] = None,
    auto_link: bool = True,
    include_properties: Iterable[str] = (),
    exclude_properties: Iterable[str] = (),
) -> Dict[PropertyDecl, List[Association]]:
    """Map each governed property to the coordinates that use it.

    Args:
        model: Project whose property table is scanned.
        explicit_links: Property name to ``groupId:artifactId`` strings.
        auto_link: Also link dependencies whose version is ``${name}``.
        include_properties: Only these property names (empty means all).
        exclude_properties: Never these property names.

    Returns:
        Properties in declaration order. A property nothing refers to maps
        to an empty list.

    Raises:
        ValueError: An explicit link is not ``groupId:artifactId``.
    """
    included = set(include_properties)
    excluded = set(exclude_properties)
    explicit_links = explicit_links or {}
    sites = list(model.dependency_management) + list(model.dependencies)

    links: Dict[PropertyDecl, List[Association]] = {}
    for prop in model.properties:
        # Filtered properties are left out; callers report them
        if included and prop.name not in included:
            continue
        if prop.name in excluded:
            continue

        associations: List[Association] = []
        for text in explicit_links.get(prop.name, ()):
            _add(associations, Association(Coordinate.parse(text), explicit=True))

        if auto_link:
            for dependency in sites:
                if dependency.property_reference != prop.name:
                    continue
                if _declaring_scope(model, prop.name, dependency) != prop.profile_id:
                    continue
                _add(associations, Association(dependency.coordinate))

        logger.debug(
            "Property ${%s} is associated with: %s",
            prop.name,
            ", ".join(str(a.coordinate) for a in associations) or "<nothing>",
        )
        links[prop] = associations
    return links


def decide_property_update(
    prop: PropertyDecl,
    associations: Sequence[Association],
    catalog: VersionCatalog,
    coordinate_filter: CoordinateFilter,
    policy: Policy,
) -> PropertyDecision:
    """Decide the new value of ``prop``, or why it stays as it is.

    Eligibility of every association is checked before any catalog
    lookup, so an excluded association costs no network round trip.

    Raises:
        CatalogError: Known versions of an association cannot be retrieved.
    """
    name = prop.reference
    current = prop.value

    if not associations:
        return PropertyDecision(
            prop,
            reason=SkipReason.NO_ASSOCIATIONS,
            message=f"Property {name} is not used by any dependency",
        )
    if not current or "${" in current:
        return PropertyDecision(
            prop,
            reason=SkipReason.NO_VERSION,
            message=f"Property {name} has no literal version to update",
        )

    for association in associations:
        reason = coordinate_filter.check(association.coordinate)
        if reason is not None:
            return PropertyDecision(
                prop,
                reason=reason,
                message=(
                    f"Not updating the property {name} because it is used by "
                    f"{association.coordinate}, which is not allowed to be updated"
                ),
            )

    if policy.process_snapshots_only and not is_snapshot(current):
        return PropertyDecision(
            prop,
            reason=SkipReason.NOT_SNAPSHOT,
            message=f"Ignoring non-snapshot property {name}",
        )

    selections: Dict[str, Optional[str]] = {}
    for association in associations:
        known = catalog.get_known_versions(association.coordinate)
        target = choose_version(current, known, policy)
        selections[str(association.coordinate)] = target.raw if target else None

    distinct = set(selections.values())
    if distinct == {None}:
        return PropertyDecision(
            prop,
            reason=SkipReason.NO_CANDIDATE,
            message=f"Property {name}: Leaving unchanged as {current}",
        )
    if len(distinct) > 1:
        detail = ", ".join(f"{key} -> {value or 'none'}" for key, value in selections.items())
        return PropertyDecision(
            prop,
            reason=SkipReason.PROPERTY_CONFLICT,
            message=f"Property {name}: associations disagree ({detail}); leaving unchanged as {current}",
        )

    new_value = distinct.pop()
    if new_value == current:
        return PropertyDecision(
            prop,
            reason=SkipReason.NO_CANDIDATE,
            message=f"Property {name}: Leaving unchanged as {current}",
        )
    return PropertyDecision(prop, new_value=new_value)
