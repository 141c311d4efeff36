"""
Already-parsed view of a POM.

:class:`ProjectModel` is what :class:`~pomkeeper.core.pom_reader.PomReader`
produces and what the updater consumes: flat lists of governed sites with
their current values, and nothing that needs a live build to answer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Tuple

from pomkeeper.constants import MAX_INTERPOLATION_DEPTH
from pomkeeper.models.coordinate import Coordinate, PropertyDecl

_EXPRESSION_RE = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class DependencyDecl:
    """One ``<dependency>`` element.

    Attributes:
        coordinate: Interpolated identity.
        raw_version: ``<version>`` text as written, ``None`` when absent.
        version: ``raw_version`` with expressions resolved.
        managed: Declared under ``dependencyManagement``.
        profile_id: Id of the enclosing profile, if any.
    """

    coordinate: Coordinate
    raw_version: Optional[str]
    version: Optional[str]
    managed: bool = False
    profile_id: Optional[str] = None

    @property
    def property_reference(self) -> Optional[str]:
        """Name of the property if the version is exactly ``${name}``."""
        if self.raw_version is None:
            return None
        match = _EXPRESSION_RE.fullmatch(self.raw_version.strip())
        return match.group(1) if match else None


@dataclass(frozen=True)
class ParentDecl:
    coordinate: Coordinate
    version: str


@dataclass
class ProjectModel:
    """Governed sites of a single POM.

    Attributes:
        coordinate: The project's own identity.
        version: The project's version (inherited from the parent if unset).
        parent: Parent reference, if any.
        properties: Property table, top-level entries first.
        dependencies: ``project/dependencies`` plus profile dependencies.
        dependency_management: Managed dependencies, including profiles'.
        modules: ``<module>`` entries as written.
        reactor: ``groupId:artifactId`` keys of every project in the build.
    """

    coordinate: Coordinate
    version: Optional[str] = None
    parent: Optional[ParentDecl] = None
    properties: List[PropertyDecl] = field(default_factory=list)
    dependencies: List[DependencyDecl] = field(default_factory=list)
    dependency_management: List[DependencyDecl] = field(default_factory=list)
    modules: List[str] = field(default_factory=list)
    reactor: FrozenSet[str] = frozenset()

    def property_value(self, name: str, profile_id: Optional[str] = None) -> Optional[str]:
        """Return the value of ``name``, preferring the given profile's entry."""
        fallback: Optional[str] = None
        for prop in self.properties:
            if prop.name != name:
                continue
            if prop.profile_id == profile_id:
                return prop.value
            if prop.profile_id is None:
                fallback = prop.value
        return fallback

    def builtin_values(self) -> Dict[str, str]:
        """Values for ``${project.*}`` / ``${pom.*}`` expressions."""
        values: Dict[str, str] = {}
        pairs: List[Tuple[str, Optional[str]]] = [
            ("groupId", self.coordinate.group_id),
            ("artifactId", self.coordinate.artifact_id),
            ("version", self.version),
            ("parent.version", self.parent.version if self.parent else None),
            ("parent.groupId", self.parent.coordinate.group_id if self.parent else None),
        ]
        for key, value in pairs:
            if value is not None:
                values[f"project.{key}"] = value
                values[f"pom.{key}"] = value
        return values

    def interpolate(self, text: Optional[str], profile_id: Optional[str] = None) -> Optional[str]:
        """Resolve ``${...}`` expressions; unknown expressions stay as written."""
        if text is None:
            return None
        return interpolate(text, self._lookup_table(profile_id))

    def _lookup_table(self, profile_id: Optional[str]) -> Dict[str, str]:
        table: Dict[str, str] = {}
        for prop in self.properties:
            if prop.value is None:
                continue
            if prop.profile_id is None:
                table.setdefault(prop.name, prop.value)
            elif prop.profile_id == profile_id:
                table[prop.name] = prop.value
        table.update(self.builtin_values())
        return table


def interpolate(text: str, values: Dict[str, str]) -> str:
    """Expand ``${name}`` references in ``text`` using ``values``.

    Nested references are expanded up to a fixed depth so that a property
    cycle cannot loop forever.
    """
    result = text
    for _ in range(MAX_INTERPOLATION_DEPTH):
        expanded = _EXPRESSION_RE.sub(
            lambda m: values.get(m.group(1), m.group(0)), result
        )
        if expanded == result:
            break
        result = expanded
    return result
