"""
Coordinates, sites and change records.

A :class:`Coordinate` identifies an artifact; a :class:`Site` is a place in
the POM whose version pomkeeper may rewrite; an :class:`AppliedChange`
records one rewrite; a :class:`SkipDiagnostic` records why a site was left
alone.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from pomkeeper.constants import DEFAULT_TYPE


@dataclass(frozen=True)
class Coordinate:
    """Identity of an artifact: ``groupId:artifactId[:type[:classifier]]``."""

    group_id: str
    artifact_id: str
    classifier: Optional[str] = None
    type: Optional[str] = None

    @property
    def key(self) -> str:
        """``groupId:artifactId``, the part repositories index by."""
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def packaging(self) -> str:
        return self.type or DEFAULT_TYPE

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """Build a coordinate from ``groupId:artifactId[:type[:classifier]]``.

        Raises:
            ValueError: Fewer than two non-empty segments.
        """
        parts = [p.strip() for p in text.split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValueError(f"Expected groupId:artifactId, got {text!r}")
        return cls(
            group_id=parts[0],
            artifact_id=parts[1],
            type=parts[2] or None if len(parts) > 2 else None,
            classifier=parts[3] or None if len(parts) > 3 else None,
        )

    def __str__(self) -> str:
        text = self.key
        if self.type or self.classifier:
            text += f":{self.packaging}"
        if self.classifier:
            text += f":{self.classifier}"
        return text


class SiteKind(str, Enum):
    DEPENDENCY = "dependency"
    DEPENDENCY_MANAGEMENT = "dependencyManagement"
    PARENT = "parent"
    PROPERTY = "property"


@dataclass(frozen=True)
class Site:
    """A governed location in the POM.

    Dependency and parent sites carry a coordinate; property sites carry a
    property name and, for profile properties, the profile id.
    """

    kind: SiteKind
    coordinate: Optional[Coordinate] = None
    property_name: Optional[str] = None
    profile_id: Optional[str] = None

    @property
    def label(self) -> str:
        if self.kind is SiteKind.PROPERTY:
            label = f"${{{self.property_name}}}"
            if self.profile_id:
                label += f" (profile {self.profile_id})"
            return label
        return str(self.coordinate)

    def __str__(self) -> str:
        return f"{self.kind.value} {self.label}"


@dataclass(frozen=True)
class PropertyDecl:
    """A ``<properties>`` entry, optionally declared inside a profile."""

    name: str
    value: Optional[str]
    profile_id: Optional[str] = None

    @property
    def reference(self) -> str:
        """The expression a dependency uses to point at this property."""
        return f"${{{self.name}}}"


@dataclass(frozen=True)
class Association:
    """Link from a property to a coordinate whose version is ``${property}``."""

    coordinate: Coordinate
    explicit: bool = False


@dataclass(frozen=True)
class AppliedChange:
    """One version rewrite that was made to the POM text."""

    site: Site
    old_value: str
    new_value: str


class SkipReason(str, Enum):
    REACTOR_EXCLUDED = "reactor-excluded"
    NOT_INCLUDED = "not-included"
    NOT_SNAPSHOT = "non-snapshot-while-snapshot-only"
    NO_CANDIDATE = "no-eligible-candidate"
    PROPERTY_CONFLICT = "property-association-conflict"
    NO_ASSOCIATIONS = "no-associations"
    NO_VERSION = "no-version"
    NO_PARENT = "no-parent"
    VERSION_RANGE = "version-range"
    PATCH_MISS = "patch-locator-miss"


@dataclass(frozen=True)
class SkipDiagnostic:
    """Why a site was left unchanged."""

    site: Site
    reason: SkipReason
    message: str
