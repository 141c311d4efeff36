"""
Unified data model exports for pomkeeper.

Example:
    >>> from pomkeeper.models import Coordinate, VersionToken, parse_version
"""

from __future__ import annotations

from pomkeeper.models.version import (
    Ordering,
    ParseFailure,
    VersionToken,
    compare_versions,
    is_snapshot,
    parse_version,
)
from pomkeeper.models.coordinate import (
    AppliedChange,
    Association,
    Coordinate,
    PropertyDecl,
    Site,
    SiteKind,
    SkipDiagnostic,
    SkipReason,
)
from pomkeeper.models.project import DependencyDecl, ParentDecl, ProjectModel
from pomkeeper.models.version_range import Restriction, VersionRange, parse_version_spec

__all__ = [
    "AppliedChange",
    "Association",
    "Coordinate",
    "DependencyDecl",
    "Ordering",
    "ParentDecl",
    "ParseFailure",
    "ProjectModel",
    "PropertyDecl",
    "Restriction",
    "Site",
    "SiteKind",
    "SkipDiagnostic",
    "SkipReason",
    "VersionRange",
    "VersionToken",
    "compare_versions",
    "is_snapshot",
    "parse_version",
    "parse_version_spec",
]
