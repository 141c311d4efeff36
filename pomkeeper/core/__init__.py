"""
Core functionality exports for pomkeeper.

Importing from here keeps user-facing imports short and stable::

    from pomkeeper.core import PomReader, VersionUpdater, use_latest_versions
"""

from __future__ import annotations

from pomkeeper.core.catalog import (
    MavenRepositoryCatalog,
    VersionCatalog,
    parse_metadata_versions,
)
from pomkeeper.core.eligibility import (
    ArtifactPattern,
    ArtifactPatternFilter,
    CoordinateFilter,
    ReactorMembership,
)
from pomkeeper.core.patcher import (
    DependencyLocator,
    ParentLocator,
    PatchTarget,
    PomDocument,
    PropertyLocator,
    apply_patch,
)
from pomkeeper.core.pom_reader import PomReader
from pomkeeper.core.properties import (
    PropertyDecision,
    decide_property_update,
    resolve_property_links,
)
from pomkeeper.core.selector import (
    Policy,
    SegmentLock,
    Selection,
    choose_version,
    determine_segment_lock,
    filter_candidates,
    select_version,
)
from pomkeeper.core.updater import (
    ProcessingSwitches,
    VersionUpdater,
    update_properties,
    use_latest_versions,
    use_next_versions,
)

__all__ = [
    # Catalog
    "VersionCatalog",
    "MavenRepositoryCatalog",
    "parse_metadata_versions",
    # Eligibility
    "ArtifactPattern",
    "ArtifactPatternFilter",
    "CoordinateFilter",
    "ReactorMembership",
    # Patching
    "PomDocument",
    "PatchTarget",
    "DependencyLocator",
    "ParentLocator",
    "PropertyLocator",
    "apply_patch",
    # Reading
    "PomReader",
    # Properties
    "PropertyDecision",
    "decide_property_update",
    "resolve_property_links",
    # Selection
    "Policy",
    "SegmentLock",
    "Selection",
    "choose_version",
    "determine_segment_lock",
    "filter_candidates",
    "select_version",
    # Orchestration
    "ProcessingSwitches",
    "VersionUpdater",
    "use_latest_versions",
    "use_next_versions",
    "update_properties",
]
