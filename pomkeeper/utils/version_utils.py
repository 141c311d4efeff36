"""
Version comparison utilities for pomkeeper.

Helpers for classifying a version change for display, built on the Maven
version model in :mod:`pomkeeper.models.version`.
"""

from __future__ import annotations

from typing import Optional

from pomkeeper.models.version import VersionToken, parse_version


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the kind of change between two Maven versions.

    Args:
        current_version: Version currently declared.
        target_version: Version it is being changed to.

    Returns:
        One of:
            - ``"same"``        : Versions compare equal
            - ``"downgrade"``   : Target version is lower than current
            - ``"major"``       : Major segment changed
            - ``"minor"``       : Minor segment changed
            - ``"incremental"`` : Incremental segment changed
            - ``"update"``      : Only qualifier or build number changed
            - ``"unknown"``     : Missing or unparsable version

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type("1.2.3", "1.2.4")
        'incremental'
        >>> get_update_type("1.0-SNAPSHOT", "1.0")
        'update'
    """
    if current_version is None or target_version is None:
        return "unknown"

    current = parse_version(current_version)
    target = parse_version(target_version)
    if not isinstance(current, VersionToken) or not isinstance(target, VersionToken):
        return "unknown"

    if not (current < target or target < current):
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _classify_upgrade(current: VersionToken, target: VersionToken) -> str:
    """Name the most significant segment that changed."""
    for index, name in enumerate(("major", "minor", "incremental")):
        if current.segment(index) != target.segment(index):
            return name

    # Qualifier, snapshot -> release, or build number only
    return "update"
