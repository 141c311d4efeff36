"""Candidate filtering and upgrade selection.

Given every version a repository knows for a coordinate, this module
narrows the list to versions that are:

1. strictly newer than the current version,
2. inside the segment lock (e.g. with ``SegmentLock.MINOR`` the major and
   minor segments must stay as they are),
3. allowed by the snapshot policy,

and then picks one of them: the newest (``Selection.LATEST``) or the
smallest step forward (``Selection.NEXT``).

Typical usage::

    lock = determine_segment_lock(allow_major=False)
    policy = Policy(segment_lock=lock, selection=Selection.NEXT)
    target = choose_version("1.2.3", ["1.2.4", "1.3.0", "2.0.0"], policy)
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from pomkeeper.models.version import VersionToken, parse_version
from pomkeeper.utils.logger import get_logger

logger = get_logger("selector")


class SegmentLock(Enum):
    """Most significant segment an upgrade must leave unchanged.

    The value is the number of leading numeric segments that are frozen.
    """

    NONE = 0
    MAJOR = 1
    MINOR = 2
    INCREMENTAL = 3


class Selection(str, Enum):
    LATEST = "latest"
    NEXT = "next"


@dataclass(frozen=True)
class Policy:
    """Selection rules for one kind of site, fixed for a whole pass."""

    segment_lock: SegmentLock = SegmentLock.NONE
    include_snapshots: bool = False
    process_snapshots_only: bool = False
    selection: Selection = Selection.LATEST


def determine_segment_lock(
    allow_major: bool = True,
    allow_minor: bool = True,
    allow_incremental: bool = True,
) -> SegmentLock:
    """Turn the three ``allow_*`` switches into a :class:`SegmentLock`.

    The first switch that is off, checked from major down, decides the
    lock. With every switch on nothing is locked.

    Example::

        >>> determine_segment_lock(allow_major=False)
        <SegmentLock.MAJOR: 1>
        >>> determine_segment_lock(allow_minor=False)
        <SegmentLock.MINOR: 2>
    """
    if not allow_major:
        lock = SegmentLock.MAJOR
    elif not allow_minor:
        lock = SegmentLock.MINOR
    elif not allow_incremental:
        lock = SegmentLock.INCREMENTAL
    else:
        lock = SegmentLock.NONE
    logger.debug("Segment lock: %s", lock.name)
    return lock


def parse_candidates(raw_versions: Iterable[str]) -> List[VersionToken]:
    """Parse catalog strings, dropping the ones that are not versions."""
    tokens: List[VersionToken] = []
    for raw in raw_versions:
        parsed = parse_version(raw)
        if isinstance(parsed, VersionToken):
            tokens.append(parsed)
        else:
            logger.debug("Ignoring unparsable version %r: %s", raw, parsed.reason)
    return tokens


def within_lock(current: VersionToken, candidate: VersionToken, lock: SegmentLock) -> bool:
    """True if ``candidate`` keeps every segment frozen by ``lock``."""
    return all(
        candidate.segment(index) == current.segment(index)
        for index in range(lock.value)
    )


def filter_candidates(
    current: VersionToken,
    universe: Iterable[VersionToken],
    lock: SegmentLock,
    include_snapshots: bool,
) -> List[VersionToken]:
    """Return the eligible upgrades of ``current``, ascending.

    Candidates that compare equal keep their input order.
    """
    eligible = [
        candidate
        for candidate in universe
        if candidate > current
        and within_lock(current, candidate, lock)
        and (include_snapshots or not candidate.is_snapshot)
    ]
    # sorted() is stable, so equal versions keep catalog order
    return sorted(eligible)


def select_version(
    candidates: Sequence[VersionToken],
    selection: Selection,
) -> Optional[VersionToken]:
    """Pick the target from an ascending candidate list.

    Returns ``None`` when there is nothing to pick; callers treat that as
    "leave unchanged".
    """
    if not candidates:
        return None
    if selection is Selection.NEXT:
        return candidates[0]
    return candidates[-1]


def choose_version(
    current: str,
    known_versions: Iterable[str],
    policy: Policy,
) -> Optional[VersionToken]:
    """Filter ``known_versions`` against ``current`` and select one.

    Returns ``None`` if ``current`` itself does not parse.
    """
    parsed_current = parse_version(current)
    if not isinstance(parsed_current, VersionToken):
        logger.debug("Current version %r is not comparable", current)
        return None

    candidates = filter_candidates(
        parsed_current,
        parse_candidates(known_versions),
        policy.segment_lock,
        policy.include_snapshots,
    )
    logger.debug(
        "Candidates newer than %s: %s",
        current,
        ", ".join(c.raw for c in candidates) or "<none>",
    )
    return select_version(candidates, policy.selection)
