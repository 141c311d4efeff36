"""
Maven version model for pomkeeper.

A version string is parsed into the five segments Maven has always used
for ordering::

    major . minor . incremental - qualifier | build number

and two parsed versions are totally ordered:

* numeric segments compare numerically, so ``01`` equals ``1`` and an
  absent trailing segment counts as ``0``;
* at equal numeric segments a release (no qualifier) is newer than any
  qualified version, and a snapshot qualifier is older than any other
  qualifier;
* remaining qualifiers compare lexically (case-insensitive), then build
  numbers numerically.

Strings outside the grammar (``"abc"``, ``"1.2.3.4"``, ``"1..2"``) do not
parse. They are reported as :class:`ParseFailure`, never coerced to zero,
and callers drop them from candidate sets.
"""

from __future__ import annotations

import re
from enum import IntEnum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from pomkeeper.constants import SNAPSHOT_PATTERN

_SNAPSHOT_RE = re.compile(SNAPSHOT_PATTERN)

_VERSION_RE = re.compile(
    r"""
    ^(?P<major>\d+)
    (?:\.(?P<minor>\d+))?
    (?:\.(?P<incremental>\d+))?
    (?:(?P<sep>[-.])(?P<suffix>[A-Za-z0-9][A-Za-z0-9._+-]*))?
    $""",
    re.VERBOSE,
)


def is_snapshot(raw: str) -> bool:
    """Return True if ``raw`` names a snapshot version.

    Matches ``<base>-SNAPSHOT`` and deployed snapshots of the form
    ``<base>-yyyyMMdd.HHmmss-N``.

    Example::

        >>> is_snapshot("1.0-SNAPSHOT")
        True
        >>> is_snapshot("1.0-20240131.120000-7")
        True
        >>> is_snapshot("1.0")
        False
    """
    return _SNAPSHOT_RE.fullmatch(raw) is not None


class Ordering(IntEnum):
    """Result of :func:`compare_versions`."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True)
class ParseFailure:
    """A version string that could not be parsed."""

    raw: str
    reason: str

    def __bool__(self) -> bool:
        return False


# Qualifier ranks at equal numeric segments
_RANK_SNAPSHOT = 0
_RANK_QUALIFIED = 1
_RANK_RELEASE = 2


@dataclass(frozen=True)
class VersionToken:
    """A parsed version string.

    Attributes:
        raw: The string exactly as it appeared in the catalog or POM.
        major: First numeric segment.
        minor: Second numeric segment, ``None`` when absent.
        incremental: Third numeric segment, ``None`` when absent.
        qualifier: Text after the numeric part (``"beta-2"``,
            ``"SNAPSHOT"``), ``None`` for releases.
        build_number: Numeric suffix such as the ``3`` in ``1.0-3``.
    """

    raw: str
    major: int
    minor: Optional[int] = None
    incremental: Optional[int] = None
    qualifier: Optional[str] = None
    build_number: Optional[int] = None
    _key: Tuple[int, int, int, int, str, int] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_key", self._sort_key())

    @property
    def is_snapshot(self) -> bool:
        return is_snapshot(self.raw)

    def segment(self, index: int) -> int:
        """Return numeric segment ``index`` (0=major, 1=minor, 2=incremental)."""
        values = (self.major, self.minor, self.incremental)
        value = values[index]
        return value if value is not None else 0

    def _sort_key(self) -> Tuple[int, int, int, int, str, int]:
        if self.qualifier is None:
            rank = _RANK_RELEASE
        elif self.is_snapshot:
            rank = _RANK_SNAPSHOT
        else:
            rank = _RANK_QUALIFIED
        return (
            self.segment(0),
            self.segment(1),
            self.segment(2),
            rank,
            (self.qualifier or "").lower(),
            self.build_number or 0,
        )

    # Ordering is defined on the parsed segments, not on ``raw``
    def __lt__(self, other: "VersionToken") -> bool:
        return self._key < other._key

    def __le__(self, other: "VersionToken") -> bool:
        return self._key <= other._key

    def __gt__(self, other: "VersionToken") -> bool:
        return self._key > other._key

    def __ge__(self, other: "VersionToken") -> bool:
        return self._key >= other._key

    def __str__(self) -> str:
        return self.raw


def parse_version(raw: str) -> Union[VersionToken, ParseFailure]:
    """Parse ``raw`` into a :class:`VersionToken`.

    Example::

        >>> parse_version("2.13.4-beta-1")
        VersionToken(raw='2.13.4-beta-1', major=2, minor=13, incremental=4, qualifier='beta-1', build_number=None)
        >>> parse_version("1.0-7").build_number
        7
        >>> bool(parse_version("not-a-version"))
        False
    """
    text = raw.strip() if raw else ""
    if not text:
        return ParseFailure(raw, "empty version")

    match = _VERSION_RE.fullmatch(text)
    if match is None:
        return ParseFailure(raw, "not a Maven version")

    sep = match.group("sep")
    suffix = match.group("suffix")
    qualifier: Optional[str] = None
    build_number: Optional[int] = None

    if suffix is not None:
        if suffix.isdigit():
            # "1.2.3.4" is a fourth numeric segment, not a build number
            if sep == ".":
                return ParseFailure(raw, "more than three numeric segments")
            build_number = int(suffix)
        elif sep == "." and suffix[0].isdigit():
            return ParseFailure(raw, "more than three numeric segments")
        else:
            qualifier = suffix

    minor = match.group("minor")
    incremental = match.group("incremental")
    return VersionToken(
        raw=raw,
        major=int(match.group("major")),
        minor=int(minor) if minor is not None else None,
        incremental=int(incremental) if incremental is not None else None,
        qualifier=qualifier,
        build_number=build_number,
    )


def compare_versions(a: VersionToken, b: VersionToken) -> Ordering:
    """Total order over parsed versions."""
    if a < b:
        return Ordering.LESS
    if a > b:
        return Ordering.GREATER
    return Ordering.EQUAL
