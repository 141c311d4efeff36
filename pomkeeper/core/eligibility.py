"""Coordinate eligibility: should this artifact be updated at all?

Two independent checks, both pure:

* **reactor exclusion**: artifacts built by the same multi-module build are
  versioned together with it and are never bumped from a repository;
* **include / exclude patterns**: ``groupId[:artifactId[:type[:classifier]]]``
  with ``*`` wildcards in any segment. An exclusion match rejects; when
  inclusions are configured, a coordinate must match one of them.
"""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable, List, Optional, Sequence

from pomkeeper.models.coordinate import Coordinate, SkipReason


class ReactorMembership:
    """Answers whether a coordinate is produced inside the current build."""

    def __init__(self, keys: Iterable[str] = ()) -> None:
        self._keys = frozenset(keys)

    def is_internally_produced(self, coordinate: Coordinate) -> bool:
        return coordinate.key in self._keys

    def __len__(self) -> int:
        return len(self._keys)


class ArtifactPattern:
    """One ``groupId[:artifactId[:type[:classifier]]]`` pattern."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern.strip()
        self._segments: List[str] = [s.strip() or "*" for s in self.pattern.split(":")]

    def matches(self, coordinate: Coordinate) -> bool:
        values = (
            coordinate.group_id,
            coordinate.artifact_id,
            coordinate.packaging,
            coordinate.classifier or "",
        )
        # Segments the pattern leaves out match anything
        return all(
            fnmatchcase(value, segment)
            for value, segment in zip(values, self._segments)
        )

    def __repr__(self) -> str:
        return f"ArtifactPattern({self.pattern!r})"


class ArtifactPatternFilter:
    """A set of patterns; matches if any member matches."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns: Sequence[ArtifactPattern] = tuple(
            ArtifactPattern(p) for p in patterns if p and p.strip()
        )

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def matches(self, coordinate: Coordinate) -> bool:
        return any(p.matches(coordinate) for p in self.patterns)


class CoordinateFilter:
    """Combined reactor and include/exclude gate.

    Args:
        reactor: Membership oracle for the current build.
        includes: Patterns a coordinate must match (empty means all).
        excludes: Patterns that reject a coordinate.
        exclude_reactor: Reject coordinates produced by the reactor.
    """

    def __init__(
        self,
        reactor: Optional[ReactorMembership] = None,
        includes: Iterable[str] = (),
        excludes: Iterable[str] = (),
        *,
        exclude_reactor: bool = True,
    ) -> None:
        self.reactor = reactor or ReactorMembership()
        self.includes = ArtifactPatternFilter(includes)
        self.excludes = ArtifactPatternFilter(excludes)
        self.exclude_reactor = exclude_reactor

    def check(self, coordinate: Coordinate) -> Optional[SkipReason]:
        """Return why ``coordinate`` is rejected, or ``None`` if eligible."""
        if self.exclude_reactor and self.reactor.is_internally_produced(coordinate):
            return SkipReason.REACTOR_EXCLUDED
        if self.excludes.matches(coordinate):
            return SkipReason.NOT_INCLUDED
        if self.includes and not self.includes.matches(coordinate):
            return SkipReason.NOT_INCLUDED
        return None

    def is_eligible(self, coordinate: Coordinate) -> bool:
        return self.check(coordinate) is None
