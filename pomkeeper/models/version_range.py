"""
Maven version specifications.

A ``<version>`` element holds either a plain version (``1.4``) or one or
more bracketed ranges::

    [1.0]            exactly 1.0
    [1.0,2.0)        1.0 <= v < 2.0
    (,1.0],[1.2,)    v <= 1.0 or v >= 1.2

pomkeeper only rewrites plain versions; ranges are recognised so that
they can be left alone, and malformed specifications abort the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from pomkeeper.exceptions import VersionRangeError
from pomkeeper.models.version import VersionToken, parse_version

_RANGE_CHARS = "[](),"


@dataclass(frozen=True)
class Restriction:
    lower: Optional[str]
    lower_inclusive: bool
    upper: Optional[str]
    upper_inclusive: bool


@dataclass(frozen=True)
class VersionRange:
    """Parsed specification: a recommended version or a set of restrictions."""

    spec: str
    recommended: Optional[str] = None
    restrictions: Tuple[Restriction, ...] = ()

    @property
    def is_range(self) -> bool:
        return bool(self.restrictions)


def _sorts_after(lower: str, upper: str) -> bool:
    """True if ``lower`` sorts after ``upper``; unparsable bounds are not ordered."""
    low = parse_version(lower)
    high = parse_version(upper)
    if isinstance(low, VersionToken) and isinstance(high, VersionToken):
        return low > high
    return False


def _parse_restriction(text: str, spec: str) -> Restriction:
    lower_inclusive = text.startswith("[")
    upper_inclusive = text.endswith("]")
    inner = text[1:-1].strip()

    if "," not in inner:
        if not (lower_inclusive and upper_inclusive):
            raise VersionRangeError(
                f"Single version must be surrounded by []: {spec}", spec=spec
            )
        if not inner:
            raise VersionRangeError(f"Empty version range: {spec}", spec=spec)
        return Restriction(inner, True, inner, True)

    lower_text, upper_text = (part.strip() for part in inner.split(",", 1))
    if "," in upper_text:
        raise VersionRangeError(f"Too many bounds in range: {spec}", spec=spec)

    lower = lower_text or None
    upper = upper_text or None
    if lower is not None and upper is not None:
        if lower == upper and not (lower_inclusive and upper_inclusive):
            raise VersionRangeError(f"Range cannot have identical boundaries: {spec}", spec=spec)
        if _sorts_after(lower, upper):
            raise VersionRangeError(f"Range defies version ordering: {spec}", spec=spec)
    return Restriction(lower, lower_inclusive, upper, upper_inclusive)


def parse_version_spec(spec: str) -> VersionRange:
    """Parse a Maven version specification.

    Raises:
        VersionRangeError: ``spec`` is empty or not a well-formed range.

    Example::

        >>> parse_version_spec("1.4").is_range
        False
        >>> parse_version_spec("[1.0,2.0)").restrictions[0].upper
        '2.0'
    """
    text = (spec or "").strip()
    if not text:
        raise VersionRangeError("Empty version specification", spec=spec)

    restrictions: List[Restriction] = []
    remaining = text
    while remaining.startswith(("[", "(")):
        closing = [i for i in (remaining.find("]"), remaining.find(")")) if i >= 0]
        if not closing:
            raise VersionRangeError(f"Unbounded range: {spec}", spec=spec)
        end = min(closing) + 1
        restriction = _parse_restriction(remaining[:end], spec)

        if restrictions:
            previous = restrictions[-1]
            if (
                previous.upper is None
                or restriction.lower is None
                or _sorts_after(previous.upper, restriction.lower)
            ):
                raise VersionRangeError(f"Ranges overlap: {spec}", spec=spec)
        restrictions.append(restriction)

        remaining = remaining[end:].strip()
        if remaining.startswith(","):
            remaining = remaining[1:].strip()

    if restrictions:
        if remaining:
            raise VersionRangeError(
                f"Only fully-qualified sets allowed in multiple set scenario: {spec}",
                spec=spec,
            )
        return VersionRange(spec=spec, restrictions=tuple(restrictions))

    if any(char in remaining for char in _RANGE_CHARS):
        raise VersionRangeError(f"Invalid version specification: {spec}", spec=spec)
    return VersionRange(spec=spec, recommended=remaining)
