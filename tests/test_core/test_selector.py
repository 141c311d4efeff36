from __future__ import annotations

from typing import List

import pytest

from pomkeeper.core.selector import (
    Policy,
    SegmentLock,
    Selection,
    choose_version,
    determine_segment_lock,
    filter_candidates,
    parse_candidates,
    select_version,
    within_lock,
)
from pomkeeper.models.version import VersionToken, parse_version


def _v(raw: str) -> VersionToken:
    token = parse_version(raw)
    assert isinstance(token, VersionToken)
    return token


def _raws(tokens: List[VersionToken]) -> List[str]:
    return [t.raw for t in tokens]


UNIVERSE = ["1.2.2", "1.2.3", "1.2.4", "1.2.5-SNAPSHOT", "1.3.0", "1.3.1", "2.0.0", "2.1.0-beta"]


@pytest.mark.unit
class TestDetermineSegmentLock:
    """Tests for turning allow_* switches into a lock."""

    @pytest.mark.parametrize(
        "major, minor, incremental, expected",
        [
            (True, True, True, SegmentLock.NONE),
            (False, True, True, SegmentLock.MAJOR),
            (True, False, True, SegmentLock.MINOR),
            (True, True, False, SegmentLock.INCREMENTAL),
            (False, False, False, SegmentLock.MAJOR),
            (True, False, False, SegmentLock.MINOR),
        ],
    )
    def test_first_disabled_switch_wins(
        self, major: bool, minor: bool, incremental: bool, expected: SegmentLock
    ) -> None:
        """Test the most significant disabled switch decides the lock."""
        assert determine_segment_lock(major, minor, incremental) is expected


@pytest.mark.unit
class TestWithinLock:
    """Tests for within_lock()."""

    def test_none_allows_anything(self) -> None:
        assert within_lock(_v("1.2.3"), _v("9.0"), SegmentLock.NONE)

    def test_major_lock(self) -> None:
        assert within_lock(_v("1.2.3"), _v("1.9"), SegmentLock.MAJOR)
        assert not within_lock(_v("1.2.3"), _v("2.0"), SegmentLock.MAJOR)

    def test_minor_lock(self) -> None:
        assert within_lock(_v("1.2.3"), _v("1.2.9"), SegmentLock.MINOR)
        assert not within_lock(_v("1.2.3"), _v("1.3.0"), SegmentLock.MINOR)

    def test_incremental_lock_allows_qualifier_changes(self) -> None:
        assert within_lock(_v("1.2.3-SNAPSHOT"), _v("1.2.3"), SegmentLock.INCREMENTAL)
        assert not within_lock(_v("1.2.3"), _v("1.2.4"), SegmentLock.INCREMENTAL)

    def test_absent_segments_count_as_zero(self) -> None:
        assert within_lock(_v("1"), _v("1.0.5"), SegmentLock.MINOR)


@pytest.mark.unit
class TestFilterCandidates:
    """Tests for filter_candidates()."""

    def test_minor_lock_scenario(self) -> None:
        """Test 1.2.3 under a MINOR lock only keeps 1.2.4."""
        result = filter_candidates(
            _v("1.2.3"),
            parse_candidates(["1.2.4", "1.3.0", "2.0.0"]),
            SegmentLock.MINOR,
            include_snapshots=False,
        )

        assert _raws(result) == ["1.2.4"]

    def test_drops_older_and_equal(self) -> None:
        result = filter_candidates(
            _v("1.2.3"), parse_candidates(UNIVERSE), SegmentLock.NONE, include_snapshots=False
        )

        assert _raws(result) == ["1.2.4", "1.3.0", "1.3.1", "2.0.0", "2.1.0-beta"]

    def test_snapshots_need_opt_in(self) -> None:
        result = filter_candidates(
            _v("1.2.3"), parse_candidates(UNIVERSE), SegmentLock.MINOR, include_snapshots=True
        )

        assert _raws(result) == ["1.2.4", "1.2.5-SNAPSHOT"]

    def test_result_is_ascending(self) -> None:
        result = filter_candidates(
            _v("1.0"),
            parse_candidates(["3.0", "1.5", "2.0", "1.1"]),
            SegmentLock.NONE,
            include_snapshots=False,
        )

        assert _raws(result) == ["1.1", "1.5", "2.0", "3.0"]

    def test_equal_versions_keep_catalog_order(self) -> None:
        result = filter_candidates(
            _v("1.0"),
            parse_candidates(["2.0.0", "2.0", "2"]),
            SegmentLock.NONE,
            include_snapshots=False,
        )

        assert _raws(result) == ["2.0.0", "2.0", "2"]

    def test_major_lock_keeps_major_segment(self) -> None:
        current = _v("1.2.3")
        result = filter_candidates(
            current, parse_candidates(UNIVERSE), SegmentLock.MAJOR, include_snapshots=True
        )

        assert result
        assert all(c.major == current.major for c in result)

    def test_empty_universe(self) -> None:
        assert filter_candidates(_v("1.0"), [], SegmentLock.NONE, False) == []


@pytest.mark.unit
class TestParseCandidates:
    def test_unparsable_entries_are_dropped(self) -> None:
        """Test catalog noise never becomes a candidate."""
        tokens = parse_candidates(["1.0", "garbage", "1.2.3.4", "", "2.0"])

        assert _raws(tokens) == ["1.0", "2.0"]


@pytest.mark.unit
class TestSelectVersion:
    """Tests for select_version()."""

    def test_empty(self) -> None:
        assert select_version([], Selection.LATEST) is None
        assert select_version([], Selection.NEXT) is None

    def test_latest_and_next(self) -> None:
        candidates = [_v("1.1"), _v("1.2"), _v("2.0")]

        assert select_version(candidates, Selection.LATEST).raw == "2.0"
        assert select_version(candidates, Selection.NEXT).raw == "1.1"

    @pytest.mark.parametrize("current", ["1.0", "1.2.3", "1.3.1", "2.0.0"])
    def test_next_never_exceeds_latest(self, current: str) -> None:
        """Test NEXT never picks a version above LATEST."""
        candidates = filter_candidates(
            _v(current), parse_candidates(UNIVERSE), SegmentLock.NONE, include_snapshots=True
        )
        latest = select_version(candidates, Selection.LATEST)
        following = select_version(candidates, Selection.NEXT)

        if latest is None:
            assert following is None
        else:
            assert following is not None
            assert not following > latest


@pytest.mark.unit
class TestChooseVersion:
    """Tests for choose_version()."""

    def test_minor_lock_latest_and_next_agree(self) -> None:
        known = ["1.2.4", "1.3.0", "2.0.0"]
        latest = Policy(segment_lock=SegmentLock.MINOR, selection=Selection.LATEST)
        following = Policy(segment_lock=SegmentLock.MINOR, selection=Selection.NEXT)

        assert choose_version("1.2.3", known, latest).raw == "1.2.4"
        assert choose_version("1.2.3", known, following).raw == "1.2.4"

    def test_snapshot_scenario(self) -> None:
        """Test a snapshot moves to the release first when stepping forward."""
        known = ["1.0.0", "1.0.1-SNAPSHOT"]
        policy = Policy(
            segment_lock=SegmentLock.NONE,
            include_snapshots=True,
            process_snapshots_only=True,
            selection=Selection.NEXT,
        )

        assert choose_version("1.0.0-SNAPSHOT", known, policy).raw == "1.0.0"

    def test_snapshot_scenario_latest(self) -> None:
        known = ["1.0.0", "1.0.1-SNAPSHOT"]
        policy = Policy(include_snapshots=True, selection=Selection.LATEST)

        assert choose_version("1.0.0-SNAPSHOT", known, policy).raw == "1.0.1-SNAPSHOT"

    def test_unparsable_current(self) -> None:
        assert choose_version("${unresolved}", ["1.0"], Policy()) is None

    def test_no_newer_version(self) -> None:
        assert choose_version("3.0", ["1.0", "2.0"], Policy()) is None
