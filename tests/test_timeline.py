"""
Unit tests for the ordered timeline container.
"""

import pytest

from logattrib.exceptions import InvariantViolation, UnsortedEventsError
from logattrib.models.timeline import Timeline, check_sorted
from logattrib.parser.events import MapEnteredEvent


def maps(*timestamps):
    return [MapEnteredEvent(ts=ts) for ts in timestamps]


class TestCheckSorted:
    """Test input order validation."""

    def test_sorted(self):
        """Test sorted input with equal timestamps passes."""
        check_sorted(maps(1, 2, 2, 3))
        check_sorted([])

    def test_unsorted(self):
        """Test the first out-of-order event is reported."""
        with pytest.raises(UnsortedEventsError) as exc_info:
            check_sorted(maps(1, 5, 3, 2))

        assert exc_info.value.index == 2
        assert exc_info.value.ts == 3
        assert exc_info.value.prev_ts == 5
        assert isinstance(exc_info.value, ValueError)


class TestTimeline:
    """Test Timeline append and insertion."""

    def test_append(self):
        """Test appending in order."""
        timeline = Timeline(maps(1, 2))
        timeline.append(MapEnteredEvent(ts=2))

        assert len(timeline) == 3
        assert timeline.tail.ts == 2
        assert [e.ts for e in reversed(timeline)] == [2, 2, 1]

    def test_append_out_of_order(self):
        """Test appending before the tail raises."""
        timeline = Timeline(maps(5))
        with pytest.raises(InvariantViolation, match="illegal state"):
            timeline.append(MapEnteredEvent(ts=4))

    def test_empty(self):
        """Test an empty timeline."""
        timeline = Timeline()
        assert not timeline
        assert timeline.tail is None
        assert timeline.to_tuple() == ()

    def test_insert_sorted(self):
        """Test a run is placed after entries sharing its first timestamp."""
        timeline = Timeline(maps(1, 3, 3, 8))
        ix = timeline.insert_sorted(*maps(3, 5))

        assert ix == 3
        assert [e.ts for e in timeline] == [1, 3, 3, 3, 5, 8]

    def test_insert_sorted_at_end(self):
        """Test inserting past the tail."""
        timeline = Timeline(maps(1, 2))
        assert timeline.insert_sorted(*maps(4)) == 2
        assert [e.ts for e in timeline] == [1, 2, 4]

    def test_insert_sorted_overlapping_successor(self):
        """Test a run reaching past its successor raises."""
        timeline = Timeline(maps(1, 5))
        with pytest.raises(InvariantViolation):
            timeline.insert_sorted(*maps(2, 6))

    def test_insert_unsorted_run(self):
        """Test an unsorted run raises."""
        timeline = Timeline(maps(1, 10))
        with pytest.raises(InvariantViolation):
            timeline.insert_sorted(*maps(4, 3))
