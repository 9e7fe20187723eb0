"""
Timestamp range lists ("segmentations") and their algebra.

A segmentation is a list of closed ``[lo, hi]`` ranges. Normalized
segmentations are sorted by ``lo`` with no two ranges touching or overlapping.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from logattrib.parser.events import BaseEvent
from logattrib.utils.search import find_last


@dataclass(frozen=True)
class TSRange:
    """Closed timestamp range."""

    lo: int
    hi: int

    @property
    def duration(self) -> int:
        """Width in milliseconds."""
        return self.hi - self.lo

    def contains(self, ts: int) -> bool:
        """Check if a timestamp falls within this range (inclusive)."""
        return self.lo <= ts <= self.hi

    def __repr__(self) -> str:
        return f"TSRange({self.lo}, {self.hi})"


Segmentation = List[TSRange]


def of_events(events: Sequence[BaseEvent]) -> Segmentation:
    """Ranges between each pair of consecutive events."""
    return [TSRange(events[i].ts, events[i + 1].ts) for i in range(len(events) - 1)]


def merge_connected(segmentation: Sequence[TSRange]) -> Segmentation:
    """
    Merge ranges that touch or overlap.

    Args:
        segmentation: Ranges sorted by ``lo``

    Returns:
        New list of disjoint ranges
    """
    if len(segmentation) <= 1:
        return list(segmentation)

    merged = [segmentation[0]]
    for current in segmentation[1:]:
        last = merged[-1]
        if last.hi >= current.lo:
            merged[-1] = TSRange(last.lo, max(last.hi, current.hi))
        else:
            merged.append(current)
    return merged


def normalize(ranges: Iterable[TSRange]) -> Segmentation:
    """Sort ranges by ``lo`` and merge connected ones."""
    return merge_connected(sorted(ranges, key=lambda r: (r.lo, r.hi)))


def to_bounding_interval(segmentation: Sequence[TSRange]) -> Segmentation:
    """Collapse a sorted segmentation into its single bounding range."""
    if len(segmentation) <= 1:
        return list(segmentation)

    return [TSRange(segmentation[0].lo, segmentation[-1].hi)]


def intersect(a: Sequence[TSRange], b: Sequence[TSRange]) -> Segmentation:
    """
    Intersect two normalized segmentations as closed intervals.

    Touching ranges produce a zero-width result: ``[1,2] ∩ [2,3] = [2,2]``.
    """
    if not a or not b:
        return []

    result: Segmentation = []
    ia = ib = 0
    while ia < len(a) and ib < len(b):
        range_a, range_b = a[ia], b[ib]
        lo = max(range_a.lo, range_b.lo)
        hi = min(range_a.hi, range_b.hi)
        if lo <= hi:
            result.append(TSRange(lo, hi))

        if range_a.hi > range_b.hi:
            ib += 1
        elif range_a.hi < range_b.hi:
            ia += 1
        else:
            ia += 1
            ib += 1
    return result


def intersect_all(segmentations: Sequence[Sequence[TSRange]]) -> Segmentation:
    """Intersect any number of segmentations."""
    if not segmentations:
        return []

    result = list(segmentations[0])
    for other in segmentations[1:]:
        result = intersect(result, other)
    return result


def find(segmentation: Sequence[TSRange], ts: int) -> Optional[TSRange]:
    """Return the range of a normalized segmentation containing ``ts``."""
    candidate = find_last(segmentation, lambda r: ts >= r.lo)
    return candidate if candidate is not None and candidate.hi >= ts else None
