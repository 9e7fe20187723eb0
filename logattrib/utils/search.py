"""
Binary search helpers over timestamp-ordered sequences.
"""

from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")


def find_last_index(
    items: Sequence[T],
    predicate: Callable[[T], bool],
    lo: int = 0,
    hi: Optional[int] = None,
) -> int:
    """
    Find the last index whose item satisfies ``predicate``.

    The predicate must be monotonic over ``items[lo:hi + 1]``: true for a
    (possibly empty) prefix and false afterwards.

    Args:
        items: Sequence to search
        predicate: Monotonic predicate
        lo: First index to consider
        hi: Last index to consider (inclusive), defaults to the last item

    Returns:
        Index of the last matching item, or -1 if none matches
    """
    if not items:
        return -1

    if hi is None:
        hi = len(items) - 1
    if lo < 0 or hi >= len(items):
        raise IndexError(f"search bounds out of range: [{lo}, {hi}] for length {len(items)}")

    result = -1
    while lo <= hi:
        mid = (lo + hi) // 2
        if predicate(items[mid]):
            result = mid
            lo = mid + 1
        else:
            hi = mid - 1
    return result


def find_last(
    items: Sequence[T],
    predicate: Callable[[T], bool],
    lo: int = 0,
    hi: Optional[int] = None,
) -> Optional[T]:
    """Return the last item satisfying a monotonic ``predicate``, or None."""
    ix = find_last_index(items, predicate, lo, hi)
    return items[ix] if ix >= 0 else None


def find_first_index(
    items: Sequence[T],
    predicate: Callable[[T], bool],
    lo: int = 0,
    hi: Optional[int] = None,
) -> int:
    """
    Find the first index whose item satisfies ``predicate``.

    The predicate must be false for a prefix and true afterwards. Returns -1
    if no item matches.
    """
    if not items:
        return -1

    if hi is None:
        hi = len(items) - 1

    result = -1
    while lo <= hi:
        mid = (lo + hi) // 2
        if predicate(items[mid]):
            result = mid
            hi = mid - 1
        else:
            lo = mid + 1
    return result
