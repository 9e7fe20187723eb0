"""
Timestamp-ordered event container used while building attribution indices.
"""

from typing import Generic, Iterator, List, Optional, Sequence, TypeVar

from logattrib.exceptions import InvariantViolation, UnsortedEventsError
from logattrib.parser.events import BaseEvent
from logattrib.utils.search import find_first_index

E = TypeVar("E", bound=BaseEvent)


def check_sorted(events: Sequence[BaseEvent]) -> None:
    """
    Verify that events are ordered by timestamp.

    Raises:
        UnsortedEventsError: At the first event preceding its predecessor
    """
    for i in range(1, len(events)):
        if events[i].ts < events[i - 1].ts:
            raise UnsortedEventsError(i, events[i].ts, events[i - 1].ts)


class Timeline(Generic[E]):
    """
    Append-mostly list of events kept sorted by ``ts``.

    ``append`` only accepts events at or after the current tail.
    ``insert_sorted`` places a run of events at their timestamp position,
    after any entries sharing the first event's timestamp. Both raise
    ``InvariantViolation`` instead of breaking the ordering.
    """

    def __init__(self, events: Optional[Sequence[E]] = None):
        self._events: List[E] = []
        if events:
            for event in events:
                self.append(event)

    def append(self, event: E) -> None:
        if self._events and event.ts < self._events[-1].ts:
            raise InvariantViolation(
                f"new element precedes prior element: {event.ts} < {self._events[-1].ts}",
                ts=event.ts,
            )
        self._events.append(event)

    def insert_sorted(self, *events: E) -> int:
        """
        Insert a sorted run of events at its timestamp position.

        Args:
            events: Events to insert, ordered by ``ts``

        Returns:
            Index of the first inserted event
        """
        if not events:
            return len(self._events)

        for i in range(1, len(events)):
            if events[i].ts < events[i - 1].ts:
                raise InvariantViolation(
                    f"inserted run is not sorted: {events[i].ts} < {events[i - 1].ts}",
                    ts=events[i].ts,
                )

        head = events[0]
        ix = find_first_index(self._events, lambda e: e.ts > head.ts)
        if ix == -1:
            ix = len(self._events)

        if ix < len(self._events) and events[-1].ts > self._events[ix].ts:
            raise InvariantViolation(
                f"inserted run overlaps successor: {events[-1].ts} > {self._events[ix].ts}",
                ts=events[-1].ts,
            )

        self._events[ix:ix] = list(events)
        return ix

    @property
    def tail(self) -> Optional[E]:
        return self._events[-1] if self._events else None

    def to_tuple(self) -> tuple:
        return tuple(self._events)

    def __getitem__(self, ix):
        return self._events[ix]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[E]:
        return iter(self._events)

    def __reversed__(self) -> Iterator[E]:
        return reversed(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    def __repr__(self) -> str:
        return f"Timeline({len(self._events)} events)"
