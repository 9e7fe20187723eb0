"""
Exceptions raised while building or querying character attribution.
"""

from typing import Optional


class AttributionError(Exception):
    """Base class for attribution failures. A raised build produces no result."""


class UnsortedEventsError(AttributionError, ValueError):
    """Input events are not ordered by timestamp."""

    def __init__(self, index: int, ts: int, prev_ts: int):
        self.index = index
        self.ts = ts
        self.prev_ts = prev_ts
        super().__init__(
            f"events must be sorted by ts: event[{index}].ts={ts} precedes event[{index - 1}].ts={prev_ts}"
        )


class InvariantViolation(AttributionError):
    """An internal modeling assumption does not hold for this input."""

    def __init__(self, message: str, character: Optional[str] = None, ts: Optional[int] = None):
        self.character = character
        self.ts = ts
        super().__init__(f"illegal state: {message}")


class UnknownCharacterError(AttributionError, KeyError):
    """Query for a character without recorded data."""

    def __init__(self, character: str):
        self.character = character
        super().__init__(f"no level segmentation found for character {character}")

    def __str__(self) -> str:
        return self.args[0]
