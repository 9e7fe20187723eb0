"""
Character attribution: which owned character was active at any moment.

Only level-ups, deaths and chat messages name a character, and a client log
never states which character is logged in. The builder replays the event
stream once and infers character switches from those events plus the zone
entries that precede them, inserting synthetic ``SetCharacterEvent``
boundaries wherever the active character changes.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set
import logging

from logattrib.config.log_versions import Feature, is_feature_supported_at
from logattrib.config.zones import ZoneInfo, get_zone_info
from logattrib.diagnostics import DiagnosticCode, Diagnostics
from logattrib.exceptions import InvariantViolation
from logattrib.models.timeline import Timeline
from logattrib.parser.events import (
    ATTRIBUTABLE_EVENTS,
    BaseEvent,
    CharacterEvent,
    HideoutEnteredEvent,
    LevelUpEvent,
    MapEnteredEvent,
    SetCharacterEvent,
)
from logattrib.processing.work_units import Work, WorkBudget, run_to_completion
from logattrib.utils.search import find_first_index, find_last


logger = logging.getLogger(__name__)

FeatureLookup = Callable[[Feature, int], bool]
ZoneLookup = Callable[[str], Optional[ZoneInfo]]


@dataclass
class AttributionResult:
    """Indices produced by one attribution pass."""

    # attributed character events and boundaries, ordered by ts
    character_ts_index: Timeline
    # level-defining events per owned character
    character_level_index: Dict[str, Timeline]
    # first campaign completion per character
    campaign_completion_ts: Dict[str, int] = field(default_factory=dict)
    foreign_characters: Set[str] = field(default_factory=set)


class AttributionBuilder:
    """
    Single-pass state machine attributing events to characters.

    Per event:

    - a level 2 level-up creates a character; it always happens in the first
      zone, so the preceding map entry is taken as creation time
    - an event of the currently attributed character is appended
    - an event of another character implies a switch; the switch time is the
      earliest hideout entry, else the latest map entry, since the previously
      attributed event
    - entering a campaign completion area marks the active character as having
      completed the campaign
    """

    def __init__(
        self,
        events: Sequence[BaseEvent],
        foreign_characters: Set[str],
        feature_lookup: Optional[FeatureLookup] = None,
        zone_lookup: Optional[ZoneLookup] = None,
        diagnostics: Optional[Diagnostics] = None,
        budget: Optional[WorkBudget] = None,
    ):
        """
        Initialize the builder.

        Args:
            events: Events sorted by timestamp
            foreign_characters: Names not owned by the log's account
            feature_lookup: Log format feature lookup
            zone_lookup: Zone metadata lookup
            diagnostics: Collector for soft anomalies
            budget: Cooperative yield budget
        """
        self.events = events
        self.foreign_characters = foreign_characters
        self.feature_lookup = feature_lookup or is_feature_supported_at
        self.zone_lookup = zone_lookup or get_zone_info
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
        self.budget = budget or WorkBudget()

        self.character_ts_index: Timeline = Timeline()
        self.character_level_index: Dict[str, Timeline] = {}
        self.campaign_completion_ts: Dict[str, int] = {}

    def iter_build(self) -> Work[AttributionResult]:
        """Build cooperatively; yields at batch boundaries."""
        for cursor, event in enumerate(self.events):
            if self.budget.tick():
                yield

            if isinstance(event, ATTRIBUTABLE_EVENTS):
                # false positives remain possible, e.g. a guild mate who always joins the area first
                if event.character in self.foreign_characters:
                    continue
                self._handle_character_event(event, cursor)
            elif isinstance(event, HideoutEnteredEvent):
                self._handle_hideout_entered(event)

        self._close_tail()

        for character in self.foreign_characters:
            self.character_level_index.pop(character, None)

        logger.debug(
            f"Attributed {len(self.character_ts_index)} events to "
            f"{len(self.character_level_index)} owned characters"
        )
        return AttributionResult(
            character_ts_index=self.character_ts_index,
            character_level_index=self.character_level_index,
            campaign_completion_ts=self.campaign_completion_ts,
            foreign_characters=set(self.foreign_characters),
        )

    def build(self) -> AttributionResult:
        """Build synchronously."""
        return run_to_completion(self.iter_build())

    def _handle_character_event(self, event: CharacterEvent, cursor: int) -> None:
        character = event.character

        if isinstance(event, LevelUpEvent) and event.level == 2:
            self._handle_character_created(event, cursor)
            return

        tail = self.character_ts_index.tail
        if tail is not None and tail.character != character and len(self.character_ts_index) > 1:
            self._infer_character_switch(event, cursor, tail)

        self._append(event)

    def _handle_character_created(self, event: LevelUpEvent, cursor: int) -> None:
        """Open a new character at the map entry preceding its level 2 level-up."""
        character = event.character

        # the predicate is not monotonic, so no binary search.
        # this finds the latest first-zone entry, which suits players resetting the zone
        creation_event = None
        for i in range(cursor, -1, -1):
            candidate = self.events[i]
            if isinstance(candidate, MapEnteredEvent) and candidate.ts < event.ts:
                creation_event = candidate
                break

        if creation_event is not None:
            created_ts = creation_event.ts
        else:
            created_ts = event.ts - 1
            if self.feature_lookup(Feature.ZONE_GENERATION, event.ts):
                self.diagnostics.warning(
                    DiagnosticCode.MISSING_CREATION_MAP_ENTRY,
                    f"log incomplete? failed to find first zone entry for level 2 character {character} at ts {event.ts}",
                    character=character,
                    ts=event.ts,
                    logger=logger,
                )

        if character in self.character_level_index:
            # TODO: keep both characters apart with an alias instead of discarding the older one
            self.diagnostics.warning(
                DiagnosticCode.DUPLICATE_CHARACTER_NAME,
                f"duplicate characters not supported yet, discarding prior character data for {character}",
                character=character,
                ts=event.ts,
                logger=logger,
            )

        index: Timeline = Timeline()
        self.character_level_index[character] = index
        self._switch_character(created_ts, character, event.ascendancy, 1, cursor)
        self.character_ts_index.append(event)
        index.append(event)
        logger.debug(f"Character {character} created at {created_ts}")

    def _infer_character_switch(self, event: CharacterEvent, cursor: int, tail: CharacterEvent) -> None:
        """
        Backtrack to the likeliest moment the character of ``event`` logged in.

        A character switch always passes through a town or hideout, so the zone
        entries since the previously attributed event bound the switch. This
        stays inaccurate when characters alternate without firing any
        identifying event in between.
        """
        character = event.character
        origin = self._find_origin_candidate(cursor, tail.ts)

        if origin is None:
            if self.feature_lookup(Feature.ZONE_GENERATION, event.ts):
                raise InvariantViolation(
                    f"unable to determine origin candidate for character {character} at ts {event.ts}",
                    character=character,
                    ts=event.ts,
                )
            return

        index = self.character_level_index.get(character)
        if index:
            last_level_event = index.tail
            self._switch_character(
                origin.ts, character, last_level_event.ascendancy, last_level_event.level, cursor
            )
        elif isinstance(event, LevelUpEvent):
            self._switch_character(origin.ts, character, event.ascendancy, event.level - 1, cursor)
        else:
            self.diagnostics.warning(
                DiagnosticCode.UNATTRIBUTABLE_SWITCH,
                f"cannot switch to character {character} at ts {event.ts}: level unknown",
                character=character,
                ts=event.ts,
                logger=logger,
                origin_ts=origin.ts,
            )

    def _find_origin_candidate(self, cursor: int, threshold: int) -> Optional[BaseEvent]:
        origin: Optional[BaseEvent] = None
        for i in range(cursor - 1, -1, -1):
            candidate = self.events[i]
            if candidate.ts <= threshold:
                break

            if isinstance(candidate, HideoutEnteredEvent):
                origin = candidate
            elif isinstance(candidate, MapEnteredEvent) and origin is None:
                origin = candidate
        return origin

    def _switch_character(
        self, switch_ts: int, character: str, ascendancy: str, level: int, cursor: int
    ) -> None:
        """
        Close the previously active character and open ``character`` at ``switch_ts``.

        The outgoing character's span ends at the last raw event before
        ``switch_ts`` so the two characters never share an event. If the
        outgoing character was still active after ``switch_ts``, both
        boundaries move past its last event instead.
        """
        prev_event = find_last(self.events, lambda e: e.ts < switch_ts, 0, cursor)
        prev_ts = prev_event.ts if prev_event is not None else switch_ts - 1
        boundaries: List[SetCharacterEvent] = []

        for prev in reversed(self.character_ts_index):
            if prev.character == character and prev.ts > prev_ts:
                # messages or deaths of a fresh character logged before its level 2 level-up
                continue

            index = self.character_level_index.get(prev.character)
            if index is None:
                if prev.character == character:
                    raise InvariantViolation(
                        f"expected prior event to be of another character {character}",
                        character=character,
                        ts=switch_ts,
                    )
                continue

            last_level_event = index.tail
            if last_level_event is None:
                # reused name, the discarded run ends at the new opening boundary
                break

            if prev_ts < last_level_event.ts:
                raise InvariantViolation(
                    f"prevTs < last level event ts for character {character} at ts {switch_ts}",
                    character=character,
                    ts=switch_ts,
                )
            if last_level_event.character == character:
                raise InvariantViolation(
                    f"previous character equals next character {character} at ts {switch_ts}",
                    character=character,
                    ts=switch_ts,
                )

            if prev.ts > prev_ts:
                logger.debug(
                    f"Character {prev.character} active at {prev.ts} after switch to {character} at {switch_ts}"
                )
                prev_ts = prev.ts
                next_ix = find_first_index(self.events, lambda e: e.ts > prev_ts, 0, cursor)
                switch_ts = self.events[next_ix].ts if next_ix >= 0 else prev_ts

            closing = SetCharacterEvent.of_event(prev_ts, last_level_event)
            index.append(closing)
            boundaries.append(closing)
            break

        opening = SetCharacterEvent(ts=switch_ts, character=character, ascendancy=ascendancy, level=level)
        boundaries.append(opening)

        tail = self.character_ts_index.tail
        if tail is not None and tail.ts > boundaries[0].ts:
            self.character_ts_index.insert_sorted(*boundaries)
        else:
            for boundary in boundaries:
                self.character_ts_index.append(boundary)
        self._level_index_for(character).append(opening)

    def _handle_hideout_entered(self, event: HideoutEnteredEvent) -> None:
        zone = self.zone_lookup(event.area_name)
        if not zone or not zone.campaign_completion_indicator:
            return

        tail = self.character_ts_index.tail
        if tail is not None and tail.character not in self.campaign_completion_ts:
            self.campaign_completion_ts[tail.character] = event.ts
            logger.debug(f"Character {tail.character} completed the campaign at {event.ts} ({zone.label})")

    def _close_tail(self) -> None:
        """Close the last active character at the final event so no span stays open."""
        tail = self.character_ts_index.tail
        if tail is None:
            return

        index = self.character_level_index.get(tail.character)
        if not index:
            raise InvariantViolation(
                f"no level index found for last active character {tail.character}",
                character=tail.character,
                ts=tail.ts,
            )
        self.character_ts_index.append(SetCharacterEvent.of_event(self.events[-1].ts, index.tail))

    def _append(self, event: CharacterEvent) -> None:
        self.character_ts_index.append(event)
        if isinstance(event, LevelUpEvent):
            self._level_index_for(event.character).append(event)

    def _level_index_for(self, character: str) -> Timeline:
        index = self.character_level_index.get(character)
        if index is None:
            index = self.character_level_index[character] = Timeline()
        return index


def build_attribution(
    events: Sequence[BaseEvent],
    foreign_characters: Set[str],
    feature_lookup: Optional[FeatureLookup] = None,
    zone_lookup: Optional[ZoneLookup] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> AttributionResult:
    """Attribute ``events`` to owned characters in one synchronous pass."""
    return AttributionBuilder(
        events, foreign_characters, feature_lookup, zone_lookup, diagnostics
    ).build()
