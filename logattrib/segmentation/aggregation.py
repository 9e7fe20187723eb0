"""
Character aggregation: the read-only query surface over attribution results.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from logattrib.config.settings import get_settings
from logattrib.diagnostics import Diagnostic, Diagnostics
from logattrib.exceptions import InvariantViolation, UnknownCharacterError
from logattrib.models.segmentation import Segmentation, TSRange, normalize
from logattrib.models.timeline import check_sorted
from logattrib.parser.events import BaseEvent, CharacterEvent, LevelEvent
from logattrib.processing.work_units import Work, WorkBudget, run_cooperatively, run_to_completion
from logattrib.segmentation.attribution import (
    AttributionBuilder,
    AttributionResult,
    FeatureLookup,
    ZoneLookup,
)
from logattrib.segmentation.foreign import ForeignCharacterClassifier
from logattrib.segmentation.levels import MAX_LEVEL, LevelSegmenter
from logattrib.utils.search import find_last


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CharacterInfo:
    """Summary of an owned character."""

    name: str
    level: int
    ascendancy: str
    created_ts: int
    # None if the campaign was never completed in this log
    campaign_completed_ts: Optional[int]
    last_played_ts: int

    @property
    def campaign_completed(self) -> bool:
        return self.campaign_completed_ts is not None

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "level": self.level,
            "ascendancy": self.ascendancy,
            "created_ts": self.created_ts,
            "campaign_completed_ts": self.campaign_completed_ts,
            "last_played_ts": self.last_played_ts,
        }


class CharacterAggregation:
    """
    Immutable query facade over the attribution indices.

    All lookups are binary searches over timestamp-ordered tuples; nothing
    here mutates state, so one instance can serve any number of readers.
    """

    def __init__(
        self,
        character_level_index: Mapping[str, Sequence[LevelEvent]],
        character_ts_index: Sequence[CharacterEvent],
        character_level_segmentation: Mapping[str, Sequence[Optional[Segmentation]]],
        characters: Sequence[CharacterInfo],
        diagnostics: Iterable[Diagnostic] = (),
    ):
        self._character_level_index = MappingProxyType(
            {name: tuple(index) for name, index in character_level_index.items()}
        )
        self._character_ts_index = tuple(character_ts_index)
        self._character_level_segmentation = MappingProxyType(
            {
                name: tuple(tuple(ranges) if ranges is not None else None for ranges in levels)
                for name, levels in character_level_segmentation.items()
            }
        )
        self._characters = tuple(characters)
        self._diagnostics = tuple(diagnostics)

    @property
    def character_level_index(self) -> Mapping[str, Tuple[LevelEvent, ...]]:
        return self._character_level_index

    @property
    def character_ts_index(self) -> Tuple[CharacterEvent, ...]:
        return self._character_ts_index

    @property
    def character_level_segmentation(self) -> Mapping[str, Tuple[Optional[Tuple[TSRange, ...]], ...]]:
        return self._character_level_segmentation

    @property
    def characters(self) -> Tuple[CharacterInfo, ...]:
        """Owned characters, ascending by last played timestamp."""
        return self._characters

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        """Soft anomalies encountered while building."""
        return self._diagnostics

    def is_owned(self, character: str) -> bool:
        """Check if the character likely belongs to the owner of the log."""
        return character in self._character_level_index

    def guess_level(self, ts: int) -> int:
        """Level of the character likely active at ``ts``, 1 if unknown."""
        level_event = self.guess_level_event(ts)
        if level_event is None:
            return 1
        return level_event.level

    def guess_level_event(self, ts: int) -> Optional[LevelEvent]:
        """
        Level-up or boundary event at or before ``ts`` of the likely active character.

        Raises:
            InvariantViolation: If the active character has no level index
        """
        any_event = self.guess_any_event(ts)
        if any_event is None:
            return None

        level_index = self._character_level_index.get(any_event.character)
        if level_index is None:
            raise InvariantViolation(
                f"no level index found for character {any_event.character}",
                character=any_event.character,
                ts=ts,
            )
        return find_last(level_index, lambda e: e.ts <= ts)

    def guess_any_event(self, ts: int) -> Optional[CharacterEvent]:
        """Attributed event at or before ``ts``, i.e. of the character likely active then."""
        return find_last(self._character_ts_index, lambda e: e.ts <= ts)

    def guess_character(self, ts: int) -> Optional[str]:
        """Name of the character likely active at ``ts``."""
        any_event = self.guess_any_event(ts)
        return any_event.character if any_event is not None else None

    def guess_segmentation(
        self,
        level_from: Optional[int] = None,
        level_to: Optional[int] = None,
        character: Optional[str] = None,
    ) -> Optional[Segmentation]:
        """
        Time ranges during which a level within [level_from, level_to] was held.

        Args:
            level_from: Lowest level, defaults to 1
            level_to: Highest level, defaults to 100
            character: Restrict to one character, otherwise merge all

        Returns:
            Normalized ranges, or None if nothing was recorded

        Raises:
            UnknownCharacterError: If ``character`` has no segmentation
        """
        if character is not None:
            levels = self._character_level_segmentation.get(character)
            if levels is None:
                raise UnknownCharacterError(character)
            return self._guess_segmentation_for(levels, level_from, level_to)

        ranges: List[TSRange] = []
        for levels in self._character_level_segmentation.values():
            character_ranges = self._guess_segmentation_for(levels, level_from, level_to)
            if character_ranges:
                ranges.extend(character_ranges)
        if not ranges:
            return None
        return normalize(ranges)

    def guess_segmentations(
        self,
        level_from: Optional[int] = None,
        level_to: Optional[int] = None,
        characters: Optional[Iterable[str]] = None,
    ) -> Dict[str, Segmentation]:
        """Per-character ``guess_segmentation``; characters without ranges are omitted."""
        if characters is None:
            characters = list(self._character_level_segmentation.keys())

        segmentations: Dict[str, Segmentation] = {}
        for character in characters:
            segmentation = self.guess_segmentation(level_from, level_to, character)
            if segmentation:
                segmentations[character] = segmentation
        return segmentations

    @staticmethod
    def _guess_segmentation_for(
        levels: Sequence[Optional[Sequence[TSRange]]],
        level_from: Optional[int],
        level_to: Optional[int],
    ) -> Optional[Segmentation]:
        ranges: List[TSRange] = []
        start = max((level_from or 1) - 1, 0)
        limit = min(level_to or MAX_LEVEL, len(levels))
        for i in range(start, limit):
            level_ranges = levels[i]
            if level_ranges:
                ranges.extend(level_ranges)
        return normalize(ranges) if ranges else None

    def __repr__(self) -> str:
        return (
            f"CharacterAggregation({len(self._characters)} characters, "
            f"{len(self._character_ts_index)} attributed events)"
        )


class CharacterAggregationBuilder:
    """
    Runs classification, attribution and segmentation over one event batch.

    A builder owns its intermediate structures and is used once.
    """

    def __init__(
        self,
        events: Sequence[BaseEvent],
        feature_lookup: Optional[FeatureLookup] = None,
        zone_lookup: Optional[ZoneLookup] = None,
        batch_size: Optional[int] = None,
    ):
        """
        Initialize the builder.

        Args:
            events: Events sorted by timestamp
            feature_lookup: Log format feature lookup, defaults to the version table
            zone_lookup: Zone metadata lookup, defaults to the zone table
            batch_size: Items between cooperative yields, defaults to settings
        """
        self.events = events
        self.feature_lookup = feature_lookup
        self.zone_lookup = zone_lookup
        self.budget = WorkBudget(batch_size or get_settings().batch_size)
        self.diagnostics = Diagnostics(logger)

    def iter_build(self) -> Work[CharacterAggregation]:
        """Build cooperatively; yields at batch boundaries."""
        check_sorted(self.events)
        logger.debug(f"Building character aggregation over {len(self.events)} events")

        classifier = ForeignCharacterClassifier(
            self.events, self.feature_lookup, self.diagnostics, self.budget
        )
        foreign_characters = yield from classifier.iter_classify()

        attribution_builder = AttributionBuilder(
            self.events,
            foreign_characters,
            self.feature_lookup,
            self.zone_lookup,
            self.diagnostics,
            self.budget,
        )
        attribution = yield from attribution_builder.iter_build()

        segmenter = LevelSegmenter(
            attribution.character_ts_index, foreign_characters, self.diagnostics, self.budget
        )
        segmentation = yield from segmenter.iter_segment()

        characters = summarize_characters(attribution)
        logger.info(
            f"Attributed {len(self.events)} events: {len(characters)} owned characters, "
            f"{len(foreign_characters)} foreign, {len(self.diagnostics)} diagnostics"
        )
        return CharacterAggregation(
            attribution.character_level_index,
            attribution.character_ts_index,
            segmentation,
            characters,
            self.diagnostics.freeze(),
        )

    def build(self) -> CharacterAggregation:
        return run_to_completion(self.iter_build())

    async def build_async(self) -> CharacterAggregation:
        return await run_cooperatively(self.iter_build())


def summarize_characters(attribution: AttributionResult) -> List[CharacterInfo]:
    """Character summaries ascending by last played timestamp."""
    last_played: Dict[str, int] = {}
    for event in attribution.character_ts_index:
        last_played[event.character] = event.ts

    characters: List[CharacterInfo] = []
    for name, level_index in attribution.character_level_index.items():
        if not level_index:
            continue

        last_level_event = level_index.tail
        characters.append(
            CharacterInfo(
                name=name,
                level=last_level_event.level,
                ascendancy=last_level_event.ascendancy,
                created_ts=level_index[0].ts,
                campaign_completed_ts=attribution.campaign_completion_ts.get(name),
                last_played_ts=last_played.get(name, last_level_event.ts),
            )
        )
    return sorted(characters, key=lambda c: c.last_played_ts)


def build_character_aggregation(
    events: Sequence[BaseEvent],
    feature_lookup: Optional[FeatureLookup] = None,
    zone_lookup: Optional[ZoneLookup] = None,
    batch_size: Optional[int] = None,
) -> CharacterAggregation:
    """
    Build the character aggregation for a complete, sorted event batch.

    Raises:
        UnsortedEventsError: If events are not ordered by timestamp
        InvariantViolation: If the heuristics reach an inconsistent state
    """
    return CharacterAggregationBuilder(events, feature_lookup, zone_lookup, batch_size).build()


async def build_character_aggregation_async(
    events: Sequence[BaseEvent],
    feature_lookup: Optional[FeatureLookup] = None,
    zone_lookup: Optional[ZoneLookup] = None,
    batch_size: Optional[int] = None,
) -> CharacterAggregation:
    """Like ``build_character_aggregation``, yielding to the event loop between batches."""
    return await CharacterAggregationBuilder(events, feature_lookup, zone_lookup, batch_size).build_async()
