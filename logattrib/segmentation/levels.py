"""
Level segmentation: when did each character hold each level.
"""

from typing import Dict, List, Optional, Sequence, Set
import logging

from logattrib.diagnostics import DiagnosticCode, Diagnostics
from logattrib.exceptions import InvariantViolation
from logattrib.models.segmentation import Segmentation, TSRange
from logattrib.parser.events import CharacterEvent, LevelUpEvent, is_level_event
from logattrib.processing.work_units import Work, WorkBudget, run_to_completion


logger = logging.getLogger(__name__)

MAX_LEVEL = 100

# Slot ``level - 1`` holds the ranges for ``level``, None if never held
LevelSegmentation = List[Optional[Segmentation]]


class LevelSegmenter:
    """
    Derive per-character, per-level time ranges from an attribution sequence.

    Runs of consecutive entries sharing character and level become one range.
    A run ending at a character switch is bounded by the character's own
    closing boundary; a run ending at a level-up is bounded by that level-up.
    """

    def __init__(
        self,
        character_ts_index: Sequence[CharacterEvent],
        foreign_characters: Optional[Set[str]] = None,
        diagnostics: Optional[Diagnostics] = None,
        budget: Optional[WorkBudget] = None,
    ):
        self.character_ts_index = character_ts_index
        self.foreign_characters = foreign_characters or set()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
        self.budget = budget or WorkBudget()
        self.segmentation: Dict[str, LevelSegmentation] = {}

    def iter_segment(self) -> Work[Dict[str, LevelSegmentation]]:
        """Segment cooperatively; yields at batch boundaries."""
        index = self.character_ts_index
        i = 0
        while i < len(index) - 1:
            if self.budget.tick():
                yield

            event = index[i]
            character = event.character
            level = self._resolve_level(i)
            if level > MAX_LEVEL:
                raise InvariantViolation(
                    f"level {level} out of range for character {character}", character=character, ts=event.ts
                )

            levels = self.segmentation.get(character)
            if levels is None:
                levels = self.segmentation[character] = [None] * MAX_LEVEL

            last_in_run: Optional[CharacterEvent] = None
            while i + 1 < len(index):
                following = index[i + 1]
                character_mismatch = following.character != character
                level_mismatch = is_level_event(following) and following.level != level

                if character_mismatch or level_mismatch or i + 2 == len(index):
                    ranges = levels[level - 1]
                    if ranges is None:
                        ranges = levels[level - 1] = []

                    if character_mismatch:
                        if last_in_run is None:
                            raise InvariantViolation(
                                f"expected boundary events for character {character} at level {level} at ts {event.ts}",
                                character=character,
                                ts=event.ts,
                            )
                        ranges.append(TSRange(event.ts, last_in_run.ts))
                    else:
                        # adjacent range up to the next level-defining (or final) event
                        ranges.append(TSRange(event.ts, following.ts))
                    break

                i += 1
                last_in_run = following
            i += 1

        self._check_gaps()
        self._check_level_ups()

        logger.debug(f"Segmented levels for {len(self.segmentation)} characters")
        return self.segmentation

    def segment(self) -> Dict[str, LevelSegmentation]:
        """Segment synchronously."""
        return run_to_completion(self.iter_segment())

    def _resolve_level(self, start: int) -> int:
        """
        Level governing the run starting at ``start``.

        Looks backward (inclusive) within the character's run first; a log
        that starts mid-level has nothing there, so the next level-defining
        event is used instead, minus one.
        """
        index = self.character_ts_index
        character = index[start].character

        for j in range(start, -1, -1):
            previous = index[j]
            if previous.character != character:
                break
            if is_level_event(previous):
                if previous.level > 0:
                    return previous.level
                break

        for j in range(start + 1, len(index)):
            following = index[j]
            if following.character != character:
                break
            if is_level_event(following):
                if following.level > 1:
                    return following.level - 1
                break

        raise InvariantViolation(
            f"no level event found for character {character} at ts {index[start].ts}",
            character=character,
            ts=index[start].ts,
        )

    def _check_gaps(self) -> None:
        for character, levels in self.segmentation.items():
            i = 0
            while i < len(levels) - 1:
                if levels[i] is None:
                    first_empty = i
                    i += 1
                    while i < len(levels) and levels[i] is None:
                        i += 1
                    if i < len(levels):
                        self.diagnostics.warning(
                            DiagnosticCode.SEGMENTATION_GAP,
                            f"segmentation has gaps for levels: {character} {first_empty + 1} .. {i}",
                            character=character,
                            logger=logger,
                            first_level=first_empty + 1,
                            last_level=i,
                        )
                    continue
                i += 1

    def _check_level_ups(self) -> None:
        for event in self.character_ts_index:
            if not isinstance(event, LevelUpEvent) or event.character in self.foreign_characters:
                continue

            levels = self.segmentation.get(event.character)
            ranges = levels[event.level - 1] if levels and 0 < event.level <= MAX_LEVEL else None
            if not ranges:
                self.diagnostics.error(
                    DiagnosticCode.MISSING_LEVEL_SEGMENTATION,
                    f"level index is missing for character {event.character} at level {event.level}",
                    character=event.character,
                    ts=event.ts,
                    logger=logger,
                    level=event.level,
                )
                continue

            if not any(r.contains(event.ts) for r in ranges):
                self.diagnostics.warning(
                    DiagnosticCode.UNPLACED_LEVEL_UP,
                    f"level index did not populate level up of character {event.character} at level {event.level}",
                    character=event.character,
                    ts=event.ts,
                    logger=logger,
                    level=event.level,
                )


def segment_levels(
    character_ts_index: Sequence[CharacterEvent],
    foreign_characters: Optional[Set[str]] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[str, LevelSegmentation]:
    """Build the per-character level segmentation synchronously."""
    return LevelSegmenter(character_ts_index, foreign_characters, diagnostics).segment()
