"""
Foreign character detection.

A client log mentions characters of other players as well: overheard chat,
party members dying, players joining the area. This module decides which
names do not belong to the account that wrote the log.
"""

from typing import Callable, Optional, Sequence, Set
import logging

from logattrib.config.log_versions import Feature, is_feature_supported_at
from logattrib.diagnostics import DiagnosticCode, Diagnostics
from logattrib.parser.events import (
    BaseEvent,
    CHAT_EVENTS,
    DeathEvent,
    JoinedAreaEvent,
    LevelUpEvent,
)
from logattrib.processing.work_units import Work, WorkBudget, run_to_completion


logger = logging.getLogger(__name__)

FeatureLookup = Callable[[Feature, int], bool]


class ForeignCharacterClassifier:
    """
    Two-pass heuristic classification of foreign character names.

    The first pass collects candidate sets, the second resolves them:

    - a ``joinedArea`` event is never written about the log owner's own
      character, so its name is foreign
    - a level-up at level 1-2, or two further contiguous level-ups, suggests an
      owned character; a non-contiguous jump suggests a foreign one
    - chat and death events alone make a name a foreign candidate
    - log formats without zone generation telemetry cannot be disambiguated,
      so every leveling character in them is foreign
    """

    def __init__(
        self,
        events: Sequence[BaseEvent],
        feature_lookup: Optional[FeatureLookup] = None,
        diagnostics: Optional[Diagnostics] = None,
        budget: Optional[WorkBudget] = None,
    ):
        """
        Initialize the classifier.

        Args:
            events: Events sorted by timestamp
            feature_lookup: Log format feature lookup
            diagnostics: Collector for soft anomalies
            budget: Cooperative yield budget
        """
        self.events = events
        self.feature_lookup = feature_lookup or is_feature_supported_at
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics(logger)
        self.budget = budget or WorkBudget()

        self.legacy_characters: Set[str] = set()
        self.maybe_owned_characters: Set[str] = set()
        self.maybe_foreign_characters: Set[str] = set()
        self.foreign_characters: Set[str] = set()

    def iter_classify(self) -> Work[Set[str]]:
        """Classify cooperatively; yields at batch boundaries."""
        for i, event in enumerate(self.events):
            if self.budget.tick():
                yield

            if isinstance(event, LevelUpEvent):
                self._handle_level_up(event, i)
            elif isinstance(event, CHAT_EVENTS + (DeathEvent,)):
                # usually overheard messages or party members dying
                self.maybe_foreign_characters.add(event.character)
            elif isinstance(event, JoinedAreaEvent):
                self.foreign_characters.add(event.character)

        return self._finalize()

    def classify(self) -> Set[str]:
        """Classify synchronously."""
        return run_to_completion(self.iter_classify())

    def _handle_level_up(self, event: LevelUpEvent, index: int) -> None:
        character = event.character
        if not self.feature_lookup(Feature.ZONE_GENERATION, event.ts):
            self.legacy_characters.add(character)
            return

        if character in self.maybe_owned_characters or character in self.foreign_characters:
            return

        if event.level <= 2:
            self.maybe_owned_characters.add(character)
            return

        current_level = event.level
        for j in range(index + 1, len(self.events)):
            next_event = self.events[j]
            if not isinstance(next_event, LevelUpEvent) or next_event.character != character:
                continue

            if next_event.level != current_level + 1:
                # requires the other player to never trigger joinedArea, uncommon but possible
                self.foreign_characters.add(character)
                logger.debug(
                    f"Non-contiguous level up for {character}: {current_level} -> {next_event.level}"
                )
                return

            current_level = next_event.level
            if current_level - event.level >= 2:
                # owned character, log is missing its creation
                self.maybe_owned_characters.add(character)
                return

    def _finalize(self) -> Set[str]:
        foreign = set(self.foreign_characters)

        for character in self.maybe_foreign_characters:
            if character not in self.maybe_owned_characters:
                foreign.add(character)

        for character in sorted(self.legacy_characters):
            foreign.add(character)
            if character in self.maybe_owned_characters:
                self.diagnostics.warning(
                    DiagnosticCode.LEGACY_OWNED_CHARACTER,
                    f"marking character {character} as foreign because it was created before zone generation was introduced",
                    character=character,
                    logger=logger,
                )

        logger.debug(
            f"Classified {len(foreign)} foreign characters "
            f"({len(self.maybe_owned_characters)} maybe owned, {len(self.legacy_characters)} legacy)"
        )
        return foreign


def determine_foreign_characters(
    events: Sequence[BaseEvent],
    feature_lookup: Optional[FeatureLookup] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Set[str]:
    """
    Determine all characters in ``events`` not owned by the log's account.

    Args:
        events: Events sorted by timestamp
        feature_lookup: Log format feature lookup
        diagnostics: Collector for soft anomalies

    Returns:
        Set of foreign character names
    """
    return ForeignCharacterClassifier(events, feature_lookup, diagnostics).classify()
