"""
Segmentation module for attributing events to characters and levels.
"""

from .foreign import ForeignCharacterClassifier, determine_foreign_characters
from .attribution import AttributionBuilder, AttributionResult
from .levels import LevelSegmenter
from .aggregation import (
    CharacterAggregation,
    CharacterInfo,
    build_character_aggregation,
    build_character_aggregation_async,
)

__all__ = [
    "ForeignCharacterClassifier",
    "determine_foreign_characters",
    "AttributionBuilder",
    "AttributionResult",
    "LevelSegmenter",
    "CharacterAggregation",
    "CharacterInfo",
    "build_character_aggregation",
    "build_character_aggregation_async",
]
