"""
Event stream module for reading serialized client log events.
"""

from .events import BaseEvent, CharacterEvent, EventFactory, EventType
from .parser import EventLogParser

__all__ = ["BaseEvent", "CharacterEvent", "EventFactory", "EventType", "EventLogParser"]
