"""
Event classes and factory for game client log events.

Events arrive already typed and sorted; each kind is a dataclass carrying only
its own fields. Kinds that name a character derive from ``CharacterEvent``.
"""

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, Optional, Type, Union
from enum import Enum
import logging


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Enumeration of known event kinds (serialized names)."""

    LOG_FILE_OPEN = "logFileOpen"

    # Chat
    MSG_LOCAL = "msgLocal"
    MSG_PARTY = "msgParty"
    MSG_GUILD = "msgGuild"
    MSG_FROM = "msgFrom"
    MSG_TO = "msgTo"

    # Character progression
    LEVEL_UP = "levelUp"
    DEATH = "death"
    SET_CHARACTER = "setCharacter"

    # Other players
    JOINED_AREA = "joinedArea"
    LEFT_AREA = "leftArea"

    # Zones
    HIDEOUT_ENTERED = "hideoutEntered"
    HIDEOUT_EXITED = "hideoutExited"
    MAP_ENTERED = "mapEntered"
    MAP_REENTERED = "mapReentered"

    BOSS_KILL = "bossKill"


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all log events."""

    ts: int  # milliseconds since epoch

    event_type: ClassVar[Optional[EventType]] = None

    @property
    def name(self) -> str:
        """Serialized event name."""
        return self.event_type.value if self.event_type else "unknown"


@dataclass(frozen=True)
class CharacterEvent(BaseEvent):
    """Base class for events naming a character."""

    character: str


@dataclass(frozen=True)
class LogFileOpenEvent(BaseEvent):
    event_type: ClassVar[EventType] = EventType.LOG_FILE_OPEN


@dataclass(frozen=True)
class MsgEvent(CharacterEvent):
    """Chat message sent by (or to) ``character``."""

    msg: str = ""


@dataclass(frozen=True)
class MsgLocalEvent(MsgEvent):
    event_type: ClassVar[EventType] = EventType.MSG_LOCAL


@dataclass(frozen=True)
class MsgPartyEvent(MsgEvent):
    event_type: ClassVar[EventType] = EventType.MSG_PARTY


@dataclass(frozen=True)
class MsgGuildEvent(MsgEvent):
    event_type: ClassVar[EventType] = EventType.MSG_GUILD


@dataclass(frozen=True)
class MsgFromEvent(MsgEvent):
    """Whisper received from ``character``."""

    event_type: ClassVar[EventType] = EventType.MSG_FROM


@dataclass(frozen=True)
class MsgToEvent(MsgEvent):
    """Whisper sent to ``character``."""

    event_type: ClassVar[EventType] = EventType.MSG_TO


@dataclass(frozen=True)
class LevelUpEvent(CharacterEvent):
    """A character reached a new level."""

    ascendancy: str
    level: int

    event_type: ClassVar[EventType] = EventType.LEVEL_UP


@dataclass(frozen=True)
class SetCharacterEvent(CharacterEvent):
    """
    Synthetic boundary event.

    Never present in a client log; fabricated during attribution to mark where
    the active character changes. Carries the level the character held at
    ``ts`` so it doubles as a level-defining event.
    """

    ascendancy: str
    level: int

    event_type: ClassVar[EventType] = EventType.SET_CHARACTER

    @classmethod
    def of_event(cls, ts: int, event: "LevelEvent") -> "SetCharacterEvent":
        """Boundary at ``ts`` carrying the character state of ``event``."""
        return cls(ts=ts, character=event.character, ascendancy=event.ascendancy, level=event.level)


@dataclass(frozen=True)
class DeathEvent(CharacterEvent):
    area_level: int = 0

    event_type: ClassVar[EventType] = EventType.DEATH


@dataclass(frozen=True)
class JoinedAreaEvent(CharacterEvent):
    """Another player joined the current area."""

    event_type: ClassVar[EventType] = EventType.JOINED_AREA


@dataclass(frozen=True)
class LeftAreaEvent(CharacterEvent):
    event_type: ClassVar[EventType] = EventType.LEFT_AREA


@dataclass(frozen=True)
class HideoutEnteredEvent(BaseEvent):
    """A hideout or town was entered."""

    area_name: str

    event_type: ClassVar[EventType] = EventType.HIDEOUT_ENTERED


@dataclass(frozen=True)
class HideoutExitedEvent(BaseEvent):
    event_type: ClassVar[EventType] = EventType.HIDEOUT_EXITED


@dataclass(frozen=True)
class MapEnteredEvent(BaseEvent):
    """A freshly generated area was entered."""

    event_type: ClassVar[EventType] = EventType.MAP_ENTERED


@dataclass(frozen=True)
class MapReenteredEvent(BaseEvent):
    event_type: ClassVar[EventType] = EventType.MAP_REENTERED


@dataclass(frozen=True)
class BossKillEvent(BaseEvent):
    boss_name: str
    msg: str = ""
    area_level: int = 0

    event_type: ClassVar[EventType] = EventType.BOSS_KILL


@dataclass(frozen=True)
class GenericEvent(BaseEvent):
    """Any event kind this package does not interpret; passed through as-is."""

    raw_name: str = "unknown"
    detail: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def name(self) -> str:
        return self.raw_name


# Type groups used for dispatch
LevelEvent = Union[LevelUpEvent, SetCharacterEvent]
LEVEL_EVENTS = (LevelUpEvent, SetCharacterEvent)
CHAT_EVENTS = (MsgLocalEvent, MsgPartyEvent, MsgGuildEvent)
ATTRIBUTABLE_EVENTS = CHAT_EVENTS + (LevelUpEvent, DeathEvent)


def is_level_event(event: BaseEvent) -> bool:
    """Check if an event defines a character level (real level-up or boundary)."""
    return isinstance(event, LEVEL_EVENTS)


class EventFactory:
    """
    Factory for building typed events from serialized records.

    Records use the shape ``{"name": str, "ts": int, "detail": {...}}`` with
    camelCase detail keys.
    """

    EVENT_CLASSES: Dict[str, Type[BaseEvent]] = {
        cls.event_type.value: cls
        for cls in (
            LogFileOpenEvent,
            MsgLocalEvent,
            MsgPartyEvent,
            MsgGuildEvent,
            MsgFromEvent,
            MsgToEvent,
            LevelUpEvent,
            SetCharacterEvent,
            DeathEvent,
            JoinedAreaEvent,
            LeftAreaEvent,
            HideoutEnteredEvent,
            HideoutExitedEvent,
            MapEnteredEvent,
            MapReenteredEvent,
            BossKillEvent,
        )
    }

    # detail key -> dataclass field
    DETAIL_FIELDS = {
        "character": "character",
        "msg": "msg",
        "ascendancy": "ascendancy",
        "level": "level",
        "areaLevel": "area_level",
        "areaName": "area_name",
        "bossName": "boss_name",
    }

    def create_event(self, record: Dict[str, Any]) -> BaseEvent:
        """
        Create an event from a serialized record.

        Args:
            record: Mapping with ``name``, ``ts`` and optional ``detail``

        Returns:
            Typed event, or ``GenericEvent`` for unknown kinds

        Raises:
            ValueError: If the record lacks a name or timestamp, or a known
                kind is missing one of its required fields
        """
        name = record.get("name")
        ts = record.get("ts")
        if not name or ts is None:
            raise ValueError(f"Event record requires 'name' and 'ts': {record!r}")

        detail = record.get("detail") or {}
        event_class = self.EVENT_CLASSES.get(name)
        if event_class is None:
            logger.debug(f"Passing through unknown event kind: {name}")
            return GenericEvent(ts=int(ts), raw_name=name, detail=dict(detail))

        kwargs: Dict[str, Any] = {"ts": int(ts)}
        known = {f.name for f in fields(event_class)}
        for key, value in detail.items():
            attr = self.DETAIL_FIELDS.get(key)
            if attr and attr in known:
                kwargs[attr] = int(value) if attr in ("level", "area_level") else value

        try:
            return event_class(**kwargs)
        except TypeError as e:
            raise ValueError(f"Invalid {name} event record: {e}") from e

    @staticmethod
    def to_record(event: BaseEvent) -> Dict[str, Any]:
        """Serialize an event back into the record shape."""
        if isinstance(event, GenericEvent):
            return {"name": event.raw_name, "ts": event.ts, "detail": dict(event.detail)}

        reverse = {attr: key for key, attr in EventFactory.DETAIL_FIELDS.items()}
        detail = {
            reverse[f.name]: getattr(event, f.name)
            for f in fields(event)
            if f.name != "ts" and f.name in reverse
        }
        record: Dict[str, Any] = {"name": event.name, "ts": event.ts}
        if detail:
            record["detail"] = detail
        return record
