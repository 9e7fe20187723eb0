"""
Event log parser that reads JSON lines files into typed events.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union
import logging

from .events import BaseEvent, EventFactory


logger = logging.getLogger(__name__)


class EventLogParser:
    """
    Parser for serialized client log event files.

    Each line holds one JSON record ``{"name": ..., "ts": ..., "detail": {...}}``.
    Blank lines and lines starting with ``#`` are skipped; malformed lines are
    recorded in ``parse_errors`` and parsing continues.
    """

    def __init__(self):
        self.event_factory = EventFactory()
        self.current_file = None
        self.line_count = 0
        self.events_processed = 0
        self.parse_errors: List[Dict[str, Any]] = []

    def parse_file(self, file_path: Union[str, Path]) -> Iterator[BaseEvent]:
        """
        Parse an event log file and yield events.

        Args:
            file_path: Path to the JSON lines file

        Yields:
            BaseEvent objects in file order
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Event log file not found: {file_path}")

        self.current_file = file_path
        logger.info(f"Starting parse of {file_path.name} ({file_path.stat().st_size / 1024:.1f} KB)")

        with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
            for line in f:
                yield from self._process_line(line)

        logger.info(
            f"Completed parsing {file_path.name}: "
            f"{self.events_processed} events, {len(self.parse_errors)} errors"
        )

    def parse_lines(self, lines: List[str]) -> List[BaseEvent]:
        """Parse raw lines and return the events."""
        events = []
        for line in lines:
            events.extend(self._process_line(line))
        return events

    def parse_all(self, file_path: Union[str, Path]) -> List[BaseEvent]:
        """Parse a whole file, returning events sorted by timestamp."""
        events = list(self.parse_file(file_path))
        # stable, so same-ts events keep file order
        events.sort(key=lambda e: e.ts)
        return events

    def _process_line(self, line: str) -> Iterator[BaseEvent]:
        self.line_count += 1
        line = line.strip()
        if not line or line.startswith("#"):
            return

        try:
            record = json.loads(line)
            if not isinstance(record, dict):
                raise ValueError(f"Expected a JSON object, got {type(record).__name__}")
            event = self.event_factory.create_event(record)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            self.parse_errors.append({
                "line": line[:100],
                "error": str(e),
                "line_number": self.line_count,
            })
            logger.debug(f"Parse error on line {self.line_count}: {e}")
            return

        self.events_processed += 1
        yield event

    def reset(self) -> None:
        """Reset counters and recorded errors."""
        self.current_file = None
        self.line_count = 0
        self.events_processed = 0
        self.parse_errors = []
