"""
Structured diagnostics for soft anomalies found during a build.

Anomalies that do not invalidate the result (reused character names, gaps in a
level segmentation, missing telemetry in old log formats) are recorded here
instead of aborting. Every record is also forwarded to the logger of the
component that produced it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional
import logging


class Severity(Enum):
    WARNING = "warning"
    ERROR = "error"


class DiagnosticCode(Enum):
    """Kinds of soft anomalies."""

    LEGACY_OWNED_CHARACTER = "legacy_owned_character"
    MISSING_CREATION_MAP_ENTRY = "missing_creation_map_entry"
    DUPLICATE_CHARACTER_NAME = "duplicate_character_name"
    UNATTRIBUTABLE_SWITCH = "unattributable_switch"
    SEGMENTATION_GAP = "segmentation_gap"
    MISSING_LEVEL_SEGMENTATION = "missing_level_segmentation"
    UNPLACED_LEVEL_UP = "unplaced_level_up"


@dataclass(frozen=True)
class Diagnostic:
    """A single soft anomaly."""

    code: DiagnosticCode
    severity: Severity
    message: str
    character: Optional[str] = None
    ts: Optional[int] = None
    context: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "character": self.character,
            "ts": self.ts,
            "context": dict(self.context),
        }


class Diagnostics:
    """
    Ordered collector of diagnostics for one build.

    Args:
        logger: Logger that mirrors each record; defaults to this module's
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._records: List[Diagnostic] = []
        self._logger = logger or logging.getLogger(__name__)

    def warning(
        self,
        code: DiagnosticCode,
        message: str,
        character: Optional[str] = None,
        ts: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ) -> Diagnostic:
        """Record a warning-level anomaly."""
        return self._record(Severity.WARNING, code, message, character, ts, logger, context)

    def error(
        self,
        code: DiagnosticCode,
        message: str,
        character: Optional[str] = None,
        ts: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        **context: Any,
    ) -> Diagnostic:
        """Record a broken-but-tolerated invariant."""
        return self._record(Severity.ERROR, code, message, character, ts, logger, context)

    def _record(self, severity, code, message, character, ts, logger, context) -> Diagnostic:
        diagnostic = Diagnostic(
            code=code,
            severity=severity,
            message=message,
            character=character,
            ts=ts,
            context=context,
        )
        self._records.append(diagnostic)

        log = logger or self._logger
        if severity is Severity.ERROR:
            log.error(message)
        else:
            log.warning(message)
        return diagnostic

    def by_code(self, code: DiagnosticCode) -> List[Diagnostic]:
        """All records with the given code, in build order."""
        return [d for d in self._records if d.code is code]

    def freeze(self) -> tuple:
        return tuple(self._records)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
