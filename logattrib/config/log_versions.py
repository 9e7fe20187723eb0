"""
Log format versions and the features each of them supports.

Client logs grew additional telemetry over time. Attribution heuristics that
rely on such telemetry must check whether the log format at a given timestamp
already emitted it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from logattrib.utils.search import find_last


class Feature(Enum):
    """Optional log telemetry."""

    ZONE_GENERATION = "zone_generation"


@dataclass
class LogVersion:
    """Log format in effect from ``ts`` (ms since epoch) onwards."""

    ts: int
    log_support: Dict[Feature, bool] = field(default_factory=dict)

    def supports(self, feature: Feature) -> bool:
        return self.log_support.get(feature, False)


def _utc_millis(year: int, month: int, day: int) -> int:
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp() * 1000)


# Ordered by ts ascending. The zone generation cut-off is approximate.
VERSIONS: List[LogVersion] = [
    LogVersion(ts=_utc_millis(2022, 2, 1), log_support={Feature.ZONE_GENERATION: True}),
]


def get_log_version_at(ts: int) -> Optional[LogVersion]:
    """
    Get the log format version in effect at a timestamp.

    Args:
        ts: Milliseconds since epoch

    Returns:
        Latest version starting at or before ``ts``, None for older logs
    """
    return find_last(VERSIONS, lambda v: ts >= v.ts)


def is_feature_supported_at(feature: Feature, ts: int) -> bool:
    """Check if the log format at ``ts`` supports ``feature``."""
    version = get_log_version_at(ts)
    return version.supports(feature) if version else False


def register_version(version: LogVersion) -> None:
    """Add a version to the table, keeping it ordered."""
    VERSIONS.append(version)
    VERSIONS.sort(key=lambda v: v.ts)
