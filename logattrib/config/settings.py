"""
Runtime settings for character attribution.

Settings come from environment variables so that the CLI and embedding
applications share one configuration surface.
"""

import os
import logging
from typing import Optional
from dataclasses import dataclass


logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10000


@dataclass
class AttributionSettings:
    """Attribution build settings."""

    # Items processed between cooperative yield points
    batch_size: int = DEFAULT_BATCH_SIZE
    log_level: str = "INFO"
    # Optional YAML file with zone / log version overrides
    config_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AttributionSettings":
        """Load settings from environment variables."""
        batch_size = DEFAULT_BATCH_SIZE
        raw_batch_size = os.getenv("LOGATTRIB_BATCH_SIZE")
        if raw_batch_size:
            try:
                batch_size = int(raw_batch_size)
            except ValueError:
                logger.warning(f"Invalid LOGATTRIB_BATCH_SIZE {raw_batch_size!r}, using {DEFAULT_BATCH_SIZE}")
            if batch_size <= 0:
                logger.warning(f"LOGATTRIB_BATCH_SIZE must be positive, using {DEFAULT_BATCH_SIZE}")
                batch_size = DEFAULT_BATCH_SIZE

        return cls(
            batch_size=batch_size,
            log_level=os.getenv("LOGATTRIB_LOG_LEVEL", "INFO").upper(),
            config_path=os.getenv("LOGATTRIB_CONFIG") or None,
        )

    def get_log_level(self) -> int:
        """Get logging level constant."""
        return getattr(logging, self.log_level, logging.INFO)


_settings: Optional[AttributionSettings] = None


def get_settings() -> AttributionSettings:
    """Get the process-wide settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = AttributionSettings.from_env()
    return _settings


def reload_settings() -> AttributionSettings:
    """Discard cached settings and reload them from the environment."""
    global _settings
    _settings = AttributionSettings.from_env()
    return _settings
