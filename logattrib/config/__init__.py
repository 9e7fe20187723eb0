"""
Configuration module for attribution settings and lookup tables.

Provides environment settings, the log format version table, zone metadata
and YAML overrides for both tables.
"""

from .settings import AttributionSettings, get_settings, reload_settings
from .log_versions import Feature, LogVersion, is_feature_supported_at
from .zones import ZoneInfo, get_zone_info
from .loader import ConfigLoader, load_and_apply_config

__all__ = [
    "AttributionSettings",
    "get_settings",
    "reload_settings",
    "Feature",
    "LogVersion",
    "is_feature_supported_at",
    "ZoneInfo",
    "get_zone_info",
    "ConfigLoader",
    "load_and_apply_config",
]
