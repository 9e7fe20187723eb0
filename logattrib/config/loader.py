"""
Configuration loader for custom zone metadata and log version tables.

Allows users to provide overrides via YAML configuration files.
"""

import yaml
import logging
from pathlib import Path
from typing import Dict, Optional, Any

from . import log_versions, zones

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Loads and applies custom configuration from YAML files."""

    @staticmethod
    def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to custom config file. If None, looks for:
                        1. logattrib.yaml in current directory
                        2. config/logattrib.yaml
                        3. ~/.logattrib/logattrib.yaml
                        4. /etc/logattrib/logattrib.yaml

        Returns:
            Configuration dictionary
        """
        search_paths = [
            Path("logattrib.yaml"),
            Path("config/logattrib.yaml"),
            Path.home() / ".logattrib" / "logattrib.yaml",
            Path("/etc/logattrib/logattrib.yaml"),
        ]

        if config_path:
            search_paths.insert(0, Path(config_path))

        for path in search_paths:
            if path.exists():
                try:
                    with open(path, "r") as f:
                        config = yaml.safe_load(f) or {}
                        logger.info(f"Loaded configuration from {path}")
                        return config
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Failed to load config from {path}: {e}")

        logger.debug("No custom configuration file found, using defaults")
        return {}

    @staticmethod
    def apply_config(config: Dict[str, Any]) -> None:
        """
        Apply custom configuration to the zone and log version tables.

        Args:
            config: Configuration dictionary from YAML
        """
        if "zones" in config:
            for area_name, entry in (config["zones"] or {}).items():
                try:
                    zone = zones.ZoneInfo(
                        label=str(entry.get("label", area_name)),
                        act=int(entry.get("act", 0)),
                        area_level=int(entry.get("area_level", 1)),
                        is_town=bool(entry.get("is_town", False)),
                        is_hideout=bool(entry.get("is_hideout", False)),
                        campaign_completion_indicator=bool(
                            entry.get("campaign_completion_indicator", False)
                        ),
                    )
                    zones.ZONE_TABLE[str(area_name)] = zone
                    logger.debug(f"Added custom zone: {area_name} = {zone.label}")
                except (AttributeError, ValueError, TypeError) as e:
                    logger.warning(f"Invalid zone entry {area_name}: {e}")

        if "campaign_completion_areas" in config:
            for area_name in config["campaign_completion_areas"] or []:
                area_name = str(area_name)
                zones.CAMPAIGN_COMPLETION_AREAS.add(area_name)
                existing = zones.ZONE_TABLE.get(area_name)
                if existing:
                    zones.ZONE_TABLE[area_name] = zones.ZoneInfo(
                        label=existing.label,
                        act=existing.act,
                        area_level=existing.area_level,
                        is_town=existing.is_town,
                        is_hideout=existing.is_hideout,
                        campaign_completion_indicator=True,
                    )
                else:
                    zones.ZONE_TABLE[area_name] = zones.ZoneInfo(
                        area_name, 0, 1, campaign_completion_indicator=True
                    )
                logger.debug(f"Added campaign completion area: {area_name}")

        if "log_versions" in config:
            for entry in config["log_versions"] or []:
                try:
                    support = {
                        feature: bool(entry[feature.value])
                        for feature in log_versions.Feature
                        if feature.value in entry
                    }
                    version = log_versions.LogVersion(ts=int(entry["ts"]), log_support=support)
                    log_versions.register_version(version)
                    logger.debug(f"Added log version at {version.ts}")
                except (KeyError, ValueError, TypeError) as e:
                    logger.warning(f"Invalid log version entry {entry}: {e}")

        logger.info("Custom configuration applied successfully")


def load_and_apply_config(config_path: Optional[str] = None) -> None:
    """
    Load and apply configuration in one step.

    Args:
        config_path: Optional path to custom config file
    """
    loader = ConfigLoader()
    config = loader.load_config(config_path)
    if config:
        loader.apply_config(config)
