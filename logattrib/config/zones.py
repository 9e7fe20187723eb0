"""
Static zone metadata keyed by the area identifiers found in client logs.

Only the attributes the attribution engine and the CLI need are modelled.
Entries can be added or overridden through the configuration loader.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Set


@dataclass(frozen=True)
class ZoneInfo:
    """Static attributes of an area."""

    label: str
    act: int
    area_level: int
    is_town: bool = False
    is_hideout: bool = False
    campaign_completion_indicator: bool = False


# Entering one of these means the campaign has been completed
CAMPAIGN_COMPLETION_AREAS: Set[str] = {"Karui Shores", "The Ziggurat Refuge"}


ZONE_TABLE: Dict[str, ZoneInfo] = {
    # Act 1
    "G1_1": ZoneInfo("The Riverbank", 1, 1),
    "G1_town": ZoneInfo("Clearfell Encampment", 1, 15, is_town=True),
    "G1_2": ZoneInfo("Clearfell", 1, 2),
    "G1_3": ZoneInfo("Mud Burrow", 1, 3),
    "G1_4": ZoneInfo("The Grelwood", 1, 4),
    "G1_5": ZoneInfo("The Red Vale", 1, 5),
    # Act 2
    "G2_town": ZoneInfo("The Ardura Caravan", 2, 32, is_town=True),
    "G2_1": ZoneInfo("Vastiri Outskirts", 2, 16),
    # Act 3
    "G3_town": ZoneInfo("Ziggurat Encampment", 3, 44, is_town=True),
    "G3_1": ZoneInfo("Sandswept Marsh", 3, 34),
    # Endgame
    "The Ziggurat Refuge": ZoneInfo(
        "The Ziggurat Refuge", 4, 65, is_town=True, campaign_completion_indicator=True
    ),
    "Karui Shores": ZoneInfo(
        "Karui Shores", 11, 68, is_town=True, campaign_completion_indicator=True
    ),
    # Hideouts
    "HideoutFelled": ZoneInfo("Felled Hideout", 0, 1, is_hideout=True),
    "HideoutShrine": ZoneInfo("Shrine Hideout", 0, 1, is_hideout=True),
    "HideoutCanal": ZoneInfo("Canal Hideout", 0, 1, is_hideout=True),
}

SANCTUM_A2 = ZoneInfo("Trial of the Sekhemas (A2)", 2, 22)
SANCTUM_A4 = ZoneInfo("Trial of the Sekhemas (A4)", 4, 40)


def get_zone_info(area_name: str, area_level: Optional[int] = None) -> Optional[ZoneInfo]:
    """
    Look up static metadata for an area.

    Args:
        area_name: Area identifier as written to the client log
        area_level: Optional area level, used to resolve Sanctum floors

    Returns:
        ZoneInfo, or None for unknown areas
    """
    zone = ZONE_TABLE.get(area_name)
    if zone:
        return zone

    if area_level and area_name.startswith("Sanctum_"):
        if area_level <= 22:
            return SANCTUM_A2
        elif area_level <= 40:
            return SANCTUM_A4

    return None


def is_campaign_completion_area(area_name: str) -> bool:
    """Check if entering this area indicates a completed campaign."""
    zone = get_zone_info(area_name)
    if zone:
        return zone.campaign_completion_indicator
    return area_name in CAMPAIGN_COMPLETION_AREAS


def get_zone_label(area_name: str) -> str:
    """Human-readable name for an area, falling back to the identifier."""
    zone = get_zone_info(area_name)
    if zone:
        return zone.label
    if area_name.startswith("Hideout"):
        return area_name[len("Hideout"):] or area_name
    return area_name
