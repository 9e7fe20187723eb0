"""
Pytest configuration and shared fixtures for the test suite.

Event builders keep scenarios short; timestamps in most tests are small
integers, so a feature lookup fixture marks them as modern log format.
"""

import pytest
from pathlib import Path

import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from logattrib.config import log_versions, zones
from tests.builders import (
    death,
    hideout,
    legacy_lookup,
    level_up,
    map_entered,
    modern_lookup,
    msg_local,
)


@pytest.fixture
def modern():
    return modern_lookup


@pytest.fixture
def legacy():
    return legacy_lookup


@pytest.fixture
def two_character_events():
    """
    Character B created first, then A; A chats, then a death of B follows a
    hideout entry and a map entry.
    """
    return [
        map_entered(100),
        level_up(150, "B", 2, "Witch"),
        map_entered(200),
        level_up(300, "A", 2),
        msg_local(350, "A"),
        hideout(400),
        map_entered(450),
        death(500, "B"),
    ]


@pytest.fixture
def early_chat_events():
    """Character X chats in its first zone before its level 2 level-up."""
    return [
        map_entered(0),
        level_up(10, "A", 2),
        level_up(20, "A", 3),
        map_entered(50),
        msg_local(60, "X"),
        level_up(100, "X", 2),
        level_up(200, "X", 3),
    ]


@pytest.fixture
def late_outgoing_events():
    """A chats after the map entry preceding B's level 2 level-up."""
    return [
        map_entered(100),
        level_up(150, "A", 2),
        map_entered(200),
        msg_local(250, "A"),
        level_up(300, "B", 2),
    ]


@pytest.fixture
def restore_tables():
    """Snapshot the zone and log version tables and restore them afterwards."""
    zone_table = dict(zones.ZONE_TABLE)
    completion_areas = set(zones.CAMPAIGN_COMPLETION_AREAS)
    versions = list(log_versions.VERSIONS)
    yield
    zones.ZONE_TABLE.clear()
    zones.ZONE_TABLE.update(zone_table)
    zones.CAMPAIGN_COMPLETION_AREAS.clear()
    zones.CAMPAIGN_COMPLETION_AREAS.update(completion_areas)
    log_versions.VERSIONS[:] = versions


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "cli: mark test as command-line related")
