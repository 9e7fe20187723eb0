"""
Unit tests for settings, lookup tables and the YAML configuration loader.
"""

import logging

import pytest
import yaml

from logattrib.config import log_versions, zones
from logattrib.config.loader import ConfigLoader, load_and_apply_config
from logattrib.config.log_versions import Feature, LogVersion, is_feature_supported_at
from logattrib.config.settings import DEFAULT_BATCH_SIZE, AttributionSettings, get_settings, reload_settings


class TestLogVersions:
    """Test the log format version table."""

    def test_zone_generation_cutoff(self):
        """Test logs before the first version lack zone generation."""
        cutoff = log_versions.VERSIONS[0].ts
        assert not is_feature_supported_at(Feature.ZONE_GENERATION, cutoff - 1)
        assert is_feature_supported_at(Feature.ZONE_GENERATION, cutoff)
        assert log_versions.get_log_version_at(cutoff - 1) is None

    def test_register_version(self, restore_tables):
        """Test later versions take precedence."""
        cutoff = log_versions.VERSIONS[0].ts
        log_versions.register_version(LogVersion(ts=cutoff + 1000, log_support={Feature.ZONE_GENERATION: False}))

        assert is_feature_supported_at(Feature.ZONE_GENERATION, cutoff + 999)
        assert not is_feature_supported_at(Feature.ZONE_GENERATION, cutoff + 1000)


class TestZones:
    """Test zone metadata lookups."""

    def test_known_zone(self):
        zone = zones.get_zone_info("G1_1")
        assert zone.label == "The Riverbank"
        assert not zone.campaign_completion_indicator

    def test_campaign_completion(self):
        assert zones.is_campaign_completion_area("Karui Shores")
        assert not zones.is_campaign_completion_area("HideoutFelled")

    def test_sanctum_floors(self):
        """Test Sanctum areas resolve by area level."""
        assert zones.get_zone_info("Sanctum_3", 20) is zones.SANCTUM_A2
        assert zones.get_zone_info("Sanctum_3", 35) is zones.SANCTUM_A4
        assert zones.get_zone_info("Sanctum_3") is None

    def test_zone_label(self):
        assert zones.get_zone_label("HideoutCanal") == "Canal Hideout"
        assert zones.get_zone_label("HideoutUnknown") == "Unknown"
        assert zones.get_zone_label("G9_9") == "G9_9"


class TestConfigLoader:
    """Test YAML overrides."""

    def test_load_config(self, tmp_path):
        path = tmp_path / "logattrib.yaml"
        path.write_text(yaml.safe_dump({"campaign_completion_areas": ["G2_town"]}))

        assert ConfigLoader.load_config(str(path)) == {"campaign_completion_areas": ["G2_town"]}

    def test_apply_zones(self, restore_tables):
        ConfigLoader.apply_config(
            {"zones": {"G4_1": {"label": "Kingsmarch", "act": 4, "area_level": 50, "is_town": True}}}
        )

        zone = zones.get_zone_info("G4_1")
        assert zone.label == "Kingsmarch"
        assert zone.is_town

    def test_invalid_zone_entry(self, restore_tables, caplog):
        """Test broken entries are skipped with a warning."""
        with caplog.at_level(logging.WARNING):
            ConfigLoader.apply_config({"zones": {"G4_1": "not a mapping", "G4_2": {"act": "x"}}})

        assert zones.get_zone_info("G4_1") is None
        assert zones.get_zone_info("G4_2") is None
        assert "Invalid zone entry" in caplog.text

    def test_apply_campaign_completion_areas(self, restore_tables):
        """Test known zones keep their attributes and unknown ones are added."""
        ConfigLoader.apply_config({"campaign_completion_areas": ["G2_town", "Endgame_Town"]})

        assert zones.get_zone_info("G2_town").campaign_completion_indicator
        assert zones.get_zone_info("G2_town").label == "The Ardura Caravan"
        assert zones.is_campaign_completion_area("Endgame_Town")

    def test_apply_log_versions(self, restore_tables):
        ConfigLoader.apply_config({"log_versions": [{"ts": 0, "zone_generation": True}, {"zone_generation": True}]})

        assert is_feature_supported_at(Feature.ZONE_GENERATION, 1)
        assert len(log_versions.VERSIONS) == 2

    def test_load_and_apply(self, tmp_path, restore_tables):
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.safe_dump({"zones": {"G4_1": {"label": "Kingsmarch"}}}))

        load_and_apply_config(str(path))
        assert zones.get_zone_label("G4_1") == "Kingsmarch"


class TestSettings:
    """Test environment settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOGATTRIB_BATCH_SIZE", raising=False)
        monkeypatch.delenv("LOGATTRIB_LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOGATTRIB_CONFIG", raising=False)

        settings = AttributionSettings.from_env()
        assert settings.batch_size == DEFAULT_BATCH_SIZE
        assert settings.get_log_level() == logging.INFO
        assert settings.config_path is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOGATTRIB_BATCH_SIZE", "250")
        monkeypatch.setenv("LOGATTRIB_LOG_LEVEL", "debug")
        monkeypatch.setenv("LOGATTRIB_CONFIG", "/tmp/custom.yaml")

        settings = AttributionSettings.from_env()
        assert settings.batch_size == 250
        assert settings.get_log_level() == logging.DEBUG
        assert settings.config_path == "/tmp/custom.yaml"

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_batch_size(self, monkeypatch, value):
        monkeypatch.setenv("LOGATTRIB_BATCH_SIZE", value)
        assert AttributionSettings.from_env().batch_size == DEFAULT_BATCH_SIZE

    def test_reload(self, monkeypatch):
        monkeypatch.setenv("LOGATTRIB_BATCH_SIZE", "42")
        try:
            assert reload_settings().batch_size == 42
            assert get_settings().batch_size == 42
        finally:
            monkeypatch.delenv("LOGATTRIB_BATCH_SIZE")
            reload_settings()
