"""
Tests for the command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from logattrib.cli import cli
from logattrib.parser.events import EventFactory
from tests.builders import hideout, level_up, map_entered, msg_local

# 2023-11-14, well within the zone generation era
BASE_TS = 1700000000000


def write_log(path, events):
    path.write_text("\n".join(json.dumps(EventFactory.to_record(e)) for e in events) + "\n")
    return str(path)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def log_file(tmp_path):
    events = [
        map_entered(BASE_TS + 100),
        level_up(BASE_TS + 150, "Bob", 2, "Witch"),
        map_entered(BASE_TS + 200),
        level_up(BASE_TS + 300, "Alice", 2),
        msg_local(BASE_TS + 350, "Alice"),
        hideout(BASE_TS + 400),
        level_up(BASE_TS + 500, "Bob", 3, "Witch"),
    ]
    return write_log(tmp_path / "events.jsonl", events)


@pytest.mark.cli
class TestCli:
    """Test CLI commands against a small event log."""

    def test_characters_summary(self, runner, log_file):
        result = runner.invoke(cli, ["characters", log_file])

        assert result.exit_code == 0, result.output
        assert "Alice" in result.output
        assert "Bob" in result.output

    def test_characters_json(self, runner, log_file, tmp_path):
        output = tmp_path / "characters.json"
        result = runner.invoke(cli, ["characters", log_file, "--format", "json", "--output", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert [c["name"] for c in data] == ["Alice", "Bob"]
        assert data[1]["level"] == 3
        assert data[1]["created_ts"] == BASE_TS + 100

    def test_level(self, runner, log_file):
        result = runner.invoke(cli, ["level", log_file, str(BASE_TS + 450)])

        assert result.exit_code == 0, result.output
        assert "Bob" in result.output
        assert "level 2" in result.output

    def test_level_before_any_character(self, runner, log_file):
        result = runner.invoke(cli, ["level", log_file, str(BASE_TS)])

        assert result.exit_code == 0, result.output
        assert "assuming level 1" in result.output

    def test_segments(self, runner, log_file):
        result = runner.invoke(cli, ["segments", log_file, "--character", "Alice", "--from-level", "2"])

        assert result.exit_code == 0, result.output
        assert "Levels 2-100 of Alice" in result.output

    def test_segments_unknown_character(self, runner, log_file):
        result = runner.invoke(cli, ["segments", log_file, "--character", "Nobody"])

        assert result.exit_code == 1
        assert "Nobody" in result.output

    def test_diagnostics_empty(self, runner, log_file):
        result = runner.invoke(cli, ["diagnostics", log_file])

        assert result.exit_code == 0, result.output
        assert "No diagnostics" in result.output

    def test_attribution_failure(self, runner, tmp_path):
        """Test fatal attribution errors exit with status 1."""
        events = [
            map_entered(BASE_TS + 100),
            level_up(BASE_TS + 150, "Alice", 2),
            map_entered(BASE_TS + 200),
            level_up(BASE_TS + 250, "Bob", 2),
            msg_local(BASE_TS + 300, "Alice"),
        ]
        path = write_log(tmp_path / "broken.jsonl", events)
        result = runner.invoke(cli, ["characters", path])

        assert result.exit_code == 1
        assert "Attribution failed" in result.output

    def test_config_option(self, runner, log_file, tmp_path, restore_tables):
        config = tmp_path / "logattrib.yaml"
        config.write_text("campaign_completion_areas:\n  - HideoutFelled\n")
        output = tmp_path / "characters.json"

        result = runner.invoke(
            cli, ["--config", str(config), "characters", log_file, "--format", "json", "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        data = {c["name"]: c for c in json.loads(output.read_text())}
        assert data["Alice"]["campaign_completed_ts"] == BASE_TS + 400
