"""Tests for CLI commands with mocked dependencies."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from gridiron_edge.alerts.models import Severity
from gridiron_edge.cli import app
from gridiron_edge.errors import ErrorCode, GeneratorError

runner = CliRunner()


class TestScanCommand:
    def test_scan_json_output(self):
        """Scans the built-in snapshot and prints the envelope."""
        result = runner.invoke(app, ["scan", "LAR @ SEA", "--output", "json"])
        assert result.exit_code == 0
        assert '"id": "alert-weather-lumen-field"' in result.output
        assert '"request_id"' in result.output

    def test_scan_table_output(self):
        result = runner.invoke(app, ["scan", "LAR @ SEA"])
        assert result.exit_code == 0
        assert "invoked: epa, weather, wr" in result.output

    def test_scan_csv_output(self):
        result = runner.invoke(app, ["scan", "LAR @ SEA", "-a", "weather", "-o", "csv"])
        assert result.exit_code == 0
        assert "id,agent,subject,confidence,severity,market,claim" in result.output
        assert "alert-weather-lumen-field,weather,Lumen Field" in result.output

    def test_scan_no_alerts(self):
        result = runner.invoke(app, ["scan", "Chiefs vs Raiders"])
        assert result.exit_code == 0
        assert "No alerts for LV @ KC" in result.output

    def test_invalid_matchup(self):
        result = runner.invoke(app, ["scan", "SEA"])
        assert result.exit_code == 1
        assert "BAD_REQUEST" in result.output

    def test_invalid_matchup_json_envelope(self):
        result = runner.invoke(app, ["scan", "SEA", "-o", "json"])
        assert result.exit_code == 1
        assert '"fallback": true' in result.output
        assert '"code": "BAD_REQUEST"' in result.output

    def test_unknown_agent(self):
        result = runner.invoke(app, ["scan", "LAR @ SEA", "--agents", "kicker"])
        assert result.exit_code == 1
        assert "BAD_REQUEST" in result.output

    def test_scan_uses_pipeline(self):
        response = {"alerts": [], "matchup": {"home": "SEA", "away": "LAR"}, "request_id": "req-x"}
        with patch("gridiron_edge.pipeline.run_scan", new=AsyncMock(return_value=response)) as mock_scan:
            result = runner.invoke(app, ["scan", "Rams @ Seahawks", "--mode", "story"])

        assert result.exit_code == 0
        request = mock_scan.call_args.args[0]
        assert request.matchup == "Rams @ Seahawks"
        assert request.mode == "story"


class TestBuildCommand:
    def test_build_json(self):
        result = runner.invoke(app, ["build", "LAR @ SEA", "-o", "json"])
        assert result.exit_code == 0
        assert '"correlation_type": "volume_share"' in result.output

    def test_build_table(self):
        result = runner.invoke(app, ["build", "LAR @ SEA"])
        assert result.exit_code == 0
        assert "Correlated Scripts" in result.output

    def test_build_from_alert_file(self, tmp_path, make_alert):
        from gridiron_edge.agents.base import AgentType

        alerts = [
            make_alert("w", AgentType.WEATHER, subject="Lumen Field"),
            make_alert("wr", AgentType.WR, subject="Puka Nacua"),
        ]
        path = tmp_path / "alerts.json"
        path.write_text(json.dumps({"alerts": [a.to_dict() for a in alerts]}))
        result = runner.invoke(app, ["build", "LAR @ SEA", "--alerts", str(path), "-o", "json"])
        assert result.exit_code == 0
        assert '"correlation_type": "weather_cascade"' in result.output

    def test_build_rejects_out_of_range_confidence(self, tmp_path, make_alert):
        alert = {**make_alert("w").to_dict(), "confidence": 1.7}
        path = tmp_path / "alerts.json"
        path.write_text(json.dumps([alert]))
        result = runner.invoke(app, ["build", "LAR @ SEA", "--alerts", str(path), "-o", "json"])
        assert result.exit_code == 1
        assert '"code": "BAD_REQUEST"' in result.output
        assert "alerts.0.confidence" in result.output

    def test_build_bad_max_legs(self):
        result = runner.invoke(app, ["build", "LAR @ SEA", "--max-legs", "9"])
        assert result.exit_code == 1


class TestBetCommand:
    def test_bet_table(self, tmp_path, make_alert):
        alerts = [
            make_alert("safe", confidence=0.8, severity=Severity.HIGH),
            make_alert("low", confidence=0.1, severity=Severity.HIGH),
        ]
        path = tmp_path / "alerts.json"
        path.write_text(json.dumps([a.to_dict() for a in alerts]))
        result = runner.invoke(app, ["bet", "--alerts", str(path)])
        assert result.exit_code == 0
        assert "Betting Ladders" in result.output
        assert "Excluded: low" in result.output

    def test_bet_rejects_out_of_range_confidence(self, tmp_path, make_alert):
        alert = {**make_alert("safe", severity=Severity.HIGH).to_dict(), "confidence": 1.7}
        path = tmp_path / "alerts.json"
        path.write_text(json.dumps([alert]))
        result = runner.invoke(app, ["bet", "--alerts", str(path)])
        assert result.exit_code == 1
        assert "BAD_REQUEST" in result.output

    def test_bet_missing_file(self, tmp_path):
        result = runner.invoke(app, ["bet", "--alerts", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "BAD_REQUEST" in result.output

    def test_bet_not_a_list(self, tmp_path):
        path = tmp_path / "alerts.json"
        path.write_text(json.dumps({"alerts": "none"}))
        result = runner.invoke(app, ["bet", "--alerts", str(path)])
        assert result.exit_code == 1


class TestStoryCommand:
    def test_story_passes_options(self, tmp_path):
        odds = tmp_path / "odds.txt"
        odds.write_text("SEA Under 47.5 -105\n")
        response = {"story": {"scripts": []}}
        with patch("gridiron_edge.pipeline.run_story", new=AsyncMock(return_value=response)) as mock_story:
            result = runner.invoke(
                app,
                [
                    "story", "LAR @ SEA",
                    "--angle", "weather", "--angle", "pace",
                    "--voice", "coach",
                    "--odds-file", str(odds),
                    "--profile", "sharp",
                ],
            )

        assert result.exit_code == 0
        request = mock_story.call_args.args[0]
        assert request.angles == ["weather", "pace"]
        assert request.voice.value == "coach"
        assert request.odds_paste == "SEA Under 47.5 -105\n"
        assert request.profile == "sharp"

    def test_story_renders_scripts(self, story_dict):
        response = {"story": story_dict}
        with patch("gridiron_edge.pipeline.run_story", new=AsyncMock(return_value=response)):
            result = runner.invoke(app, ["story", "LAR @ SEA"])

        assert result.exit_code == 0
        assert "Wind Game" in result.output
        assert "Want the other side of this story?" in result.output

    def test_story_generator_error(self):
        error = GeneratorError(ErrorCode.WRAPPER_TIMEOUT, "Model call timed out")
        with patch("gridiron_edge.pipeline.run_story", new=AsyncMock(side_effect=error)):
            result = runner.invoke(app, ["story", "LAR @ SEA", "-o", "json"])

        assert result.exit_code == 1
        assert '"code": "WRAPPER_TIMEOUT"' in result.output
        assert '"recoverable": true' in result.output


class TestNormalizeLegCommand:
    def test_rewrites(self):
        result = runner.invoke(app, ["normalize-leg", "Team Total", "KC Over 44.5", "--game-total", "44.5"])
        assert result.exit_code == 0
        assert "Game Total: Over 44.5 Points" in result.output

    def test_pass_through(self):
        result = runner.invoke(app, ["normalize-leg", "Team Total", "KC Over 23.5", "--game-total", "44.5"])
        assert result.exit_code == 0
        assert "Team Total: KC Over 23.5" in result.output


def test_no_args_shows_help():
    result = runner.invoke(app, [])
    assert "scan" in result.output
