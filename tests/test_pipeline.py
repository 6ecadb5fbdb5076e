"""Tests for the pipeline orchestrator."""

from __future__ import annotations

import json
import threading
from unittest.mock import AsyncMock, patch

import pytest

from gridiron_edge import memory as memory_mod
from gridiron_edge.alerts.models import Severity
from gridiron_edge.config import Settings
from gridiron_edge.errors import (
    ErrorCode,
    GeneratorError,
    GuardrailError,
    OperationCancelled,
    RequestValidationError,
)
from gridiron_edge.payloads import BetRequest, BuildRequest, ScanRequest, StoryRequest, parse_request
from gridiron_edge.pipeline import run_bet, run_build, run_scan, run_story, scan_matchup
from gridiron_edge.story.schema import REQUIRED_NOTES

SEA_ALERT_IDS = [
    "alert-epa-puka-nacua",
    "alert-epa-cooper-kupp",
    "alert-weather-lumen-field",
    "alert-wr-jaxon-smith-njigba",
    "alert-wr-puka-nacua",
]


@pytest.fixture(autouse=True)
def fresh_memory():
    memory_mod.reset_memory()
    yield
    memory_mod.reset_memory()


class TestScanMatchup:
    @pytest.mark.asyncio
    async def test_sea_snapshot(self, settings):
        scan = await scan_matchup("LAR @ SEA", settings)
        assert (scan.home, scan.away) == ("SEA", "LAR")
        assert [a.id for a in scan.alerts] == SEA_ALERT_IDS
        assert scan.warnings == []

    @pytest.mark.asyncio
    async def test_live_data_degraded_warning(self):
        settings = Settings(_env_file=None, flags={"live_data": True}, fallback_week=21)
        scan = await scan_matchup("NE @ DEN", settings)
        assert scan.warnings == ["Schedule unavailable; using season 2025 week 21"]

    @pytest.mark.asyncio
    async def test_cancelled(self, settings):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled):
            await scan_matchup("LAR @ SEA", settings, cancel=cancel)


class TestRunScan:
    @pytest.mark.asyncio
    async def test_response_envelope(self, settings):
        response = await run_scan(ScanRequest(matchup="LAR @ SEA"), settings)
        assert [a["id"] for a in response["alerts"]] == SEA_ALERT_IDS
        assert response["mode"] == "prop"
        assert response["matchup"] == {"home": "SEA", "away": "LAR"}
        assert response["agents"]["invoked"] == ["epa", "weather", "wr"]
        assert "fallback" not in response
        assert response["request_id"].startswith("req-")
        assert response["provenance"]["request_id"] == response["request_id"]
        assert response["provenance"]["rules_version"] == settings.rules_version

    @pytest.mark.asyncio
    async def test_agent_subset(self, settings):
        response = await run_scan(ScanRequest(matchup="LAR @ SEA", agent_ids=["weather"]), settings)
        assert [a["id"] for a in response["alerts"]] == ["alert-weather-lumen-field"]
        assert response["agents"] == {"invoked": ["weather"], "silent": []}

    @pytest.mark.asyncio
    async def test_no_alerts_sets_fallback(self, settings):
        response = await run_scan(ScanRequest(matchup="Chiefs vs Raiders"), settings)
        assert response["alerts"] == []
        assert response["fallback"] is True

    @pytest.mark.asyncio
    async def test_disabled_mode(self):
        settings = Settings(_env_file=None, flags={"prop_enabled": False})
        with pytest.raises(RequestValidationError):
            await run_scan(ScanRequest(matchup="LAR @ SEA"), settings)

    @pytest.mark.asyncio
    async def test_context_file(self, settings, tmp_path):
        path = tmp_path / "ctx.json"
        path.write_text(json.dumps({"weather": {"wind_mph": 25, "stadium": "Highmark Stadium"}}))
        response = await run_scan(ScanRequest(matchup="MIA @ BUF"), settings, context_path=path)
        assert [a["id"] for a in response["alerts"]] == ["alert-weather-highmark-stadium"]


class TestRunBuild:
    @pytest.mark.asyncio
    async def test_scans_when_no_alerts(self, settings):
        response = await run_build(BuildRequest(matchup="LAR @ SEA"), settings)
        assert [a["id"] for a in response["alerts"]] == SEA_ALERT_IDS
        assert [s["correlation_type"] for s in response["scripts"]] == [
            "weather_cascade",
            "volume_share",
        ]
        assert len(response["provenance_hash"]) == 64

    @pytest.mark.asyncio
    async def test_uses_supplied_alerts(self, settings, make_alert):
        from gridiron_edge.agents.base import AgentType

        alerts = [
            make_alert("w", AgentType.WEATHER, 0.6, subject="Lumen Field"),
            make_alert("qb", AgentType.QB, 0.7, subject="Matthew Stafford"),
        ]
        request = BuildRequest(matchup="LAR @ SEA", alerts=[a.to_dict() for a in alerts])
        response = await run_build(request, settings)
        (script,) = response["scripts"]
        assert script["correlation_type"] == "weather_cascade"
        assert [leg["alert_id"] for leg in script["legs"]] == ["w", "qb"]

    @pytest.mark.asyncio
    async def test_scripts_metadata_flag(self):
        settings = Settings(_env_file=None, flags={"scripts_metadata": False})
        response = await run_build(BuildRequest(matchup="LAR @ SEA"), settings)
        assert "scripts" not in response
        assert response["alerts"]

    def test_malformed_alerts(self):
        with pytest.raises(RequestValidationError):
            parse_request(BuildRequest, {"matchup": "LAR @ SEA", "alerts": [{"id": "x"}]})

    @pytest.mark.asyncio
    async def test_supplied_alerts_count_toward_token_limit(self, make_alert):
        settings = Settings(_env_file=None, limits={"max_input_tokens": 10})
        request = BuildRequest(matchup="LAR @ SEA", alerts=[make_alert("a").to_dict()])
        with pytest.raises(GuardrailError):
            await run_build(request, settings)


class TestRunBet:
    @pytest.mark.asyncio
    async def test_ladders(self, settings, make_alert):
        alerts = [
            make_alert("safe", confidence=0.8, severity=Severity.HIGH),
            make_alert("mod", confidence=0.6, severity=Severity.HIGH),
            make_alert("low", confidence=0.2, severity=Severity.HIGH),
        ]
        response = await run_bet(BetRequest(alerts=[a.to_dict() for a in alerts]), settings)
        assert [ladder["tier"] for ladder in response["ladders"]] == ["safe", "moderate"]
        assert response["alerts_used"] == ["safe", "mod"]
        assert response["alerts_excluded"] == ["low"]
        assert "message" not in response

    @pytest.mark.asyncio
    async def test_nothing_qualifies(self, settings, make_alert):
        alerts = [make_alert("low", confidence=0.1, severity=Severity.HIGH)]
        response = await run_bet(BetRequest(alerts=[a.to_dict() for a in alerts]), settings)
        assert response["ladders"] == []
        assert "Confidence levels may be too low" in response["message"]

    @pytest.mark.asyncio
    async def test_provenance_hash_is_stable(self, settings, make_alert):
        request = BetRequest(alerts=[make_alert("a", confidence=0.8, severity=Severity.HIGH).to_dict()])
        first = await run_bet(request, settings)
        second = await run_bet(request, settings)
        assert first["provenance_hash"] == second["provenance_hash"]
        assert first["request_id"] != second["request_id"]


class TestRunStory:
    @pytest.mark.asyncio
    async def test_story_round_trip(self, settings, story_dict):
        with patch(
            "gridiron_edge.pipeline.ask_model",
            new=AsyncMock(return_value=json.dumps(story_dict)),
        ) as mock_ask:
            response = await run_story(StoryRequest(matchup="LAR @ SEA"), settings)

        mock_ask.assert_awaited_once()
        user_prompt = mock_ask.call_args.args[1]
        assert "Matchup: LAR @ SEA" in user_prompt
        leg = response["story"]["scripts"][0]["legs"][0]
        assert (leg["market"], leg["selection"]) == ("Game Total", "Under 47.5 Points")
        assert set(REQUIRED_NOTES) <= set(response["story"]["scripts"][0]["notes"])
        assert response["mode"] == "story"
        assert response["provenance"]["prompt_hash"]

    @pytest.mark.asyncio
    async def test_profile_memory_feeds_prompt(self, settings, story_dict):
        memory_mod.set_memory("sharp", {"house_rules": ["no player props"]})
        with patch(
            "gridiron_edge.pipeline.ask_model",
            new=AsyncMock(return_value=json.dumps(story_dict)),
        ) as mock_ask:
            response = await run_story(StoryRequest(matchup="LAR @ SEA", profile="sharp"), settings)

        assert "no player props" in mock_ask.call_args.args[1]
        assert response["provenance"]["cache_hits"] == 1
        assert response["provenance"]["cache_misses"] == 0

    @pytest.mark.asyncio
    async def test_generator_disabled(self):
        settings = Settings(_env_file=None, flags={"llm_analyst": False})
        with pytest.raises(GeneratorError) as exc_info:
            await run_story(StoryRequest(matchup="LAR @ SEA"), settings)
        assert exc_info.value.code is ErrorCode.MODEL_ERROR
        assert not exc_info.value.recoverable

    @pytest.mark.asyncio
    async def test_bad_model_output(self, settings):
        with patch("gridiron_edge.pipeline.ask_model", new=AsyncMock(return_value="sorry")):
            with pytest.raises(GeneratorError) as exc_info:
                await run_story(StoryRequest(matchup="LAR @ SEA"), settings)
        assert exc_info.value.code is ErrorCode.BAD_WRAPPER_RESPONSE
