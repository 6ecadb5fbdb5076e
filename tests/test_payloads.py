"""Tests for request validation, guardrails and settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gridiron_edge.agents.base import AgentType
from gridiron_edge.config import RequestLimits, Settings
from gridiron_edge.errors import ErrorCode, GuardrailError, RequestValidationError
from gridiron_edge.guardrails import check_prompt, check_request_limits, estimate_cost, estimate_tokens
from gridiron_edge.payloads import BetRequest, BuildRequest, ScanRequest, StoryRequest, parse_request


class TestParseRequest:
    def test_scan_defaults(self):
        req = parse_request(ScanRequest, {"matchup": "LAR @ SEA"})
        assert req.mode == "prop"
        assert req.agents is None

    def test_agent_ids_converted(self):
        req = parse_request(ScanRequest, {"matchup": "LAR @ SEA", "agent_ids": ["qb", "weather"]})
        assert req.agents == [AgentType.QB, AgentType.WEATHER]

    def test_unknown_agent_rejected(self):
        with pytest.raises(RequestValidationError) as exc_info:
            parse_request(ScanRequest, {"matchup": "LAR @ SEA", "agent_ids": ["kicker"]})
        assert exc_info.value.code is ErrorCode.BAD_REQUEST
        (error,) = exc_info.value.details["errors"]
        assert error["loc"] == "agent_ids"
        assert "kicker" in error["msg"]

    def test_empty_agent_list_rejected(self):
        with pytest.raises(RequestValidationError):
            parse_request(ScanRequest, {"matchup": "LAR @ SEA", "agent_ids": []})

    def test_extra_field_rejected(self):
        with pytest.raises(RequestValidationError):
            parse_request(ScanRequest, {"matchup": "LAR @ SEA", "debug": True})

    def test_bet_requires_alerts(self):
        with pytest.raises(RequestValidationError):
            parse_request(BetRequest, {"alerts": []})

    def test_alert_round_trips_from_scan_output(self, make_alert):
        alert = make_alert("a", confidence=0.8)
        req = parse_request(BetRequest, {"alerts": [alert.to_dict()]})
        assert req.alerts[0].to_alert() == alert

    @pytest.mark.parametrize(
        "change,loc",
        [
            ({"confidence": 1.5}, "alerts.0.confidence"),
            ({"confidence": -0.1}, "alerts.0.confidence"),
            ({"severity": "low"}, "alerts.0.severity"),
            ({"agent": "kicker"}, "alerts.0.agent"),
            ({"edge": 3}, "alerts.0.edge"),
        ],
    )
    @pytest.mark.parametrize(
        "model,base", [(BuildRequest, {"matchup": "LAR @ SEA"}), (BetRequest, {})]
    )
    def test_bad_alert_rejected(self, make_alert, model, base, change, loc):
        alert = {**make_alert("a").to_dict(), **change}
        with pytest.raises(RequestValidationError) as exc_info:
            parse_request(model, {**base, "alerts": [alert]})
        assert exc_info.value.code is ErrorCode.BAD_REQUEST
        assert loc in [e["loc"] for e in exc_info.value.details["errors"]]

    def test_alert_requires_market_and_claim(self, make_alert):
        alert = make_alert("a").to_dict()
        del alert["market"], alert["claim"]
        with pytest.raises(RequestValidationError) as exc_info:
            parse_request(BetRequest, {"alerts": [alert]})
        locs = {e["loc"] for e in exc_info.value.details["errors"]}
        assert locs == {"alerts.0.market", "alerts.0.claim"}

    @pytest.mark.parametrize("max_legs", [1, 7])
    def test_build_max_legs_bounds(self, max_legs):
        with pytest.raises(RequestValidationError):
            parse_request(BuildRequest, {"matchup": "LAR @ SEA", "max_legs": max_legs})

    def test_story_voice(self):
        req = parse_request(StoryRequest, {"matchup": "NE @ DEN", "voice": "hype"})
        assert req.voice.value == "hype"
        with pytest.raises(RequestValidationError):
            parse_request(StoryRequest, {"matchup": "NE @ DEN", "voice": "poet"})

    def test_non_mapping_input(self):
        with pytest.raises(RequestValidationError):
            parse_request(ScanRequest, ["LAR @ SEA"])


class TestGuardrails:
    def test_estimate_tokens(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2

    def test_estimate_cost(self):
        limits = RequestLimits(input_rate=1.0, output_rate=2.0)
        assert estimate_cost(1000, 500, limits) == pytest.approx(2.0)

    def test_token_limit(self):
        limits = RequestLimits(max_input_tokens=10)
        check_request_limits(10, limits)
        with pytest.raises(GuardrailError) as exc_info:
            check_request_limits(11, limits)
        assert exc_info.value.code is ErrorCode.TOKEN_LIMIT_EXCEEDED
        assert not exc_info.value.recoverable

    def test_cost_limit(self):
        with pytest.raises(GuardrailError) as exc_info:
            check_request_limits(5, RequestLimits(max_cost_usd=0.01), estimated_cost=0.02)
        assert exc_info.value.code is ErrorCode.COST_LIMIT_EXCEEDED

    def test_check_prompt_returns_tokens(self):
        assert check_prompt("abcd" * 3, "abcd" * 2, RequestLimits()) == 5

    def test_check_prompt_cost(self):
        """Reserved output tokens alone exceed a tiny budget."""
        with pytest.raises(GuardrailError) as exc_info:
            check_prompt("sys", "user", RequestLimits(max_cost_usd=0.005))
        assert exc_info.value.code is ErrorCode.COST_LIMIT_EXCEEDED


class TestSettings:
    def test_defaults(self, settings):
        assert settings.flags.llm_analyst
        assert not settings.flags.live_data
        assert settings.tiers.safe_min == 0.7
        assert settings.scripts.correlation_factors["volume_share"] == -0.2

    def test_nested_env(self, monkeypatch):
        monkeypatch.setenv("FLAGS__STORY_ENABLED", "false")
        monkeypatch.setenv("THRESHOLDS__WEATHER__WIND_MPH", "20")
        s = Settings(_env_file=None)
        assert not s.flags.story_enabled
        assert s.thresholds.weather.wind_mph == 20.0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("llm_temperature", 1.5),
            ("memory_max_profiles", 0),
            ("memory_max_bytes", -1),
            ("fallback_week", 0),
            ("leg_guard_tolerance", -0.1),
        ],
    )
    def test_validators(self, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: value})
