"""Tests for matchup parsing and context loading."""

from __future__ import annotations

import json

import pytest

from gridiron_edge.errors import ErrorCode, RequestValidationError
from gridiron_edge.matchups import load_matchup_context, normalize_team_name, parse_matchup
from gridiron_edge.samples import CHAMPIONSHIP_VERSION


class TestParseMatchup:
    @pytest.mark.parametrize(
        "matchup,expected",
        [
            ("LAR @ SEA", ("SEA", "LAR")),
            ("lar@sea", ("SEA", "LAR")),
            ("49ers @ Seahawks", ("SEA", "SF")),
            ("Chiefs vs Raiders", ("KC", "LV")),
            ("Denver VS. New England", ("DEN", "NE")),
            ("  Patriots @ Broncos  ", ("DEN", "NE")),
        ],
    )
    def test_forms(self, matchup, expected):
        assert parse_matchup(matchup) == expected

    @pytest.mark.parametrize("matchup", ["SEA", "SEA - LAR", "", "@"])
    def test_invalid(self, matchup):
        with pytest.raises(RequestValidationError) as exc_info:
            parse_matchup(matchup)
        assert exc_info.value.code is ErrorCode.BAD_REQUEST
        assert "examples" in exc_info.value.details

    def test_unknown_name_upper_cased(self):
        assert normalize_team_name(" oilers ") == "OILERS"


class TestLoadMatchupContext:
    def test_sample(self):
        context = load_matchup_context("SEA", "LAR")
        assert context.weather["stadium"] == "Lumen Field"
        assert context.game_total == 47.5
        assert context.data_version == CHAMPIONSHIP_VERSION

    def test_samples_are_copies(self):
        first = load_matchup_context("SEA", "LAR")
        first.players["SEA"].clear()
        assert load_matchup_context("SEA", "LAR").players["SEA"]

    def test_fallback(self):
        context = load_matchup_context("KC", "LV")
        assert (context.home_team, context.away_team) == ("KC", "LV")
        assert context.players == {"KC": [], "LV": []}
        assert context.game_total is None

    def test_from_file(self, tmp_path):
        path = tmp_path / "ctx.json"
        path.write_text(
            json.dumps({"weather": {"wind_mph": 22}, "game_total": 38.5, "data_version": "custom"})
        )
        context = load_matchup_context("BUF", "MIA", path)
        assert (context.home_team, context.away_team) == ("BUF", "MIA")
        assert context.weather["wind_mph"] == 22
        assert context.data_version == "custom"

    def test_missing_file(self, tmp_path):
        with pytest.raises(RequestValidationError):
            load_matchup_context("BUF", "MIA", tmp_path / "nope.json")

    def test_bad_json_file(self, tmp_path):
        path = tmp_path / "ctx.json"
        path.write_text("{not json")
        with pytest.raises(RequestValidationError):
            load_matchup_context("BUF", "MIA", path)
