"""Tests for the team-total leg guard."""

from __future__ import annotations

import pytest

from gridiron_edge.story.leg_guard import GuardContext, apply_leg_guard, normalize_team_total
from gridiron_edge.story.schema import StoryPayload


class TestNormalizeTeamTotal:
    def test_rewrites_restated_game_total(self):
        guard = GuardContext(game_total=44.5)
        assert normalize_team_total("Team Total", "KC Over 44.5", guard) == (
            "Game Total",
            "Over 44.5 Points",
        )

    def test_tolerance_edge(self):
        """44.49 sits just over 0.01 from 44.5 in floating point; 44.50 is rewritten."""
        guard = GuardContext(game_total=44.5, tolerance=0.01)
        assert normalize_team_total("Team Total", "Over 44.49", guard) == ("Team Total", "Over 44.49")
        assert normalize_team_total("Team Total", "Over 44.50", guard) == (
            "Game Total",
            "Over 44.5 Points",
        )

    def test_line_exactly_at_tolerance_is_rewritten(self):
        guard = GuardContext(game_total=44.75, tolerance=0.25)
        assert normalize_team_total("Team Total", "SEA Under 44.5", guard) == (
            "Game Total",
            "Under 44.5 Points",
        )
        assert normalize_team_total("Team Total", "SEA Under 44.25", guard) == (
            "Team Total",
            "SEA Under 44.25",
        )

    def test_under_checked_first(self):
        guard = GuardContext(game_total=41)
        assert normalize_team_total("teamtotal", "Under 41 (was over)", guard) == (
            "Game Total",
            "Under 41 Points",
        )

    def test_integral_line_has_no_decimals(self):
        guard = GuardContext(game_total=47.0)
        assert normalize_team_total("TEAM TOTAL", "over 47.0", guard) == ("Game Total", "Over 47 Points")

    @pytest.mark.parametrize(
        "market,selection,guard",
        [
            ("Player Props", "Over 44.5", GuardContext(game_total=44.5)),
            ("Team Total", "Over 44.5", GuardContext()),
            ("Team Total", "Over", GuardContext(game_total=44.5)),
            ("Team Total", "Overall 44.5", GuardContext(game_total=44.5)),
            ("Team Total", "KC Over 23.5", GuardContext(game_total=44.5)),
        ],
    )
    def test_pass_through(self, market, selection, guard):
        assert normalize_team_total(market, selection, guard) == (market, selection)

    def test_idempotent(self):
        guard = GuardContext(game_total=44.5)
        once = normalize_team_total("Team Total", "Under 44.5", guard)
        assert normalize_team_total(*once, guard) == once


class TestApplyLegGuard:
    def test_rewrites_only_matching_legs(self, story_dict):
        story = StoryPayload.model_validate(story_dict)
        guarded = apply_leg_guard(story, GuardContext(game_total=47.5))
        legs = guarded.scripts[0].legs
        assert (legs[0].market, legs[0].selection) == ("Game Total", "Under 47.5 Points")
        assert legs[1] == story.scripts[0].legs[1]
        assert legs[2] == story.scripts[0].legs[2]
        assert story.scripts[0].legs[0].market == "Team Total"
