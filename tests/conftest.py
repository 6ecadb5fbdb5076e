"""Shared test fixtures."""

from __future__ import annotations

import copy

import pytest

from gridiron_edge.agents.base import AgentType, ThresholdContext
from gridiron_edge.agents.runner import MatchupContext
from gridiron_edge.alerts.models import Alert, Severity
from gridiron_edge.config import Settings
from gridiron_edge.samples import LAR_AT_SEA, NE_AT_DEN
from gridiron_edge.story.parlay import compute_parlay_math
from gridiron_edge.story.schema import REQUIRED_NOTES


@pytest.fixture
def settings():
    """Default settings, isolated from any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def ctx():
    return ThresholdContext(data_timestamp=1700000000000, data_version="2025-week-10")


@pytest.fixture
def sea_context():
    """LAR @ SEA snapshot: 17 mph wind, two LAR receiving EPA edges, two WR separation edges."""
    return MatchupContext.from_dict(copy.deepcopy(LAR_AT_SEA))


@pytest.fixture
def den_context():
    """NE @ DEN snapshot: one EPA edge, a DEN pressure pair and one WR separation edge."""
    return MatchupContext.from_dict(copy.deepcopy(NE_AT_DEN))


@pytest.fixture
def make_alert():
    """Factory for alerts with sensible defaults."""

    def _make(
        alert_id: str,
        agent: AgentType = AgentType.QB,
        confidence: float = 0.6,
        severity: Severity = Severity.MEDIUM,
        subject: str = "Test Player",
        market: str | None = None,
    ) -> Alert:
        return Alert(
            id=alert_id,
            agent=agent,
            subject=subject,
            finding_ids=(f"{alert_id}-f1",),
            confidence=confidence,
            severity=severity,
            claim=f"{subject} claim",
            market=market or f"{subject} market",
            implications=(),
        )

    return _make


@pytest.fixture
def story_dict():
    """A valid generator payload with one three-leg script at -110 each."""
    math = compute_parlay_math([-110, -110, -110])
    return {
        "assumptions": {
            "matchup": "LAR @ SEA",
            "line_focus": "",
            "angles": ["weather"],
            "voice": "analyst",
        },
        "scripts": [
            {
                "title": "Wind Game",
                "narrative": "Wind keeps the ball on the ground.",
                "legs": [
                    {
                        "market": "Team Total",
                        "selection": "SEA Under 47.5",
                        "american_odds": -110,
                        "odds_source": "illustrative",
                    },
                    {
                        "market": "Rush Yards",
                        "selection": "Kenneth Walker Over 79.5",
                        "american_odds": -110,
                        "odds_source": "illustrative",
                    },
                    {
                        "market": "Receiving Yards",
                        "selection": "Puka Nacua Under 85.5",
                        "american_odds": -110,
                        "odds_source": "illustrative",
                    },
                ],
                "parlay_math": math.model_dump(),
                "notes": list(REQUIRED_NOTES),
                "offer_opposite": "Want the other side of this story?",
            }
        ],
    }
