"""Rewrite team-total legs that simply restate the game total.

A "team total" whose line equals the full game total is a misleading
statement; it is re-expressed as the equivalent Game Total leg. Every other
leg passes through unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from gridiron_edge.story.schema import StoryPayload

logger = logging.getLogger(__name__)

_TEAM_TOTAL_RE = re.compile(r"team\s*total", re.IGNORECASE)
_LINE_RE = re.compile(r"\d+(?:\.\d+)?")
_UNDER_RE = re.compile(r"\bunder\b", re.IGNORECASE)
_OVER_RE = re.compile(r"\bover\b", re.IGNORECASE)

GAME_TOTAL_MARKET = "Game Total"


@dataclass(frozen=True)
class GuardContext:
    """Known game-level numbers for one matchup.

    Attributes:
        game_total: posted full-game total, if known
        team_totals: team abbreviation → posted team total
        tolerance: a team-total line within this distance of the game total (inclusive) is rewritten
    """

    game_total: float | None = None
    team_totals: dict[str, float] = field(default_factory=dict)
    tolerance: float = 0.01


def _format_line(line: float) -> str:
    if line == int(line):
        return str(int(line))
    return f"{line:g}"


def _direction(selection: str) -> str | None:
    if _UNDER_RE.search(selection):
        return "Under"
    if _OVER_RE.search(selection):
        return "Over"
    return None


def normalize_team_total(market: str, selection: str, guard: GuardContext) -> tuple[str, str]:
    """Return the (market, selection) to display for one leg."""
    if not _TEAM_TOTAL_RE.search(market) or guard.game_total is None:
        return market, selection
    match = _LINE_RE.search(selection)
    if match is None:
        return market, selection
    line = float(match.group(0))
    if abs(line - guard.game_total) > guard.tolerance:
        return market, selection
    direction = _direction(selection)
    if direction is None:
        return market, selection
    return GAME_TOTAL_MARKET, f"{direction} {_format_line(line)} Points"


def apply_leg_guard(story: StoryPayload, guard: GuardContext) -> StoryPayload:
    """Normalize every leg of every script; unchanged legs are kept as-is."""
    scripts = []
    rewritten = 0
    for script in story.scripts:
        legs = []
        for leg in script.legs:
            market, selection = normalize_team_total(leg.market, leg.selection, guard)
            if (market, selection) != (leg.market, leg.selection):
                rewritten += 1
                leg = leg.model_copy(update={"market": market, "selection": selection})
            legs.append(leg)
        scripts.append(script.model_copy(update={"legs": legs}))
    if rewritten:
        logger.info("Leg guard rewrote %d team-total leg(s) as game totals", rewritten)
    return story.model_copy(update={"scripts": scripts})
