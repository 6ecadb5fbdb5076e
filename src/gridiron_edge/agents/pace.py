"""Pace detector: projected plays and pace mismatches for over/under signals."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import AgentType, Finding, ThresholdContext, bottom, make_finding, stat, top
from gridiron_edge.common.types import ordinal
from gridiron_edge.config import PaceThresholds

logger = logging.getLogger(__name__)

# Seconds of game clock per team
_HALF_GAME_SECONDS = 1800.0

PACE_KEYS = ("plays_per_game", "seconds_per_play", "pace_rank")


def _block(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def has_pace_data(team: Mapping[str, object]) -> bool:
    return any(stat(team, key) is not None for key in PACE_KEYS)


class PaceDetector:
    """Game-level detector; ``subject`` is the game block, no opponent.

    The game block holds ``home`` and ``away`` team stats (each with a
    ``team`` key), the venue ``weather`` and an optional ``season``.
    A matchup-level signal takes precedence over per-team findings.
    Outdoor wind above the threshold silences the detector.
    """

    agent = AgentType.PACE

    def __init__(self, thresholds: PaceThresholds, league_size: int = 32) -> None:
        self.t = thresholds
        self.league_size = league_size

    def league_average(self, season: int | None) -> float:
        """Plays per team per game for ``season``, else the latest season on file."""
        table = self.t.league_plays_per_game
        if season in table:
            return table[season]
        return table[max(table)]

    def team_plays(self, team: Mapping[str, object], league: float) -> float:
        plays = stat(team, "plays_per_game")
        if plays:
            return plays
        seconds = stat(team, "seconds_per_play")
        if seconds:
            return _HALF_GAME_SECONDS / seconds
        return league

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        t = self.t
        home = _block(subject, "home")
        away = _block(subject, "away")
        if not (has_pace_data(home) or has_pace_data(away)):
            logger.debug("No pace data, pace agent silent")
            return

        weather = _block(subject, "weather")
        wind = stat(weather, "wind_mph")
        if not weather.get("indoor") and wind is not None and wind > t.wind_mph:
            logger.debug("%g mph wind overrides pace signals", wind)
            return

        season = stat(subject, "season")
        league = self.league_average(int(season) if season is not None else None)
        home_team = str(home.get("team") or "HOME")
        away_team = str(away.get("team") or "AWAY")
        game = f"{away_team} at {home_team}"

        projected = (self.team_plays(home, league) + self.team_plays(away, league)) / 2
        delta = projected - league
        if projected >= t.projected_plays_high:
            over, threshold = True, t.projected_plays_high
        elif projected <= t.projected_plays_low:
            over, threshold = False, t.projected_plays_low
        elif delta >= t.projected_plays_delta:
            over, threshold = True, league + t.projected_plays_delta
        elif delta <= -t.projected_plays_delta:
            over, threshold = False, league - t.projected_plays_delta
        else:
            over, threshold = None, None

        if over is not None:
            yield make_finding(
                self.agent, "projected", "pace_over_signal" if over else "pace_under_signal", game,
                "projected_plays", projected, threshold,
                t.projected_plays_ceiling if over else t.projected_plays_floor,
                f"projected plays {'>=' if over else '<='} {threshold:g}",
                f"Projected {projected:.1f} plays ({delta:+.1f} vs league avg)",
                context,
            )

        home_rank = stat(home, "pace_rank")
        away_rank = stat(away, "pace_rank")
        if self._mismatch(home_rank, away_rank):
            gap = abs(home_rank - away_rank)
            yield make_finding(
                self.agent, "mismatch", "pace_mismatch", game,
                "pace_rank_gap", gap, t.slow_pace_rank - t.fast_pace_rank, self.league_size - 1,
                f"one offense top {t.fast_pace_rank} in pace, the other {ordinal(t.slow_pace_rank)} or slower",
                f"Pace mismatch: {home_team} ({ordinal(home_rank)}) vs {away_team} ({ordinal(away_rank)})",
                context,
                value_str=f"{int(home_rank)} vs {int(away_rank)}",
            )

        if over is not None:
            return
        for team in (home, away):
            finding = self._team_finding(team, league, context)
            if finding is not None:
                yield finding

    def _mismatch(self, home_rank: float | None, away_rank: float | None) -> bool:
        t = self.t
        if home_rank is None or away_rank is None:
            return False
        return (top(home_rank, t.fast_pace_rank) and bottom(away_rank, t.slow_pace_rank)) or (
            bottom(home_rank, t.slow_pace_rank) and top(away_rank, t.fast_pace_rank)
        )

    def _team_finding(
        self, team: Mapping[str, object], league: float, context: ThresholdContext
    ) -> Finding | None:
        t = self.t
        name = str(team.get("team") or "team")
        rank = stat(team, "pace_rank")
        if top(rank, t.fast_pace_rank):
            return make_finding(
                self.agent, "team", "team_plays_above_avg", name,
                "pace_rank", rank, t.fast_pace_rank, 1,
                f"pace rank <= {t.fast_pace_rank}",
                f"{name}: {ordinal(rank)} in pace",
                context,
            )
        if bottom(rank, t.slow_pace_rank):
            return make_finding(
                self.agent, "team", "team_plays_below_avg", name,
                "pace_rank", rank, t.slow_pace_rank, self.league_size,
                f"pace rank >= {t.slow_pace_rank}",
                f"{name}: {ordinal(rank)} in pace",
                context,
            )

        plays = stat(team, "plays_per_game")
        if plays is None:
            return None
        if plays - league >= t.projected_plays_delta:
            return make_finding(
                self.agent, "team", "team_plays_above_avg", name,
                "plays_per_game", plays, league + t.projected_plays_delta, t.projected_plays_ceiling,
                f"plays per game >= league + {t.projected_plays_delta:g}",
                f"{name}: {plays:.1f} plays/game",
                context,
            )
        if plays - league <= -t.projected_plays_delta:
            return make_finding(
                self.agent, "team", "team_plays_below_avg", name,
                "plays_per_game", plays, league - t.projected_plays_delta, t.projected_plays_floor,
                f"plays per game <= league - {t.projected_plays_delta:g}",
                f"{name}: {plays:.1f} plays/game",
                context,
            )
        return None
