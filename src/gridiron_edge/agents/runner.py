"""Run the selected detectors over both sides of a matchup."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from gridiron_edge.agents.base import AgentType, Finding, ThresholdContext
from gridiron_edge.agents.registry import AGENT_POSITIONS, ALL_AGENTS, build_registry
from gridiron_edge.common.types import JsonDict
from gridiron_edge.config import DetectorThresholds
from gridiron_edge.errors import check_cancelled

logger = logging.getLogger(__name__)


@dataclass
class MatchupContext:
    """Stat snapshot for one game.

    Attributes:
        home_team: home team abbreviation
        away_team: away team abbreviation
        players: team abbreviation → list of player stat dicts (with "position")
        team_stats: team abbreviation → team stat dict
        weather: venue weather block (indoor, wind_mph, temperature_f, ...)
        data_timestamp: epoch ms of the snapshot
        data_version: snapshot identifier
        game_total: posted game total, used by the leg guard
        team_totals: team abbreviation → posted team total
        injuries: team abbreviation → injury reports (text or mappings)
        season: season year, used for league pace averages
    """

    home_team: str
    away_team: str
    players: dict[str, list[JsonDict]] = field(default_factory=dict)
    team_stats: dict[str, JsonDict] = field(default_factory=dict)
    weather: JsonDict = field(default_factory=dict)
    data_timestamp: int = 0
    data_version: str = "unknown"
    game_total: float | None = None
    team_totals: dict[str, float] = field(default_factory=dict)
    injuries: dict[str, list[object]] = field(default_factory=dict)
    season: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> MatchupContext:
        game_total = data.get("game_total")
        season = data.get("season")
        return cls(
            home_team=str(data["home_team"]),
            away_team=str(data["away_team"]),
            players={k: list(v) for k, v in dict(data.get("players") or {}).items()},
            team_stats={k: dict(v) for k, v in dict(data.get("team_stats") or {}).items()},
            weather=dict(data.get("weather") or {}),
            data_timestamp=int(data.get("data_timestamp") or 0),
            data_version=str(data.get("data_version") or "unknown"),
            game_total=float(game_total) if game_total is not None else None,  # type: ignore[arg-type]
            team_totals={k: float(v) for k, v in dict(data.get("team_totals") or {}).items()},
            injuries={k: list(v) for k, v in dict(data.get("injuries") or {}).items()},
            season=int(season) if season is not None else None,  # type: ignore[call-overload]
        )

    @property
    def threshold_context(self) -> ThresholdContext:
        return ThresholdContext(self.data_timestamp, self.data_version)

    def sides(self) -> list[tuple[str, str]]:
        """(team, opponent) pairs, home first."""
        return [(self.home_team, self.away_team), (self.away_team, self.home_team)]


@dataclass
class AgentRunResult:
    findings: list[Finding]
    agents_invoked: list[AgentType]
    agents_silent: list[AgentType]


def _players_for(context: MatchupContext, team: str, positions: tuple[str, ...]) -> list[JsonDict]:
    players = context.players.get(team, [])
    if not positions:
        return [{**p, "team": p.get("team", team)} for p in players]
    return [
        {**p, "team": p.get("team", team)}
        for p in players
        if str(p.get("position", "")).upper() in positions
    ]


def _run_agent(
    agent: AgentType,
    detector,
    context: MatchupContext,
) -> list[Finding]:
    tctx = context.threshold_context
    findings: list[Finding] = []

    if agent is AgentType.WEATHER:
        findings.extend(detector.detect(context.weather, None, tctx))
        return findings

    if agent is AgentType.PACE:
        game = {
            "home": {**context.team_stats.get(context.home_team, {}), "team": context.home_team},
            "away": {**context.team_stats.get(context.away_team, {}), "team": context.away_team},
            "weather": context.weather,
            "season": context.season,
        }
        findings.extend(detector.detect(game, None, tctx))
        return findings

    if agent is AgentType.INJURY:
        for team, _ in context.sides():
            for entry in context.injuries.get(team, []):
                report = dict(entry) if isinstance(entry, Mapping) else {"report": str(entry)}
                findings.extend(detector.detect({**report, "team": team}, None, tctx))
        return findings

    for team, opponent in context.sides():
        team_stats = {**context.team_stats.get(team, {}), "team": team}
        opp_stats = {**context.team_stats.get(opponent, {}), "team": opponent}

        if agent is AgentType.PRESSURE:
            if "pressure_rate_rank" not in opp_stats:
                continue
            findings.extend(detector.detect(team_stats, opp_stats, tctx))
            continue

        for player in _players_for(context, team, AGENT_POSITIONS[agent]):
            findings.extend(detector.detect(player, opp_stats, tctx))

    return findings


def run_agents(
    context: MatchupContext,
    agent_ids: Iterable[AgentType] | None = None,
    thresholds: DetectorThresholds | None = None,
    cancel: object | None = None,
) -> AgentRunResult:
    """Run the selected agents (all by default) in detection order.

    Agents that produce findings are reported as invoked, the rest as silent.
    """
    selected = set(agent_ids) if agent_ids is not None else set(ALL_AGENTS)
    registry = build_registry(thresholds or DetectorThresholds())
    logger.debug("Running %d agent(s)", len(selected))

    findings: list[Finding] = []
    invoked: list[AgentType] = []
    silent: list[AgentType] = []

    for agent in ALL_AGENTS:
        if agent not in selected:
            continue
        check_cancelled(cancel, f"agent:{agent.value}")
        agent_findings = _run_agent(agent, registry[agent], context)
        if agent_findings:
            findings.extend(agent_findings)
            invoked.append(agent)
        else:
            silent.append(agent)

    logger.info(
        "Agents produced %d finding(s); invoked=%s silent=%s",
        len(findings),
        [a.value for a in invoked],
        [a.value for a in silent],
    )
    return AgentRunResult(findings=findings, agents_invoked=invoked, agents_silent=silent)
