"""Cross-agent correlation rules and script selection.

Four grouping rules run in a fixed order, and every rule is evaluated
against the full alert set, so one call can yield several candidates:

    weather_cascade   weather + {qb, wr, te}   all weather + first 2 passing
    defensive_funnel  pressure + qb           all pressure + all qb
    volume_share      >= 2 wr                 first 3 wr
    game_script       epa + hb                first 2 epa + first 2 hb

``build_scripts`` then turns candidates into Scripts: legs trimmed to
``max_legs``, candidates left with fewer than two legs dropped, and at most
``max_scripts`` kept in rule order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from gridiron_edge.agents.base import AgentType
from gridiron_edge.alerts.models import Alert
from gridiron_edge.config import ScriptSettings
from gridiron_edge.errors import check_cancelled
from gridiron_edge.provenance import artifact_hash
from gridiron_edge.recommend.models import (
    MAX_LEGS,
    MIN_LEGS,
    CorrelationCandidate,
    CorrelationType,
    Leg,
    RiskLevel,
    Script,
)

logger = logging.getLogger(__name__)

PASSING_AGENTS = frozenset({AgentType.QB.value, AgentType.WR.value, AgentType.TE.value})

EXPLANATIONS: dict[CorrelationType, str] = {
    CorrelationType.WEATHER_CASCADE: "Weather conditions affect passing game metrics across multiple positions",
    CorrelationType.DEFENSIVE_FUNNEL: "Pass rush pressure correlates with QB performance metrics",
    CorrelationType.VOLUME_SHARE: "Target share concentration among receiving options",
    CorrelationType.GAME_SCRIPT: "EPA efficiency patterns predict game script and usage",
}

SCRIPT_NAMES: dict[CorrelationType, str] = {
    CorrelationType.GAME_SCRIPT: "Game Script Stack",
    CorrelationType.PLAYER_STACK: "Player Stack Parlay",
    CorrelationType.WEATHER_CASCADE: "Weather Impact Parlay",
    CorrelationType.DEFENSIVE_FUNNEL: "Defensive Pressure Stack",
    CorrelationType.VOLUME_SHARE: "Target Volume Parlay",
}


def _agent_value(agent: AgentType | str | None) -> str | None:
    if isinstance(agent, AgentType):
        return agent.value
    return agent


def _candidate(
    kind: CorrelationType,
    ids: list[str],
    implications: Mapping[str, Sequence[str]],
) -> CorrelationCandidate:
    tags: list[str] = []
    for alert_id in ids:
        for tag in implications.get(alert_id, ()):
            if tag not in tags:
                tags.append(tag)
    return CorrelationCandidate(kind, tuple(ids), EXPLANATIONS[kind], tuple(tags))


def identify_correlations(
    alert_ids: Sequence[str],
    agent_of: Mapping[str, AgentType | str],
    implications: Mapping[str, Sequence[str]] | None = None,
    cancel: object | None = None,
) -> list[CorrelationCandidate]:
    """Apply every correlation rule to the alert set, in rule order."""
    implications = implications or {}

    def by_agent(*agents: str) -> list[str]:
        return [i for i in alert_ids if _agent_value(agent_of.get(i)) in agents]

    candidates: list[CorrelationCandidate] = []

    check_cancelled(cancel, "correlation")
    weather = by_agent(AgentType.WEATHER.value)
    passing = by_agent(*PASSING_AGENTS)
    if weather and passing:
        candidates.append(
            _candidate(CorrelationType.WEATHER_CASCADE, weather + passing[:2], implications)
        )

    check_cancelled(cancel, "correlation")
    pressure = by_agent(AgentType.PRESSURE.value)
    qb = by_agent(AgentType.QB.value)
    if pressure and qb:
        candidates.append(
            _candidate(CorrelationType.DEFENSIVE_FUNNEL, pressure + qb, implications)
        )

    check_cancelled(cancel, "correlation")
    wr = by_agent(AgentType.WR.value)
    if len(wr) >= 2:
        candidates.append(_candidate(CorrelationType.VOLUME_SHARE, wr[:3], implications))

    check_cancelled(cancel, "correlation")
    epa = by_agent(AgentType.EPA.value)
    hb = by_agent(AgentType.HB.value)
    if epa and hb:
        candidates.append(
            _candidate(CorrelationType.GAME_SCRIPT, epa[:2] + hb[:2], implications)
        )

    logger.debug(
        "Correlation rules matched: %s", [c.correlation_type.value for c in candidates]
    )
    return candidates


def combined_confidence(
    leg_confidences: Sequence[float],
    correlation_bonus: float = 0.0,
    cap: float = 0.95,
) -> float:
    """Product of leg confidences plus a small correlation bump, capped."""
    product = 1.0
    for c in leg_confidences:
        product *= c
    return round(min(product + correlation_bonus * 0.1, cap), 2)


def risk_level(confidence: float, leg_count: int) -> RiskLevel:
    if leg_count <= 2 and confidence >= 0.5:
        return RiskLevel.CONSERVATIVE
    if leg_count <= 4 and confidence >= 0.3:
        return RiskLevel.MODERATE
    return RiskLevel.AGGRESSIVE


def build_scripts(
    alerts: Sequence[Alert],
    max_legs: int | None = None,
    settings: ScriptSettings | None = None,
    rules_version: str = "",
    cancel: object | None = None,
) -> list[Script]:
    """Select correlation candidates into at most ``max_scripts`` scripts."""
    cfg = settings or ScriptSettings()
    if len(alerts) < 2:
        return []

    legs_cap = max_legs if max_legs is not None else cfg.default_max_legs
    legs_cap = max(MIN_LEGS, min(MAX_LEGS, legs_cap))

    by_id = {a.id: a for a in alerts}
    candidates = identify_correlations(
        [a.id for a in alerts],
        {a.id: a.agent for a in alerts},
        {a.id: a.implications for a in alerts},
        cancel=cancel,
    )

    scripts: list[Script] = []
    for index, candidate in enumerate(candidates):
        if len(scripts) >= cfg.max_scripts:
            break
        check_cancelled(cancel, "script selection")

        ids = [i for i in candidate.alert_ids[:legs_cap] if i in by_id]
        if len(ids) < MIN_LEGS:
            logger.debug("Dropping %s candidate: %d leg(s)", candidate.correlation_type.value, len(ids))
            continue

        factor = cfg.correlation_factors.get(candidate.correlation_type.value)
        legs = tuple(
            Leg(
                alert_id=i,
                agent=by_id[i].agent,
                market=by_id[i].market,
                implied_probability=by_id[i].confidence,
                correlation_factor=factor,
            )
            for i in ids
        )
        confidence = combined_confidence(
            [leg.implied_probability or 0.5 for leg in legs],
            cfg.correlation_bonus,
            cfg.max_combined_confidence,
        )
        scripts.append(
            Script(
                id=f"script-{candidate.correlation_type.value}-{index}",
                name=SCRIPT_NAMES[candidate.correlation_type],
                legs=legs,
                correlation_type=candidate.correlation_type,
                correlation_explanation=candidate.explanation,
                combined_confidence=confidence,
                risk_level=risk_level(confidence, len(legs)),
                provenance_hash=artifact_hash(
                    candidate.correlation_type.value, ids, rules_version
                ),
            )
        )

    return scripts
