"""Merge findings into alerts with confidence and severity.

Confidence is derived in code from how far each finding cleared its
threshold toward its ceiling:

    strength   = clamp(|value - threshold| / |ceiling - threshold|, 0, 1)
    confidence = clamp(floor + span * mean(strength)
                       + bonus * min(n - 1, cap), 0, 1)

A finding sitting exactly on its threshold contributes strength 0; one at
(or past) its ceiling contributes 1. Extra corroborating findings for the
same subject add a capped bonus. Nothing extrapolates outside [0, 1].
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gridiron_edge.agents.base import AgentType, Finding
from gridiron_edge.alerts.models import Alert, Severity
from gridiron_edge.common.types import clamp, slugify
from gridiron_edge.config import AggregatorSettings

logger = logging.getLogger(__name__)

DEFAULT_IMPLICATIONS: dict[AgentType, tuple[str, ...]] = {
    AgentType.EPA: ("team_total_over",),
    AgentType.PRESSURE: ("qb_sacks_over",),
    AgentType.WEATHER: ("game_total_under",),
    AgentType.QB: ("qb_pass_yards_over",),
    AgentType.HB: ("rb_rush_yards_over",),
    AgentType.WR: ("wr_yards_over",),
    AgentType.TE: ("te_receptions_over",),
    AgentType.INJURY: ("team_total_under",),
    AgentType.USAGE: ("receptions_over",),
    AgentType.PACE: ("game_total_over",),
}

MARKET_LABELS: dict[AgentType, str] = {
    AgentType.EPA: "Team Total Over",
    AgentType.PRESSURE: "QB Sacks Over",
    AgentType.WEATHER: "Game Total Under",
    AgentType.QB: "Pass Yards Over",
    AgentType.HB: "Rush Yards Over",
    AgentType.WR: "Receiving Yards Over",
    AgentType.TE: "Receptions Over",
    AgentType.INJURY: "Team Total Under",
    AgentType.USAGE: "Receptions Over",
    AgentType.PACE: "Game Total Over",
}

# Finding types whose market differs from their agent's default
TYPE_MARKETS: dict[str, tuple[str, tuple[str, ...]]] = {
    "defensive_playmaker_unavailable": ("Opponent Team Total Over", ("opponent_team_total_over",)),
    "volume_workhorse": ("Rush Attempts Over", ("rb_rush_attempts_over",)),
    "snap_share_committee": ("Rush Attempts Under", ("rb_rush_attempts_under",)),
    "usage_trending_down": ("Receptions Under", ("receptions_under",)),
    "pace_under_signal": ("Game Total Under", ("game_total_under",)),
    "team_plays_below_avg": ("Game Total Under", ("game_total_under",)),
}

GAME_LEVEL_AGENTS = frozenset({AgentType.WEATHER, AgentType.PACE})


def finding_strength(finding: Finding, default: float = 0.5) -> float:
    """How far a finding cleared its threshold, scaled to [0, 1]."""
    if finding.value_num is None or finding.threshold is None or finding.ceiling is None:
        return clamp(default)
    span = abs(finding.ceiling - finding.threshold)
    if span == 0:
        return clamp(default)
    return clamp(abs(finding.value_num - finding.threshold) / span)


def score_confidence(findings: list[Finding], cfg: AggregatorSettings) -> float:
    if not findings:
        return 0.0
    strengths = [finding_strength(f, cfg.default_strength) for f in findings]
    mean = sum(strengths) / len(strengths)
    extra = min(len(findings) - 1, cfg.corroboration_cap)
    score = cfg.confidence_floor + cfg.confidence_span * mean + cfg.corroboration_bonus * extra
    return round(clamp(score), 2)


def _market_for(agent: AgentType, subject: str, first_type: str) -> tuple[str, tuple[str, ...]]:
    """Market label and implication tags for a group, keyed by its first finding."""
    label, implications = TYPE_MARKETS.get(
        first_type, (MARKET_LABELS[agent], DEFAULT_IMPLICATIONS[agent])
    )
    if agent in GAME_LEVEL_AGENTS:
        return label, implications
    if agent is AgentType.INJURY:
        return f"{label} ({subject} absence)", implications
    return f"{subject} {label}", implications


def aggregate_findings(
    findings: Iterable[Finding],
    settings: AggregatorSettings | None = None,
) -> list[Alert]:
    """Group findings by (agent, subject) into alerts, in first-seen order."""
    cfg = settings or AggregatorSettings()

    groups: dict[tuple[AgentType, str], list[Finding]] = {}
    for finding in findings:
        groups.setdefault((finding.agent, finding.subject), []).append(finding)

    alerts: list[Alert] = []
    used_ids: set[str] = set()
    for (agent, subject), group in groups.items():
        base_id = f"alert-{agent.value}-{slugify(subject)}"
        alert_id = base_id
        suffix = 2
        while alert_id in used_ids:
            alert_id = f"{base_id}-{suffix}"
            suffix += 1
        used_ids.add(alert_id)
        market, implications = _market_for(agent, subject, group[0].type)

        alerts.append(
            Alert(
                id=alert_id,
                agent=agent,
                subject=subject,
                finding_ids=tuple(f.id for f in group),
                confidence=score_confidence(group, cfg),
                severity=Severity.HIGH if len(group) >= 2 else Severity.MEDIUM,
                claim="; ".join(f.comparison_context for f in group),
                market=market,
                implications=implications,
            )
        )

    logger.debug("Aggregated %d finding group(s) into %d alert(s)", len(groups), len(alerts))
    return alerts
