"""Risk-tiered ladders from alert confidence and severity.

Band edges (defaults):

    safe        confidence >= 0.7 and severity high     first 3
    moderate    0.5 <= confidence < 0.7 or severity medium   first 4
    aggressive  0.3 <= confidence < 0.5                 first 3

Each tier filters the ids on its own, so a medium severity alert at 0.4
sits in both moderate and aggressive and takes a slot under each cap.
Missing confidence counts as 0. Empty tiers are omitted.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from gridiron_edge.alerts.models import Alert, Severity
from gridiron_edge.common.types import clamp
from gridiron_edge.config import TierSettings
from gridiron_edge.errors import check_cancelled
from gridiron_edge.provenance import artifact_hash
from gridiron_edge.recommend.models import MAX_RUNGS, MIN_RUNGS, Ladder, Rung, Tier, TierGroup

logger = logging.getLogger(__name__)

TIER_NAMES: dict[Tier, str] = {
    Tier.SAFE: "High Confidence Picks",
    Tier.MODERATE: "Balanced Value Plays",
    Tier.AGGRESSIVE: "High Upside Longshots",
}


def _severity(value: Severity | str | None) -> str | None:
    if isinstance(value, Severity):
        return value.value
    return value


def in_tier(
    tier: Tier, confidence: float, severity: Severity | str | None, cfg: TierSettings
) -> bool:
    sev = _severity(severity)
    if tier is Tier.SAFE:
        return confidence >= cfg.safe_min and sev == Severity.HIGH.value
    if tier is Tier.MODERATE:
        return cfg.moderate_min <= confidence < cfg.safe_min or sev == Severity.MEDIUM.value
    return cfg.aggressive_min <= confidence < cfg.moderate_min


def classify(
    confidence: float, severity: Severity | str | None, cfg: TierSettings
) -> tuple[Tier, ...]:
    """Every tier whose band the pair falls in, in tier order."""
    return tuple(tier for tier in Tier if in_tier(tier, confidence, severity, cfg))


def organize_ladders(
    alert_ids: Sequence[str],
    confidences: Mapping[str, float],
    severities: Mapping[str, Severity | str],
    settings: TierSettings | None = None,
    cancel: object | None = None,
) -> list[TierGroup]:
    """Filter ids into safe, moderate and aggressive tiers independently, each capped."""
    cfg = settings or TierSettings()
    caps = {Tier.SAFE: cfg.safe_cap, Tier.MODERATE: cfg.moderate_cap, Tier.AGGRESSIVE: cfg.aggressive_cap}

    groups: list[TierGroup] = []
    for tier in Tier:
        check_cancelled(cancel, "tiering")
        matching = [
            alert_id
            for alert_id in alert_ids
            if in_tier(tier, confidences.get(alert_id, 0.0) or 0.0, severities.get(alert_id), cfg)
        ]
        ids = matching[: caps[tier]]
        if ids:
            groups.append(TierGroup(tier=tier, ids=tuple(ids), name=TIER_NAMES[tier]))
    return groups


def stake_pct(tier: Tier, avg_confidence: float, cfg: TierSettings) -> float:
    """Bankroll percentage: tier base nudged by confidence, clamped to [0.5, 10]."""
    base = {
        Tier.SAFE: cfg.stake_safe,
        Tier.MODERATE: cfg.stake_moderate,
        Tier.AGGRESSIVE: cfg.stake_aggressive,
    }[tier]
    return round(clamp(base + (avg_confidence - 0.5) * 2, 0.5, 10.0), 1)


def _rung(alert: Alert) -> Rung:
    rationale = alert.claim or f"{alert.agent.value.upper()} agent signal - {alert.severity.value} severity"
    return Rung(
        alert_id=alert.id,
        agent=alert.agent,
        market=alert.market,
        rationale=rationale[:200],
        implied_probability=alert.confidence,
    )


def build_ladders(
    alerts: Sequence[Alert],
    max_rungs: int = 3,
    include_aggressive: bool = True,
    settings: TierSettings | None = None,
    rules_version: str = "",
    cancel: object | None = None,
) -> list[Ladder]:
    cfg = settings or TierSettings()
    max_rungs = max(MIN_RUNGS, min(MAX_RUNGS, max_rungs))
    by_id = {a.id: a for a in alerts}

    groups = organize_ladders(
        [a.id for a in alerts],
        {a.id: a.confidence for a in alerts},
        {a.id: a.severity for a in alerts},
        settings=cfg,
        cancel=cancel,
    )

    ladders: list[Ladder] = []
    for index, group in enumerate(groups):
        if group.tier is Tier.AGGRESSIVE and not include_aggressive:
            continue
        rungs = tuple(_rung(by_id[i]) for i in group.ids[:max_rungs] if i in by_id)
        if not rungs:
            continue
        probs = [r.implied_probability if r.implied_probability is not None else 0.5 for r in rungs]
        avg = sum(probs) / len(probs)
        ladders.append(
            Ladder(
                id=f"ladder-{group.tier.value}-{index}",
                name=group.name,
                tier=group.tier,
                rungs=rungs,
                total_implied_probability=round(avg, 2),
                recommended_stake_pct=stake_pct(group.tier, avg, cfg),
                provenance_hash=artifact_hash(
                    group.tier.value, [r.alert_id for r in rungs], rules_version
                ),
            )
        )

    logger.debug("Built %d ladder(s) from %d alert(s)", len(ladders), len(alerts))
    return ladders
