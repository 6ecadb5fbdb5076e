"""Usage detector: volume leaders and usage trends over the last four games."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import AgentType, Finding, ThresholdContext, make_finding, stat, subject_name
from gridiron_edge.config import UsageThresholds

logger = logging.getLogger(__name__)

BACKS = frozenset({"RB", "HB"})


def _delta(stats: Mapping[str, object], key: str) -> float | None:
    """Last-four value minus season value for ``key``."""
    season = stat(stats, f"{key}_season")
    recent = stat(stats, f"{key}_l4")
    if season is None or recent is None:
        return None
    return recent - season


class UsageDetector:
    """Emits at most one finding per player: the first rule that fires.

    Rule order: elite target share, alpha target share, workhorse back,
    rising usage, falling usage, committee back. Sample gates apply only
    when the sample stat is present.
    """

    agent = AgentType.USAGE

    def __init__(self, thresholds: UsageThresholds, league_size: int = 32) -> None:
        self.t = thresholds

    def suppression_reason(self, player: Mapping[str, object]) -> str | None:
        t = self.t
        if player.get("injury_limited"):
            return "injury_limited"
        for key, floor in (
            ("games_in_window", t.min_games_in_window),
            ("routes_sample", t.min_routes_sample),
            ("targets_sample", t.min_targets_sample),
        ):
            value = stat(player, key)
            if value is not None and value < floor:
                return f"{key} < {floor}"
        return None

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        name = subject_name(subject)
        reason = self.suppression_reason(subject)
        if reason:
            logger.debug("Usage for %s suppressed: %s", name, reason)
            return
        finding = self._first_rule(subject, name, context)
        if finding is not None:
            yield finding

    def _first_rule(
        self, player: Mapping[str, object], name: str, context: ThresholdContext
    ) -> Finding | None:
        t = self.t
        share = stat(player, "target_share_l4")
        snaps = stat(player, "snap_pct_l4")
        is_back = str(player.get("position", "")).upper() in BACKS

        if share is not None and share >= t.target_share_elite:
            return make_finding(
                self.agent, "share", "target_share_elite", name,
                "target_share_l4", share, t.target_share_elite, t.target_share_ceiling,
                f"target share (L4) >= {t.target_share_elite:.0%}",
                f"{name}: {share:.1%} target share (elite)",
                context,
            )
        if share is not None and share >= t.target_share_high:
            return make_finding(
                self.agent, "share", "target_share_alpha", name,
                "target_share_l4", share, t.target_share_high, t.target_share_elite,
                f"target share (L4) >= {t.target_share_high:.0%}",
                f"{name}: {share:.1%} target share (alpha)",
                context,
            )
        if is_back and snaps is not None and snaps >= t.snap_pct_high:
            return make_finding(
                self.agent, "snaps", "volume_workhorse", name,
                "snap_pct_l4", snaps, t.snap_pct_high, 1.0,
                f"snap share (L4) >= {t.snap_pct_high:.0%}",
                f"{name}: {snaps:.1%} snap share (workhorse)",
                context,
            )

        deltas = [d for d in (_delta(player, "snap_pct"), _delta(player, "target_share")) if d is not None]
        rising = [d for d in deltas if d >= t.trend_rising]
        if rising:
            delta = max(rising)
            return make_finding(
                self.agent, "trend", "usage_trending_up", name,
                "usage_delta", delta, t.trend_rising, t.trend_ceiling,
                f"L4 vs season delta >= {t.trend_rising:+.0%}",
                f"{name}: usage trending up ({delta:+.1%} over the last four)",
                context,
            )
        falling = [d for d in deltas if d <= t.trend_falling]
        if falling:
            delta = min(falling)
            return make_finding(
                self.agent, "trend", "usage_trending_down", name,
                "usage_delta", delta, t.trend_falling, -t.trend_ceiling,
                f"L4 vs season delta <= {t.trend_falling:+.0%}",
                f"{name}: usage trending down ({delta:+.1%} over the last four)",
                context,
            )

        if is_back and snaps is not None and snaps <= t.snap_pct_low:
            return make_finding(
                self.agent, "snaps", "snap_share_committee", name,
                "snap_pct_l4", snaps, t.snap_pct_low, t.snap_pct_floor,
                f"snap share (L4) <= {t.snap_pct_low:.0%}",
                f"{name}: {snaps:.1%} snap share (committee)",
                context,
            )
        return None
