"""Tight end detector: target volume, yardage, scoring and red-zone usage."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import (
    AgentType,
    Finding,
    ThresholdContext,
    bottom,
    make_finding,
    meets_sample,
    stat,
    subject_name,
    top,
)
from gridiron_edge.common.types import ordinal
from gridiron_edge.config import TEThresholds

logger = logging.getLogger(__name__)


class TEDetector:
    agent = AgentType.TE

    def __init__(self, thresholds: TEThresholds, league_size: int = 32) -> None:
        self.t = thresholds
        self.league_size = league_size

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        t = self.t
        name = subject_name(subject)
        if not meets_sample(subject, "targets", t.min_targets):
            logger.debug("TE %s below %d targets, suppressed", name, t.min_targets)
            return
        opponent = opponent or {}

        share = stat(subject, "target_share_rank")
        te_def = stat(opponent, "te_defense_rank")
        if top(share, t.target_share_rank) and bottom(te_def, t.defense_rank):
            yield make_finding(
                self.agent, "volume", "te_target_volume", name,
                "target_share_rank", share, t.target_share_rank, 1,
                f"TE target share rank <= {t.target_share_rank} AND TE defense rank >= {t.defense_rank}",
                f"{name}: {ordinal(share)} TE target share vs {ordinal(te_def)} TE defense",
                context,
            )

        yards = stat(subject, "receiving_yards_rank")
        yards_allowed = stat(opponent, "yards_allowed_to_te_rank")
        if top(yards, t.yards_rank) and bottom(yards_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "yards", "te_yardage_advantage", name,
                "receiving_yards_rank", yards, t.yards_rank, 1,
                f"TE yards rank <= {t.yards_rank} AND TE yards allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(yards)} TE yards vs {ordinal(yards_allowed)} vs TEs",
                context,
            )

        tds = stat(subject, "receiving_td_rank")
        td_allowed = stat(opponent, "td_allowed_to_te_rank")
        if top(tds, t.td_rank) and bottom(td_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "td", "te_td_opportunity", name,
                "receiving_td_rank", tds, t.td_rank, 1,
                f"TE TD rank <= {t.td_rank} AND TE TD allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(tds)} TE TDs vs {ordinal(td_allowed)} in TE TDs allowed",
                context,
            )

        red_zone = stat(subject, "red_zone_target_rank")
        if top(red_zone, t.red_zone_rank):
            yield make_finding(
                self.agent, "redzone", "te_red_zone_factor", name,
                "red_zone_target_rank", red_zone, t.red_zone_rank, 1,
                f"red zone target rank <= {t.red_zone_rank}",
                f"{name}: {ordinal(red_zone)} in red zone targets",
                context,
            )
