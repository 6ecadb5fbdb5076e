"""Wide receiver detector: target volume, yardage, scoring and separation."""

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
from gridiron_edge.config import WRThresholds

logger = logging.getLogger(__name__)


class WRDetector:
    agent = AgentType.WR

    def __init__(self, thresholds: WRThresholds, league_size: int = 32) -> None:
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
            logger.debug("WR %s below %d targets, suppressed", name, t.min_targets)
            return
        opponent = opponent or {}

        share = stat(subject, "target_share_rank")
        pass_def = stat(opponent, "pass_defense_rank")
        if top(share, t.target_share_rank) and bottom(pass_def, t.defense_rank):
            yield make_finding(
                self.agent, "volume", "wr_target_volume", name,
                "target_share_rank", share, t.target_share_rank, 1,
                f"target share rank <= {t.target_share_rank} AND pass defense rank >= {t.defense_rank}",
                f"{name}: {ordinal(share)} in target share vs {ordinal(pass_def)} pass defense",
                context,
            )

        yards = stat(subject, "receiving_yards_rank")
        yards_allowed = stat(opponent, "yards_allowed_to_wr_rank")
        if top(yards, t.yards_rank) and bottom(yards_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "yards", "wr_yardage_advantage", name,
                "receiving_yards_rank", yards, t.yards_rank, 1,
                f"receiving yards rank <= {t.yards_rank} AND WR yards allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(yards)} in receiving yards vs {ordinal(yards_allowed)} vs WRs",
                context,
            )

        tds = stat(subject, "receiving_td_rank")
        td_allowed = stat(opponent, "td_allowed_to_wr_rank")
        if top(tds, t.td_rank) and bottom(td_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "td", "wr_td_opportunity", name,
                "receiving_td_rank", tds, t.td_rank, 1,
                f"receiving TD rank <= {t.td_rank} AND WR TD allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(tds)} in receiving TDs vs {ordinal(td_allowed)} in WR TDs allowed",
                context,
            )

        separation = stat(subject, "separation_rank")
        if top(separation, t.separation_rank):
            yield make_finding(
                self.agent, "separation", "wr_separation_advantage", name,
                "separation_rank", separation, t.separation_rank, 1,
                f"separation rank <= {t.separation_rank}",
                f"{name}: {ordinal(separation)} in average separation",
                context,
            )
