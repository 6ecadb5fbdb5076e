"""Running back detector: rushing volume, efficiency and scoring vs. run defense."""

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
from gridiron_edge.config import HBThresholds

logger = logging.getLogger(__name__)


class HBDetector:
    agent = AgentType.HB

    def __init__(self, thresholds: HBThresholds, league_size: int = 32) -> None:
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
        if not meets_sample(subject, "carries", t.min_carries):
            logger.debug("HB %s below %d carries, suppressed", name, t.min_carries)
            return
        opponent = opponent or {}

        rush_yards = stat(subject, "rush_yards_rank")
        rush_def = stat(opponent, "rush_defense_rank")
        if top(rush_yards, t.rush_yards_rank) and bottom(rush_def, t.defense_rank):
            yield make_finding(
                self.agent, "volume", "hb_volume_advantage", name,
                "rush_yards_rank", rush_yards, t.rush_yards_rank, 1,
                f"rush yards rank <= {t.rush_yards_rank} AND run defense rank >= {t.defense_rank}",
                f"{name}: {ordinal(rush_yards)} in rush yards vs {ordinal(rush_def)} run defense",
                context,
            )

        ypc = stat(subject, "yards_per_carry_rank")
        ypc_allowed = stat(opponent, "rush_yards_allowed_rank")
        if top(ypc, t.ypc_rank) and bottom(ypc_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "ypc", "hb_efficiency_advantage", name,
                "yards_per_carry_rank", ypc, t.ypc_rank, 1,
                f"YPC rank <= {t.ypc_rank} AND rush yards allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(ypc)} YPC vs {ordinal(ypc_allowed)} rush yards allowed",
                context,
            )

        rush_td = stat(subject, "rush_td_rank")
        td_allowed = stat(opponent, "rush_td_allowed_rank")
        if top(rush_td, t.rush_td_rank) and bottom(td_allowed, t.defense_rank):
            yield make_finding(
                self.agent, "td", "hb_td_opportunity", name,
                "rush_td_rank", rush_td, t.rush_td_rank, 1,
                f"rush TD rank <= {t.rush_td_rank} AND rush TD allowed rank >= {t.defense_rank}",
                f"{name}: {ordinal(rush_td)} in rush TDs vs {ordinal(td_allowed)} in TDs allowed",
                context,
            )

        reception = stat(subject, "reception_rank")
        if top(reception, t.reception_rank):
            yield make_finding(
                self.agent, "receiving", "hb_receiving_factor", name,
                "reception_rank", reception, t.reception_rank, 1,
                f"reception rank <= {t.reception_rank} among backs",
                f"{name}: {ordinal(reception)} in receptions among backs",
                context,
            )
