"""Pass rush detector: elite pressure vs. a leaky offensive line."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import (
    AgentType,
    Finding,
    ThresholdContext,
    bottom,
    make_finding,
    stat,
    top,
)
from gridiron_edge.common.types import ordinal
from gridiron_edge.config import PressureThresholds

logger = logging.getLogger(__name__)


class PressureDetector:
    """Team-level detector.

    ``subject`` is the offense being pressured (``team``, ``qb_name``,
    ``pass_block_win_rate_rank``, ``qb_passer_rating_under_pressure``);
    ``opponent`` is the defense (``team``, ``pressure_rate_rank``). The QB
    vulnerability rule only runs once the pressure mismatch has fired.
    """

    agent = AgentType.PRESSURE

    def __init__(self, thresholds: PressureThresholds, league_size: int = 32) -> None:
        self.t = thresholds
        self.league_size = league_size

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        t = self.t
        opponent = opponent or {}
        offense = str(subject.get("team") or "Unknown")
        defense = str(opponent.get("team") or "Unknown")

        rush_rank = stat(opponent, "pressure_rate_rank")
        block_rank = stat(subject, "pass_block_win_rate_rank")
        if not (top(rush_rank, t.pressure_rank) and bottom(block_rank, t.pass_block_rank)):
            return

        yield make_finding(
            self.agent, "rate", "pressure_rate_advantage", offense,
            "pressure_rate_rank", rush_rank, t.pressure_rank, 1,
            f"defense rank <= {t.pressure_rank} AND OL rank >= {t.pass_block_rank}",
            f"{defense}: {ordinal(rush_rank)} pass rush vs {offense} {ordinal(block_rank)} OL",
            context,
        )

        rating = stat(subject, "qb_passer_rating_under_pressure")
        if rating is not None and rating < t.pressured_rating:
            qb_name = str(subject.get("qb_name") or "Unknown QB")
            yield make_finding(
                self.agent, "vuln", "qb_pressure_vulnerability", offense,
                "qb_passer_rating_under_pressure", rating,
                t.pressured_rating, t.pressured_rating_floor,
                f"passer rating under pressure < {t.pressured_rating:g}",
                f"{qb_name}: {rating:g} rating when pressured",
                context,
            )
