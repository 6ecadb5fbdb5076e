"""Quarterback detector: passer efficiency vs. pass defense."""

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
from gridiron_edge.config import QBThresholds

logger = logging.getLogger(__name__)


class QBDetector:
    """Fires when a top passer faces a bottom-tier pass defense.

    The turnover rule has no attempts gate: a turnover-prone QB against a
    ball-hawking secondary is flagged regardless of volume.
    """

    agent = AgentType.QB

    def __init__(self, thresholds: QBThresholds, league_size: int = 32) -> None:
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
        opponent = opponent or {}
        has_sample = meets_sample(subject, "attempts", t.min_attempts)
        if not has_sample:
            logger.debug("QB %s below %d attempts, rating/ypa rules skipped", name, t.min_attempts)

        rating = stat(subject, "qb_rating_rank")
        pass_def = stat(opponent, "pass_defense_rank")
        if has_sample and top(rating, t.rating_rank) and bottom(pass_def, t.defense_pass_rank):
            yield make_finding(
                self.agent, "rating", "qb_rating_advantage", name,
                "qb_rating_rank", rating, t.rating_rank, 1,
                f"QB rating rank <= {t.rating_rank} AND defense rank >= {t.defense_pass_rank}",
                f"{name}: {ordinal(rating)} QB rating vs {ordinal(pass_def)} pass defense",
                context,
            )

        ypa = stat(subject, "yards_per_attempt_rank")
        yards_allowed = stat(opponent, "pass_yards_allowed_rank")
        if has_sample and top(ypa, t.ypa_rank) and bottom(yards_allowed, t.defense_pass_rank):
            yield make_finding(
                self.agent, "ypa", "qb_ypa_advantage", name,
                "yards_per_attempt_rank", ypa, t.ypa_rank, 1,
                f"YPA rank <= {t.ypa_rank} AND defense yards rank >= {t.defense_pass_rank}",
                f"{name}: {ordinal(ypa)} YPA vs {ordinal(yards_allowed)} yards allowed",
                context,
            )

        turnover = stat(subject, "turnover_pct_rank")
        int_rate = stat(opponent, "interception_rate_rank")
        if bottom(turnover, t.turnover_rank) and top(int_rate, t.interception_rank):
            yield make_finding(
                self.agent, "turnover", "qb_turnover_risk", name,
                "turnover_pct_rank", turnover, t.turnover_rank, self.league_size,
                f"QB turnover rank >= {t.turnover_rank} AND defense INT rank <= {t.interception_rank}",
                f"{name}: {ordinal(turnover)} turnover rate vs {ordinal(int_rate)} INT rate",
                context,
            )
