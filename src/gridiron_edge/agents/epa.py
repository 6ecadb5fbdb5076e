"""EPA detector: efficient skill players vs. defenses that leak EPA."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import (
    AgentType,
    Finding,
    ThresholdContext,
    make_finding,
    meets_sample,
    stat,
    subject_name,
    top,
)
from gridiron_edge.common.types import ordinal
from gridiron_edge.config import EPAThresholds

logger = logging.getLogger(__name__)


class EPADetector:
    """Receiving and rushing EPA mismatches.

    Defensive EPA ranks run worst-first, so rank 1 allows the most EPA and a
    top-N check on the defense finds the leakiest units. Each rule carries
    its own sample gate (targets for receiving, rushes for rushing).
    """

    agent = AgentType.EPA

    def __init__(self, thresholds: EPAThresholds, league_size: int = 32) -> None:
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

        recv = stat(subject, "receiving_epa_rank")
        recv_allowed = stat(opponent, "epa_allowed_to_wr_rank")
        if meets_sample(subject, "targets", t.min_plays):
            if top(recv, t.offense_rank) and top(recv_allowed, t.defense_allowed_rank):
                yield make_finding(
                    self.agent, "recv", "receiving_epa_mismatch", name,
                    "receiving_epa_rank", recv, t.offense_rank, 1,
                    f"rank <= {t.offense_rank} AND opponent allows top {t.defense_allowed_rank}",
                    f"{name}: {ordinal(recv)} receiving EPA vs {ordinal(recv_allowed)} worst defense",
                    context,
                )
        elif recv is not None:
            logger.debug("EPA %s below %d targets, receiving rule skipped", name, t.min_plays)

        rush = stat(subject, "rushing_epa_rank")
        rush_allowed = stat(opponent, "epa_allowed_to_rb_rank")
        if meets_sample(subject, "rushes", t.min_plays):
            if top(rush, t.offense_rank) and top(rush_allowed, t.defense_allowed_rank):
                yield make_finding(
                    self.agent, "rush", "rushing_epa_mismatch", name,
                    "rushing_epa_rank", rush, t.offense_rank, 1,
                    f"rank <= {t.offense_rank} AND opponent allows top {t.defense_allowed_rank}",
                    f"{name}: {ordinal(rush)} rushing EPA vs {ordinal(rush_allowed)} worst defense",
                    context,
                )
        elif rush is not None:
            logger.debug("EPA %s below %d rushes, rushing rule skipped", name, t.min_plays)
