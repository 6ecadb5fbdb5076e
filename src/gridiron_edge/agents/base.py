"""Finding model, detector protocol and shared detector helpers."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Protocol

from gridiron_edge.common.types import JsonDict, slugify


class AgentType(str, Enum):
    EPA = "epa"
    PRESSURE = "pressure"
    WEATHER = "weather"
    QB = "qb"
    HB = "hb"
    WR = "wr"
    TE = "te"
    INJURY = "injury"
    USAGE = "usage"
    PACE = "pace"


class SourceType(str, Enum):
    LOCAL = "local"
    WEB = "web"
    NOTES = "notes"


@dataclass(frozen=True)
class ThresholdContext:
    """Run-level context stamped onto every finding.

    Attributes:
        data_timestamp: epoch milliseconds of the stat snapshot
        data_version: identifier of the stat snapshot (e.g. "2025-week-10")
    """

    data_timestamp: int
    data_version: str


@dataclass(frozen=True)
class Finding:
    """An atomic observation emitted by a detector when a rule fires.

    Attributes:
        id: "{agent}-{subject slug}-{kind}-{data_timestamp}"
        agent: detector that emitted it
        type: tag identifying which rule fired (e.g. "qb_rating_advantage")
        subject: player or team the rule is about
        stat: stat key the rule compared
        value_num: numeric value of the stat, if numeric
        value_str: string value of the stat, if not numeric
        threshold: bound the value had to clear
        ceiling: value at which the signal is strongest
        threshold_met: human-readable rule text
        comparison_context: human-readable comparison that fired
        source_ref: where the stat came from
        source_type: local, web or notes
        data_timestamp: inherited from ThresholdContext
        data_version: inherited from ThresholdContext
    """

    id: str
    agent: AgentType
    type: str
    subject: str
    stat: str
    threshold_met: str
    comparison_context: str
    source_ref: str
    data_timestamp: int
    data_version: str
    value_num: float | None = None
    value_str: str | None = None
    threshold: float | None = None
    ceiling: float | None = None
    source_type: SourceType = SourceType.LOCAL

    @property
    def value_type(self) -> str:
        return "numeric" if self.value_num is not None else "string"

    def to_dict(self) -> JsonDict:
        data = asdict(self)
        data["agent"] = self.agent.value
        data["source_type"] = self.source_type.value
        data["value_type"] = self.value_type
        return data


class Detector(Protocol):
    """Protocol for threshold detectors dispatched by agent type."""

    agent: AgentType

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        """Yield findings for one subject against its opponent.

        Args:
            subject: stats of the player or team being evaluated
            opponent: stats of the opposing team (None where not applicable)
            context: run-level timestamp and data version

        Returns:
            A fresh, finite iterator; calling again restarts detection.
        """
        ...


def stat(stats: Mapping[str, object] | None, key: str) -> float | None:
    """Read a numeric stat, treating missing or non-numeric values as absent."""
    if not stats:
        return None
    value = stats.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def meets_sample(stats: Mapping[str, object], key: str, floor: int) -> bool:
    """True when the sample-size stat reaches ``floor`` (inclusive)."""
    count = stat(stats, key)
    return count is not None and count >= floor


def top(value: float | None, rank: int) -> bool:
    """Rank is inside the top ``rank`` (inclusive)."""
    return value is not None and value <= rank


def bottom(value: float | None, rank: int) -> bool:
    """Rank is at or below ``rank`` (inclusive)."""
    return value is not None and value >= rank


def make_finding(
    agent: AgentType,
    kind: str,
    type_: str,
    subject: str,
    stat_key: str,
    value: float,
    threshold: float,
    ceiling: float,
    threshold_met: str,
    comparison_context: str,
    context: ThresholdContext,
    *,
    value_str: str | None = None,
    source_type: SourceType = SourceType.LOCAL,
    source_ref: str | None = None,
) -> Finding:
    """Build a numeric finding with the canonical id format.

    Local-source findings point at the snapshot file unless ``source_ref`` is given.
    """
    return Finding(
        id=f"{agent.value}-{slugify(subject)}-{kind}-{context.data_timestamp}",
        agent=agent,
        type=type_,
        subject=subject,
        stat=stat_key,
        value_num=value,
        value_str=value_str,
        threshold=threshold,
        ceiling=ceiling,
        threshold_met=threshold_met,
        comparison_context=comparison_context,
        source_ref=source_ref or f"local://data/{agent.value}/{context.data_version}.json",
        source_type=source_type,
        data_timestamp=context.data_timestamp,
        data_version=context.data_version,
    )


def subject_name(stats: Mapping[str, object], default: str = "Unknown") -> str:
    name = stats.get("name")
    return str(name) if name else default
