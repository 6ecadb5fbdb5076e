"""Alert data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gridiron_edge.agents.base import AgentType
from gridiron_edge.common.types import JsonDict


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass(frozen=True)
class Alert:
    """A user-facing unit built from one or more findings about one subject.

    Attributes:
        id: unique within a run
        agent: detector that produced the underlying findings
        subject: player or team the findings are about
        finding_ids: ids of the merged findings, in detection order
        confidence: [0, 1], from how far the findings cleared their thresholds
        severity: high when two or more findings corroborate, else medium
        claim: human-readable rationale
        market: suggested market label
        implications: downstream market tags
    """

    id: str
    agent: AgentType
    subject: str
    finding_ids: tuple[str, ...]
    confidence: float
    severity: Severity
    claim: str
    market: str
    implications: tuple[str, ...] = ()

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "agent": self.agent.value,
            "subject": self.subject,
            "finding_ids": list(self.finding_ids),
            "confidence": self.confidence,
            "severity": self.severity.value,
            "claim": self.claim,
            "market": self.market,
            "implications": list(self.implications),
        }

    @classmethod
    def from_dict(cls, data: JsonDict) -> Alert:
        return cls(
            id=str(data["id"]),
            agent=AgentType(data["agent"]),
            subject=str(data.get("subject", "")),
            finding_ids=tuple(data.get("finding_ids") or ()),  # type: ignore[arg-type]
            confidence=float(data.get("confidence") or 0.0),  # type: ignore[arg-type]
            severity=Severity(data.get("severity", "medium")),
            claim=str(data.get("claim", "")),
            market=str(data.get("market", "")),
            implications=tuple(data.get("implications") or ()),  # type: ignore[arg-type]
        )
