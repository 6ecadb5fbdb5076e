"""Script and ladder data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gridiron_edge.agents.base import AgentType
from gridiron_edge.common.types import JsonDict


class CorrelationType(str, Enum):
    GAME_SCRIPT = "game_script"
    PLAYER_STACK = "player_stack"
    WEATHER_CASCADE = "weather_cascade"
    DEFENSIVE_FUNNEL = "defensive_funnel"
    VOLUME_SHARE = "volume_share"


class RiskLevel(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class Tier(str, Enum):
    SAFE = "safe"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


MIN_LEGS = 2
MAX_LEGS = 6
MIN_RUNGS = 1
MAX_RUNGS = 5


@dataclass(frozen=True)
class CorrelationCandidate:
    """One correlation rule's grouping of alert ids, before selection."""

    correlation_type: CorrelationType
    alert_ids: tuple[str, ...]
    explanation: str
    implications: tuple[str, ...] = ()


@dataclass(frozen=True)
class TierGroup:
    """One tier's ids, in input order, already capped."""

    tier: Tier
    ids: tuple[str, ...]
    name: str


@dataclass(frozen=True)
class Leg:
    alert_id: str
    agent: AgentType
    market: str
    implied_probability: float | None = None
    correlation_factor: float | None = None

    def __post_init__(self) -> None:
        if self.implied_probability is not None and not 0.0 <= self.implied_probability <= 1.0:
            raise ValueError(f"implied_probability must be in [0, 1], got {self.implied_probability}")
        if self.correlation_factor is not None and not -1.0 <= self.correlation_factor <= 1.0:
            raise ValueError(f"correlation_factor must be in [-1, 1], got {self.correlation_factor}")

    def to_dict(self) -> JsonDict:
        return {
            "alert_id": self.alert_id,
            "agent": self.agent.value,
            "market": self.market,
            "implied_probability": self.implied_probability,
            "correlation_factor": self.correlation_factor,
        }


@dataclass(frozen=True)
class Script:
    """A correlated parlay candidate.

    Attributes:
        id: script id, unique per build
        name: display name derived from the correlation type
        legs: 2-6 legs, one alert each
        correlation_type: rule that grouped the legs
        correlation_explanation: fixed explanation of the rule (<= 300 chars)
        combined_confidence: [0, 1]
        risk_level: conservative, moderate or aggressive
        provenance_hash: hash over type, alert ids and rules version
    """

    id: str
    name: str
    legs: tuple[Leg, ...]
    correlation_type: CorrelationType
    correlation_explanation: str
    combined_confidence: float
    risk_level: RiskLevel
    provenance_hash: str

    def __post_init__(self) -> None:
        if not MIN_LEGS <= len(self.legs) <= MAX_LEGS:
            raise ValueError(f"script needs {MIN_LEGS}-{MAX_LEGS} legs, got {len(self.legs)}")
        if not 0.0 <= self.combined_confidence <= 1.0:
            raise ValueError(f"combined_confidence must be in [0, 1], got {self.combined_confidence}")
        if len(self.correlation_explanation) > 300:
            raise ValueError("correlation_explanation exceeds 300 characters")

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "name": self.name,
            "legs": [leg.to_dict() for leg in self.legs],
            "correlation_type": self.correlation_type.value,
            "correlation_explanation": self.correlation_explanation,
            "combined_confidence": self.combined_confidence,
            "risk_level": self.risk_level.value,
            "provenance_hash": self.provenance_hash,
        }


@dataclass(frozen=True)
class Rung:
    alert_id: str
    agent: AgentType
    market: str
    rationale: str
    line: float | None = None
    implied_probability: float | None = None

    def to_dict(self) -> JsonDict:
        return {
            "alert_id": self.alert_id,
            "agent": self.agent.value,
            "market": self.market,
            "line": self.line,
            "implied_probability": self.implied_probability,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class Ladder:
    id: str
    name: str
    tier: Tier
    rungs: tuple[Rung, ...]
    provenance_hash: str
    total_implied_probability: float | None = None
    recommended_stake_pct: float | None = None

    def __post_init__(self) -> None:
        if not MIN_RUNGS <= len(self.rungs) <= MAX_RUNGS:
            raise ValueError(f"ladder needs {MIN_RUNGS}-{MAX_RUNGS} rungs, got {len(self.rungs)}")

    def to_dict(self) -> JsonDict:
        return {
            "id": self.id,
            "name": self.name,
            "tier": self.tier.value,
            "rungs": [rung.to_dict() for rung in self.rungs],
            "total_implied_probability": self.total_implied_probability,
            "recommended_stake_pct": self.recommended_stake_pct,
            "provenance_hash": self.provenance_hash,
        }
