"""Request models validated before anything reaches the pipeline."""

from __future__ import annotations

from typing import Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gridiron_edge.agents.base import AgentType
from gridiron_edge.alerts.models import Alert, Severity
from gridiron_edge.errors import RequestValidationError
from gridiron_edge.story.schema import Voice

Mode = Literal["prop", "story", "parlay"]

_KNOWN_AGENTS = {a.value for a in AgentType}


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")


class AlertInput(_Request):
    """One alert as supplied by a caller, usually copied from scan output."""

    id: str = Field(min_length=1)
    agent: AgentType
    subject: str = ""
    finding_ids: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0, le=1)
    severity: Severity
    claim: str
    market: str
    implications: list[str] = Field(default_factory=list)

    def to_alert(self) -> Alert:
        return Alert(
            id=self.id,
            agent=self.agent,
            subject=self.subject,
            finding_ids=tuple(self.finding_ids),
            confidence=self.confidence,
            severity=self.severity,
            claim=self.claim,
            market=self.market,
            implications=tuple(self.implications),
        )


class ScanRequest(_Request):
    matchup: str = Field(min_length=3, max_length=100)
    agent_ids: list[str] | None = None
    mode: Mode = "prop"
    profile: str | None = None

    @field_validator("agent_ids")
    @classmethod
    def _known_agents(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        if not v:
            raise ValueError("agent_ids must not be empty when provided")
        unknown = sorted(set(v) - _KNOWN_AGENTS)
        if unknown:
            raise ValueError(f"unknown agent ids: {', '.join(unknown)}")
        return v

    @property
    def agents(self) -> list[AgentType] | None:
        if self.agent_ids is None:
            return None
        return [AgentType(a) for a in self.agent_ids]


class BuildRequest(_Request):
    matchup: str = Field(min_length=3, max_length=100)
    alerts: list[AlertInput] = Field(default_factory=list)
    mode: Mode = "parlay"
    max_legs: int = Field(default=4, ge=2, le=6)
    risk_preference: Literal["conservative", "moderate", "aggressive"] = "moderate"


class BetRequest(_Request):
    alerts: list[AlertInput] = Field(min_length=1)
    include_aggressive: bool = True
    max_rungs: int = Field(default=3, ge=1, le=5)


class StoryRequest(_Request):
    matchup: str = Field(min_length=3, max_length=100)
    line_focus: str = Field(default="", max_length=120)
    angles: list[str] = Field(default_factory=list, max_length=10)
    voice: Voice = Voice.ANALYST
    odds_paste: str | None = Field(default=None, max_length=4000)
    profile: str | None = None


RequestT = TypeVar("RequestT", bound=_Request)


def parse_request(model: type[RequestT], data: object) -> RequestT:
    """Validate ``data`` as ``model``; failures become RequestValidationError."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in exc.errors()
        ]
        raise RequestValidationError(f"Invalid {model.__name__}", {"errors": errors}) from exc
