"""Pydantic schema for generator story payloads.

Unknown keys are rejected at every level, and so is any payload missing a
required key.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_NOTES: tuple[str, str] = (
    "No guarantees; high variance by design; bet what you can afford.",
    "If odds not supplied, american_odds are illustrative — paste your book’s prices to re-price.",
)

OFFER_OPPOSITE = "Want the other side of this story?"


class OddsSource(str, Enum):
    ILLUSTRATIVE = "illustrative"
    USER_SUPPLIED = "user_supplied"


class Voice(str, Enum):
    ANALYST = "analyst"
    HYPE = "hype"
    COACH = "coach"


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StoryLeg(_Strict):
    market: str = Field(min_length=1)
    selection: str = Field(min_length=1)
    american_odds: float
    odds_source: OddsSource


class ParlayMath(_Strict):
    stake: float
    leg_decimals: list[float]
    product_decimal: float
    payout: float
    profit: float
    steps: str = Field(min_length=1)

    @field_validator("stake")
    @classmethod
    def _unit_stake(cls, v: float) -> float:
        if v != 1:
            raise ValueError(f"stake must be 1, got {v}")
        return v


class StoryScript(_Strict):
    title: str = Field(min_length=1)
    narrative: str = Field(min_length=1)
    legs: list[StoryLeg] = Field(min_length=3, max_length=5)
    parlay_math: ParlayMath
    notes: list[str] = Field(min_length=2)
    offer_opposite: Literal["Want the other side of this story?"]


class Assumptions(_Strict):
    matchup: str = Field(min_length=1)
    line_focus: str = ""
    angles: list[str] = Field(default_factory=list)
    voice: Voice


class StoryPayload(_Strict):
    assumptions: Assumptions
    scripts: list[StoryScript] = Field(min_length=1, max_length=3)
