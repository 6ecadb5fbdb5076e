"""Application configuration via pydantic-settings."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QBThresholds(BaseModel):
    rating_rank: int = 10
    ypa_rank: int = 10
    # Bottom-10 turnover rate (bad)
    turnover_rank: int = 22
    # Bottom-10 pass defense (vulnerable)
    defense_pass_rank: int = 22
    interception_rank: int = 10
    min_attempts: int = 150


class HBThresholds(BaseModel):
    rush_yards_rank: int = 10
    ypc_rank: int = 10
    rush_td_rank: int = 10
    reception_rank: int = 15
    defense_rank: int = 22
    min_carries: int = 80


class WRThresholds(BaseModel):
    target_share_rank: int = 10
    yards_rank: int = 10
    td_rank: int = 10
    separation_rank: int = 10
    defense_rank: int = 22
    min_targets: int = 50


class TEThresholds(BaseModel):
    target_share_rank: int = 8
    yards_rank: int = 8
    td_rank: int = 8
    red_zone_rank: int = 8
    defense_rank: int = 22
    min_targets: int = 40


class EPAThresholds(BaseModel):
    offense_rank: int = 10
    # Rank 1 = allows the most EPA
    defense_allowed_rank: int = 10
    min_plays: int = 50


class PressureThresholds(BaseModel):
    pressure_rank: int = 10
    pass_block_rank: int = 22
    # QB passer rating under pressure below this is a vulnerability
    pressured_rating: float = 60.0
    pressured_rating_floor: float = 30.0


class WeatherThresholds(BaseModel):
    wind_mph: float = 15.0
    wind_ceiling_mph: float = 30.0
    cold_f: float = 32.0
    cold_ceiling_f: float = 0.0
    precip_pct: float = 50.0
    precip_ceiling_pct: float = 100.0


class InjuryThresholds(BaseModel):
    material_statuses: list[str] = Field(default_factory=lambda: ["OUT", "DOUBTFUL"])
    # Any absence at these positions is material
    always_material: list[str] = Field(default_factory=lambda: ["QB"])
    # Material only for starters and rotation players
    conditional_material: list[str] = Field(
        default_factory=lambda: ["RB", "WR", "TE", "OL", "DL", "LB", "CB"]
    )
    # Finding strength per status
    status_weights: dict[str, float] = Field(default_factory=lambda: {"OUT": 1.0, "DOUBTFUL": 0.5})


class UsageThresholds(BaseModel):
    # Last-four-game window
    snap_pct_high: float = 0.80
    snap_pct_low: float = 0.50
    snap_pct_floor: float = 0.30
    target_share_high: float = 0.25
    target_share_elite: float = 0.30
    target_share_ceiling: float = 0.40
    # Last four vs. season delta
    trend_rising: float = 0.05
    trend_falling: float = -0.05
    trend_ceiling: float = 0.15
    min_games_in_window: int = 4
    min_routes_sample: int = 50
    min_targets_sample: int = 15


class PaceThresholds(BaseModel):
    fast_pace_rank: int = 10
    slow_pace_rank: int = 23
    projected_plays_high: float = 68.0
    projected_plays_low: float = 58.0
    projected_plays_delta: float = 5.0
    projected_plays_ceiling: float = 75.0
    projected_plays_floor: float = 51.0
    # Outdoor wind above this voids pace totals signals
    wind_mph: float = 20.0
    # League plays per team per game, by season
    league_plays_per_game: dict[int, float] = Field(default_factory=lambda: {2024: 62.5, 2025: 63.0})


class DetectorThresholds(BaseModel):
    """Numeric rule thresholds for every detector."""

    league_size: int = 32
    qb: QBThresholds = Field(default_factory=QBThresholds)
    hb: HBThresholds = Field(default_factory=HBThresholds)
    wr: WRThresholds = Field(default_factory=WRThresholds)
    te: TEThresholds = Field(default_factory=TEThresholds)
    epa: EPAThresholds = Field(default_factory=EPAThresholds)
    pressure: PressureThresholds = Field(default_factory=PressureThresholds)
    weather: WeatherThresholds = Field(default_factory=WeatherThresholds)
    injury: InjuryThresholds = Field(default_factory=InjuryThresholds)
    usage: UsageThresholds = Field(default_factory=UsageThresholds)
    pace: PaceThresholds = Field(default_factory=PaceThresholds)


class AggregatorSettings(BaseModel):
    confidence_floor: float = 0.3
    confidence_span: float = 0.6
    corroboration_bonus: float = 0.1
    corroboration_cap: int = 2
    # Strength used when a finding has no numeric distance to its ceiling
    default_strength: float = 0.5


class TierSettings(BaseModel):
    safe_min: float = 0.7
    moderate_min: float = 0.5
    aggressive_min: float = 0.3
    safe_cap: int = 3
    moderate_cap: int = 4
    aggressive_cap: int = 3
    # Base bankroll percentage per tier
    stake_safe: float = 5.0
    stake_moderate: float = 3.0
    stake_aggressive: float = 1.0


class ScriptSettings(BaseModel):
    max_scripts: int = 3
    default_max_legs: int = 4
    correlation_bonus: float = 0.15
    max_combined_confidence: float = 0.95
    correlation_factors: dict[str, float] = Field(
        default_factory=lambda: {
            "weather_cascade": 0.6,
            "defensive_funnel": 0.5,
            "volume_share": -0.2,
            "game_script": 0.4,
            "player_stack": 0.5,
        }
    )


class FeatureFlags(BaseModel):
    prop_enabled: bool = True
    story_enabled: bool = True
    parlay_enabled: bool = True
    live_data: bool = False
    llm_analyst: bool = True
    scripts_metadata: bool = True


class RequestLimits(BaseModel):
    max_input_tokens: int = 8000
    max_output_tokens: int = 2000
    max_cost_usd: float = 0.15
    timeout_seconds: float = 45.0
    # USD per 1k tokens
    input_rate: float = 0.001
    output_rate: float = 0.005


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Anthropic API key for story generation
    anthropic_api_key: str = ""
    llm_model: str = "claude-haiku-4-5-20251001"
    llm_temperature: float = 0.7

    # HTTP request timeout seconds
    http_timeout: float = 30.0

    # Schedule endpoint used to derive the current season/week
    schedule_api_url: str = ""

    # Used when the schedule is unavailable
    fallback_season: int = 2025
    fallback_week: int = 1

    # Identifies the rule set stamped into every provenance hash
    rules_version: str = "terminal-rules-v1"

    # Bounded profile memory
    memory_max_profiles: int = 100
    memory_max_bytes: int = 1_000_000

    # Leg guard tolerance when comparing a team total to the game total
    leg_guard_tolerance: float = 0.01

    flags: FeatureFlags = Field(default_factory=FeatureFlags)
    limits: RequestLimits = Field(default_factory=RequestLimits)
    thresholds: DetectorThresholds = Field(default_factory=DetectorThresholds)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    tiers: TierSettings = Field(default_factory=TierSettings)
    scripts: ScriptSettings = Field(default_factory=ScriptSettings)

    @field_validator("llm_temperature")
    @classmethod
    def _temperature_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"llm_temperature must be in [0, 1], got {v}")
        return v

    @field_validator("memory_max_profiles", "memory_max_bytes")
    @classmethod
    def _memory_bound_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"memory bounds must be > 0, got {v}")
        return v

    @field_validator("fallback_week")
    @classmethod
    def _week_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"fallback_week must be > 0, got {v}")
        return v

    @field_validator("leg_guard_tolerance")
    @classmethod
    def _tolerance_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"leg_guard_tolerance must be >= 0, got {v}")
        return v


def get_settings() -> Settings:
    """Get a settings instance from the environment."""
    return Settings()
