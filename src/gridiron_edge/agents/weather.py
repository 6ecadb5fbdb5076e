"""Weather detector: wind, cold and precipitation at outdoor venues."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import AgentType, Finding, ThresholdContext, make_finding, stat
from gridiron_edge.config import WeatherThresholds

logger = logging.getLogger(__name__)


class WeatherDetector:
    """Game-level detector; ``subject`` is the weather block, no opponent.

    All comparisons are strict: exactly 15 mph wind does not qualify.
    """

    agent = AgentType.WEATHER

    def __init__(self, thresholds: WeatherThresholds, league_size: int = 32) -> None:
        self.t = thresholds

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        t = self.t
        if subject.get("indoor"):
            logger.debug("Indoor venue, weather agent silent")
            return
        venue = str(subject.get("stadium") or "game")

        wind = stat(subject, "wind_mph")
        if wind is not None and wind > t.wind_mph:
            yield make_finding(
                self.agent, "wind", "weather_wind", venue,
                "wind_mph", wind, t.wind_mph, t.wind_ceiling_mph,
                f"wind > {t.wind_mph:g} mph",
                f"{wind:g} mph wind - affects deep passing",
                context,
            )

        temp = stat(subject, "temperature_f")
        if temp is not None and temp < t.cold_f:
            yield make_finding(
                self.agent, "cold", "weather_cold", venue,
                "temperature_f", temp, t.cold_f, t.cold_ceiling_f,
                f"temp < {t.cold_f:g}F",
                f"{temp:g}F - cold weather game",
                context,
            )

        precip = stat(subject, "precipitation_chance")
        if precip is not None and precip > t.precip_pct:
            kind = subject.get("precipitation_type") or "precipitation"
            yield make_finding(
                self.agent, "precip", "weather_rain", venue,
                "precipitation_chance", precip, t.precip_pct, t.precip_ceiling_pct,
                f"precipitation > {t.precip_pct:g}%",
                f"{precip:g}% chance of {kind}",
                context,
            )
