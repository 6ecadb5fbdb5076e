"""AgentType → Detector dispatch registry."""

from __future__ import annotations

from gridiron_edge.agents.base import AgentType, Detector
from gridiron_edge.agents.epa import EPADetector
from gridiron_edge.agents.hb import HBDetector
from gridiron_edge.agents.injury import InjuryDetector
from gridiron_edge.agents.pace import PaceDetector
from gridiron_edge.agents.pressure import PressureDetector
from gridiron_edge.agents.qb import QBDetector
from gridiron_edge.agents.te import TEDetector
from gridiron_edge.agents.usage import UsageDetector
from gridiron_edge.agents.weather import WeatherDetector
from gridiron_edge.agents.wr import WRDetector
from gridiron_edge.config import DetectorThresholds

# Detection order; alerts inherit it.
ALL_AGENTS: tuple[AgentType, ...] = (
    AgentType.EPA,
    AgentType.PRESSURE,
    AgentType.WEATHER,
    AgentType.QB,
    AgentType.HB,
    AgentType.WR,
    AgentType.TE,
    AgentType.INJURY,
    AgentType.USAGE,
    AgentType.PACE,
)

# Roster positions each player-level agent evaluates.
AGENT_POSITIONS: dict[AgentType, tuple[str, ...]] = {
    AgentType.EPA: (),
    AgentType.QB: ("QB",),
    AgentType.HB: ("HB", "RB"),
    AgentType.WR: ("WR",),
    AgentType.TE: ("TE",),
    AgentType.USAGE: ("HB", "RB", "WR", "TE"),
}


def build_registry(thresholds: DetectorThresholds) -> dict[AgentType, Detector]:
    """Instantiate every detector against one threshold configuration."""
    n = thresholds.league_size
    return {
        AgentType.EPA: EPADetector(thresholds.epa, n),
        AgentType.PRESSURE: PressureDetector(thresholds.pressure, n),
        AgentType.WEATHER: WeatherDetector(thresholds.weather, n),
        AgentType.QB: QBDetector(thresholds.qb, n),
        AgentType.HB: HBDetector(thresholds.hb, n),
        AgentType.WR: WRDetector(thresholds.wr, n),
        AgentType.TE: TEDetector(thresholds.te, n),
        AgentType.INJURY: InjuryDetector(thresholds.injury, n),
        AgentType.USAGE: UsageDetector(thresholds.usage, n),
        AgentType.PACE: PaceDetector(thresholds.pace, n),
    }


def get_detector(agent: AgentType, thresholds: DetectorThresholds) -> Detector:
    return build_registry(thresholds)[agent]
