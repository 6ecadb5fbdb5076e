"""Injury detector: material absences from curated injury reports.

Reports come either as free text ("Patrick Mahomes (QB) - OUT") or as
mappings with ``player``, ``status``, ``position`` and ``designation``.
An absence is material when the player is OUT or DOUBTFUL and is a
quarterback, or a starter/rotation player at a conditional position.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping

from gridiron_edge.agents.base import AgentType, Finding, SourceType, ThresholdContext, make_finding
from gridiron_edge.config import InjuryThresholds

logger = logging.getLogger(__name__)

POSITION_ALIASES: dict[str, str] = {
    "QB": "QB",
    "RB": "RB", "HB": "RB", "FB": "RB",
    "WR": "WR",
    "TE": "TE",
    "OT": "OL", "OG": "OL", "C": "OL", "OL": "OL", "T": "OL", "G": "OL",
    "DE": "DL", "DT": "DL", "NT": "DL", "DL": "DL",
    "LB": "LB", "ILB": "LB", "OLB": "LB", "MLB": "LB",
    "CB": "CB",
    "S": "S", "FS": "S", "SS": "S",
    "K": "K", "PK": "K",
    "P": "P",
}

FINDING_TYPES: dict[str, str] = {
    "QB": "qb_unavailable",
    "OL": "oline_unavailable",
    "DL": "defensive_playmaker_unavailable",
    "LB": "defensive_playmaker_unavailable",
    "CB": "defensive_playmaker_unavailable",
    "S": "defensive_playmaker_unavailable",
}

_STATUS_RE = re.compile(r"\b(OUT|DOUBTFUL|QUESTIONABLE|PROBABLE)\b", re.IGNORECASE)
_PAREN_POSITION_RE = re.compile(r"\(([A-Z]{1,3})\)")
# Upper-case tokens only; initials such as "D.K." are not positions
_POSITION_RE = re.compile(
    r"(?<![\w.])(QB|RB|HB|FB|WR|TE|OT|OG|OL|DE|DT|NT|DL|ILB|OLB|MLB|LB|CB|FS|SS|PK)(?![\w.])"
)
_PAREN_RE = re.compile(r"\(.*?\)")
_BODY_PART_RE = re.compile(
    r"\s*\b(knee|ankle|hamstring|back|shoulder|concussion|illness|personal)\b.*$", re.IGNORECASE
)
_DESIGNATION_RE = re.compile(r"\b(starter|starting|rotation|depth|backup)\b", re.IGNORECASE)


def parse_status(text: str) -> str:
    upper = text.upper()
    for status in ("OUT", "DOUBTFUL", "QUESTIONABLE", "PROBABLE"):
        if status in upper:
            return status
    return "ACTIVE"


def parse_position(text: str | None) -> str | None:
    if not text:
        return None
    return POSITION_ALIASES.get(text.strip().upper())


def parse_designation(text: str | None) -> str:
    if not text:
        return "unknown"
    lowered = text.lower()
    if "start" in lowered:
        return "starter"
    if "rotat" in lowered:
        return "rotation"
    if "depth" in lowered or "backup" in lowered:
        return "depth"
    return "unknown"


def parse_report(report: str) -> dict[str, str] | None:
    """Split a free-text report into player, status and position.

    Returns None when the report carries no status or no usable name.
    """
    status = _STATUS_RE.search(report)
    if status is None:
        return None

    position = _PAREN_POSITION_RE.search(report) or _POSITION_RE.search(report)
    raw_position = position.group(1) if position else ""

    name = _STATUS_RE.sub(" ", report)
    name = _PAREN_RE.sub(" ", name)
    name = re.sub(r"\s*-\s*", " ", name)
    if raw_position:
        name = re.sub(rf"(?<![\w.]){raw_position}(?![\w.])", " ", name, count=1)
    name = _DESIGNATION_RE.sub(" ", name)
    name = _BODY_PART_RE.sub("", name)
    name = " ".join(name.replace(",", " ").split())
    if len(name) < 2:
        return None

    return {"player": name, "status": status.group(1).upper(), "position": raw_position}


class InjuryDetector:
    """Player-level detector over one injury report; no opponent."""

    agent = AgentType.INJURY

    def __init__(self, thresholds: InjuryThresholds, league_size: int = 32) -> None:
        self.t = thresholds

    def is_material(self, status: str, position: str | None, designation: str) -> bool:
        t = self.t
        if status not in t.material_statuses:
            return False
        if position is None:
            return designation == "starter"
        if position in t.always_material:
            return True
        if position in t.conditional_material:
            return designation in ("starter", "rotation")
        return False

    def detect(
        self,
        subject: Mapping[str, object],
        opponent: Mapping[str, object] | None,
        context: ThresholdContext,
    ) -> Iterator[Finding]:
        team = str(subject.get("team") or "")
        report = subject.get("report")
        if isinstance(report, str):
            entry = parse_report(report)
            if entry is None:
                logger.debug("Unparseable injury report: %r", report)
                return
            designation = parse_designation(str(subject.get("designation") or report))
        else:
            player = subject.get("player")
            if not player or not subject.get("status"):
                return
            entry = {
                "player": str(player),
                "status": str(subject["status"]),
                "position": str(subject.get("position") or ""),
            }
            designation = parse_designation(str(subject.get("designation") or ""))

        player = entry["player"]
        status = parse_status(entry["status"])
        position = parse_position(entry["position"])
        if not self.is_material(status, position, designation):
            logger.debug(
                "Skipping non-material injury: %s (%s, %s, %s)",
                player, status, position or "unknown", designation,
            )
            return

        type_ = FINDING_TYPES.get(position or "", "skill_player_unavailable")
        weight = self.t.status_weights.get(status, 0.0)
        yield make_finding(
            self.agent, "status", type_, player,
            "status_weight", weight, 0.0, 1.0,
            f"status in [{', '.join(self.t.material_statuses)}]",
            f"{player} ({position or 'unknown'}, {team or '?'}) is {status}",
            context,
            value_str=status,
            source_type=SourceType.NOTES,
            source_ref=f"notes://injuries/{team}",
        )
