"""Matchup string parsing, team alias resolution and context loading."""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path

from gridiron_edge.agents.runner import MatchupContext
from gridiron_edge.common.types import TeamPair
from gridiron_edge.errors import RequestValidationError
from gridiron_edge.samples import SAMPLE_CONTEXTS, fallback_context

logger = logging.getLogger(__name__)

TEAM_ALIASES: dict[str, str] = {
    # NFC West
    "49ers": "SF", "niners": "SF", "san francisco": "SF",
    "seahawks": "SEA", "seattle": "SEA",
    "cardinals": "ARI", "arizona": "ARI",
    "rams": "LAR", "los angeles rams": "LAR",
    # AFC West
    "chiefs": "KC", "kansas city": "KC",
    "raiders": "LV", "las vegas": "LV",
    "broncos": "DEN", "denver": "DEN",
    "chargers": "LAC", "los angeles chargers": "LAC",
    # NFC East
    "cowboys": "DAL", "dallas": "DAL",
    "eagles": "PHI", "philadelphia": "PHI",
    "giants": "NYG", "new york giants": "NYG",
    "commanders": "WAS", "washington": "WAS",
    # NFC North
    "bears": "CHI", "chicago": "CHI",
    "lions": "DET", "detroit": "DET",
    "packers": "GB", "green bay": "GB",
    "vikings": "MIN", "minnesota": "MIN",
    # NFC South
    "falcons": "ATL", "atlanta": "ATL",
    "panthers": "CAR", "carolina": "CAR",
    "saints": "NO", "new orleans": "NO",
    "buccaneers": "TB", "bucs": "TB", "tampa bay": "TB",
    # AFC North
    "ravens": "BAL", "baltimore": "BAL",
    "bengals": "CIN", "cincinnati": "CIN",
    "browns": "CLE", "cleveland": "CLE",
    "steelers": "PIT", "pittsburgh": "PIT",
    # AFC South
    "texans": "HOU", "houston": "HOU",
    "colts": "IND", "indianapolis": "IND",
    "jaguars": "JAX", "jacksonville": "JAX",
    "titans": "TEN", "tennessee": "TEN",
    # AFC East
    "bills": "BUF", "buffalo": "BUF",
    "dolphins": "MIA", "miami": "MIA",
    "patriots": "NE", "new england": "NE",
    "jets": "NYJ", "new york jets": "NYJ",
}

_AT_RE = re.compile(r"^(.+?)\s*@\s*(.+)$")
_VS_RE = re.compile(r"^(.+?)\s+vs\.?\s+(.+)$", re.IGNORECASE)


def normalize_team_name(name: str) -> str:
    """Resolve a nickname or city to its abbreviation; unknown names are upper-cased."""
    cleaned = name.strip()
    return TEAM_ALIASES.get(cleaned.lower(), cleaned.upper())


def parse_matchup(matchup: str) -> TeamPair:
    """Parse "AWAY @ HOME" or "HOME vs AWAY" into a (home, away) pair.

    Raises:
        RequestValidationError: when neither form matches.
    """
    text = matchup.strip()
    match = _AT_RE.match(text)
    if match:
        away, home = match.group(1), match.group(2)
        return normalize_team_name(home), normalize_team_name(away)

    match = _VS_RE.match(text)
    if match:
        home, away = match.group(1), match.group(2)
        return normalize_team_name(home), normalize_team_name(away)

    raise RequestValidationError(
        "Invalid matchup format",
        {
            "matchup": matchup,
            "hint": 'Use "Team1 @ Team2" or "Team1 vs Team2"',
            "examples": ["SF @ SEA", "49ers @ Seahawks", "Chiefs vs Raiders"],
        },
    )


def load_matchup_context(
    home: str,
    away: str,
    path: str | Path | None = None,
) -> MatchupContext:
    """Load the stat snapshot for a game.

    A JSON file at ``path`` wins; otherwise the built-in snapshot for the
    (home, away) pair is used, falling back to an empty context.
    """
    if path is not None:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RequestValidationError(
                f"Could not read matchup context from {path}", {"reason": str(exc)}
            ) from exc
        data.setdefault("home_team", home)
        data.setdefault("away_team", away)
        logger.info("Loaded matchup context from %s", path)
        return MatchupContext.from_dict(data)

    sample = SAMPLE_CONTEXTS.get((home, away))
    if sample is None:
        logger.info("No snapshot for %s @ %s; using empty context", away, home)
        return MatchupContext.from_dict(fallback_context(home, away))
    return MatchupContext.from_dict(copy.deepcopy(sample))
