"""Built-in matchup snapshots used when no context file is supplied.

Keys follow the MatchupContext.from_dict layout. Snapshot timestamps are
fixed so finding ids (and therefore provenance hashes) are reproducible.
"""

from __future__ import annotations

from gridiron_edge.common.types import JsonDict

CHAMPIONSHIP_TIMESTAMP = 1769299200000  # 2026-01-25 00:00 UTC
CHAMPIONSHIP_VERSION = "2025-week-21-championship"

# AFC Championship: NE @ DEN
NE_AT_DEN: JsonDict = {
    "home_team": "DEN",
    "away_team": "NE",
    "players": {
        "DEN": [
            {
                "name": "Jarrett Stidham",
                "position": "QB",
                "qb_rating_rank": 28,
                "yards_per_attempt_rank": 24,
                "turnover_pct_rank": 18,
                "attempts": 66,
            },
            {
                "name": "Courtland Sutton",
                "position": "WR",
                "target_share_rank": 9,
                "receiving_yards_rank": 14,
                "targets": 118,
            },
        ],
        "NE": [
            {
                "name": "Drake Maye",
                "position": "QB",
                "qb_rating_rank": 1,
                "yards_per_attempt_rank": 3,
                "attempts": 520,
            },
            {
                "name": "DeMario Douglas",
                "position": "WR",
                "receiving_epa_rank": 8,
                "target_share_rank": 5,
                "separation_rank": 6,
                "targets": 110,
            },
            {
                "name": "Kayshon Boutte",
                "position": "WR",
                "receiving_epa_rank": 12,
                "red_zone_target_rank": 8,
                "targets": 95,
            },
        ],
    },
    "team_stats": {
        "DEN": {
            "pass_defense_rank": 4,
            "epa_allowed_to_wr_rank": 9,
            "pressure_rate_rank": 7,
            "pass_block_win_rate_rank": 25,
            "qb_name": "Jarrett Stidham",
            "qb_passer_rating_under_pressure": 52.0,
        },
        "NE": {
            "epa_allowed_to_wr_rank": 22,
            "pressure_rate_rank": 9,
            "pass_block_win_rate_rank": 14,
            "qb_name": "Drake Maye",
        },
    },
    "weather": {
        "temperature_f": 35,
        "wind_mph": 8,
        "precipitation_chance": 10,
        "indoor": False,
        "stadium": "Empower Field at Mile High",
    },
    "data_timestamp": CHAMPIONSHIP_TIMESTAMP,
    "data_version": CHAMPIONSHIP_VERSION,
    "game_total": 41.5,
    "team_totals": {"DEN": 18.0, "NE": 23.0},
}

# NFC Championship: LAR @ SEA
LAR_AT_SEA: JsonDict = {
    "home_team": "SEA",
    "away_team": "LAR",
    "players": {
        "SEA": [
            {
                "name": "Sam Darnold",
                "position": "QB",
                "qb_rating_rank": 9,
                "yards_per_attempt_rank": 12,
                "attempts": 480,
            },
            {
                "name": "Jaxon Smith-Njigba",
                "position": "WR",
                "receiving_epa_rank": 6,
                "target_share_rank": 3,
                "separation_rank": 4,
                "targets": 125,
            },
            {
                "name": "Kenneth Walker III",
                "position": "HB",
                "rushing_epa_rank": 5,
                "rush_yards_rank": 8,
                "carries": 245,
                "rushes": 245,
            },
        ],
        "LAR": [
            {
                "name": "Matthew Stafford",
                "position": "QB",
                "qb_rating_rank": 4,
                "yards_per_attempt_rank": 2,
                "attempts": 545,
            },
            {
                "name": "Puka Nacua",
                "position": "WR",
                "receiving_epa_rank": 2,
                "target_share_rank": 1,
                "separation_rank": 3,
                "targets": 140,
            },
            {
                "name": "Cooper Kupp",
                "position": "WR",
                "receiving_epa_rank": 7,
                "red_zone_target_rank": 4,
                "targets": 115,
            },
        ],
    },
    "team_stats": {
        "SEA": {
            "pass_defense_rank": 2,
            "epa_allowed_to_wr_rank": 5,
            "pressure_rate_rank": 4,
            "qb_name": "Sam Darnold",
        },
        "LAR": {
            "epa_allowed_to_rb_rank": 18,
            "te_defense_rank": 16,
            "pressure_rate_rank": 14,
            "pass_block_win_rate_rank": 8,
            "qb_name": "Matthew Stafford",
            "qb_passer_rating_under_pressure": 85.3,
        },
    },
    "weather": {
        "temperature_f": 48,
        "wind_mph": 17,
        "precipitation_chance": 40,
        "precipitation_type": "rain",
        "indoor": False,
        "stadium": "Lumen Field",
    },
    "data_timestamp": CHAMPIONSHIP_TIMESTAMP,
    "data_version": CHAMPIONSHIP_VERSION,
    "game_total": 47.5,
    "team_totals": {"SEA": 25.0, "LAR": 22.5},
}

SAMPLE_CONTEXTS: dict[tuple[str, str], JsonDict] = {
    ("DEN", "NE"): NE_AT_DEN,
    ("SEA", "LAR"): LAR_AT_SEA,
}


def fallback_context(home: str, away: str) -> JsonDict:
    """Minimal context for matchups without a snapshot: calm weather, no stats."""
    return {
        "home_team": home,
        "away_team": away,
        "players": {home: [], away: []},
        "team_stats": {home: {}, away: {}},
        "weather": {
            "temperature_f": 55,
            "wind_mph": 5,
            "precipitation_chance": 10,
            "indoor": False,
        },
        "data_timestamp": CHAMPIONSHIP_TIMESTAMP,
        "data_version": "2025-week-21",
    }
