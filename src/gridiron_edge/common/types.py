"""Shared type aliases and small text helpers."""

from __future__ import annotations

import re
from typing import TypeAlias

# JSON-like dict
JsonDict: TypeAlias = dict[str, object]

# Team abbreviation pair (home, away)
TeamPair: TypeAlias = tuple[str, str]

_SLUG_RE = re.compile(r"\s+")


def slugify(name: str) -> str:
    """Lowercase a name and collapse whitespace runs to dashes."""
    return _SLUG_RE.sub("-", name.strip().lower())


def ordinal(n: int | float | None) -> str:
    """Format a rank as 1st, 2nd, 3rd, 4th ... 11th, 12th, 13th, 21st."""
    if n is None:
        return "?"
    n = int(n)
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` into [low, high]."""
    return max(low, min(high, value))
