"""Parse pasted sportsbook prices and match them to story legs."""

from __future__ import annotations

import re
from dataclasses import dataclass

_ODDS_RE = re.compile(r"([+-]\d{3,4})")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")

MATCH_THRESHOLD = 0.6


@dataclass(frozen=True)
class OddsEntry:
    selection_text: str
    american_odds: int


def parse_odds_paste(text: str | None) -> list[OddsEntry]:
    """One entry per line holding a price like -110 or +145.

    Lines without a price, or with nothing left once the price is removed,
    are skipped.
    """
    if not text:
        return []
    entries: list[OddsEntry] = []
    for raw in text.splitlines():
        line = raw.strip()
        match = _ODDS_RE.search(line)
        if not match:
            continue
        selection = line.replace(match.group(1), "", 1).strip()
        if not selection:
            continue
        entries.append(OddsEntry(selection, int(match.group(1))))
    return entries


def normalize_text(value: str) -> str:
    value = _NON_ALNUM_RE.sub(" ", value.lower())
    return _SPACE_RE.sub(" ", value).strip()


def similarity_score(a: str, b: str) -> float:
    """1.0 exact, 0.9 containment, else token Jaccard."""
    na, nb = normalize_text(a), normalize_text(b)
    if not na or not nb:
        return 0.0
    if na == nb:
        return 1.0
    if na in nb or nb in na:
        return 0.9
    sa, sb = set(na.split()), set(nb.split())
    union = sa | sb
    return len(sa & sb) / len(union) if union else 0.0


def match_odds(
    selection: str,
    entries: list[OddsEntry],
    threshold: float = MATCH_THRESHOLD,
) -> OddsEntry | None:
    best: OddsEntry | None = None
    best_score = 0.0
    for entry in entries:
        score = similarity_score(selection, entry.selection_text)
        if score > best_score:
            best, best_score = entry, score
    if best is not None and best_score >= threshold:
        return best
    return None
