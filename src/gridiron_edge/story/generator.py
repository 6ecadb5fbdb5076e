"""Generator boundary: prompt in, validated and repriced story payload out."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Awaitable, Callable

from pydantic import ValidationError

from gridiron_edge.common.types import JsonDict
from gridiron_edge.errors import ErrorCode, GeneratorError
from gridiron_edge.story.leg_guard import GuardContext, apply_leg_guard
from gridiron_edge.story.odds import match_odds, parse_odds_paste
from gridiron_edge.story.parlay import compute_parlay_math, math_differs
from gridiron_edge.story.schema import (
    OFFER_OPPOSITE,
    REQUIRED_NOTES,
    OddsSource,
    StoryPayload,
    StoryScript,
)

logger = logging.getLogger(__name__)

# (system, user) -> raw model text
AskFn = Callable[[str, str], Awaitable[str]]

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

SYSTEM_PROMPT = (
    "You build correlated, narrative parlay scripts for one NFL matchup. "
    "Return ONLY valid JSON matching the schema. No extra keys, no prose outside JSON. "
    "Avoid lock or guarantee language and do not speculate about injuries."
)


def build_story_prompt(
    matchup: str,
    line_focus: str = "",
    angles: list[str] | None = None,
    voice: str = "analyst",
    alert_claims: list[str] | None = None,
    memory: JsonDict | None = None,
) -> str:
    parts = [f"Matchup: {matchup}"]
    if line_focus:
        parts.append(f"Line focus: {line_focus}. Include exactly one leg using it verbatim.")
    if angles:
        parts.append(f"Angles: {', '.join(angles)}")
    parts.append(f"Voice: {voice}")
    if alert_claims:
        parts.append("Signals:\n" + "\n".join(f"- {c}" for c in alert_claims))
    if memory:
        parts.append(f"User preferences: {json.dumps(memory, sort_keys=True)}")
    parts.append(
        "Schema: {assumptions: {matchup, line_focus, angles[], voice}, scripts: 1-3 x "
        "{title, narrative, legs: 3-5 x {market, selection, american_odds, odds_source}, "
        "parlay_math: {stake: 1, leg_decimals[], product_decimal, payout, profit, steps}, "
        f"notes: {json.dumps(list(REQUIRED_NOTES), ensure_ascii=False)}, "
        f"offer_opposite: {json.dumps(OFFER_OPPOSITE)}}}}}"
    )
    return "\n".join(parts)


def parse_story_payload(raw: str) -> StoryPayload:
    """Decode and validate model output; both failures are recoverable."""
    text = _FENCE_RE.sub("", raw.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GeneratorError(
            ErrorCode.BAD_WRAPPER_RESPONSE, f"Model output is not JSON: {exc.msg}"
        ) from exc
    try:
        return StoryPayload.model_validate(data)
    except ValidationError as exc:
        raise GeneratorError(
            ErrorCode.BAD_PARSED_SCHEMA,
            "Model output does not match the story schema",
            {"errors": [e["msg"] for e in exc.errors()][:10]},
        ) from exc


def _with_required_notes(script: StoryScript) -> list[str]:
    notes = list(script.notes)
    lowered = {n.lower() for n in notes}
    for required in REQUIRED_NOTES:
        if required.lower() not in lowered:
            notes.append(required)
    return notes


def finalize_story(
    story: StoryPayload,
    odds_paste: str | None = None,
    guard: GuardContext | None = None,
) -> StoryPayload:
    """Reprice from pasted odds, fix the math, enforce notes, then guard legs."""
    entries = parse_odds_paste(odds_paste)
    scripts = []
    for script in story.scripts:
        legs = []
        for leg in script.legs:
            entry = match_odds(f"{leg.market} {leg.selection}", entries) if entries else None
            if entry is not None:
                leg = leg.model_copy(
                    update={
                        "american_odds": float(entry.american_odds),
                        "odds_source": OddsSource.USER_SUPPLIED,
                    }
                )
            legs.append(leg)

        math = compute_parlay_math([leg.american_odds for leg in legs])
        if math_differs(math, script.parlay_math):
            logger.info("Recomputed parlay math for %r", script.title)
        scripts.append(
            script.model_copy(
                update={"legs": legs, "parlay_math": math, "notes": _with_required_notes(script)}
            )
        )

    story = story.model_copy(update={"scripts": scripts})
    if guard is not None:
        story = apply_leg_guard(story, guard)
    return story


async def generate_story(
    prompt: str,
    ask: AskFn,
    odds_paste: str | None = None,
    guard: GuardContext | None = None,
) -> StoryPayload:
    raw = await ask(SYSTEM_PROMPT, prompt)
    story = parse_story_payload(raw)
    return finalize_story(story, odds_paste=odds_paste, guard=guard)
