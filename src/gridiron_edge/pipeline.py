"""Top-level pipeline orchestrator.

Wires together: matchup resolution → detectors → alert aggregation →
{scripts, ladders, story}. Each action returns a JSON-ready response dict;
failures surface as GridironError subclasses for the caller to envelope.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from gridiron_edge.agents.base import AgentType
from gridiron_edge.agents.runner import AgentRunResult, MatchupContext, run_agents
from gridiron_edge.alerts.aggregator import aggregate_findings
from gridiron_edge.alerts.models import Alert
from gridiron_edge.common.llm import ask_model
from gridiron_edge.common.types import JsonDict
from gridiron_edge.config import Settings, get_settings
from gridiron_edge.errors import ErrorCode, GeneratorError, RequestValidationError, check_cancelled
from gridiron_edge.guardrails import check_prompt, check_request_limits, estimate_tokens
from gridiron_edge.matchups import load_matchup_context, parse_matchup
from gridiron_edge.memory import get_memory, sanitize_memory_for_prompt
from gridiron_edge.payloads import AlertInput, BetRequest, BuildRequest, ScanRequest, StoryRequest
from gridiron_edge.provenance import (
    Provenance,
    ProvenanceInputs,
    build_provenance,
    generate_request_id,
    hash_payload,
)
from gridiron_edge.recommend.correlation import build_scripts
from gridiron_edge.recommend.tiering import build_ladders
from gridiron_edge.response import build_terminal_response
from gridiron_edge.schedule import resolve_schedule
from gridiron_edge.story.generator import SYSTEM_PROMPT, build_story_prompt, generate_story
from gridiron_edge.story.leg_guard import GuardContext

logger = logging.getLogger(__name__)
console = Console(stderr=True)


@dataclass
class ScanResult:
    """Intermediate output shared by every action that starts from a matchup."""

    home: str
    away: str
    context: MatchupContext
    run: AgentRunResult
    alerts: list[Alert]
    warnings: list[str] = field(default_factory=list)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _require_mode(mode: str, settings: Settings) -> None:
    enabled = {
        "prop": settings.flags.prop_enabled,
        "story": settings.flags.story_enabled,
        "parlay": settings.flags.parlay_enabled,
    }
    if not enabled.get(mode, False):
        raise RequestValidationError(f"Mode '{mode}' is disabled", {"mode": mode})


def _supplied_alerts(raw: Sequence[AlertInput], settings: Settings) -> list[Alert]:
    payload = [a.model_dump(mode="json") for a in raw]
    check_request_limits(estimate_tokens(json.dumps(payload)), settings.limits)
    return [a.to_alert() for a in raw]


async def scan_matchup(
    matchup: str,
    settings: Settings,
    agent_ids: Sequence[AgentType] | None = None,
    cancel: object | None = None,
    context_path: str | Path | None = None,
) -> ScanResult:
    """Resolve the matchup, run detectors and aggregate their findings."""
    home, away = parse_matchup(matchup)
    console.print(f"[bold]Scanning {away} @ {home}...[/bold]")

    warnings: list[str] = []
    if settings.flags.live_data:
        info = await resolve_schedule(settings)
        if info.degraded:
            warnings.append(f"Schedule unavailable; using season {info.year} week {info.week}")

    context = load_matchup_context(home, away, context_path)
    check_cancelled(cancel, "scan")
    run = run_agents(context, agent_ids, thresholds=settings.thresholds, cancel=cancel)
    alerts = aggregate_findings(run.findings, settings.aggregator)
    console.print(f"  {len(run.findings)} finding(s) → {len(alerts)} alert(s)")
    return ScanResult(home, away, context, run, alerts, warnings)


def _scan_provenance(
    scan: ScanResult,
    settings: Settings,
    request_id: str,
    prompt: str = "",
    cache_hits: int = 0,
    cache_misses: int = 0,
) -> Provenance:
    return build_provenance(
        ProvenanceInputs(
            findings=scan.run.findings,
            data_version=scan.context.data_version,
            data_timestamp=scan.context.data_timestamp,
            rules_version=settings.rules_version,
            agents_invoked=scan.run.agents_invoked,
            agents_silent=scan.run.agents_silent,
            prompt=prompt,
            llm_model=settings.llm_model if prompt else "",
            llm_temperature=settings.llm_temperature if prompt else 0.0,
            cache_hits=cache_hits,
            cache_misses=cache_misses,
        ),
        request_id=request_id,
    )


async def run_scan(
    request: ScanRequest,
    settings: Settings | None = None,
    cancel: object | None = None,
    context_path: str | Path | None = None,
) -> JsonDict:
    """Scan a matchup and return the terminal response envelope."""
    settings = settings or get_settings()
    start = time.perf_counter()
    request_id = generate_request_id()
    _require_mode(request.mode, settings)

    scan = await scan_matchup(
        request.matchup, settings, request.agents, cancel=cancel, context_path=context_path
    )
    provenance = _scan_provenance(scan, settings, request_id)

    return build_terminal_response(
        alerts=scan.alerts,
        mode=request.mode,
        request_id=request_id,
        matchup=(scan.home, scan.away),
        agents_invoked=[a.value for a in scan.run.agents_invoked],
        agents_silent=[a.value for a in scan.run.agents_silent],
        provenance=provenance,
        timing_ms=_elapsed_ms(start),
        fallback=not scan.alerts,
        warnings=scan.warnings,
    )


async def run_build(
    request: BuildRequest,
    settings: Settings | None = None,
    cancel: object | None = None,
    context_path: str | Path | None = None,
) -> JsonDict:
    """Group alerts into correlated scripts.

    Alerts supplied in the request are used as-is; otherwise the matchup is
    scanned first.
    """
    settings = settings or get_settings()
    start = time.perf_counter()
    request_id = generate_request_id()
    _require_mode(request.mode, settings)

    home, away = parse_matchup(request.matchup)
    if request.alerts:
        alerts = _supplied_alerts(request.alerts, settings)
    else:
        scan = await scan_matchup(request.matchup, settings, cancel=cancel, context_path=context_path)
        alerts = scan.alerts

    scripts = build_scripts(
        alerts,
        max_legs=request.max_legs,
        settings=settings.scripts,
        rules_version=settings.rules_version,
        cancel=cancel,
    )
    console.print(f"  Built {len(scripts)} script(s) from {len(alerts)} alert(s)")

    response: JsonDict = {
        "request_id": request_id,
        "mode": request.mode,
        "matchup": {"home": home, "away": away},
        "alerts": [a.to_dict() for a in alerts],
        "risk_preference": request.risk_preference,
        "provenance_hash": hash_payload(
            {
                "alert_ids": [a.id for a in alerts],
                "scripts": [s.provenance_hash for s in scripts],
                "rules_version": settings.rules_version,
            }
        ),
        "timing_ms": _elapsed_ms(start),
    }
    if settings.flags.scripts_metadata:
        response["scripts"] = [s.to_dict() for s in scripts]
    return response


async def run_bet(
    request: BetRequest,
    settings: Settings | None = None,
    cancel: object | None = None,
) -> JsonDict:
    """Organize alerts into risk-tiered ladders."""
    settings = settings or get_settings()
    start = time.perf_counter()
    request_id = generate_request_id()

    alerts = _supplied_alerts(request.alerts, settings)

    ladders = build_ladders(
        alerts,
        max_rungs=request.max_rungs,
        include_aggressive=request.include_aggressive,
        settings=settings.tiers,
        rules_version=settings.rules_version,
        cancel=cancel,
    )
    used = {r.alert_id for ladder in ladders for r in ladder.rungs}
    alert_ids = [a.id for a in alerts]

    response: JsonDict = {
        "request_id": request_id,
        "ladders": [ladder.to_dict() for ladder in ladders],
        "alerts_used": [i for i in alert_ids if i in used],
        "alerts_excluded": [i for i in alert_ids if i not in used],
        "provenance_hash": hash_payload(
            {
                "alert_ids": alert_ids,
                "ladders": [ladder.provenance_hash for ladder in ladders],
                "rules_version": settings.rules_version,
            }
        ),
        "timing_ms": _elapsed_ms(start),
    }
    if not ladders:
        response["message"] = "No alerts qualify for betting ladders. Confidence levels may be too low."
    return response


async def run_story(
    request: StoryRequest,
    settings: Settings | None = None,
    cancel: object | None = None,
    context_path: str | Path | None = None,
) -> JsonDict:
    """Generate narrative parlay scripts for a matchup.

    Guardrails run before the model call; the returned payload is repriced
    from any pasted odds and passed through the leg guard.
    """
    settings = settings or get_settings()
    start = time.perf_counter()
    request_id = generate_request_id()
    _require_mode("story", settings)
    if not settings.flags.llm_analyst:
        raise GeneratorError(
            ErrorCode.MODEL_ERROR, "Story generation is disabled", recoverable=False
        )

    scan = await scan_matchup(request.matchup, settings, cancel=cancel, context_path=context_path)

    cache_hits = cache_misses = 0
    memory = None
    if request.profile:
        stored = get_memory(request.profile)
        if stored:
            cache_hits += 1
        else:
            cache_misses += 1
        memory = sanitize_memory_for_prompt(stored)

    prompt = build_story_prompt(
        matchup=f"{scan.away} @ {scan.home}",
        line_focus=request.line_focus,
        angles=request.angles,
        voice=request.voice.value,
        alert_claims=[a.claim for a in scan.alerts],
        memory=memory,
    )
    tokens = check_prompt(SYSTEM_PROMPT, prompt, settings.limits)
    logger.info("Story prompt ~%d tokens", tokens)
    check_cancelled(cancel, "story")

    async def ask(system: str, user: str) -> str:
        return await ask_model(system, user, settings=settings)

    guard = GuardContext(
        game_total=scan.context.game_total,
        team_totals=scan.context.team_totals,
        tolerance=settings.leg_guard_tolerance,
    )
    story = await generate_story(prompt, ask, odds_paste=request.odds_paste, guard=guard)
    console.print(f"  Generated {len(story.scripts)} story script(s)")

    provenance = _scan_provenance(
        scan, settings, request_id, prompt=prompt, cache_hits=cache_hits, cache_misses=cache_misses
    )
    response = build_terminal_response(
        alerts=scan.alerts,
        mode="story",
        request_id=request_id,
        matchup=(scan.home, scan.away),
        agents_invoked=[a.value for a in scan.run.agents_invoked],
        agents_silent=[a.value for a in scan.run.agents_silent],
        provenance=provenance,
        timing_ms=_elapsed_ms(start),
        warnings=scan.warnings,
    )
    response["story"] = story.model_dump(mode="json")
    return response
