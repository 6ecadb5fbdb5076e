"""Typer CLI: gridiron-edge scan, build, bet, story, normalize-leg."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from gridiron_edge.errors import GridironError

app = typer.Typer(
    name="gridiron-edge",
    help="NFL matchup signal scanner, parlay script builder and betting ladders",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(error: GridironError, output: str) -> None:
    from gridiron_edge.formatters import format_json
    from gridiron_edge.provenance import generate_request_id
    from gridiron_edge.response import build_error_response

    if output == "json":
        typer.echo(format_json(build_error_response(error, generate_request_id())))
    else:
        console.print(f"[red]{error.code.value}: {error.message}[/red]")
    raise typer.Exit(code=1)


def _load_alerts(path: Path) -> list[dict]:
    """Read alerts from a JSON list or from a saved scan response."""
    from gridiron_edge.errors import RequestValidationError

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RequestValidationError(f"Could not read alerts from {path}", {"reason": str(exc)}) from exc
    if isinstance(data, dict):
        data = data.get("alerts", [])
    if not isinstance(data, list):
        raise RequestValidationError(f"{path} does not contain an alert list")
    return data


@app.command()
def scan(
    matchup: str = typer.Argument(help='Game, e.g. "NE @ DEN" or "Seahawks vs Rams"'),
    agents: Optional[str] = typer.Option(
        None, "--agents", "-a",
        help="Comma-separated agents to run (epa,pressure,weather,qb,hb,wr,te,injury,usage,pace)",
    ),
    mode: str = typer.Option("prop", "--mode", help="Run mode: prop, story, parlay"),
    context: Optional[Path] = typer.Option(
        None, "--context", "-c", help="JSON matchup context file (defaults to built-in snapshot)",
    ),
    output: str = typer.Option(
        "table", "--output", "-o",
        help="Output format: table, json, csv",
    ),
) -> None:
    """Run the detectors over a matchup and list the resulting alerts."""

    async def _run() -> None:
        from gridiron_edge.formatters import format_alerts_csv, format_alerts_table, format_json
        from gridiron_edge.payloads import ScanRequest, parse_request
        from gridiron_edge.pipeline import run_scan

        payload: dict[str, object] = {"matchup": matchup, "mode": mode}
        if agents:
            payload["agent_ids"] = [a.strip().lower() for a in agents.split(",") if a.strip()]
        request = parse_request(ScanRequest, payload)
        response = await run_scan(request, context_path=context)

        if output == "json":
            typer.echo(format_json(response))
        elif output == "csv":
            typer.echo(format_alerts_csv(response))
        else:
            format_alerts_table(response, console)

    try:
        asyncio.run(_run())
    except GridironError as exc:
        _fail(exc, output)


@app.command()
def build(
    matchup: str = typer.Argument(help='Game, e.g. "NE @ DEN"'),
    alerts: Optional[Path] = typer.Option(
        None, "--alerts", help="Alerts JSON (scan output); scans the matchup when omitted",
    ),
    max_legs: int = typer.Option(4, "--max-legs", help="Legs per script (2-6)"),
    risk: str = typer.Option("moderate", "--risk", help="conservative, moderate or aggressive"),
    context: Optional[Path] = typer.Option(None, "--context", "-c", help="JSON matchup context file"),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
) -> None:
    """Group correlated alerts into parlay scripts."""

    async def _run() -> None:
        from gridiron_edge.formatters import format_json, format_scripts_table
        from gridiron_edge.payloads import BuildRequest, parse_request
        from gridiron_edge.pipeline import run_build

        request = parse_request(
            BuildRequest,
            {
                "matchup": matchup,
                "alerts": _load_alerts(alerts) if alerts else [],
                "max_legs": max_legs,
                "risk_preference": risk,
            },
        )
        response = await run_build(request, context_path=context)

        if output == "json":
            typer.echo(format_json(response))
        else:
            format_scripts_table(response, console)

    try:
        asyncio.run(_run())
    except GridironError as exc:
        _fail(exc, output)


@app.command()
def bet(
    alerts: Path = typer.Option(..., "--alerts", help="Alerts JSON (scan output)"),
    max_rungs: int = typer.Option(3, "--max-rungs", help="Rungs per ladder (1-5)"),
    aggressive: bool = typer.Option(
        True, "--aggressive/--no-aggressive", help="Include the aggressive tier",
    ),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
) -> None:
    """Organize alerts into safe, moderate and aggressive ladders."""

    async def _run() -> None:
        from gridiron_edge.formatters import format_json, format_ladders_table
        from gridiron_edge.payloads import BetRequest, parse_request
        from gridiron_edge.pipeline import run_bet

        request = parse_request(
            BetRequest,
            {
                "alerts": _load_alerts(alerts),
                "max_rungs": max_rungs,
                "include_aggressive": aggressive,
            },
        )
        response = await run_bet(request)

        if output == "json":
            typer.echo(format_json(response))
        else:
            format_ladders_table(response, console)

    try:
        asyncio.run(_run())
    except GridironError as exc:
        _fail(exc, output)


@app.command()
def story(
    matchup: str = typer.Argument(help='Game, e.g. "LAR @ SEA"'),
    line_focus: str = typer.Option("", "--line-focus", help="A line the story must use"),
    angle: Optional[list[str]] = typer.Option(None, "--angle", help="Story angle (repeatable)"),
    voice: str = typer.Option("analyst", "--voice", help="analyst, hype or coach"),
    odds_file: Optional[Path] = typer.Option(
        None, "--odds-file", help="Sportsbook odds paste used to reprice legs",
    ),
    profile: Optional[str] = typer.Option(None, "--profile", help="Preference profile id"),
    context: Optional[Path] = typer.Option(None, "--context", "-c", help="JSON matchup context file"),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
) -> None:
    """Generate narrative parlay scripts with the configured model."""

    async def _run() -> None:
        from gridiron_edge.formatters import format_json, format_story
        from gridiron_edge.payloads import StoryRequest, parse_request
        from gridiron_edge.pipeline import run_story

        request = parse_request(
            StoryRequest,
            {
                "matchup": matchup,
                "line_focus": line_focus,
                "angles": angle or [],
                "voice": voice,
                "odds_paste": odds_file.read_text(encoding="utf-8") if odds_file else None,
                "profile": profile,
            },
        )
        response = await run_story(request, context_path=context)

        if output == "json":
            typer.echo(format_json(response))
        else:
            format_story(response, console)

    try:
        asyncio.run(_run())
    except GridironError as exc:
        _fail(exc, output)


@app.command(name="normalize-leg")
def normalize_leg(
    market: str = typer.Argument(help='Leg market, e.g. "Team Total"'),
    selection: str = typer.Argument(help='Leg selection, e.g. "Over 44.5"'),
    game_total: Optional[float] = typer.Option(None, "--game-total", help="Posted game total"),
    tolerance: Optional[float] = typer.Option(None, "--tolerance", help="Match tolerance"),
) -> None:
    """Show how the leg guard would display one leg."""
    from gridiron_edge.config import get_settings
    from gridiron_edge.story.leg_guard import GuardContext, normalize_team_total

    guard = GuardContext(
        game_total=game_total,
        tolerance=tolerance if tolerance is not None else get_settings().leg_guard_tolerance,
    )
    new_market, new_selection = normalize_team_total(market, selection, guard)
    typer.echo(f"{new_market}: {new_selection}")


if __name__ == "__main__":
    app()
