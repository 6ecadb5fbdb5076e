"""Output formatters: Rich tables, JSON, CSV."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Mapping, Sequence
from typing import Any

from rich.console import Console
from rich.table import Table

_SEVERITY_COLORS = {"high": "red", "medium": "yellow"}
_TIER_COLORS = {"safe": "green", "moderate": "yellow", "aggressive": "red"}


def format_alerts_table(response: Mapping[str, Any], console: Console | None = None) -> None:
    """Print a scan response's alerts as a Rich table sorted by confidence."""
    if console is None:
        console = Console()

    alerts: Sequence[Mapping[str, Any]] = response.get("alerts") or []
    matchup = response.get("matchup") or {}
    title = f"{matchup.get('away', '?')} @ {matchup.get('home', '?')}"

    if not alerts:
        console.print(f"[yellow]No alerts for {title} (no thresholds cleared).[/yellow]")
        return

    table = Table(
        title=f"Gridiron Edge Alerts: {title}",
        caption=f"request {response.get('request_id', '')}",
        show_lines=True,
    )
    table.add_column("Agent", style="bold", width=8)
    table.add_column("Subject", width=22)
    table.add_column("Conf", justify="right", width=5)
    table.add_column("Severity", width=8)
    table.add_column("Market", width=28)
    table.add_column("Claim", width=50, no_wrap=False)

    for a in sorted(alerts, key=lambda a: a.get("confidence", 0.0), reverse=True):
        color = _SEVERITY_COLORS.get(str(a.get("severity")), "white")
        table.add_row(
            str(a.get("agent", "")).upper(),
            str(a.get("subject", ""))[:22],
            f"{float(a.get('confidence') or 0.0):.0%}",
            f"[{color}]{a.get('severity', '')}[/{color}]",
            str(a.get("market", ""))[:28],
            str(a.get("claim", ""))[:120],
        )

    console.print(table)

    agents = response.get("agents") or {}
    invoked = ", ".join(agents.get("invoked", [])) or "none"
    silent = ", ".join(agents.get("silent", [])) or "none"
    console.print(f"\n[dim]{len(alerts)} alert(s) | invoked: {invoked} | silent: {silent}[/dim]")
    for warning in response.get("warnings") or []:
        console.print(f"[yellow]warning:[/yellow] {warning}")


def format_scripts_table(response: Mapping[str, Any], console: Console | None = None) -> None:
    if console is None:
        console = Console()

    scripts: Sequence[Mapping[str, Any]] = response.get("scripts") or []
    if not scripts:
        console.print("[yellow]No correlated scripts (need at least two related alerts).[/yellow]")
        return

    table = Table(title="Correlated Scripts", show_lines=True)
    table.add_column("Script", style="bold", width=24)
    table.add_column("Type", width=16)
    table.add_column("Conf", justify="right", width=5)
    table.add_column("Risk", width=12)
    table.add_column("Legs", width=44, no_wrap=False)

    for s in scripts:
        legs = "\n".join(f"• {leg['market']}" for leg in s.get("legs", []))
        table.add_row(
            str(s.get("name", "")),
            str(s.get("correlation_type", "")),
            f"{float(s.get('combined_confidence') or 0.0):.0%}",
            str(s.get("risk_level", "")),
            legs,
        )

    console.print(table)


def format_ladders_table(response: Mapping[str, Any], console: Console | None = None) -> None:
    if console is None:
        console = Console()

    ladders: Sequence[Mapping[str, Any]] = response.get("ladders") or []
    if not ladders:
        console.print(f"[yellow]{response.get('message', 'No ladders built.')}[/yellow]")
        return

    table = Table(title="Betting Ladders", show_lines=True)
    table.add_column("Tier", style="bold", width=11)
    table.add_column("Stake %", justify="right", width=7)
    table.add_column("Avg P", justify="right", width=6)
    table.add_column("Rungs", width=56, no_wrap=False)

    for ladder in ladders:
        tier = str(ladder.get("tier", ""))
        color = _TIER_COLORS.get(tier, "white")
        rungs = "\n".join(
            f"• {r['market']} ({float(r.get('implied_probability') or 0.0):.0%})"
            for r in ladder.get("rungs", [])
        )
        table.add_row(
            f"[{color}]{ladder.get('name', tier)}[/{color}]",
            f"{float(ladder.get('recommended_stake_pct') or 0.0):.1f}",
            f"{float(ladder.get('total_implied_probability') or 0.0):.0%}",
            rungs,
        )

    console.print(table)
    excluded = response.get("alerts_excluded") or []
    if excluded:
        console.print(f"\n[dim]Excluded: {', '.join(excluded)}[/dim]")


def format_story(response: Mapping[str, Any], console: Console | None = None) -> None:
    """Print each story script with its legs and parlay math."""
    if console is None:
        console = Console()

    story = response.get("story") or {}
    for script in story.get("scripts", []):
        console.print(f"\n[bold]{script['title']}[/bold]")
        console.print(script["narrative"])
        for leg in script["legs"]:
            odds = leg["american_odds"]
            source = "" if leg["odds_source"] == "user_supplied" else " [dim](illustrative)[/dim]"
            console.print(f"  • {leg['market']}: {leg['selection']} ({odds:+g}){source}")
        console.print(f"  [cyan]{script['parlay_math']['steps']}[/cyan]")
        for note in script["notes"]:
            console.print(f"  [dim]{note}[/dim]")
        console.print(f"  {script['offer_opposite']}")


def format_json(data: object) -> str:
    """Format any response dict as a JSON string."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_alerts_csv(response: Mapping[str, Any]) -> str:
    """Format a scan response's alerts as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["id", "agent", "subject", "confidence", "severity", "market", "claim"])
    for a in response.get("alerts") or []:
        writer.writerow([
            a["id"], a["agent"], a["subject"], a["confidence"],
            a["severity"], a["market"], a["claim"],
        ])
    return output.getvalue()
