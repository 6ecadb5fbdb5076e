"""Season/week preflight from the schedule endpoint, with configured fallbacks."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from gridiron_edge.common.http import HttpClient
from gridiron_edge.common.types import JsonDict
from gridiron_edge.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleInfo:
    """Derived season position.

    Attributes:
        year: season year
        week: season week
        degraded: True when either value came from the fallbacks
        games_count: number of games in the payload, if it listed any
    """

    year: int
    week: int
    degraded: bool
    games_count: int | None = None


def _number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def derive_year_week(
    schedule_json: Mapping[str, object] | None,
    fallback_year: int,
    fallback_week: int,
) -> ScheduleInfo:
    """Read season/week from a schedule payload, substituting fallbacks for bad values."""
    payload = schedule_json or {}
    year = _number(payload.get("season"))
    week = _number(payload.get("week"))
    games = payload.get("games")

    ok_year = year is not None and year > 1900
    ok_week = week is not None and week > 0

    return ScheduleInfo(
        year=int(year) if ok_year else fallback_year,
        week=int(week) if ok_week else fallback_week,
        degraded=not (ok_year and ok_week),
        games_count=len(games) if isinstance(games, list) else None,
    )


async def fetch_schedule(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | None = None,
) -> JsonDict | None:
    """GET the configured schedule endpoint; any failure returns None."""
    settings = settings or get_settings()
    if not settings.schedule_api_url:
        logger.debug("No schedule API configured")
        return None

    client = HttpClient(
        timeout=timeout if timeout is not None else settings.http_timeout,
        transport=transport,
    )
    try:
        resp = await client.get(settings.schedule_api_url)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Schedule fetch failed: %s", exc)
        return None
    finally:
        await client.close()

    if not isinstance(data, dict):
        logger.warning("Schedule payload is not an object")
        return None
    return data


async def resolve_schedule(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float | None = None,
) -> ScheduleInfo:
    settings = settings or get_settings()
    payload = await fetch_schedule(settings, transport=transport, timeout=timeout)
    info = derive_year_week(payload, settings.fallback_season, settings.fallback_week)
    if info.degraded:
        logger.warning(
            "Schedule degraded; using season %d week %d", info.year, info.week
        )
    return info
