"""Response envelopes shared by every terminal action."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from gridiron_edge.alerts.models import Alert
from gridiron_edge.common.types import JsonDict
from gridiron_edge.errors import ErrorCode, GridironError
from gridiron_edge.provenance import Provenance


def build_terminal_response(
    alerts: Iterable[Alert],
    mode: str,
    request_id: str,
    matchup: tuple[str, str],
    agents_invoked: Sequence[str],
    agents_silent: Sequence[str],
    provenance: Provenance,
    timing_ms: int,
    fallback: bool = False,
    warnings: Sequence[str] | None = None,
) -> JsonDict:
    """Success envelope. ``matchup`` is (home, away); optional flags appear only when set."""
    home, away = matchup
    response: JsonDict = {
        "alerts": [a.to_dict() for a in alerts],
        "mode": mode,
        "request_id": request_id,
        "matchup": {"home": home, "away": away},
        "agents": {"invoked": list(agents_invoked), "silent": list(agents_silent)},
        "provenance": provenance.to_dict(),
        "timing_ms": timing_ms,
    }
    if fallback:
        response["fallback"] = True
    if warnings:
        response["warnings"] = list(warnings)
    return response


def build_error_response(error: Exception, request_id: str, mode: str | None = None) -> JsonDict:
    """Error envelope; still carries an (empty) alert list."""
    if isinstance(error, GridironError):
        detail = error.to_dict()
    else:
        detail = {
            "code": ErrorCode.UNKNOWN_ERROR.value,
            "message": str(error) or type(error).__name__,
            "recoverable": False,
        }
    response: JsonDict = {
        "alerts": [],
        "error": detail,
        "request_id": request_id,
        "fallback": True,
    }
    if mode is not None:
        response["mode"] = mode
    return response
