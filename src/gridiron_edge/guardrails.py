"""Token and cost limits checked before a generator call."""

from __future__ import annotations

import math

from gridiron_edge.config import RequestLimits
from gridiron_edge.errors import ErrorCode, GuardrailError


def estimate_tokens(text: str) -> int:
    """Rough English estimate: ~4 characters per token."""
    return math.ceil(len(text) / 4)


def estimate_cost(input_tokens: int, output_tokens: int, limits: RequestLimits) -> float:
    return input_tokens * limits.input_rate / 1000 + output_tokens * limits.output_rate / 1000


def check_request_limits(
    input_tokens: int,
    limits: RequestLimits,
    estimated_cost: float | None = None,
) -> None:
    if input_tokens > limits.max_input_tokens:
        raise GuardrailError(
            ErrorCode.TOKEN_LIMIT_EXCEEDED,
            f"Input tokens ({input_tokens}) exceeds limit ({limits.max_input_tokens})",
            {"input_tokens": input_tokens, "limit": limits.max_input_tokens},
        )
    if estimated_cost is not None and estimated_cost > limits.max_cost_usd:
        raise GuardrailError(
            ErrorCode.COST_LIMIT_EXCEEDED,
            f"Estimated cost (${estimated_cost:.4f}) exceeds limit (${limits.max_cost_usd})",
            {"estimated_cost": estimated_cost, "limit": limits.max_cost_usd},
        )


def check_prompt(system: str, user: str, limits: RequestLimits) -> int:
    """Estimate the prompt size and enforce every limit; returns the token estimate."""
    tokens = estimate_tokens(system) + estimate_tokens(user)
    cost = estimate_cost(tokens, limits.max_output_tokens, limits)
    check_request_limits(tokens, limits, cost)
    return tokens
