"""American odds to decimal parlay math, $1 stake."""

from __future__ import annotations

import math
from collections.abc import Sequence

from gridiron_edge.story.schema import ParlayMath

MATH_TOLERANCE = 0.02


def _round(value: float, decimals: int = 2) -> float:
    """Round half up, matching the math shown to users."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def american_to_decimal(american: float) -> float:
    """+150 → 2.5, -110 → 1.909...; 0 and non-finite odds map to 0."""
    if not math.isfinite(american) or american == 0:
        return 0.0
    if american > 0:
        return 1 + american / 100
    return 1 + 100 / abs(american)


def compute_parlay_math(american_odds: Sequence[float]) -> ParlayMath:
    leg_decimals = [_round(american_to_decimal(a)) for a in american_odds]
    product = 1.0
    for d in leg_decimals:
        product *= d
    product_decimal = _round(product)
    payout = _round(product_decimal * 1)
    profit = _round(payout - 1)
    joined = " × ".join(f"{d:.2f}" for d in leg_decimals)
    steps = f"{joined} = {product_decimal:.2f}; payout ${payout:.2f}, profit ${profit:.2f}"
    return ParlayMath(
        stake=1,
        leg_decimals=leg_decimals,
        product_decimal=product_decimal,
        payout=payout,
        profit=profit,
        steps=steps,
    )


def math_differs(a: ParlayMath, b: ParlayMath, tolerance: float = MATH_TOLERANCE) -> bool:
    return (
        abs(a.product_decimal - b.product_decimal) > tolerance
        or abs(a.payout - b.payout) > tolerance
        or abs(a.profit - b.profit) > tolerance
    )
