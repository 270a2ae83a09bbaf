"""
Percentage math for the coin summary.

All inputs are USD prices.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext
from enum import Enum
from typing import Final

from ..shared.errors import DegenerateBaselineError
from .models import Performance

TWO_PLACES: Final[Decimal] = Decimal("0.01")


class ZeroBaselinePolicy(str, Enum):
    """How to report a percentage whose baseline price is 0."""

    ERROR = "error"
    NULL = "null"


def format_percent(value: float) -> str:
    """Format a percentage with two decimals and a trailing '%'.

    Rounds the exact value of the float half away from zero, so 60.865 is
    treated as the binary number it really is. Non-finite values are spelled
    the way JavaScript spells them.
    """
    if math.isnan(value):
        return "NaN%"
    if math.isinf(value):
        return "Infinity%" if value > 0 else "-Infinity%"

    exact = Decimal(value)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, exact.adjusted() + 3)
        rounded = exact.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return f"{rounded:f}%"


def relative_percent(
    delta: float,
    baseline: float,
    label: str,
    policy: ZeroBaselinePolicy = ZeroBaselinePolicy.ERROR,
) -> str | None:
    """Express ``delta`` as a formatted percentage of ``baseline``."""
    if baseline == 0:
        if policy is ZeroBaselinePolicy.NULL:
            return None
        raise DegenerateBaselineError(label)
    return format_percent(delta / baseline * 100)


def compute_performance(
    current_usd: float,
    ath_usd: float,
    atl_usd: float,
    policy: ZeroBaselinePolicy = ZeroBaselinePolicy.ERROR,
) -> Performance:
    """
    Compute how far the current price sits from its all-time extremes.

    Both values are signed: a price above the ATH yields a negative
    ``percent_below_ath`` and a price below the ATL a negative
    ``percent_above_atl``.
    """
    return Performance(
        percent_below_ath=relative_percent(
            ath_usd - current_usd, ath_usd, "all-time high", policy
        ),
        percent_above_atl=relative_percent(
            current_usd - atl_usd, atl_usd, "all-time low", policy
        ),
    )
