from __future__ import annotations

from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP
from typing import Optional

from ..dataclasses import RoundingMode, RoundingPolicy


def floor_whole(amount: Decimal) -> Decimal:
    return amount.to_integral_value(rounding=ROUND_FLOOR)


def round_up_to_next_whole(amount: Decimal) -> Decimal:
    """Round a Decimal amount up to the next whole number (e.g., 315.79 -> 316)."""
    return amount.to_integral_value(rounding=ROUND_CEILING)


def round_to_nearest(amount: Decimal, step: Decimal) -> Decimal:
    """Snap to the nearest multiple of step, halves going up (12.025 @ 0.05 -> 12.05)."""
    multiples = (amount / step).to_integral_value(rounding=ROUND_HALF_UP)
    return multiples * step


def apply_rounding(price: Decimal, policy: Optional[RoundingPolicy]) -> Decimal:
    """
    Apply a rounding policy to a selling price.

    ENDINGS keeps the whole part and appends the ending: 5.365 @ 0.99 -> 5.99.
    Endings outside [0, 1) are applied as given.
    """
    if policy is None or policy.mode is None:
        return price
    if policy.mode is RoundingMode.ENDINGS:
        return floor_whole(price) + policy.value
    if policy.mode is RoundingMode.NEAREST:
        return round_to_nearest(price, policy.value)
    if policy.mode is RoundingMode.UP:
        return round_up_to_next_whole(price)
    return floor_whole(price)
