"""
Margin / markup algebra.

margin = profit / selling price  ->  price = cost / (1 - margin)
markup = profit / cost           ->  price = cost * (1 + markup)

A markup of m is the same price as a margin of m / (1 + m).
"""
from __future__ import annotations

from decimal import Decimal

from ..dataclasses import MarginMode
from ..exceptions import InvalidMarginValue
from .utils import ONE, ZERO


def check_margin_value(mode: MarginMode, value: Decimal) -> None:
    # value == 1 divides by zero, value > 1 gives a negative price
    if mode is MarginMode.MARGIN and value >= ONE:
        raise InvalidMarginValue(value)


def invert_margin(landed_cost: Decimal, mode: MarginMode, value: Decimal) -> Decimal:
    """Selling price that yields the requested margin or markup on landed_cost."""
    check_margin_value(mode, value)
    if mode is MarginMode.MARGIN:
        return landed_cost / (ONE - value)
    # negative markups (discounts) are left to caller policy
    return landed_cost * (ONE + value)


def markup_to_margin(markup: Decimal) -> Decimal:
    return markup / (ONE + markup)


def margin_to_markup(margin: Decimal) -> Decimal:
    return margin / (ONE - margin)


def actual_margin(selling_price: Decimal, landed_cost: Decimal) -> Decimal:
    """Margin actually achieved at a (rounded) selling price."""
    if selling_price == ZERO:
        return ZERO
    return (selling_price - landed_cost) / selling_price
