from decimal import Decimal

import pytest

from landed_cost.dataclasses import MarginMode, RoundingMode, RoundingPolicy
from landed_cost.exceptions import InvalidMarginValue, InvalidModelConfig
from landed_cost.services.margin import (
    actual_margin, invert_margin, margin_to_markup, markup_to_margin,
)
from landed_cost.services.rounding import apply_rounding

D = Decimal


def test_margin_inversion():
    assert invert_margin(D("4.292"), MarginMode.MARGIN, D("0.20")) == D("5.365")
    assert invert_margin(D("80"), MarginMode.MARKUP, D("0.25")) == D("100")


def test_markup_and_margin_are_equivalent():
    cost = D("80")
    markup = D("0.25")
    assert markup_to_margin(markup) == D("0.2")
    assert margin_to_markup(D("0.2")) == markup
    assert invert_margin(cost, MarginMode.MARKUP, markup) == invert_margin(cost, MarginMode.MARGIN, markup_to_margin(markup))


COSTS = ["0.01", "4.292", "80", "12500.75"]
TOLERANCE = D("1e-18")


@pytest.mark.parametrize("cost", COSTS)
@pytest.mark.parametrize("target", ["0", "0.05", "0.2", "0.5", "0.75", "0.999"])
def test_margin_price_gives_back_the_target_margin(cost, target):
    price = invert_margin(D(cost), MarginMode.MARGIN, D(target))
    assert abs(actual_margin(price, D(cost)) - D(target)) <= TOLERANCE


@pytest.mark.parametrize("cost", COSTS)
@pytest.mark.parametrize("markup", ["0", "0.1", "0.25", "1", "3"])
def test_markup_matches_equivalent_margin(cost, markup):
    by_markup = invert_margin(D(cost), MarginMode.MARKUP, D(markup))
    by_margin = invert_margin(D(cost), MarginMode.MARGIN, markup_to_margin(D(markup)))
    assert abs(by_markup - by_margin) <= TOLERANCE
    assert abs(actual_margin(by_markup, D(cost)) - markup_to_margin(D(markup))) <= TOLERANCE


@pytest.mark.parametrize("value", ["1", "1.5"])
def test_margin_of_one_or_more_is_rejected(value):
    with pytest.raises(InvalidMarginValue):
        invert_margin(D("10"), MarginMode.MARGIN, D(value))


def test_markup_above_one_is_fine():
    assert invert_margin(D("10"), MarginMode.MARKUP, D("1.5")) == D("25")


def test_actual_margin():
    assert actual_margin(D("100"), D("80")) == D("0.2")
    assert actual_margin(D("0"), D("80")) == 0


@pytest.mark.parametrize("mode,value,price,expected", [
    (RoundingMode.ENDINGS, "0.99", "5.365", "5.99"),
    (RoundingMode.ENDINGS, "0.49", "12.01", "12.49"),
    (RoundingMode.NEAREST, "0.05", "12.025", "12.05"),
    (RoundingMode.NEAREST, "0.05", "12.024", "12.00"),
    (RoundingMode.UP, None, "315.01", "316"),
    (RoundingMode.DOWN, None, "315.99", "315"),
])
def test_rounding_modes(mode, value, price, expected):
    policy = RoundingPolicy(mode=mode, value=D(value) if value else None)
    assert apply_rounding(D(price), policy) == D(expected)


@pytest.mark.parametrize("policy", [
    RoundingPolicy(mode=RoundingMode.ENDINGS, value=D("0.99")),
    RoundingPolicy(mode=RoundingMode.NEAREST, value=D("0.25")),
    RoundingPolicy(mode=RoundingMode.UP),
    RoundingPolicy(mode=RoundingMode.DOWN),
])
def test_rounding_is_idempotent(policy):
    once = apply_rounding(D("17.3842"), policy)
    assert apply_rounding(once, policy) == once


def test_no_rounding_policy_is_noop():
    assert apply_rounding(D("5.365"), None) == D("5.365")
    assert apply_rounding(D("5.365"), RoundingPolicy()) == D("5.365")


def test_rounding_policy_validation():
    with pytest.raises(InvalidModelConfig):
        RoundingPolicy(mode=RoundingMode.NEAREST)
    with pytest.raises(InvalidModelConfig):
        RoundingPolicy(mode=RoundingMode.NEAREST, value=D("0"))
    with pytest.raises(InvalidModelConfig):
        RoundingPolicy(mode=RoundingMode.ENDINGS)
