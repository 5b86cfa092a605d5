"""
Freight and insurance cost models, evaluated per unit in the destination
currency. Percentage values are fractions (0.003 = 0.3%).
"""
from __future__ import annotations

from decimal import Decimal

from ..dataclasses import FreightModel, FreightType, InsuranceModel, InsuranceType
from ..exceptions import InvalidModelConfig


def evaluate_freight(model: FreightModel, weight_kg: Decimal, units: int) -> Decimal:
    if model.type is FreightType.PER_KG:
        return weight_kg * model.value
    if model.type is FreightType.PER_ORDER:
        # order-level charge spread over the item's units
        if units <= 0:
            raise InvalidModelConfig("PER_ORDER freight requires a positive unit count")
        return model.value / Decimal(units)
    # PER_UNIT and FIXED are both already per unit
    return model.value


def evaluate_insurance(
    model: InsuranceModel, base_value: Decimal, weight_kg: Decimal, units: int
) -> Decimal:
    if model.type is InsuranceType.PCT_OF_VALUE:
        return base_value * model.value
    if model.type is InsuranceType.PER_KG:
        return weight_kg * model.value
    return model.value
