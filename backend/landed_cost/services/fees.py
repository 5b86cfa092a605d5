from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple

from ..dataclasses import AppliedFee, FeeMethod, FeeRecord
from .utils import ZERO


@dataclass(frozen=True)
class FeeTotal:
    total: Decimal
    applied: Tuple[AppliedFee, ...]


def fee_amount(fee: FeeRecord, customs_value: Decimal, weight_kg: Decimal, units: int) -> Decimal:
    if fee.method is FeeMethod.PER_KG:
        return fee.value * weight_kg
    if fee.method is FeeMethod.PER_UNIT:
        return fee.value * Decimal(units)
    if fee.method is FeeMethod.PCT:
        return fee.value * customs_value
    return fee.value


def aggregate_fees(
    fees: Iterable[FeeRecord], customs_value: Decimal, weight_kg: Decimal, units: int
) -> FeeTotal:
    """Sum fee rules against the customs value. Fees never see each other's output."""
    applied = []
    total = ZERO
    for fee in fees:
        amount = fee_amount(fee, customs_value, weight_kg, units)
        total += amount
        applied.append(AppliedFee(id=fee.id, name=fee.name, method=fee.method, value=fee.value, amount=amount))
    return FeeTotal(total=total, applied=tuple(applied))
