from __future__ import annotations

from datetime import date
from decimal import Decimal

from landed_cost.dataclasses import (
    DutyRateRecord,
    FeeMethod,
    FeeRecord,
    FxRateRecord,
    ImportItem,
    Product,
    RunConfig,
    VatBase,
    VatRateRecord,
)
from landed_cost.services.rate_resolver import InMemoryRateStore

D = Decimal

AS_OF = date(2025, 6, 1)


def make_item(item_id=1, purchase_price="1000", units=1, hs_code="420221", weight_kg="1.2", sku=None):
    return ImportItem(
        id=item_id,
        purchase_price=D(purchase_price),
        units=units,
        product=Product(sku=sku or f"SKU-{item_id}", hs_code=hs_code, weight_kg=D(weight_kg)),
    )


def make_config(**overrides):
    raw = {
        "destination": "UK",
        "margin_mode": "MARGIN",
        "margin_value": "0.20",
        "freight_model": {"type": "PER_UNIT", "value": "0.5"},
        "insurance_model": {"type": "FIXED", "value": "0.1"},
        "rounding": {"mode": "ENDINGS", "value": "0.99"},
    }
    raw.update(overrides)
    return RunConfig.from_dict(raw)


def make_store(duty=True, vat=True):
    return InMemoryRateStore(
        fx_rates=[FxRateRecord(id=1, effective_from=date(2025, 1, 1), factors={"GBP": D("0.0025")})],
        duty_rates=[
            DutyRateRecord(id=10, country="UK", hs_code="420221", rate=D("0.10"), effective_from=date(2024, 1, 1)),
        ] if duty else [],
        vat_rates=[
            VatRateRecord(id=20, country="UK", base=VatBase.CIF_PLUS_DUTY, rate=D("0.20"), effective_from=date(2024, 1, 1)),
        ] if vat else [],
        fees=[FeeRecord(id=30, country="UK", name="Clearance", method=FeeMethod.FIXED, value=D("0.2"))],
    )
