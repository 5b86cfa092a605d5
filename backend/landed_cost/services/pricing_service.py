"""
Per-item landed cost pipeline.

Calculation flow (destination currency, per unit):
 1. base = purchase_price * fx
 2. freight_per_unit from the freight model
 3. insurance_per_unit from the insurance model (against base)
 4. customs_value = base + freight_per_unit + insurance_per_unit
 5. duty = customs_value * duty_rate (0 when no duty record)
 6. total_fees = sum of fee rules against customs_value
 7. vat_base_amount per the VAT record's base
 8. tax = vat_rate * vat_base_amount (0 when no VAT record)
 9. landed_cost = customs_value + duty + total_fees + tax
10. selling_price from the margin / markup target
11. rounding
12. margin_pct recomputed from the rounded price
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..dataclasses import (
    Breakdown,
    BreakdownCalculations,
    BreakdownInputs,
    BreakdownModels,
    BreakdownRates,
    DutyRateRecord,
    DutyRateUsed,
    FeeRecord,
    FreightModel,
    FxRateRecord,
    FxRateUsed,
    ImportItem,
    InsuranceModel,
    MarginMode,
    PricingResult,
    Product,
    RateBundle,
    RoundingPolicy,
    RunConfig,
    VatBase,
    VatRateRecord,
    VatRateUsed,
    parse_tag,
)
from .cost_models import evaluate_freight, evaluate_insurance
from .fees import aggregate_fees
from .margin import actual_margin, invert_margin
from .rounding import apply_rounding
from .tax_policy import select_vat_base
from .utils import ZERO, d, to_date

logger = logging.getLogger(__name__)


def price_item(item: ImportItem, config: RunConfig, bundle: RateBundle) -> PricingResult:
    product = item.product
    weight_kg = product.weight_kg
    units = item.units

    base = item.purchase_price * bundle.fx_factor
    freight_per_unit = evaluate_freight(config.freight_model, weight_kg, units)
    insurance_per_unit = evaluate_insurance(config.insurance_model, base, weight_kg, units)
    customs_value = base + freight_per_unit + insurance_per_unit

    duty = ZERO
    duty_used: Optional[DutyRateUsed] = None
    duty_rate = bundle.duty_rates.get(product.hs_code)
    if duty_rate is not None:
        duty = customs_value * duty_rate.rate
        duty_used = DutyRateUsed(
            id=duty_rate.id,
            hs_code=duty_rate.hs_code,
            rate=duty_rate.rate,
            effective_from=duty_rate.effective_from,
        )

    fees = aggregate_fees(bundle.fees, customs_value, weight_kg, units)

    vat_base = bundle.vat_rate.base if bundle.vat_rate is not None else VatBase.CIF
    vat_base_amount = select_vat_base(vat_base, customs_value, duty, fees.total)

    tax = ZERO
    vat_used: Optional[VatRateUsed] = None
    if bundle.vat_rate is not None:
        tax = vat_base_amount * bundle.vat_rate.rate
        vat_used = VatRateUsed(
            id=bundle.vat_rate.id,
            base=bundle.vat_rate.base,
            rate=bundle.vat_rate.rate,
            effective_from=bundle.vat_rate.effective_from,
        )

    landed_cost = customs_value + duty + fees.total + tax

    unrounded = invert_margin(landed_cost, config.margin_mode, config.margin_value)
    selling_price = apply_rounding(unrounded, config.rounding)
    margin_pct = actual_margin(selling_price, landed_cost)
    logger.debug("Priced item %s: landed_cost=%s selling_price=%s", item.id, landed_cost, selling_price)

    breakdown = Breakdown(
        inputs=BreakdownInputs(
            sku=product.sku,
            hs_code=product.hs_code,
            purchase_price=item.purchase_price,
            weight_kg=weight_kg,
            volume_m3=product.volume_m3,
            units=units,
            destination=config.destination,
            incoterm=config.incoterm,
            margin_mode=config.margin_mode,
            margin_value=config.margin_value,
            vat_base=vat_base,
            threshold_toggles=dict(config.threshold_toggles),
        ),
        rates=BreakdownRates(
            fx_rate_used=FxRateUsed(
                id=bundle.fx_rate.id,
                as_of=bundle.fx_rate.effective_from,
                currency=bundle.currency,
                rate=bundle.fx_factor,
            ),
            duty_rate_used=duty_used,
            vat_rate_used=vat_used,
            fees=fees.applied,
        ),
        calculations=BreakdownCalculations(
            base=base,
            freight_per_unit=freight_per_unit,
            insurance_per_unit=insurance_per_unit,
            customs_value=customs_value,
            duty=duty,
            total_fees=fees.total,
            vat_base_amount=vat_base_amount,
            tax=tax,
            landed_cost=landed_cost,
            selling_price_before_rounding=unrounded,
            selling_price=selling_price,
            margin_pct=margin_pct,
        ),
        models=BreakdownModels(
            freight_model=config.freight_model,
            insurance_model=config.insurance_model,
            rounding=config.rounding,
        ),
    )

    return PricingResult(
        import_item_id=item.id,
        purchase_price=item.purchase_price,
        selling_price=selling_price,
        landed_cost=landed_cost,
        margin_pct=margin_pct,
        breakdown=breakdown,
    )


def replay_breakdown(breakdown: Mapping[str, Any], import_item_id: Any = None) -> PricingResult:
    """
    Recompute an item from a stored breakdown alone, without touching any
    rate store. Used to re-validate historical runs after rates changed.
    """
    inputs = breakdown["inputs"]
    rates = breakdown["rates"]
    models = breakdown["models"]

    fx_used = rates["fx_rate_used"]
    fx_record = FxRateRecord(
        id=fx_used.get("id"),
        effective_from=to_date(fx_used["as_of"]),
        factors={fx_used["currency"]: d(fx_used["rate"])},
    )

    duty_rates: Dict[str, DutyRateRecord] = {}
    duty_used = rates.get("duty_rate_used")
    if duty_used:
        duty_rates[duty_used["hs_code"]] = DutyRateRecord(
            id=duty_used.get("id"),
            country=inputs["destination"],
            hs_code=duty_used["hs_code"],
            rate=d(duty_used["rate"]),
            effective_from=to_date(duty_used["effective_from"]),
        )

    vat_rate = None
    vat_used = rates.get("vat_rate_used")
    if vat_used:
        vat_rate = VatRateRecord(
            id=vat_used.get("id"),
            country=inputs["destination"],
            base=parse_tag(VatBase, vat_used["base"], "VAT base"),
            rate=d(vat_used["rate"]),
            effective_from=to_date(vat_used["effective_from"]),
        )

    fees = tuple(FeeRecord.from_dict(f, country=inputs["destination"]) for f in rates.get("fees") or [])

    config = RunConfig(
        destination=inputs["destination"],
        incoterm=inputs.get("incoterm") or "",
        margin_mode=parse_tag(MarginMode, inputs["margin_mode"], "margin mode"),
        margin_value=d(inputs["margin_value"]),
        freight_model=FreightModel.from_dict(models["freight_model"]),
        insurance_model=InsuranceModel.from_dict(models["insurance_model"]),
        vat_base=parse_tag(VatBase, inputs.get("vat_base") or VatBase.CIF_PLUS_DUTY, "VAT base"),
        threshold_toggles=dict(inputs.get("threshold_toggles") or {}),
        rounding=RoundingPolicy.from_dict(models.get("rounding")),
    )
    bundle = RateBundle(
        fx_rate=fx_record,
        fx_factor=d(fx_used["rate"]),
        currency=fx_used["currency"],
        duty_rates=duty_rates,
        vat_rate=vat_rate,
        fees=fees,
    )
    item = ImportItem(
        id=import_item_id,
        purchase_price=d(inputs["purchase_price"]),
        units=int(inputs["units"]),
        product=Product(
            sku=inputs["sku"],
            hs_code=inputs["hs_code"],
            weight_kg=d(inputs["weight_kg"]),
            volume_m3=d(inputs.get("volume_m3") or 0),
        ),
    )
    return price_item(item, config, bundle)
