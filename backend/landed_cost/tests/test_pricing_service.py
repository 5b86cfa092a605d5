from __future__ import annotations

from decimal import Decimal

from landed_cost.dataclasses import VatBase
from landed_cost.services.pricing_service import price_item, replay_breakdown
from landed_cost.services.rate_resolver import RateResolver
from landed_cost.services.run_service import resolve_bundle

from .factories import AS_OF, make_config, make_item, make_store

D = Decimal


def bundle_for(store, config, items):
    return resolve_bundle(items, config, RateResolver(store), AS_OF, [])


def test_end_to_end_scenario(config, item, store):
    result = price_item(item, config, bundle_for(store, config, [item]))
    calc = result.breakdown.calculations

    assert calc.base == D("2.5")
    assert calc.freight_per_unit == D("0.5")
    assert calc.insurance_per_unit == D("0.1")
    assert calc.customs_value == D("3.1")
    assert calc.duty == D("0.31")
    assert calc.total_fees == D("0.2")
    assert calc.vat_base_amount == D("3.41")
    assert calc.tax == D("0.682")
    assert calc.landed_cost == D("4.292")
    assert calc.selling_price_before_rounding == D("5.365")
    assert result.selling_price == D("5.99")
    assert abs(result.margin_pct - D("0.2835")) < D("0.0001")
    assert result.landed_cost == calc.landed_cost


def test_breakdown_records_every_rate_used(config, item, store):
    result = price_item(item, config, bundle_for(store, config, [item]))
    rates = result.breakdown.rates

    assert rates.fx_rate_used.id == 1
    assert rates.fx_rate_used.currency == "GBP"
    assert rates.duty_rate_used.id == 10
    assert rates.vat_rate_used.id == 20
    assert rates.vat_rate_used.base is VatBase.CIF_PLUS_DUTY
    assert [f.id for f in rates.fees] == [30]

    out = result.breakdown.to_dict()
    assert set(out) == {"inputs", "rates", "calculations", "models"}
    assert out["calculations"]["landed_cost"] == str(result.landed_cost)
    assert out["models"]["rounding"] == {"mode": "ENDINGS", "value": "0.99"}
    assert out["inputs"]["margin_mode"] == "MARGIN"


def test_unresolved_duty_contributes_zero(config, item):
    store = make_store(duty=False)
    result = price_item(item, config, bundle_for(store, config, [item]))
    calc = result.breakdown.calculations

    assert calc.duty == 0
    assert result.breakdown.rates.duty_rate_used is None
    # VAT on CIF + zero duty
    assert calc.tax == D("0.62")
    assert calc.landed_cost == D("3.92")


def test_missing_vat_record_falls_back_to_cif_and_zero_tax(config, item):
    store = make_store(vat=False)
    result = price_item(item, config, bundle_for(store, config, [item]))
    calc = result.breakdown.calculations

    assert calc.tax == 0
    assert calc.vat_base_amount == calc.customs_value
    assert result.breakdown.rates.vat_rate_used is None
    assert result.breakdown.inputs.vat_base is VatBase.CIF
    assert calc.landed_cost == D("3.61")


def test_markup_mode_without_rounding(item, store):
    config = make_config(margin_mode="MARKUP", margin_value="0.25", rounding=None)
    result = price_item(item, config, bundle_for(store, config, [item]))
    assert result.selling_price == D("4.292") * D("1.25")
    assert result.margin_pct == D("0.2")
    assert result.breakdown.to_dict()["models"]["rounding"] is None


def test_replay_breakdown_reproduces_prices(config, store):
    item = make_item(units=3, weight_kg="2")
    config = make_config(
        freight_model={"type": "PER_KG", "value": "0.4"},
        insurance_model={"type": "PCT", "value": "0.01"},
        fees_overrides={"UK": [
            {"name": "Handling", "method": "PER_UNIT", "value": "0.5"},
            {"name": "Processing", "method": "PCT", "value": "0.005"},
        ]},
    )
    original = price_item(item, config, bundle_for(store, config, [item]))
    replayed = replay_breakdown(original.breakdown.to_dict(), import_item_id=item.id)

    assert replayed.landed_cost == original.landed_cost
    assert replayed.selling_price == original.selling_price
    assert replayed.breakdown.to_dict() == original.breakdown.to_dict()
