from decimal import Decimal

import pytest

from landed_cost.dataclasses import (
    FeeMethod, FeeRecord, FreightModel, FreightType, InsuranceModel, InsuranceType, VatBase,
)
from landed_cost.exceptions import InvalidModelConfig
from landed_cost.services.cost_models import evaluate_freight, evaluate_insurance
from landed_cost.services.fees import aggregate_fees
from landed_cost.services.tax_policy import select_vat_base

D = Decimal


@pytest.mark.parametrize("ftype,value,weight,units,expected", [
    (FreightType.PER_KG, "2", "2.5", 1, "5"),
    (FreightType.PER_UNIT, "0.5", "2.5", 10, "0.5"),
    (FreightType.PER_ORDER, "100", "2.5", 4, "25"),
    (FreightType.FIXED, "3", "2.5", 4, "3"),
])
def test_freight_models(ftype, value, weight, units, expected):
    model = FreightModel(type=ftype, value=D(value))
    assert evaluate_freight(model, D(weight), units) == D(expected)


def test_per_order_freight_requires_units():
    with pytest.raises(InvalidModelConfig):
        evaluate_freight(FreightModel(type=FreightType.PER_ORDER, value=D("100")), D("1"), 0)


@pytest.mark.parametrize("itype,value,expected", [
    (InsuranceType.PCT_OF_VALUE, "0.01", "0.025"),
    (InsuranceType.PER_KG, "0.2", "0.4"),
    (InsuranceType.PER_UNIT, "0.3", "0.3"),
    (InsuranceType.FIXED, "0.1", "0.1"),
])
def test_insurance_models(itype, value, expected):
    model = InsuranceModel(type=itype, value=D(value))
    assert evaluate_insurance(model, D("2.5"), D("2"), 3) == D(expected)


def test_fees_are_independent_of_each_other():
    fees = [
        FeeRecord(id=1, country="UK", name="Clearance", method=FeeMethod.FIXED, value=D("5")),
        FeeRecord(id=2, country="UK", name="Weight", method=FeeMethod.PER_KG, value=D("1.5")),
        FeeRecord(id=3, country="UK", name="Handling", method=FeeMethod.PER_UNIT, value=D("0.5")),
        FeeRecord(id=4, country="UK", name="Processing", method=FeeMethod.PCT, value=D("0.01")),
    ]
    out = aggregate_fees(fees, customs_value=D("100"), weight_kg=D("2"), units=3)
    assert [a.amount for a in out.applied] == [D("5"), D("3"), D("1.5"), D("1")]
    assert out.total == D("10.5")
    assert out.applied[3].name == "Processing"
    assert out.applied[3].method is FeeMethod.PCT


def test_no_fees():
    out = aggregate_fees([], D("100"), D("1"), 1)
    assert out.total == 0
    assert out.applied == ()


@pytest.mark.parametrize("base,expected", [
    (VatBase.CIF, "100"),
    (VatBase.CIF_PLUS_DUTY, "110"),
    (VatBase.CIF_PLUS_DUTY_FEES, "115"),
    (None, "100"),
])
def test_vat_base_selection(base, expected):
    assert select_vat_base(base, D("100"), D("10"), D("5")) == D(expected)
