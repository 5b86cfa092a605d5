from datetime import date
from decimal import Decimal

import pytest

from landed_cost.dataclasses import (
    FreightModel, FreightType, InsuranceModel, InsuranceType, RoundingPolicy, RunConfig, VatBase,
    currency_for_destination,
)
from landed_cost.exceptions import InvalidModelConfig
from landed_cost.services.utils import LATEST

from .factories import make_config


@pytest.mark.parametrize("raw", [
    {"type": "PER_PALLET", "value": "1"},
    {"type": "", "value": "1"},
    {"type": "PER_KG"},
    {"type": "PER_KG", "value": "abc"},
    "PER_KG",
])
def test_unknown_freight_config_is_rejected(raw):
    with pytest.raises(InvalidModelConfig):
        FreightModel.from_dict(raw)


def test_insurance_pct_alias():
    model = InsuranceModel.from_dict({"type": "pct", "value": "0.01"})
    assert model.type is InsuranceType.PCT_OF_VALUE
    assert model.to_dict() == {"type": "PCT_OF_VALUE", "value": "0.01"}


def test_unknown_rounding_and_vat_base_are_rejected():
    with pytest.raises(InvalidModelConfig):
        RoundingPolicy.from_dict({"mode": "BANKERS", "value": "1"})
    with pytest.raises(InvalidModelConfig):
        make_config(vat_base="GROSS")
    with pytest.raises(InvalidModelConfig):
        make_config(margin_mode="PROFIT")


def test_run_config_defaults_and_round_trip():
    config = make_config(destination="uk")
    assert config.destination == "UK"
    assert config.fx_date == LATEST
    assert config.vat_base is VatBase.CIF_PLUS_DUTY
    assert config.freight_model == FreightModel(type=FreightType.PER_UNIT, value=Decimal("0.5"))

    again = RunConfig.from_dict(config.to_dict())
    assert again == config


def test_run_config_parses_dates_and_overrides():
    config = make_config(
        fx_date="2025-01-01T00:00:00.000Z",
        fees_overrides={"uk": [{"name": "Broker", "method": "FIXED", "value": "5"}]},
    )
    assert config.fx_date == date(2025, 1, 1)
    fees = config.fees_overrides["UK"]
    assert fees[0].id == "override:UK:0"
    assert fees[0].country == "UK"


def test_destination_currency():
    assert currency_for_destination("UK") == "GBP"
    assert currency_for_destination("us") == "USD"
    assert currency_for_destination("EU") == "EUR"
    assert currency_for_destination("CAD") == "CAD"
