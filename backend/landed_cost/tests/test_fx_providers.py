from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from landed_cost.fx_providers import load
from landed_cost.fx_providers.env import EnvProvider
from landed_cost.fx_providers.exchangerate_api import ExchangeRateApiProvider

API_PAYLOAD = {
    "result": "success",
    "base_code": "PKR",
    "time_last_update_unix": 1735689601,  # 2025-01-01 00:00:01 UTC
    "conversion_rates": {"PKR": 1, "GBP": 0.002845, "USD": 0.003591, "EUR": 0.003447},
}


def test_exchangerate_api_parse(monkeypatch):
    p = ExchangeRateApiProvider(api_key="test-key")
    monkeypatch.setattr(p, "_fetch_json", lambda base: API_PAYLOAD)
    quote = p.fetch("pkr", ["GBP", "USD", "EUR"])
    assert quote.base_ccy == "PKR"
    assert quote.as_of == date(2025, 1, 1)
    assert quote.factors == {"GBP": Decimal("0.002845"), "USD": Decimal("0.003591"), "EUR": Decimal("0.003447")}
    assert quote.source == "EXCHANGERATE_API"


def test_exchangerate_api_error_result(monkeypatch):
    p = ExchangeRateApiProvider(api_key="test-key")
    monkeypatch.setattr(p, "_fetch_json", lambda base: {"result": "error", "error-type": "invalid-key"})
    with pytest.raises(RuntimeError, match="invalid-key"):
        p.fetch("PKR", ["GBP"])


def test_exchangerate_api_missing_currency(monkeypatch):
    p = ExchangeRateApiProvider(api_key="test-key")
    monkeypatch.setattr(p, "_fetch_json", lambda base: API_PAYLOAD)
    with pytest.raises(RuntimeError, match="PKR->JPY"):
        p.fetch("PKR", ["JPY"])


def test_exchangerate_api_requires_key(monkeypatch):
    monkeypatch.delenv("FX_API_KEY", raising=False)
    with pytest.raises(RuntimeError, match="FX_API_KEY"):
        ExchangeRateApiProvider().fetch("PKR", ["GBP"])


def test_env_provider(monkeypatch):
    monkeypatch.setenv("FX_FACTORS", '{"GBP": 0.0028, "USD": "0.0036"}')
    monkeypatch.setenv("FX_AS_OF", "2025-01-01")
    quote = EnvProvider().fetch("PKR", ["gbp", "USD"])
    assert quote.as_of == date(2025, 1, 1)
    assert quote.factors == {"GBP": Decimal("0.0028"), "USD": Decimal("0.0036")}
    with pytest.raises(ValueError, match="EUR"):
        EnvProvider().fetch("PKR", ["EUR"])


def test_load_provider_by_name():
    assert isinstance(load("exchangerate_api"), ExchangeRateApiProvider)
    assert isinstance(load(None), EnvProvider)
    with pytest.raises(ValueError):
        load("bsp_html")
