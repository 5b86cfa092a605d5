from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

import requests

from ..services.utils import d
from . import FxQuote

logger = logging.getLogger(__name__)


class ExchangeRateApiProvider:
    """Latest conversion rates from exchangerate-api.com (v6 JSON API)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 15,
    ) -> None:
        self.api_key = api_key or os.environ.get("FX_API_KEY", "")
        self.base_url = (base_url or os.environ.get("FX_API_BASE") or "https://v6.exchangerate-api.com/v6").rstrip("/")
        self.timeout = timeout

    def _fetch_json(self, base: str) -> Dict[str, Any]:
        if not self.api_key:
            raise RuntimeError("FX_API_KEY is not set")
        url = f"{self.base_url}/{self.api_key}/latest/{base}"
        resp = requests.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    @staticmethod
    def _parse(payload: Dict[str, Any], base: str, currencies: Iterable[str]) -> FxQuote:
        if payload.get("result") != "success":
            raise RuntimeError(f"exchangerate-api: {payload.get('error-type') or 'request failed'}")
        rates = payload.get("conversion_rates") or {}
        factors = {}
        for ccy in currencies:
            ccy = ccy.upper()
            if rates.get(ccy) is None:
                raise RuntimeError(f"exchangerate-api: no {base}->{ccy} rate in response")
            factors[ccy] = d(rates[ccy])
        ts = payload.get("time_last_update_unix")
        as_of = datetime.fromtimestamp(int(ts), tz=timezone.utc) if ts else datetime.now(timezone.utc)
        return FxQuote(as_of=as_of.date(), base_ccy=base, factors=factors, source="EXCHANGERATE_API")

    def fetch(self, base: str, currencies: Iterable[str]) -> FxQuote:
        base = base.upper()
        payload = self._fetch_json(base)
        quote = self._parse(payload, base, currencies)
        logger.debug("exchangerate-api %s as of %s: %s", base, quote.as_of, quote.factors)
        return quote
