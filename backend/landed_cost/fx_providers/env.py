from __future__ import annotations

import json
import logging
import os
from datetime import date
from typing import Dict, Iterable, Optional

from django.utils.timezone import localdate

from ..services.utils import d, to_date
from . import FxQuote

logger = logging.getLogger(__name__)


class EnvProvider:
    """
    Reads conversion factors from the FX_FACTORS env var as JSON.
    Example:
      FX_FACTORS='{"GBP": 0.0028, "USD": 0.0036, "EUR": 0.0033}'
    FX_AS_OF (ISO date) overrides the as-of date, which defaults to today.
    """

    def __init__(self, as_of: Optional[date] = None):
        self.as_of = as_of or to_date(os.environ.get("FX_AS_OF")) or localdate()
        blob = os.environ.get("FX_FACTORS", "{}")
        try:
            self.table: Dict[str, float] = json.loads(blob)
        except json.JSONDecodeError:
            logger.exception("Invalid FX_FACTORS JSON; falling back to empty table")
            self.table = {}

    def fetch(self, base: str, currencies: Iterable[str]) -> FxQuote:
        factors = {}
        for ccy in currencies:
            ccy = ccy.upper()
            if self.table.get(ccy) is None:
                raise ValueError(f"No factor configured in FX_FACTORS for {base.upper()}->{ccy}")
            factors[ccy] = d(self.table[ccy])
        return FxQuote(as_of=self.as_of, base_ccy=base.upper(), factors=factors, source="ENV")
