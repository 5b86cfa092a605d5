from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Optional


@dataclass
class FxQuote:
    as_of: date
    base_ccy: str
    # currency code -> units of that currency per one unit of base_ccy
    factors: Dict[str, Decimal] = field(default_factory=dict)
    source: str = ""


def load(name: Optional[str]):
    """
    Lazy-load an FX provider by name.
    - 'exchangerate_api', 'exchangerate', 'api' -> ExchangeRateApiProvider
    - 'env', 'env_provider', None -> EnvProvider
    """
    key = (name or "env").strip().lower()
    if key in {"exchangerate_api", "exchangerate", "api"}:
        from .exchangerate_api import ExchangeRateApiProvider  # local import to avoid circulars
        return ExchangeRateApiProvider()
    if key in {"env", "env_provider"}:
        from .env import EnvProvider
        return EnvProvider()
    raise ValueError(f"Unknown FX provider '{name}'. Use exchangerate_api or env.")
