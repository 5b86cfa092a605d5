from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..dataclasses import VatBase


def select_vat_base(
    base: Optional[VatBase], customs_value: Decimal, duty: Decimal, fees: Decimal
) -> Decimal:
    """
    Return the amount VAT is charged on.

    Rules:
      - CIF: customs value only (also used when no base is known)
      - CIF_PLUS_DUTY: customs value + duty
      - CIF_PLUS_DUTY_FEES: customs value + duty + fees
    """
    if base is VatBase.CIF_PLUS_DUTY:
        return customs_value + duty
    if base is VatBase.CIF_PLUS_DUTY_FEES:
        return customs_value + duty + fees
    return customs_value
