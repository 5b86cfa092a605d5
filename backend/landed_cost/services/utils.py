from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

ZERO = Decimal("0")
ONE = Decimal("1")

LATEST = "latest"


def d(val) -> Decimal:
    """Coerce incoming values to Decimal safely."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def d_or_none(val) -> Optional[Decimal]:
    if val is None or val == "":
        return None
    return d(val)


def to_date(val: Union[date, datetime, str, None]) -> Optional[date]:
    """Normalize a date-ish value (ISO string, datetime or date) to a date."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    text = str(val).strip()
    # Accept full ISO timestamps as sent by browser clients ("2025-01-01T00:00:00.000Z")
    return date.fromisoformat(text[:10])

