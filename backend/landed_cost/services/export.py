from __future__ import annotations

import csv
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Mapping, TextIO

from .utils import d

CENTS = Decimal("0.01")

EXPORT_COLUMNS = [
    "SKU",
    "Product Name",
    "HS Code",
    "Units",
    "Weight (kg)",
    "Volume (m3)",
    "Purchase Price",
    "FX Rate",
    "Base",
    "Freight",
    "Insurance",
    "Customs Value",
    "Duty",
    "Fees",
    "Tax",
    "Landed Cost",
    "Selling Price",
    "Margin %",
    "Currency",
]


def money(val) -> str:
    return str(d(val).quantize(CENTS, rounding=ROUND_HALF_UP))


def breakdown_row(breakdown: Mapping[str, Any], product_name: str = "") -> Dict[str, str]:
    """Flatten one stored breakdown into an export row.

    Every figure is read back from the breakdown; nothing is recomputed.
    Money and margin columns are rounded to cents, inputs and the FX rate
    are written as stored.
    """
    inputs = breakdown["inputs"]
    calc = breakdown["calculations"]
    fx = breakdown["rates"]["fx_rate_used"]
    return {
        "SKU": inputs["sku"],
        "Product Name": product_name,
        "HS Code": inputs["hs_code"],
        "Units": str(inputs["units"]),
        "Weight (kg)": str(inputs["weight_kg"]),
        "Volume (m3)": str(inputs.get("volume_m3") or "0"),
        "Purchase Price": str(inputs["purchase_price"]),
        "FX Rate": str(fx["rate"]),
        "Base": money(calc["base"]),
        "Freight": money(calc["freight_per_unit"]),
        "Insurance": money(calc["insurance_per_unit"]),
        "Customs Value": money(calc["customs_value"]),
        "Duty": money(calc["duty"]),
        "Fees": money(calc["total_fees"]),
        "Tax": money(calc["tax"]),
        "Landed Cost": money(calc["landed_cost"]),
        "Selling Price": money(calc["selling_price"]),
        # stored as a fraction, exported as a percentage
        "Margin %": money(d(calc["margin_pct"]) * 100),
        "Currency": fx["currency"],
    }


def breakdown_rows(items: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Rows for items shaped ``{"breakdown": {...}, "product_name": "..."}``."""
    return [breakdown_row(i["breakdown"], i.get("product_name") or "") for i in items]


def write_csv(rows: Iterable[Mapping[str, str]], fh: TextIO) -> None:
    writer = csv.DictWriter(fh, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
