import csv
import io
from decimal import Decimal

from landed_cost.services.export import EXPORT_COLUMNS, breakdown_rows, write_csv
from landed_cost.services.rate_resolver import RateResolver
from landed_cost.services.run_service import compute_run

from .factories import AS_OF, make_item


def test_export_rows_come_from_breakdown(store, config):
    out = compute_run([make_item()], config, RateResolver(store), as_of=AS_OF)
    breakdown = out.results[0].breakdown.to_dict()

    rows = breakdown_rows([{"breakdown": breakdown, "product_name": "Leather handbag"}])
    row = rows[0]
    assert list(row) == EXPORT_COLUMNS
    assert row["SKU"] == "SKU-1"
    assert row["Product Name"] == "Leather handbag"
    assert row["Currency"] == "GBP"
    assert row["Landed Cost"] == "4.29"
    assert row["Selling Price"] == "5.99"
    assert row["Duty"] == "0.31"
    assert row["Margin %"] == "28.35"
    assert row["FX Rate"] == "0.0025"
    # the stored breakdown keeps full precision
    assert Decimal(breakdown["calculations"]["landed_cost"]) == Decimal("4.292")


def test_write_csv(store, config):
    out = compute_run([make_item(1), make_item(2)], config, RateResolver(store), as_of=AS_OF)
    rows = breakdown_rows({"breakdown": r.breakdown.to_dict()} for r in out.results)

    buf = io.StringIO()
    write_csv(rows, buf)
    parsed = list(csv.DictReader(io.StringIO(buf.getvalue())))
    assert len(parsed) == 2
    assert list(parsed[0]) == EXPORT_COLUMNS
    assert parsed[1]["SKU"] == "SKU-2"
