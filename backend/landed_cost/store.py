"""
ORM-backed rate store and item source for the calculation core.

The store returns every row in scope and leaves date selection to
``RateResolver``; the core never sees a model instance.
"""
from __future__ import annotations

from typing import List

from .dataclasses import (
    DutyRateRecord,
    FeeRecord,
    FxRateRecord,
    ImportItem,
    Product,
    RunConfig,
    VatBase,
    VatRateRecord,
)
from .models import DutyRate, Fee, FxRate, ImportItem as ImportItemRow, PricingRun, VatRate
from .services.utils import d


def fx_record(row: FxRate) -> FxRateRecord:
    return FxRateRecord(
        id=row.id,
        effective_from=row.as_of_date,
        effective_to=row.effective_to,
        factors={str(k).upper(): d(v) for k, v in (row.factors or {}).items()},
        base_currency=row.base_ccy,
        source=row.source or "",
    )


class DjangoRateStore:
    def fx_rates(self) -> List[FxRateRecord]:
        return [fx_record(r) for r in FxRate.objects.all()]

    def duty_rates(self, country: str, hs_code: str) -> List[DutyRateRecord]:
        qs = DutyRate.objects.filter(country=country, hs_code=hs_code)
        return [
            DutyRateRecord(
                id=r.id,
                country=r.country,
                hs_code=r.hs_code,
                rate=d(r.rate),
                effective_from=r.effective_from,
                effective_to=r.effective_to,
            )
            for r in qs
        ]

    def vat_rates(self, country: str, base: VatBase) -> List[VatRateRecord]:
        qs = VatRate.objects.filter(country=country, base=base.value)
        return [
            VatRateRecord(
                id=r.id,
                country=r.country,
                base=VatBase(r.base),
                rate=d(r.rate),
                effective_from=r.effective_from,
                effective_to=r.effective_to,
            )
            for r in qs
        ]

    def fees(self, country: str) -> List[FeeRecord]:
        qs = Fee.objects.filter(country=country).order_by('id')
        return [
            FeeRecord.from_dict(
                {"id": r.id, "country": r.country, "name": r.name, "method": r.method, "value": r.value}
            )
            for r in qs
        ]


def load_import_items(import_id: int) -> List[ImportItem]:
    """Materialize the items of an import, in insertion order."""
    rows = (ImportItemRow.objects
            .filter(pricing_import_id=import_id)
            .select_related('product')
            .order_by('id'))
    return [
        ImportItem(
            id=row.id,
            purchase_price=d(row.purchase_price),
            units=row.units,
            product=Product(
                sku=row.product.sku,
                hs_code=row.product.hs_code,
                weight_kg=d(row.product.weight_kg),
                volume_m3=d(row.product.volume_m3),
                name=row.product.name or "",
            ),
        )
        for row in rows
    ]


def run_config(run: PricingRun) -> RunConfig:
    """Rebuild the engine config stored on a run row."""
    return RunConfig.from_dict({
        "destination": run.destination,
        "incoterm": run.incoterm,
        "fx_date": run.fx_date,
        "margin_mode": run.margin_mode,
        "margin_value": run.margin_value,
        "freight_model": run.freight_model,
        "insurance_model": run.insurance_model,
        "fees_overrides": run.fees_overrides,
        "vat_base": run.vat_base,
        "threshold_toggles": run.threshold_toggles,
        "rounding": run.rounding,
    })
