from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from ..dataclasses import (
    DutyRateRecord,
    ImportItem,
    PricingResult,
    RateBundle,
    RunConfig,
    RunOutput,
    RunSnapshot,
    RunTotals,
    VatRateRecord,
    currency_for_destination,
)
from ..exceptions import EmptyItemSet, MissingRate, RunCancelled
from .margin import actual_margin, check_margin_value
from .pricing_service import price_item
from .rate_resolver import RateResolver
from .utils import LATEST, ZERO, to_date

logger = logging.getLogger(__name__)


def resolve_bundle(
    items: Sequence[ImportItem],
    config: RunConfig,
    resolver: RateResolver,
    as_of: date,
    reasons: List[str],
) -> RateBundle:
    """Resolve every rate the run needs exactly once.

    FX failure propagates (fatal). Missing duty/VAT records are logged,
    noted in ``reasons`` and left out of the bundle.
    """
    country = config.destination
    fx_rate = resolver.resolve_fx(config.fx_date)
    fx_factor = fx_rate.factor_for(country)
    rates_as_of = as_of if config.fx_date == LATEST else to_date(config.fx_date)

    duty_rates: Dict[str, DutyRateRecord] = {}
    for hs_code in sorted({item.product.hs_code for item in items}):
        try:
            duty_rates[hs_code] = resolver.resolve_duty(hs_code, country, rates_as_of)
        except MissingRate as exc:
            logger.warning("%s; duty will not be applied", exc)
            reasons.append(str(exc))

    vat_rate: Optional[VatRateRecord] = None
    try:
        vat_rate = resolver.resolve_vat(country, config.vat_base, rates_as_of)
    except MissingRate as exc:
        logger.warning("%s; VAT will not be applied", exc)
        reasons.append(str(exc))

    fees, overridden = resolver.resolve_fees(country, config.fees_overrides)

    return RateBundle(
        fx_rate=fx_rate,
        fx_factor=fx_factor,
        currency=currency_for_destination(country),
        duty_rates=duty_rates,
        vat_rate=vat_rate,
        fees=fees,
        fees_overridden=overridden,
        rates_as_of=rates_as_of,
    )


def summarize(results: Sequence[PricingResult]) -> RunTotals:
    total_purchase = sum((r.purchase_price for r in results), ZERO)
    total_landed = sum((r.landed_cost for r in results), ZERO)
    total_selling = sum((r.selling_price for r in results), ZERO)
    return RunTotals(
        item_count=len(results),
        total_purchase_price=total_purchase,
        total_landed_cost=total_landed,
        total_selling_price=total_selling,
        # margin of the sums, not the mean of per-item margins
        average_margin_pct=actual_margin(total_selling, total_landed),
    )


def snapshot_bundle(bundle: RateBundle) -> RunSnapshot:
    return RunSnapshot(
        fx_rate=bundle.fx_rate,
        currency=bundle.currency,
        rates_as_of=bundle.rates_as_of,
        duty_rates=tuple(bundle.duty_rates[k] for k in sorted(bundle.duty_rates)),
        vat_rate=bundle.vat_rate,
        fees=bundle.fees,
        fees_overridden=bundle.fees_overridden,
    )


def compute_run(
    items: Sequence[ImportItem],
    config: RunConfig,
    resolver: RateResolver,
    *,
    as_of: Optional[date] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
) -> RunOutput:
    """
    Price every item of an import against one shared, read-only rate bundle.

    Args:
        items: import items with their products
        config: run-wide configuration
        resolver: rate resolver over the caller's rate store
        as_of: date used for duty/VAT when the FX date is "latest" (today by default)
        should_cancel: polled before each item; returning True aborts the run

    Returns:
        RunOutput with per-item results, totals and the rate snapshot

    Raises:
        EmptyItemSet, InvalidMarginValue, RateNotFound, RunCancelled
    """
    if not items:
        raise EmptyItemSet()
    check_margin_value(config.margin_mode, config.margin_value)

    reasons: List[str] = []
    bundle = resolve_bundle(items, config, resolver, as_of or date.today(), reasons)

    results: List[PricingResult] = []
    for idx, item in enumerate(items):
        if should_cancel is not None and should_cancel():
            logger.info("Pricing run cancelled before item %s (%d/%d)", item.id, idx, len(items))
            raise RunCancelled(processed=idx, total=len(items))
        results.append(price_item(item, config, bundle))

    totals = summarize(results)
    logger.info(
        "Priced %d items for %s (FX %s): landed=%s selling=%s margin=%s%s",
        totals.item_count,
        config.destination,
        bundle.fx_rate.id,
        totals.total_landed_cost,
        totals.total_selling_price,
        totals.average_margin_pct,
        " [incomplete]" if reasons else "",
    )
    return RunOutput(results=results, snapshot=snapshot_bundle(bundle), totals=totals, reasons=reasons)
