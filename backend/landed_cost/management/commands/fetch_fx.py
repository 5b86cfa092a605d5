from __future__ import annotations

import logging
import os
from typing import List

from django.core.management.base import BaseCommand, CommandError
from django.utils.timezone import localdate

from landed_cost.dataclasses import DEFAULT_SOURCE_CURRENCY, DESTINATION_CURRENCY
from landed_cost.fx_providers import load as load_provider
from landed_cost.models import FxRate
from landed_cost.services.utils import d

logger = logging.getLogger(__name__)


def parse_currencies(arg: str) -> List[str]:
    codes = [c.strip().upper() for c in (arg or "").split(",") if c.strip()]
    for code in codes:
        if len(code) != 3 or not code.isalpha():
            raise CommandError(f"Invalid currency '{code}'. Use ISO codes, e.g., GBP,USD,EUR")
    return codes


class Command(BaseCommand):
    help = "Fetch FX conversion factors from the configured provider and persist one FxRate per as-of date."

    def add_arguments(self, parser):
        parser.add_argument("--base", type=str, default=DEFAULT_SOURCE_CURRENCY, help="Source currency, e.g., PKR")
        parser.add_argument(
            "--currencies",
            type=str,
            default=",".join(DESTINATION_CURRENCY.values()),
            help="Comma-separated destination currencies, e.g., GBP,USD,EUR",
        )
        parser.add_argument(
            "--provider",
            type=str,
            default=os.environ.get("FX_PROVIDER", "env"),
            help="FX provider to use (exchangerate_api|env)",
        )

    def handle(self, *args, **options):
        base = (options["base"] or DEFAULT_SOURCE_CURRENCY).strip().upper()
        currencies = parse_currencies(options["currencies"])
        if not currencies:
            raise CommandError("--currencies is required (e.g., GBP,USD,EUR)")

        FX_STALE_HOURS = float(os.environ.get("FX_STALE_HOURS", 24))
        FX_ANOM_PCT = float(os.environ.get("FX_ANOMALY_PCT", 0.05))

        prev = FxRate.objects.filter(base_ccy=base).order_by("-as_of_date").first()
        if prev is not None:
            age_hours = (localdate() - prev.as_of_date).days * 24.0
            if age_hours > FX_STALE_HOURS:
                logger.warning("FX staleness: %s latest rate %s is %.0fh old", base, prev.as_of_date, age_hours)

        try:
            provider = load_provider(options["provider"])
            quote = provider.fetch(base, currencies)
        except Exception as e:
            raise CommandError(f"FX provider '{options['provider']}' failed: {e}") from e

        if prev is not None:
            for ccy, new_rate in quote.factors.items():
                prev_rate = (prev.factors or {}).get(ccy)
                if prev_rate is None or d(prev_rate) <= 0:
                    continue
                pct = float(abs(new_rate - d(prev_rate)) / d(prev_rate))
                if pct > FX_ANOM_PCT:
                    logger.warning("FX anomaly: %s->%s changed by %.2f%% (old=%s new=%s)",
                                   base, ccy, pct * 100.0, prev_rate, new_rate)

        row, created = FxRate.objects.get_or_create(
            as_of_date=quote.as_of,
            defaults={
                "base_ccy": quote.base_ccy,
                "factors": {k: str(v) for k, v in quote.factors.items()},
                "source": quote.source,
            },
        )
        if not created:
            self.stdout.write(f"FX rates for {quote.as_of.isoformat()} already exist (id={row.id}); nothing saved")
            return

        summary = ", ".join(f"{k}={v}" for k, v in row.factors.items())
        self.stdout.write(self.style.SUCCESS(
            f"Saved FX {base} @ {quote.as_of.isoformat()} [{quote.source}]: {summary}"
        ))
