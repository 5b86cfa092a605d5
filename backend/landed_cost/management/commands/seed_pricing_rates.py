from datetime import date
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from landed_cost.models import DutyRate, Fee, FxRate, VatRate

FX_RATES = [
    # PKR -> destination currency
    (date(2025, 1, 1), {"GBP": "0.0028", "USD": "0.0036", "EUR": "0.0033"}),
    (date(2024, 12, 1), {"GBP": "0.0027", "USD": "0.0035", "EUR": "0.0032"}),
]

DUTY_FROM = date(2024, 1, 1)
# leather goods: handbags, wallets, gloves
DUTY_RATES = {
    "420231": {"UK": "0.035", "US": "0.055", "EU": "0.045"},
    "420232": {"UK": "0.035", "US": "0.055", "EU": "0.045"},
    "420221": {"UK": "0.035", "US": "0.06", "EU": "0.045"},
    "420222": {"UK": "0.025", "US": "0.045", "EU": "0.035"},
    "420310": {"UK": "0.08", "US": "0.125", "EU": "0.04"},
}

VAT_RATES = {"UK": "0.20", "US": "0.00", "EU": "0.19"}

FEES = [
    ("UK", "Customs Clearance", "FIXED", "15"),
    ("UK", "Handling Fee", "PER_UNIT", "0.50"),
    ("US", "MPF", "PCT", "0.00344"),
    ("US", "HMF", "PCT", "0.00125"),
    ("US", "Customs Broker Fee", "FIXED", "75"),
    ("EU", "Customs Clearance", "FIXED", "20"),
    ("EU", "EORI Processing", "PCT", "0.005"),
    ("EU", "Import Processing Fee", "FIXED", "12"),
]


class Command(BaseCommand):
    help = "Seed UK/US/EU FX, duty, VAT and fee rows for landed cost pricing. Safe to re-run."

    @transaction.atomic
    def handle(self, *args, **options):
        for as_of, factors in FX_RATES:
            FxRate.objects.update_or_create(
                as_of_date=as_of,
                defaults={"base_ccy": "PKR", "factors": factors, "source": "SEED"},
            )

        for hs_code, by_country in DUTY_RATES.items():
            for country, rate in by_country.items():
                DutyRate.objects.update_or_create(
                    country=country, hs_code=hs_code, effective_from=DUTY_FROM,
                    defaults={"rate": Decimal(rate)},
                )

        for country, rate in VAT_RATES.items():
            VatRate.objects.update_or_create(
                country=country, base="CIF_PLUS_DUTY", effective_from=DUTY_FROM,
                defaults={"rate": Decimal(rate)},
            )

        for country, name, method, value in FEES:
            Fee.objects.update_or_create(
                country=country, name=name,
                defaults={"method": method, "value": Decimal(value)},
            )

        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(FX_RATES)} FX rates, "
            f"{sum(len(v) for v in DUTY_RATES.values())} duty rates, "
            f"{len(VAT_RATES)} VAT rates, {len(FEES)} fees"
        ))
