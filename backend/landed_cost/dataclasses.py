from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from .exceptions import InvalidModelConfig, RateNotFound
from .services.utils import LATEST, ZERO, d, d_or_none, to_date

DESTINATION_CURRENCY = {
    "UK": "GBP",
    "US": "USD",
    "EU": "EUR",
}
DEFAULT_SOURCE_CURRENCY = "PKR"


def currency_for_destination(destination: str) -> str:
    """Map a destination jurisdiction to its currency; ISO codes pass through."""
    code = (destination or "").strip().upper()
    return DESTINATION_CURRENCY.get(code, code)


# --------------------------- Tags ---------------------------

class FreightType(str, Enum):
    PER_KG = "PER_KG"
    PER_UNIT = "PER_UNIT"
    PER_ORDER = "PER_ORDER"
    FIXED = "FIXED"


class InsuranceType(str, Enum):
    PCT_OF_VALUE = "PCT_OF_VALUE"
    FIXED = "FIXED"
    PER_KG = "PER_KG"
    PER_UNIT = "PER_UNIT"


class FeeMethod(str, Enum):
    FIXED = "FIXED"
    PER_KG = "PER_KG"
    PER_UNIT = "PER_UNIT"
    PCT = "PCT"


class VatBase(str, Enum):
    CIF = "CIF"
    CIF_PLUS_DUTY = "CIF_PLUS_DUTY"
    CIF_PLUS_DUTY_FEES = "CIF_PLUS_DUTY_FEES"


class MarginMode(str, Enum):
    MARGIN = "MARGIN"
    MARKUP = "MARKUP"


class RoundingMode(str, Enum):
    ENDINGS = "ENDINGS"
    NEAREST = "NEAREST"
    UP = "UP"
    DOWN = "DOWN"


E = TypeVar("E", bound=Enum)

_TAG_ALIASES: Dict[Type[Enum], Dict[str, str]] = {
    InsuranceType: {"PCT": "PCT_OF_VALUE"},
}


def parse_tag(enum_cls: Type[E], raw: Any, what: str) -> E:
    """Parse a configuration tag into its closed enum, rejecting unknown tags."""
    if isinstance(raw, enum_cls):
        return raw
    key = str(raw or "").strip().upper()
    key = _TAG_ALIASES.get(enum_cls, {}).get(key, key)
    try:
        return enum_cls(key)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidModelConfig(f"Unknown {what} type {raw!r}. Allowed: {allowed}.")


def _parse_amount(raw: Any, what: str) -> Decimal:
    if raw is None or raw == "":
        raise InvalidModelConfig(f"{what} requires a value")
    try:
        return d(raw)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidModelConfig(f"{what} value {raw!r} is not a number")


def as_json(obj: Any) -> Any:
    """Render records as JSON-safe structures. Decimals become strings so audit
    figures survive serialization without float drift."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: as_json(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Mapping):
        return {str(k): as_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [as_json(v) for v in obj]
    return obj


# --------------------------- Cost models ---------------------------

@dataclass(frozen=True)
class FreightModel:
    type: FreightType
    value: Decimal

    @classmethod
    def from_dict(cls, raw: Any) -> "FreightModel":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidModelConfig("freight model must be an object with 'type' and 'value'")
        return cls(
            type=parse_tag(FreightType, raw.get("type"), "freight model"),
            value=_parse_amount(raw.get("value"), "freight model"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return as_json(self)


@dataclass(frozen=True)
class InsuranceModel:
    type: InsuranceType
    value: Decimal

    @classmethod
    def from_dict(cls, raw: Any) -> "InsuranceModel":
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, Mapping):
            raise InvalidModelConfig("insurance model must be an object with 'type' and 'value'")
        return cls(
            type=parse_tag(InsuranceType, raw.get("type"), "insurance model"),
            value=_parse_amount(raw.get("value"), "insurance model"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return as_json(self)


@dataclass(frozen=True)
class RoundingPolicy:
    """Rounding applied to the selling price. No mode means no rounding."""
    mode: Optional[RoundingMode] = None
    value: Optional[Decimal] = None

    def __post_init__(self):
        if self.mode is RoundingMode.ENDINGS and self.value is None:
            raise InvalidModelConfig("ENDINGS rounding requires a value, e.g. 0.99")
        if self.mode is RoundingMode.NEAREST and (self.value is None or self.value <= ZERO):
            raise InvalidModelConfig("NEAREST rounding requires a positive step value")

    @classmethod
    def from_dict(cls, raw: Any) -> "RoundingPolicy":
        if isinstance(raw, cls):
            return raw
        if not raw:
            return cls()
        if not isinstance(raw, Mapping):
            raise InvalidModelConfig("rounding must be an object with 'mode' and 'value'")
        if not raw.get("mode"):
            return cls()
        mode = parse_tag(RoundingMode, raw.get("mode"), "rounding")
        try:
            value = d_or_none(raw.get("value"))
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidModelConfig(f"rounding value {raw.get('value')!r} is not a number")
        return cls(mode=mode, value=value)

    @property
    def is_noop(self) -> bool:
        return self.mode is None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        if self.is_noop:
            return None
        return as_json(self)


# --------------------------- Rate records ---------------------------

@dataclass(frozen=True)
class FxRateRecord:
    id: Any
    effective_from: date
    factors: Dict[str, Decimal]
    base_currency: str = DEFAULT_SOURCE_CURRENCY
    effective_to: Optional[date] = None
    source: str = ""

    def factor_for(self, destination: str) -> Decimal:
        currency = currency_for_destination(destination)
        factor = self.factors.get(currency)
        if factor is None:
            raise RateNotFound("FX", self.effective_from, scope=f"{self.base_currency}->{currency}")
        return d(factor)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FxRateRecord":
        return cls(
            id=raw.get("id"),
            effective_from=to_date(raw.get("effective_from") or raw.get("as_of_date")),
            factors={str(k).upper(): d(v) for k, v in (raw.get("factors") or {}).items()},
            base_currency=raw.get("base_currency") or DEFAULT_SOURCE_CURRENCY,
            effective_to=to_date(raw.get("effective_to")),
            source=raw.get("source") or "",
        )


@dataclass(frozen=True)
class DutyRateRecord:
    id: Any
    country: str
    hs_code: str
    rate: Decimal
    effective_from: date
    effective_to: Optional[date] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "DutyRateRecord":
        return cls(
            id=raw.get("id"),
            country=raw["country"],
            hs_code=str(raw["hs_code"]),
            rate=d(raw["rate"]),
            effective_from=to_date(raw["effective_from"]),
            effective_to=to_date(raw.get("effective_to")),
        )


@dataclass(frozen=True)
class VatRateRecord:
    id: Any
    country: str
    base: VatBase
    rate: Decimal
    effective_from: date
    effective_to: Optional[date] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "VatRateRecord":
        return cls(
            id=raw.get("id"),
            country=raw["country"],
            base=parse_tag(VatBase, raw["base"], "VAT base"),
            rate=d(raw["rate"]),
            effective_from=to_date(raw["effective_from"]),
            effective_to=to_date(raw.get("effective_to")),
        )


@dataclass(frozen=True)
class FeeRecord:
    id: Any
    country: str
    name: str
    method: FeeMethod
    value: Decimal

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], country: Optional[str] = None) -> "FeeRecord":
        return cls(
            id=raw.get("id"),
            country=raw.get("country") or country or "",
            name=raw.get("name") or "",
            method=parse_tag(FeeMethod, raw.get("method"), "fee method"),
            value=_parse_amount(raw.get("value"), f"fee {raw.get('name') or ''}".strip()),
        )


# --------------------------- Items ---------------------------

@dataclass(frozen=True)
class Product:
    sku: str
    hs_code: str
    weight_kg: Decimal
    volume_m3: Decimal = ZERO
    name: str = ""


@dataclass(frozen=True)
class ImportItem:
    id: Any
    purchase_price: Decimal  # source currency, per unit
    units: int
    product: Product


# --------------------------- Run configuration ---------------------------

FxDate = Union[date, str]


@dataclass(frozen=True)
class RunConfig:
    destination: str
    margin_mode: MarginMode
    margin_value: Decimal
    freight_model: FreightModel
    insurance_model: InsuranceModel
    incoterm: str = ""
    fx_date: FxDate = LATEST
    fees_overrides: Optional[Dict[str, Tuple[FeeRecord, ...]]] = None
    vat_base: VatBase = VatBase.CIF_PLUS_DUTY
    threshold_toggles: Dict[str, bool] = field(default_factory=dict)
    rounding: RoundingPolicy = field(default_factory=RoundingPolicy)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RunConfig":
        fx_date = raw.get("fx_date") or LATEST
        if fx_date != LATEST:
            fx_date = to_date(fx_date)

        overrides = None
        if raw.get("fees_overrides"):
            overrides = {}
            for country, fees in raw["fees_overrides"].items():
                overrides[country.upper()] = tuple(
                    FeeRecord.from_dict(
                        {**fee, "id": fee.get("id") or f"override:{country.upper()}:{idx}"},
                        country=country.upper(),
                    )
                    for idx, fee in enumerate(fees or [])
                )

        return cls(
            destination=str(raw["destination"]).upper(),
            incoterm=raw.get("incoterm") or "",
            fx_date=fx_date,
            margin_mode=parse_tag(MarginMode, raw.get("margin_mode"), "margin mode"),
            margin_value=_parse_amount(raw.get("margin_value"), "margin"),
            freight_model=FreightModel.from_dict(raw.get("freight_model")),
            insurance_model=InsuranceModel.from_dict(raw.get("insurance_model")),
            fees_overrides=overrides,
            vat_base=parse_tag(VatBase, raw.get("vat_base") or VatBase.CIF_PLUS_DUTY, "VAT base"),
            threshold_toggles=dict(raw.get("threshold_toggles") or {}),
            rounding=RoundingPolicy.from_dict(raw.get("rounding")),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = as_json(self)
        out["rounding"] = self.rounding.to_dict()
        return out


# --------------------------- Resolved rates ---------------------------

@dataclass(frozen=True)
class RateBundle:
    """Rates resolved once per run and shared read-only by every item."""
    fx_rate: FxRateRecord
    fx_factor: Decimal
    currency: str
    duty_rates: Dict[str, DutyRateRecord] = field(default_factory=dict)
    vat_rate: Optional[VatRateRecord] = None
    fees: Tuple[FeeRecord, ...] = ()
    fees_overridden: bool = False
    rates_as_of: Optional[date] = None


# --------------------------- Breakdown ---------------------------

@dataclass(frozen=True)
class FxRateUsed:
    id: Any
    as_of: date
    currency: str
    rate: Decimal


@dataclass(frozen=True)
class DutyRateUsed:
    id: Any
    hs_code: str
    rate: Decimal
    effective_from: date


@dataclass(frozen=True)
class VatRateUsed:
    id: Any
    base: VatBase
    rate: Decimal
    effective_from: date


@dataclass(frozen=True)
class AppliedFee:
    id: Any
    name: str
    method: FeeMethod
    value: Decimal
    amount: Decimal


@dataclass(frozen=True)
class BreakdownInputs:
    sku: str
    hs_code: str
    purchase_price: Decimal
    weight_kg: Decimal
    volume_m3: Decimal
    units: int
    destination: str
    incoterm: str
    margin_mode: MarginMode
    margin_value: Decimal
    vat_base: VatBase
    threshold_toggles: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class BreakdownRates:
    fx_rate_used: FxRateUsed
    duty_rate_used: Optional[DutyRateUsed]
    vat_rate_used: Optional[VatRateUsed]
    fees: Tuple[AppliedFee, ...] = ()


@dataclass(frozen=True)
class BreakdownCalculations:
    base: Decimal
    freight_per_unit: Decimal
    insurance_per_unit: Decimal
    customs_value: Decimal
    duty: Decimal
    total_fees: Decimal
    vat_base_amount: Decimal
    tax: Decimal
    landed_cost: Decimal
    selling_price_before_rounding: Decimal
    selling_price: Decimal
    margin_pct: Decimal


@dataclass(frozen=True)
class BreakdownModels:
    freight_model: FreightModel
    insurance_model: InsuranceModel
    rounding: RoundingPolicy


@dataclass(frozen=True)
class Breakdown:
    inputs: BreakdownInputs
    rates: BreakdownRates
    calculations: BreakdownCalculations
    models: BreakdownModels

    def to_dict(self) -> Dict[str, Any]:
        out = as_json(self)
        out["models"]["rounding"] = self.models.rounding.to_dict()
        return out


@dataclass(frozen=True)
class PricingResult:
    import_item_id: Any
    purchase_price: Decimal
    selling_price: Decimal
    landed_cost: Decimal
    margin_pct: Decimal
    breakdown: Breakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "import_item_id": self.import_item_id,
            "purchase_price": str(self.purchase_price),
            "selling_price": str(self.selling_price),
            "landed_cost": str(self.landed_cost),
            "margin_pct": str(self.margin_pct),
            "breakdown": self.breakdown.to_dict(),
        }


# --------------------------- Run output ---------------------------

@dataclass(frozen=True)
class RunSnapshot:
    """Every rate and fee record a run resolved, kept with the results so a
    later rate change cannot alter a historical run."""
    fx_rate: FxRateRecord
    currency: str
    rates_as_of: date
    duty_rates: Tuple[DutyRateRecord, ...] = ()
    vat_rate: Optional[VatRateRecord] = None
    fees: Tuple[FeeRecord, ...] = ()
    fees_overridden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return as_json(self)


@dataclass(frozen=True)
class RunTotals:
    item_count: int
    total_purchase_price: Decimal
    total_landed_cost: Decimal
    total_selling_price: Decimal
    average_margin_pct: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return as_json(self)


@dataclass
class RunOutput:
    results: List[PricingResult]
    snapshot: RunSnapshot
    totals: RunTotals
    reasons: List[str] = field(default_factory=list)

    @property
    def is_incomplete(self) -> bool:
        return bool(self.reasons)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "snapshot_rates": self.snapshot.to_dict(),
            "totals": self.totals.to_dict(),
            "is_incomplete": self.is_incomplete,
            "reasons": list(self.reasons),
        }
