"""
Effective-dated rate resolution.

The resolver owns the selection rule; the store it is given only has to
return every record of a kind for a scope. Among the records valid on the
requested date (``effective_from <= date`` and ``effective_to`` absent or
``>= date``) the one with the greatest ``effective_from`` wins, ties going to
the greatest record id so repeated runs pick the same record.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import (
    Any, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple, TypeVar, Union,
)

from ..dataclasses import (
    DutyRateRecord,
    FeeRecord,
    FxRateRecord,
    VatBase,
    VatRateRecord,
)
from ..exceptions import MissingRate, RateNotFound
from .utils import LATEST, to_date

logger = logging.getLogger(__name__)

R = TypeVar("R", FxRateRecord, DutyRateRecord, VatRateRecord)


class RateStore(Protocol):
    """Read-only access to rate records. Implementations return every record in
    scope; they do not filter by date."""

    def fx_rates(self) -> Iterable[FxRateRecord]: ...

    def duty_rates(self, country: str, hs_code: str) -> Iterable[DutyRateRecord]: ...

    def vat_rates(self, country: str, base: VatBase) -> Iterable[VatRateRecord]: ...

    def fees(self, country: str) -> Iterable[FeeRecord]: ...


class InMemoryRateStore:
    def __init__(
        self,
        fx_rates: Sequence[FxRateRecord] = (),
        duty_rates: Sequence[DutyRateRecord] = (),
        vat_rates: Sequence[VatRateRecord] = (),
        fees: Sequence[FeeRecord] = (),
    ):
        self._fx = list(fx_rates)
        self._duty = list(duty_rates)
        self._vat = list(vat_rates)
        self._fees = list(fees)

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> "InMemoryRateStore":
        """Rebuild a store holding exactly the records a past run resolved."""
        return cls(
            fx_rates=[FxRateRecord.from_dict(snapshot["fx_rate"])],
            duty_rates=[DutyRateRecord.from_dict(r) for r in snapshot.get("duty_rates") or []],
            vat_rates=[VatRateRecord.from_dict(snapshot["vat_rate"])] if snapshot.get("vat_rate") else [],
            fees=[FeeRecord.from_dict(f) for f in snapshot.get("fees") or []],
        )

    def fx_rates(self) -> List[FxRateRecord]:
        return list(self._fx)

    def duty_rates(self, country: str, hs_code: str) -> List[DutyRateRecord]:
        return [r for r in self._duty if r.country == country and r.hs_code == hs_code]

    def vat_rates(self, country: str, base: VatBase) -> List[VatRateRecord]:
        return [r for r in self._vat if r.country == country and r.base == base]

    def fees(self, country: str) -> List[FeeRecord]:
        return [f for f in self._fees if f.country == country]


def _identity_key(record_id: Any) -> Tuple[int, Any]:
    # ints order numerically, anything else by its text; ints sort before text
    if isinstance(record_id, int) and not isinstance(record_id, bool):
        return (0, record_id)
    return (1, "" if record_id is None else str(record_id))


def is_active(record: Union[FxRateRecord, DutyRateRecord, VatRateRecord], on: date) -> bool:
    if record.effective_from > on:
        return False
    return record.effective_to is None or record.effective_to >= on


def select_effective(records: Iterable[R], on: Optional[date]) -> Optional[R]:
    """Pick the single active record for a date; ``None`` date means no filter."""
    candidates = [r for r in records if on is None or is_active(r, on)]
    if not candidates:
        return None
    return max(candidates, key=lambda r: (r.effective_from, _identity_key(r.id)))


class RateResolver:
    def __init__(self, store: RateStore):
        self.store = store

    def resolve_fx(self, on: Union[date, str, None]) -> FxRateRecord:
        """Resolve the FX record for a date; ``"latest"`` picks the newest overall."""
        target = None if on in (None, LATEST) else to_date(on)
        record = select_effective(self.store.fx_rates(), target)
        if record is None:
            raise RateNotFound("FX", on or LATEST)
        logger.debug("Resolved FX %s (effective %s) for %s", record.id, record.effective_from, on)
        return record

    def resolve_duty(self, hs_code: str, country: str, on: date) -> DutyRateRecord:
        record = select_effective(self.store.duty_rates(country, hs_code), on)
        if record is None:
            raise MissingRate("duty", f"{country}/{hs_code}", on)
        return record

    def resolve_vat(self, country: str, base: VatBase, on: date) -> VatRateRecord:
        record = select_effective(self.store.vat_rates(country, base), on)
        if record is None:
            raise MissingRate("VAT", f"{country}/{base.value}", on)
        return record

    def resolve_fees(
        self,
        country: str,
        overrides: Optional[Mapping[str, Sequence[FeeRecord]]] = None,
    ) -> Tuple[Tuple[FeeRecord, ...], bool]:
        """Return the fee set for a country and whether it came from overrides.

        An override entry for the country replaces the lookup entirely, even
        when it is an empty list.
        """
        if overrides and country in overrides:
            return tuple(overrides[country]), True
        return tuple(self.store.fees(country)), False
