"""
Exceptions raised by the landed cost engine.

Fatal errors stop a run and reach the caller; `MissingRate` is the one
non-fatal kind and is absorbed by the run orchestrator into the breakdown
(a null ``*_rate_used`` and a zero contribution).
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional


class LandedCostError(Exception):
    """Base exception for landed cost engine errors"""
    pass


class RateNotFound(LandedCostError):
    """Raised when no FX record is valid for the run date. Aborts the run."""

    def __init__(self, kind: str, as_of: Any, scope: Optional[str] = None):
        self.kind = kind
        self.as_of = as_of
        self.scope = scope
        where = f" for {scope}" if scope else ""
        super().__init__(f"No {kind} rate found{where} as of {as_of}")


class MissingRate(LandedCostError):
    """Raised when a duty or VAT record is not available for a scope and date."""

    def __init__(self, kind: str, scope: str, as_of: date):
        self.kind = kind
        self.scope = scope
        self.as_of = as_of
        super().__init__(f"No {kind} rate for {scope} as of {as_of}")


class InvalidMarginValue(LandedCostError):
    """Raised when MARGIN mode is asked for a margin of 100% or more."""

    def __init__(self, value: Decimal, item_id: Any = None):
        self.value = value
        self.item_id = item_id
        msg = f"Margin value must be strictly less than 1 in MARGIN mode, got {value}"
        if item_id is not None:
            msg += f" (item {item_id})"
        super().__init__(msg)


class EmptyItemSet(LandedCostError):
    """Raised when a run is started without any items."""

    def __init__(self, message: str = "No items supplied for pricing run"):
        super().__init__(message)


class InvalidModelConfig(LandedCostError, ValueError):
    """Raised when a cost model, rounding policy or VAT base tag is not usable"""
    pass


class RunCancelled(LandedCostError):
    """Raised when a caller cancels a run between items."""

    def __init__(self, processed: int, total: int):
        self.processed = processed
        self.total = total
        super().__init__(f"Pricing run cancelled after {processed} of {total} items")
