"""Data models for the loan simulator.

This module defines the enumerations and dataclasses shared by the rate
conversions, the schedule generator and the outer surfaces: the loan
specification entered by the user, the family of equivalent rates, the
individual schedule periods and the aggregated simulation result. Every
model is frozen; a simulation builds them once and never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List


class RateKind(str, Enum):
    EFFECTIVE = "effective"
    NOMINAL = "nominal"


class Frequency(str, Enum):
    """Compounding or payment frequency.

    ``periods_per_year`` drives the rate conversions. ``days_per_period`` is
    the fixed day count used to place payments; it approximates the calendar
    and is not meant to match real month lengths.
    """

    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    FOUR_MONTHLY = "four-monthly"
    SEMIANNUAL = "semiannual"
    ANNUAL = "annual"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @property
    def days_per_period(self) -> int:
        return _DAYS_PER_PERIOD[self]


_PERIODS_PER_YEAR = {
    Frequency.MONTHLY: 12,
    Frequency.BIMONTHLY: 6,
    Frequency.QUARTERLY: 4,
    Frequency.FOUR_MONTHLY: 3,
    Frequency.SEMIANNUAL: 2,
    Frequency.ANNUAL: 1,
}

_DAYS_PER_PERIOD = {
    Frequency.MONTHLY: 30,
    Frequency.BIMONTHLY: 60,
    Frequency.QUARTERLY: 90,
    Frequency.FOUR_MONTHLY: 120,
    Frequency.SEMIANNUAL: 180,
    Frequency.ANNUAL: 365,
}


class AnnuityType(str, Enum):
    AMORTIZATION = "amortization"
    CAPITALIZATION = "capitalization"


class AnnuityTiming(str, Enum):
    # Carried through to the output only; the schedule math ignores it.
    DUE = "due"
    ANTICIPATED = "anticipated"


@dataclass(frozen=True)
class LoanSpecification:
    """A validated loan simulation request.

    Attributes
    ----------
    principal: Decimal
        The amount financed. Must be positive.
    term: int
        Number of payment periods.
    rate: Decimal
        The rate as entered, as a fraction in ``(0, 1]``. Its meaning depends
        on ``rate_kind``, ``rate_frequency`` and ``is_anticipated``.
    rate_kind: RateKind
        ``effective`` when ``rate`` is already a per-period rate at
        ``rate_frequency``; ``nominal`` when it is an annual rate compounded
        at ``rate_frequency``.
    rate_frequency: Frequency
        The frequency the entered rate is quoted in.
    payment_frequency: Frequency
        The frequency of the payments. The schedule is always produced in
        this frequency.
    is_anticipated: bool
        Whether interest is charged at the start of each period.
    annuity_type: AnnuityType
        ``amortization`` pays principal down every period; ``capitalization``
        pays interest only and returns the principal on the last period.
    annuity_timing: AnnuityTiming
        Informational.
    """

    principal: Decimal
    term: int
    rate: Decimal
    rate_kind: RateKind = RateKind.EFFECTIVE
    rate_frequency: Frequency = Frequency.MONTHLY
    payment_frequency: Frequency = Frequency.MONTHLY
    is_anticipated: bool = False
    annuity_type: AnnuityType = AnnuityType.AMORTIZATION
    annuity_timing: AnnuityTiming = AnnuityTiming.DUE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "principal": str(self.principal),
            "term": self.term,
            "rate": str(self.rate),
            "rate_kind": self.rate_kind.value,
            "rate_frequency": self.rate_frequency.value,
            "payment_frequency": self.payment_frequency.value,
            "is_anticipated": self.is_anticipated,
            "annuity_type": self.annuity_type.value,
            "annuity_timing": self.annuity_timing.value,
        }


@dataclass(frozen=True)
class EffectiveRateSet:
    """Equivalent rates, all expressed in the payment frequency."""

    effective_rate: Decimal
    nominal_rate: Decimal
    anticipated_effective_rate: Decimal
    anticipated_nominal_rate: Decimal
    frequency: Frequency

    def to_dict(self) -> Dict[str, Any]:
        return {
            "effective_rate": float(self.effective_rate),
            "nominal_rate": float(self.nominal_rate),
            "anticipated_effective_rate": float(self.anticipated_effective_rate),
            "anticipated_nominal_rate": float(self.anticipated_nominal_rate),
            "frequency": self.frequency.value,
        }


@dataclass(frozen=True)
class PaymentPeriod:
    """One row of the amortization (or capitalization) schedule."""

    index: int
    due_offset_days: int
    starting_balance: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    total_payment: Decimal
    ending_balance: Decimal

    def due_date(self, start: date) -> date:
        return start + timedelta(days=self.due_offset_days)


@dataclass(frozen=True)
class SimulationResult:
    """Everything a caller needs to render a simulation."""

    specification: LoanSpecification
    effective_rate: Decimal
    equivalent_rates: EffectiveRateSet
    periodic_payment: Decimal
    schedule: List[PaymentPeriod] = field(default_factory=list)
    total_interest: Decimal = Decimal("0")
    total_payment: Decimal = Decimal("0")
    present_value: Decimal = Decimal("0")
    future_value: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view (floats for numbers)."""
        return {
            "specification": self.specification.to_dict(),
            "effective_rate": float(self.effective_rate),
            "equivalent_rates": self.equivalent_rates.to_dict(),
            "periodic_payment": float(self.periodic_payment),
            "total_interest": float(self.total_interest),
            "total_payment": float(self.total_payment),
            "present_value": float(self.present_value),
            "future_value": float(self.future_value),
            "schedule": [
                {
                    "index": p.index,
                    "due_offset_days": p.due_offset_days,
                    "starting_balance": float(p.starting_balance),
                    "principal": float(p.principal_portion),
                    "interest": float(p.interest_portion),
                    "payment": float(p.total_payment),
                    "balance": float(p.ending_balance),
                }
                for p in self.schedule
            ],
        }
