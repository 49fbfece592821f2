"""Interest rate conversions.

A rate can be entered as nominal or effective, regular or anticipated, and
quoted in any of the supported frequencies. ``normalize`` reduces every
combination to a single number, the effective rate per payment period, which
is all the schedule generator needs. ``derive_equivalents`` goes the other
way and reports the whole family of equivalent rates in the payment
frequency.

Each conversion step rounds its result to six fractional digits, and the
anticipated-to-regular conversion rounds its denominator to three. Displayed
figures and schedule totals depend on these exact roundings, so they must
not be removed.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from .data_models import EffectiveRateSet, Frequency, LoanSpecification, RateKind
from .exceptions import DomainError
from .utils import round_places

logger = logging.getLogger(__name__)

RATE_PLACES = 6
DENOMINATOR_PLACES = 3


def periods_per_year(frequency: Frequency) -> int:
    return frequency.periods_per_year


def convert_nominal_to_effective(nominal_rate: Decimal, periods: int) -> Decimal:
    """Return the effective rate per period, ``i = j / m``."""
    return round_places(nominal_rate / Decimal(periods), RATE_PLACES)


def convert_effective_to_nominal(effective_rate: Decimal, periods: int) -> Decimal:
    """Return the nominal annual rate, ``j = i * m``."""
    return round_places(effective_rate * Decimal(periods), RATE_PLACES)


def convert_anticipated_to_regular(anticipated_rate: Decimal) -> Decimal:
    """Return the regular (end of period) equivalent of an anticipated rate.

    The formula is ``i = a / (1 - a)``. The denominator is rounded to three
    decimals before dividing. The rounding starts from the binary double
    ``1 - a``, so apparent ties follow the double's exact value: ``1 - 0.0635``
    is stored just under 0.9365 and becomes 0.936.

    Raises
    ------
    DomainError
        If the rate is 1 or more, which leaves no positive denominator.
    """
    if anticipated_rate >= 1:
        raise DomainError("invalid anticipated rate", rate=anticipated_rate)
    denominator = round_places(Decimal(1 - float(anticipated_rate)), DENOMINATOR_PLACES)
    if denominator <= 0:
        raise DomainError("invalid anticipated rate", rate=anticipated_rate)
    return round_places(anticipated_rate / denominator, RATE_PLACES)


def convert_regular_to_anticipated(regular_rate: Decimal) -> Decimal:
    """Return the anticipated equivalent of a regular rate, ``a = i / (1 + i)``."""
    return round_places(regular_rate / (1 + regular_rate), RATE_PLACES)


def convert_effective_rate_frequency(
    effective_rate: Decimal, from_frequency: Frequency, to_frequency: Frequency
) -> Decimal:
    """Convert an effective rate from one frequency to another.

    Uses ``(1 + i1)^m1 = (1 + i2)^m2`` through the effective annual rate:

        annual = (1 + i1)^m1 - 1
        i2 = (1 + annual)^(1 / m2) - 1

    The rate is returned untouched when both frequencies are the same.
    """
    if from_frequency == to_frequency:
        return effective_rate
    from_periods = periods_per_year(from_frequency)
    to_periods = periods_per_year(to_frequency)
    annual = (1 + effective_rate) ** from_periods - 1
    converted = (1 + annual) ** (Decimal(1) / Decimal(to_periods)) - 1
    return round_places(converted, RATE_PLACES)


def normalize(spec: LoanSpecification) -> Decimal:
    """Return the effective rate per payment period for ``spec``."""
    rate = spec.rate
    if spec.rate_kind == RateKind.NOMINAL:
        if spec.is_anticipated:
            rate = convert_anticipated_to_regular(rate)
        rate = convert_nominal_to_effective(rate, periods_per_year(spec.rate_frequency))
    elif spec.is_anticipated:
        rate = convert_anticipated_to_regular(rate)

    effective = convert_effective_rate_frequency(
        rate, spec.rate_frequency, spec.payment_frequency
    )
    logger.debug(
        "Normalized %s %s rate %s (%s) to %s per %s period",
        "anticipated" if spec.is_anticipated else "regular",
        spec.rate_kind.value,
        spec.rate,
        spec.rate_frequency.value,
        effective,
        spec.payment_frequency.value,
    )
    return effective


def derive_equivalents(effective_rate: Decimal, payment_frequency: Frequency) -> EffectiveRateSet:
    """Return the nominal and anticipated rates equivalent to ``effective_rate``."""
    periods = Decimal(periods_per_year(payment_frequency))
    anticipated_effective = convert_regular_to_anticipated(effective_rate)
    return EffectiveRateSet(
        effective_rate=effective_rate,
        nominal_rate=effective_rate * periods,
        anticipated_effective_rate=anticipated_effective,
        anticipated_nominal_rate=anticipated_effective * periods,
        frequency=payment_frequency,
    )
