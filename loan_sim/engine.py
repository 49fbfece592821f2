"""Core calculation engine for the loan simulator.

This module implements the periodic payment, the amortization (or
capitalization) schedule and the compound-growth baseline, and ties them
together with the rate conversions in ``simulate``. Everything here is a
pure function of its arguments; a simulation is rebuilt from scratch on
every call.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext
from typing import List, Tuple

from .data_models import (
    AnnuityType,
    EffectiveRateSet,
    LoanSpecification,
    PaymentPeriod,
    SimulationResult,
)
from .exceptions import DomainError
from .rates import derive_equivalents, normalize

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def calculate_periodic_payment(
    principal: Decimal,
    effective_rate: Decimal,
    term: int,
    annuity_type: AnnuityType = AnnuityType.AMORTIZATION,
) -> Decimal:
    """Return the fixed installment for a loan.

    For amortization the formula is:

        payment = P * (i * (1 + i)^n) / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the effective rate per period and
    ``n`` is the number of payments. When the rate is zero, or too small to
    move ``(1 + i)^n`` away from 1 at the working precision, the payment
    simplifies to ``P / n``.

    For capitalization only interest is paid each period, ``P * i``; with a
    zero rate that payment is zero.
    """
    if effective_rate == 0:
        if annuity_type == AnnuityType.CAPITALIZATION:
            return ZERO
        return principal / Decimal(term)
    if annuity_type == AnnuityType.CAPITALIZATION:
        return principal * effective_rate
    factor = (1 + effective_rate) ** term
    if factor == 1:
        return principal / Decimal(term)
    return principal * (effective_rate * factor) / (factor - 1)


def generate_schedule(effective_rate: Decimal, spec: LoanSpecification) -> List[PaymentPeriod]:
    """Build the period-by-period schedule for ``spec``.

    Parameters
    ----------
    effective_rate: Decimal
        The effective rate per payment period, as returned by ``normalize``.
    spec: LoanSpecification
        The loan being simulated.

    Returns
    -------
    List[PaymentPeriod]
        Exactly ``spec.term`` periods. The last period absorbs whatever
        balance is left, so an amortizing loan always closes at zero and a
        capitalization loan returns its principal in one final payment.
    """
    capitalization = spec.annuity_type == AnnuityType.CAPITALIZATION
    periodic_payment = calculate_periodic_payment(
        spec.principal, effective_rate, spec.term, spec.annuity_type
    )
    days = spec.payment_frequency.days_per_period

    schedule: List[PaymentPeriod] = []
    remaining = spec.principal
    for k in range(1, spec.term + 1):
        starting_balance = remaining
        interest = remaining * effective_rate
        last = k == spec.term

        if capitalization:
            principal_portion = ZERO
            total = interest
            if last:
                principal_portion = remaining
                total = interest + principal_portion
                remaining = ZERO
        else:
            principal_portion = periodic_payment - interest
            total = periodic_payment
            if last:
                # close out the rounding drift of the previous periods
                principal_portion = remaining
                total = principal_portion + interest
            remaining -= principal_portion

        schedule.append(
            PaymentPeriod(
                index=k,
                due_offset_days=k * days,
                starting_balance=starting_balance,
                principal_portion=principal_portion,
                interest_portion=interest,
                total_payment=total,
                ending_balance=max(ZERO, remaining),
            )
        )
    return schedule


def project_future_value(effective_rate: Decimal, principal: Decimal, term: int) -> Decimal:
    """Return ``P * (1 + i)^n``, the balance if nothing were ever paid."""
    return principal * (1 + effective_rate) ** term


def growth_curve(
    effective_rate: Decimal, principal: Decimal, term: int
) -> List[Tuple[int, Decimal, Decimal, Decimal]]:
    """Return the compound-growth series used for the baseline chart.

    Each item is ``(period, amount, period_interest, accumulated_interest)``
    for periods ``0..term``.
    """
    curve = [(0, principal, ZERO, ZERO)]
    previous = principal
    for n in range(1, term + 1):
        amount = project_future_value(effective_rate, principal, n)
        curve.append((n, amount, amount - previous, amount - principal))
        previous = amount
    return curve


def simulate(spec: LoanSpecification) -> SimulationResult:
    """Run a complete simulation for ``spec``.

    Raises
    ------
    DomainError
        If the entered rate cannot be converted (anticipated rate of 100 %).
    """
    effective_rate = normalize(spec)
    equivalents = derive_equivalents(effective_rate, spec.payment_frequency)
    periodic_payment = calculate_periodic_payment(
        spec.principal, effective_rate, spec.term, spec.annuity_type
    )
    schedule = generate_schedule(effective_rate, spec)
    total_interest = sum((p.interest_portion for p in schedule), ZERO)
    total_payment = sum((p.total_payment for p in schedule), ZERO)

    return SimulationResult(
        specification=spec,
        effective_rate=effective_rate,
        equivalent_rates=equivalents,
        periodic_payment=periodic_payment,
        schedule=schedule,
        total_interest=total_interest,
        total_payment=total_payment,
        present_value=spec.principal,
        future_value=project_future_value(effective_rate, spec.principal, spec.term),
    )


def degenerate_result(spec: LoanSpecification) -> SimulationResult:
    """Return the zero-valued result shown when a simulation fails.

    The entered rate is echoed in every rate field and the principal stands
    in for the totals, so the outer surfaces still have something to render.
    """
    return SimulationResult(
        specification=spec,
        effective_rate=spec.rate,
        equivalent_rates=EffectiveRateSet(
            effective_rate=spec.rate,
            nominal_rate=spec.rate,
            anticipated_effective_rate=spec.rate,
            anticipated_nominal_rate=spec.rate,
            frequency=spec.payment_frequency,
        ),
        periodic_payment=ZERO,
        schedule=[],
        total_interest=ZERO,
        total_payment=spec.principal,
        present_value=spec.principal,
        future_value=spec.principal,
    )


def simulate_or_fallback(spec: LoanSpecification) -> Tuple[SimulationResult, bool]:
    """Run ``simulate`` and fall back to ``degenerate_result`` on failure.

    Returns the result and a flag telling whether the fallback was used.
    """
    try:
        return simulate(spec), False
    except (DomainError, ArithmeticError) as exc:
        logger.warning("Simulation failed, using degenerate result: %s", exc)
        return degenerate_result(spec), True
