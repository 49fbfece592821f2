"""Output helpers for the loan simulator.

This module provides simple functions to render simulation summaries, rate
families and schedules in a tabular text format, plus the number formatting
shared with the web templates. Output goes through ``click.echo`` so it
behaves under click's test runner and with redirected streams.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

import click

from .data_models import (
    AnnuityType,
    EffectiveRateSet,
    LoanSpecification,
    PaymentPeriod,
    RateKind,
    SimulationResult,
)
from .rates import (
    convert_anticipated_to_regular,
    convert_effective_rate_frequency,
    convert_nominal_to_effective,
)

CURRENCY_OPTIONS = {
    "COP": {"label": "Colombian peso", "prefix": "$", "suffix": " COP"},
    "USD": {"label": "US dollar", "prefix": "US$", "suffix": ""},
    "EUR": {"label": "Euro", "prefix": "€", "suffix": ""},
}


def format_percentage(value: Decimal, max_decimals: int = 3) -> str:
    """Format a fraction as a percentage with up to ``max_decimals`` digits.

    Trailing zeros are dropped, so ``0.02`` becomes ``"2%"`` and ``0.019608``
    becomes ``"1.961%"``.
    """
    text = f"{Decimal(value) * 100:.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}%"


def format_amount(value: Decimal, currency: Optional[str] = None, max_decimals: int = 3) -> str:
    """Format an amount with thousands separators and an optional currency."""
    text = f"{Decimal(value):,.{max_decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if currency is None:
        return text
    meta = CURRENCY_OPTIONS.get(currency.upper())
    if meta is None:
        return f"{text} {currency.upper()}"
    return f"{meta['prefix']}{text}{meta['suffix']}"


def _plain(value: Decimal) -> str:
    return format(Decimal(value).normalize(), "f")


def _rate_steps(spec: LoanSpecification) -> List[str]:
    """Replay the rate normalization with the loan's own values."""
    anticipated = "anticipated" if spec.is_anticipated else "regular"
    steps = [
        f"Entered rate = {_plain(spec.rate)} ({anticipated} {spec.rate_kind.value}, {spec.rate_frequency.value})"
    ]
    rate = spec.rate
    nominal = spec.rate_kind == RateKind.NOMINAL
    if spec.is_anticipated:
        regular = convert_anticipated_to_regular(rate)
        symbol = "j" if nominal else "i"
        steps.append(
            f"{symbol} = {symbol}a / (1 − {symbol}a) = {_plain(rate)} / (1 − {_plain(rate)}) = {_plain(regular)}"
        )
        rate = regular
    if nominal:
        m = spec.rate_frequency.periods_per_year
        effective = convert_nominal_to_effective(rate, m)
        steps.append(f"i = j / m = {_plain(rate)} / {m} = {_plain(effective)}")
        rate = effective
    if spec.rate_frequency != spec.payment_frequency:
        m1 = spec.rate_frequency.periods_per_year
        m2 = spec.payment_frequency.periods_per_year
        bridged = convert_effective_rate_frequency(rate, spec.rate_frequency, spec.payment_frequency)
        steps.append("(1 + i1)^m1 = (1 + i2)^m2")
        steps.append(f"(1 + {_plain(rate)})^{m1} = (1 + {_plain(bridged)})^{m2}")
        rate = bridged
    steps.append(f"i = {_plain(rate)} per {spec.payment_frequency.value} period")
    return steps


def calculation_details(result: SimulationResult) -> List[Tuple[str, List[str]]]:
    """Return the formulas behind ``result`` with the loan's values filled in.

    Each item is a section title and its lines. The rate steps are replayed
    from the specification, so this must not be called on a fallback result.
    """
    spec = result.specification
    i = _plain(result.effective_rate)
    p = format_amount(result.present_value)
    n = spec.term
    payment = format_amount(result.periodic_payment)

    if spec.annuity_type == AnnuityType.CAPITALIZATION:
        payment_lines = ["C = P·i", f"C = {p} · {i} = {payment}"]
    else:
        payment_lines = [
            "C = P·i(1+i)^n / ((1+i)^n − 1)",
            f"C = {p}·{i}(1+{i})^{n} / ((1+{i})^{n} − 1) = {payment}",
        ]

    rates = result.equivalent_rates
    m = rates.frequency.periods_per_year
    ia = _plain(rates.anticipated_effective_rate)
    return [
        ("Rate conversion", _rate_steps(spec)),
        ("Periodic payment", payment_lines),
        ("Future value", ["S = P(1+i)^n", f"S = {p}(1+{i})^{n} = {format_amount(result.future_value)}"]),
        (
            "Equivalent rates",
            [
                f"j = i × m = {i} × {m} = {_plain(rates.nominal_rate)}",
                f"ia = i / (1 + i) = {i} / (1 + {i}) = {ia}",
                f"ja = ia × m = {ia} × {m} = {_plain(rates.anticipated_nominal_rate)}",
            ],
        ),
    ]


def print_calculation_details(result: SimulationResult) -> None:
    """Print the formulas used for the simulation."""
    click.echo("Calculation details")
    click.echo("-" * 72)
    for title, lines in calculation_details(result):
        click.echo(title)
        for line in lines:
            click.echo(f"  {line}")
    click.echo("-" * 72)


def print_summary(result: SimulationResult, currency: Optional[str] = None) -> None:
    """Print a summary of the simulation in a human‑readable format."""
    spec = result.specification
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Principal (P)      : {format_amount(result.present_value, currency)}")
    click.echo(f"Periodic payment   : {format_amount(result.periodic_payment, currency)}")
    click.echo(f"Total interest     : {format_amount(result.total_interest, currency)}")
    click.echo(f"Total paid         : {format_amount(result.total_payment, currency)}")
    click.echo(f"Future value (S)   : {format_amount(result.future_value, currency)}")
    click.echo(f"Effective rate     : {format_percentage(result.effective_rate)} per {spec.payment_frequency.value} period")
    click.echo(f"Term               : {spec.term} {spec.payment_frequency.value} periods")
    click.echo(f"Annuity            : {spec.annuity_type.value} ({spec.annuity_timing.value})")
    click.echo("-" * 72)


def print_rates(rates: EffectiveRateSet) -> None:
    """Print the family of equivalent rates in the payment frequency."""
    click.echo(f"Equivalent rates ({rates.frequency.value})")
    click.echo("-" * 72)
    click.echo(f"Effective            : {format_percentage(rates.effective_rate)}")
    click.echo(f"Nominal              : {format_percentage(rates.nominal_rate)}")
    click.echo(f"Anticipated effective: {format_percentage(rates.anticipated_effective_rate)}")
    click.echo(f"Anticipated nominal  : {format_percentage(rates.anticipated_nominal_rate)}")
    click.echo("-" * 72)


def print_schedule(schedule: Iterable[PaymentPeriod], start: Optional[date] = None) -> None:
    """Print the schedule as a simple table.

    Parameters
    ----------
    schedule: Iterable[PaymentPeriod]
        The periods to print.
    start: Optional[date]
        When given, a ``Date`` column shows each period's due date counted
        from ``start``; otherwise the day offset is shown.
    """
    headers = ["Period", "Date" if start else "Day", "StartBal", "Payment", "Principal", "Interest", "EndBal"]
    click.echo("\t".join(headers))
    for period in schedule:
        when = period.due_date(start).isoformat() if start else str(period.due_offset_days)
        row = [
            str(period.index),
            when,
            f"{period.starting_balance:.2f}",
            f"{period.total_payment:.2f}",
            f"{period.principal_portion:.2f}",
            f"{period.interest_portion:.2f}",
            f"{period.ending_balance:.2f}",
        ]
        click.echo("\t".join(row))


def print_growth(curve: Iterable[Tuple[int, Decimal, Decimal, Decimal]]) -> None:
    """Print the compound-growth baseline."""
    click.echo("\t".join(["Period", "Amount", "Interest", "Accumulated"]))
    for period, amount, interest, accumulated in curve:
        click.echo(f"{period}\t{amount:.2f}\t{interest:.2f}\t{accumulated:.2f}")
