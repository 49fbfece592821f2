"""Command‑line interface for the loan simulator.

This module uses the ``click`` library to implement a multi‑command
interface. Users can compute full schedules, view summaries, list the
equivalent rates, print the compound-growth baseline or show the formulas
behind a simulation. Results can be
printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import click

from .data_models import (
    AnnuityTiming,
    AnnuityType,
    Frequency,
    LoanSpecification,
    RateKind,
    SimulationResult,
)
from .engine import growth_curve, simulate_or_fallback
from .formatter import (
    print_calculation_details,
    print_growth,
    print_rates,
    print_schedule,
    print_summary,
)
from .utils import decimal_from_str, enum_from_str, parse_date

MAX_TERMINAL_ROWS = 120


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000).
    """
    value = str(value).strip().lower()
    value = value.replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    return decimal_from_str(value) * factor


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string (e.g. "2" or "2%") into a fraction."""
    value = str(value).strip()
    if value.endswith("%"):
        value = value[:-1]
    return decimal_from_str(value) / 100


def parse_term(value: Union[str, int]) -> int:
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid number of periods: {value}") from exc


def parse_flag(value: Union[str, bool]) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y", "on")


def build_spec_from_options(
    principal: str,
    rate: str,
    term: Union[str, int],
    rate_kind: str = "effective",
    rate_frequency: str = "monthly",
    payment_frequency: Optional[str] = None,
    anticipated: Union[str, bool] = False,
    annuity_type: str = "amortization",
    annuity_timing: str = "due",
) -> LoanSpecification:
    """Validate raw option values and build a ``LoanSpecification``.

    ``rate`` is a percentage in ``(0, 100]``. ``payment_frequency`` defaults
    to the rate frequency. Every problem found is reported at once in a
    single ``click.BadParameter``.
    """
    errors: List[str] = []

    def check(parse: Callable[[], Any]) -> Any:
        try:
            return parse()
        except ValueError as exc:
            errors.append(str(exc))
            return None

    principal_value = check(lambda: parse_amount(principal)) if str(principal).strip() else None
    if principal_value is None or principal_value <= 0:
        errors.append("Principal must be greater than 0")

    term_value = check(lambda: parse_term(term))
    if term_value is None or term_value <= 0:
        errors.append("Term must be a positive number of periods")

    rate_value = check(lambda: parse_percent(rate)) if str(rate).strip() else None
    if rate_value is None or rate_value <= 0:
        errors.append("Interest rate must be greater than 0")
    elif rate_value > 1:
        errors.append("Interest rate cannot exceed 100%")

    kind = check(lambda: enum_from_str(RateKind, rate_kind))
    rate_freq = check(lambda: enum_from_str(Frequency, rate_frequency))
    payment_freq = rate_freq
    if payment_frequency:
        payment_freq = check(lambda: enum_from_str(Frequency, payment_frequency))
    annuity = check(lambda: enum_from_str(AnnuityType, annuity_type))
    timing = check(lambda: enum_from_str(AnnuityTiming, annuity_timing))

    if errors:
        raise click.BadParameter("\n".join(dict.fromkeys(errors)))

    return LoanSpecification(
        principal=principal_value,
        term=term_value,
        rate=rate_value,
        rate_kind=kind,
        rate_frequency=rate_freq,
        payment_frequency=payment_freq,
        is_anticipated=parse_flag(anticipated),
        annuity_type=annuity,
        annuity_timing=timing,
    )


def export_to_json(path: Path, result: SimulationResult, include_schedule: bool = True) -> None:
    """Export the simulation (and optionally its schedule) to a JSON file."""
    data = result.to_dict()
    if not include_schedule:
        data.pop("schedule")
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: SimulationResult, start: Optional[date] = None) -> None:
    """Export the schedule to a CSV file."""
    header = [
        "Period",
        "Due_Offset_Days",
        "Due_Date",
        "Starting_Balance",
        "Payment",
        "Principal",
        "Interest",
        "Ending_Balance",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for p in result.schedule:
            writer.writerow(
                [
                    p.index,
                    p.due_offset_days,
                    p.due_date(start).isoformat() if start else "",
                    float(p.starting_balance),
                    float(p.total_payment),
                    float(p.principal_portion),
                    float(p.interest_portion),
                    float(p.ending_balance),
                ]
            )


def loan_options(func: Callable) -> Callable:
    """Attach the options shared by every simulation command."""
    frequencies = [f.value for f in Frequency]
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Amount financed (e.g. 1000000 or 1m)"),
        click.option("--rate", "-r", "rate", required=True, help="Interest rate in percent, 0 < rate <= 100"),
        click.option("--term", "-t", "term", required=True, type=int, help="Number of payment periods"),
        click.option("--rate-kind", "rate_kind", type=click.Choice([k.value for k in RateKind]), default="effective", help="Whether the rate is effective or nominal"),
        click.option("--rate-frequency", "rate_frequency", type=click.Choice(frequencies), default="monthly", help="Frequency the rate is quoted in"),
        click.option("--payment-frequency", "payment_frequency", type=click.Choice(frequencies), default=None, help="Payment frequency (defaults to the rate frequency)"),
        click.option("--anticipated/--regular", "anticipated", default=False, help="Interest charged at the start of each period"),
        click.option("--annuity", "annuity_type", type=click.Choice([a.value for a in AnnuityType]), default="amortization", help="Amortization or interest-only capitalization"),
        click.option("--timing", "annuity_timing", type=click.Choice([t.value for t in AnnuityTiming]), default="due", help="Annuity timing (informational)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _run(**options: Any) -> SimulationResult:
    spec = build_spec_from_options(**options)
    result, failed = simulate_or_fallback(spec)
    if failed:
        click.echo("Warning: the rate could not be converted; showing a zeroed result.", err=True)
    return result


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command‑line loan simulator supporting several rate conventions."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@loan_options
@click.option("--start-date", "-s", "start_date", help="Date the loan starts (YYYY-MM-DD); defaults to today")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(start_date: Optional[str], output: Optional[str], **options: Any) -> None:
    """Compute and print the full payment schedule."""
    try:
        start = parse_date(start_date) if start_date else date.today()
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--start-date")
    result = _run(**options)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result, start)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result)
    print_rates(result.equivalent_rates)
    rows = result.schedule
    if len(rows) > MAX_TERMINAL_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_TERMINAL_ROWS} rows.")
        rows = rows[:MAX_TERMINAL_ROWS]
    print_schedule(rows, start)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary metrics and rates."""
    result = _run(**options)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        export_to_json(path, result, include_schedule=False)
        click.echo(f"Summary exported to {path}")
        return
    print_summary(result)
    print_rates(result.equivalent_rates)


@cli.command()
@loan_options
def rates(**options: Any) -> None:
    """Print the rates equivalent to the entered one in the payment frequency."""
    result = _run(**options)
    print_rates(result.equivalent_rates)


@cli.command()
@loan_options
def growth(**options: Any) -> None:
    """Print the compound-growth baseline S = P(1 + i)^n per period."""
    result = _run(**options)
    spec = result.specification
    print_growth(growth_curve(result.effective_rate, spec.principal, spec.term))


@cli.command()
@loan_options
def details(**options: Any) -> None:
    """Print the payment, future value and rate formulas with the loan's values."""
    spec = build_spec_from_options(**options)
    result, failed = simulate_or_fallback(spec)
    if failed:
        raise click.ClickException("The rate could not be converted; no calculation details to show.")
    print_calculation_details(result)


if __name__ == "__main__":
    cli()
