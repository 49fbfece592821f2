"""Utility functions for the loan simulator.

This module provides helpers for turning user input into Python data types
(decimals, dates and enumeration members) and for rounding decimals the way
the rate conversions require.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP, getcontext, InvalidOperation
from enum import Enum
from typing import Type, TypeVar

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

E = TypeVar("E", bound=Enum)


def round_places(value: Decimal, places: int) -> Decimal:
    """Round ``value`` half-up to ``places`` fractional digits."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace. It raises
    ``ValueError`` if conversion fails or the value is not finite.
    """
    try:
        cleaned = str(value).replace(",", "").strip()
        result = Decimal(cleaned)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date``.

    Raises
    ------
    ValueError
        If the string is not a valid ISO date.
    """
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError) as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def enum_from_str(enum_cls: Type[E], value: str) -> E:
    """Look up an enumeration member by its value, ignoring case."""
    cleaned = str(value).strip().lower()
    for member in enum_cls:
        if member.value == cleaned:
            return member
    choices = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Invalid {enum_cls.__name__} '{value}'; expected one of: {choices}")
