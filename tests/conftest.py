"""Shared fixtures for the loan simulator tests.

Canonical loan: 1,000,000 at 2 % effective per month, 12 monthly payments.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from loan_sim.data_models import AnnuityType, Frequency, LoanSpecification, RateKind


@pytest.fixture
def monthly_loan() -> LoanSpecification:
    """1,000,000 amortized over 12 months at 2 % effective monthly."""
    return LoanSpecification(
        principal=Decimal("1000000"),
        term=12,
        rate=Decimal("0.02"),
        rate_kind=RateKind.EFFECTIVE,
        rate_frequency=Frequency.MONTHLY,
        payment_frequency=Frequency.MONTHLY,
        is_anticipated=False,
        annuity_type=AnnuityType.AMORTIZATION,
    )


@pytest.fixture
def capitalization_loan(monthly_loan) -> LoanSpecification:
    """Same loan, interest only with the principal repaid at the end."""
    return replace(monthly_loan, annuity_type=AnnuityType.CAPITALIZATION)


@pytest.fixture
def loan_args():
    """CLI arguments for the canonical loan."""
    return ["-p", "1000000", "-r", "2", "-t", "12"]
