"""Tests for the rate conversions."""

from dataclasses import replace
from decimal import Decimal

import pytest

from loan_sim.data_models import Frequency, RateKind
from loan_sim.exceptions import DomainError
from loan_sim.rates import (
    convert_anticipated_to_regular,
    convert_effective_rate_frequency,
    convert_effective_to_nominal,
    convert_nominal_to_effective,
    convert_regular_to_anticipated,
    derive_equivalents,
    normalize,
    periods_per_year,
)


class TestPeriodsPerYear:
    def test_table(self):
        assert [periods_per_year(f) for f in Frequency] == [12, 6, 4, 3, 2, 1]

    def test_days_per_period(self):
        assert [f.days_per_period for f in Frequency] == [30, 60, 90, 120, 180, 365]


class TestBasicConversions:
    def test_nominal_to_effective(self):
        assert convert_nominal_to_effective(Decimal("0.24"), 12) == Decimal("0.02")

    def test_nominal_to_effective_rounds_to_six_places(self):
        # 0.1 / 3 = 0.0333...
        assert convert_nominal_to_effective(Decimal("0.1"), 3) == Decimal("0.033333")

    def test_effective_to_nominal(self):
        assert convert_effective_to_nominal(Decimal("0.02"), 12) == Decimal("0.24")

    def test_anticipated_to_regular(self):
        # 0.02 / 0.980
        assert convert_anticipated_to_regular(Decimal("0.02")) == Decimal("0.020408")

    def test_anticipated_denominator_rounded_to_three_places(self):
        # 1 - 0.0196 = 0.9804 -> 0.980, so 0.0196 / 0.980 = 0.02 exactly
        assert convert_anticipated_to_regular(Decimal("0.0196")) == Decimal("0.02")

    def test_anticipated_denominator_rounds_from_binary_value(self):
        # 1 - 0.0635 is stored just below 0.9365, so the denominator is 0.936
        assert convert_anticipated_to_regular(Decimal("0.0635")) == Decimal("0.067842")

    def test_regular_to_anticipated(self):
        # 0.02 / 1.02 = 0.0196078...
        assert convert_regular_to_anticipated(Decimal("0.02")) == Decimal("0.019608")

    @pytest.mark.parametrize("rate", ["0.005", "0.01", "0.015", "0.02"])
    def test_round_trip_within_tolerance(self, rate):
        i = Decimal(rate)
        back = convert_anticipated_to_regular(convert_regular_to_anticipated(i))
        assert abs(back - i) <= Decimal("0.00001")

    @pytest.mark.parametrize("rate", ["1", "1.5", "0.9996"])
    def test_invalid_anticipated_rate(self, rate):
        with pytest.raises(DomainError, match="invalid anticipated rate"):
            convert_anticipated_to_regular(Decimal(rate))

    def test_domain_error_is_value_error(self):
        with pytest.raises(ValueError):
            convert_anticipated_to_regular(Decimal("1"))


class TestFrequencyConversion:
    def test_same_frequency_is_untouched(self):
        rate = Decimal("0.0123456789")
        assert convert_effective_rate_frequency(rate, Frequency.MONTHLY, Frequency.MONTHLY) is rate

    def test_annual_to_monthly(self):
        # 1.12 ** (1/12) - 1 = 0.0094888
        result = convert_effective_rate_frequency(Decimal("0.12"), Frequency.ANNUAL, Frequency.MONTHLY)
        assert result == Decimal("0.009489")

    def test_monthly_to_annual(self):
        # 1.01 ** 12 - 1 = 0.1268250
        result = convert_effective_rate_frequency(Decimal("0.01"), Frequency.MONTHLY, Frequency.ANNUAL)
        assert result == Decimal("0.126825")

    def test_compounding_identity(self):
        monthly = convert_effective_rate_frequency(Decimal("0.03"), Frequency.QUARTERLY, Frequency.MONTHLY)
        assert abs((1 + monthly) ** 3 - Decimal("1.03")) < Decimal("0.00001")


class TestNormalize:
    def test_effective_regular_same_frequency(self, monthly_loan):
        assert normalize(monthly_loan) == Decimal("0.02")

    def test_nominal_regular(self, monthly_loan):
        spec = replace(monthly_loan, rate=Decimal("0.24"), rate_kind=RateKind.NOMINAL)
        assert normalize(spec) == Decimal("0.02")

    def test_nominal_anticipated(self, monthly_loan):
        spec = replace(
            monthly_loan, rate=Decimal("0.24"), rate_kind=RateKind.NOMINAL, is_anticipated=True
        )
        # 0.24 / 0.760 = 0.315789, then / 12 = 0.02631575 -> 0.026316
        assert normalize(spec) == Decimal("0.026316")

    def test_effective_anticipated(self, monthly_loan):
        spec = replace(monthly_loan, is_anticipated=True)
        assert normalize(spec) == Decimal("0.020408")

    def test_effective_annual_paid_monthly(self, monthly_loan):
        spec = replace(monthly_loan, rate=Decimal("0.12"), rate_frequency=Frequency.ANNUAL)
        assert normalize(spec) == Decimal("0.009489")

    def test_nominal_quarterly_paid_monthly(self, monthly_loan):
        spec = replace(
            monthly_loan,
            rate=Decimal("0.12"),
            rate_kind=RateKind.NOMINAL,
            rate_frequency=Frequency.QUARTERLY,
        )
        effective = normalize(spec)
        # 3 % per quarter expressed monthly
        assert abs((1 + effective) ** 3 - Decimal("1.03")) < Decimal("0.00001")

    def test_effective_anticipated_quarterly_paid_monthly(self, monthly_loan):
        spec = replace(
            monthly_loan,
            rate=Decimal("0.03"),
            rate_frequency=Frequency.QUARTERLY,
            is_anticipated=True,
        )
        effective = normalize(spec)
        # 0.03 / 0.970 = 0.030928 per quarter, then bridged to monthly
        expected = convert_effective_rate_frequency(
            Decimal("0.030928"), Frequency.QUARTERLY, Frequency.MONTHLY
        )
        assert effective == expected
        assert abs((1 + effective) ** 3 - Decimal("1.030928")) < Decimal("0.00001")

    def test_nominal_anticipated_annual_paid_monthly(self, monthly_loan):
        spec = replace(
            monthly_loan,
            rate=Decimal("0.12"),
            rate_kind=RateKind.NOMINAL,
            rate_frequency=Frequency.ANNUAL,
            is_anticipated=True,
        )
        effective = normalize(spec)
        # 0.12 / 0.880 = 0.136364 per year (m = 1), then bridged to monthly
        expected = convert_effective_rate_frequency(
            Decimal("0.136364"), Frequency.ANNUAL, Frequency.MONTHLY
        )
        assert effective == expected
        assert abs((1 + effective) ** 12 - Decimal("1.136364")) < Decimal("0.00001")

    def test_anticipated_rate_of_one_fails(self, monthly_loan):
        spec = replace(monthly_loan, rate=Decimal("1"), is_anticipated=True)
        with pytest.raises(DomainError):
            normalize(spec)

    def test_regular_rate_of_one_is_allowed(self, monthly_loan):
        spec = replace(monthly_loan, rate=Decimal("1"))
        assert normalize(spec) == Decimal("1")


class TestDeriveEquivalents:
    def test_monthly_family(self):
        rates = derive_equivalents(Decimal("0.02"), Frequency.MONTHLY)
        assert rates.effective_rate == Decimal("0.02")
        assert rates.nominal_rate == Decimal("0.24")
        assert rates.anticipated_effective_rate == Decimal("0.019608")
        assert rates.anticipated_nominal_rate == Decimal("0.235296")
        assert rates.frequency is Frequency.MONTHLY

    def test_invariants_hold_for_quarterly(self):
        rates = derive_equivalents(Decimal("0.05"), Frequency.QUARTERLY)
        assert rates.nominal_rate == rates.effective_rate * 4
        assert rates.anticipated_nominal_rate == rates.anticipated_effective_rate * 4
        assert abs(rates.anticipated_effective_rate - Decimal("0.05") / Decimal("1.05")) < Decimal("0.000001")
