from decimal import Decimal

import pytest

from amortization.data_models import Frequency
from amortization.utils import decimal_from_str, int_from_str, parse_amount, parse_percent
from amortization.validation import (
    EXTRA_MESSAGE,
    FREQUENCY_MESSAGE,
    PRINCIPAL_MESSAGE,
    RATE_MESSAGE,
    YEARS_MESSAGE,
    validate_loan_form,
)


def test_valid_form_builds_inputs():
    inputs, messages = validate_loan_form("250,000", "5.5", "30", "monthly", "150")
    assert messages == []
    assert inputs.principal == Decimal("250000")
    assert inputs.annual_rate == Decimal("5.5")
    assert inputs.term_years == 30
    assert inputs.frequency is Frequency.MONTHLY
    assert inputs.extra_payment == Decimal("150")


def test_empty_extra_payment_means_zero():
    inputs, messages = validate_loan_form("10000", "5", "1", "yearly", "")
    assert messages == []
    assert inputs.extra_payment == 0
    assert inputs.frequency is Frequency.YEARLY


def test_shorthand_amounts_and_percent_sign():
    inputs, _ = validate_loan_form("500k", "4.25%", "15", "Monthly", "1k")
    assert inputs.principal == Decimal("500000")
    assert inputs.annual_rate == Decimal("4.25")
    assert inputs.extra_payment == Decimal("1000")


def test_every_missing_field_is_reported():
    inputs, messages = validate_loan_form("", "", "", "monthly", "")
    assert inputs is None
    assert messages == [PRINCIPAL_MESSAGE, RATE_MESSAGE, YEARS_MESSAGE]


@pytest.mark.parametrize(
    "principal, rate, years, frequency, extra, expected",
    [
        ("0", "5", "10", "monthly", "", PRINCIPAL_MESSAGE),
        ("abc", "5", "10", "monthly", "", PRINCIPAL_MESSAGE),
        ("10000", "0", "10", "monthly", "", RATE_MESSAGE),
        ("10000", "-2", "10", "monthly", "", RATE_MESSAGE),
        ("10000", "5", "0", "monthly", "", YEARS_MESSAGE),
        ("10000", "5", "2.5", "monthly", "", YEARS_MESSAGE),
        ("10000", "5", "10", "weekly", "", FREQUENCY_MESSAGE),
        ("10000", "5", "10", "monthly", "-1", EXTRA_MESSAGE),
        ("10000", "5", "10", "monthly", "lots", EXTRA_MESSAGE),
        ("10000", "nan", "10", "monthly", "", RATE_MESSAGE),
    ],
)
def test_field_messages(principal, rate, years, frequency, extra, expected):
    inputs, messages = validate_loan_form(principal, rate, years, frequency, extra)
    assert inputs is None
    assert messages == [expected]


def test_caps_on_term_principal_and_rate():
    _, messages = validate_loan_form("2000000000000", "101", "101", "monthly", "")
    assert len(messages) == 3
    assert messages[0].startswith("Principal must not exceed")
    assert messages[1].startswith("Annual interest rate must not exceed")
    assert messages[2] == "Loan term must not exceed 100 years"


def test_term_at_cap_is_accepted():
    inputs, messages = validate_loan_form("1000", "3", "100", "monthly", "")
    assert messages == []
    assert inputs.term_years == 100


class TestParsers:
    def test_decimal_from_str_strips_commas(self):
        assert decimal_from_str(" 1,234.50 ") == Decimal("1234.50")

    def test_decimal_from_str_rejects_garbage(self):
        with pytest.raises(ValueError):
            decimal_from_str("12abc")
        with pytest.raises(ValueError):
            decimal_from_str("Infinity")

    def test_parse_amount_suffixes(self):
        assert parse_amount("1.2m") == Decimal("1200000")
        assert parse_amount("750K") == Decimal("750000")

    def test_parse_percent(self):
        assert parse_percent("6%") == Decimal("6")

    def test_int_from_str(self):
        assert int_from_str("30") == 30
        assert int_from_str("30.0") == 30
        with pytest.raises(ValueError):
            int_from_str("30.5")

    def test_parse_amount_rejects_exponent_overflow(self):
        with pytest.raises(ValueError):
            parse_amount("2e999999k")

    def test_int_from_str_rejects_huge_exponent(self):
        with pytest.raises(ValueError):
            int_from_str("1e99999999")


@pytest.mark.parametrize(
    "principal, years, extra, expected",
    [
        ("1e1000000", "10", "", PRINCIPAL_MESSAGE),
        ("10000", "10", "2e999999k", EXTRA_MESSAGE),
        ("1000", "1e99999999", "", YEARS_MESSAGE),
        ("1000", "1e20", "", YEARS_MESSAGE),
    ],
)
def test_out_of_range_numbers_are_field_messages(principal, years, extra, expected):
    inputs, messages = validate_loan_form(principal, "5", years, "monthly", extra)
    assert inputs is None
    assert messages == [expected]
