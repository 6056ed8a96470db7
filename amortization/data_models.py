"""Data models for the amortization calculator.

This module defines dataclasses representing the entities passed in and out of
the engine: the validated loan inputs, individual schedule entries, the
aggregated totals and the headline result. Using dataclasses makes it easy to
construct, inspect and serialize these structures.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List


class Frequency(str, Enum):
    """Payment frequency. One period is a month or a year."""

    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def periods_per_year(self) -> int:
        return 12 if self is Frequency.MONTHLY else 1

    @property
    def label(self) -> str:
        return "Month" if self is Frequency.MONTHLY else "Year"


@dataclass(frozen=True)
class LoanInputs:
    """Inputs of a single calculation.

    Attributes
    ----------
    principal: Decimal
        The original loan amount.
    annual_rate: Decimal
        Nominal annual interest rate in percentage points (5.5 means 5.5 %).
    term_years: int
        Nominal term of the loan in years.
    frequency: Frequency
        Whether payments are made monthly or yearly.
    extra_payment: Decimal
        Constant extra amount applied to principal every period until payoff.
    """

    principal: Decimal
    annual_rate: Decimal
    term_years: int
    frequency: Frequency = Frequency.MONTHLY
    extra_payment: Decimal = Decimal("0")


@dataclass
class PeriodEntry:
    """An entry in the amortization schedule.

    ``principal`` is the scheduled (non-extra) part of the payment and
    ``extra_payment`` the extra actually applied, which can be lower than the
    requested extra on the final period. ``balance`` is the remaining
    principal after this period's payment.
    """

    period: int
    interest: Decimal
    principal: Decimal
    extra_payment: Decimal
    total_payment: Decimal
    balance: Decimal


@dataclass
class ScheduleSummary:
    """Sums over every entry of a schedule."""

    principal: Decimal
    extra_payment: Decimal
    interest: Decimal
    total_payment: Decimal
    periods: int


@dataclass
class LoanResult:
    """Headline result, formatted to two decimals for display."""

    payment: str
    total: str


@dataclass
class AmortizationOutcome:
    """Everything produced by a successful calculation."""

    inputs: LoanInputs
    periods: int  # nominal number of periods
    period_rate: Decimal
    payment: Decimal  # full precision fixed payment
    result: LoanResult
    schedule: List[PeriodEntry]
    summary: ScheduleSummary
    baseline_interest: Decimal
    interest_saved: Decimal


@dataclass
class CalculationError:
    """Typed failure returned instead of an outcome.

    ``code`` is ``"invalid_input"`` or ``"degenerate_rate"``.
    """

    code: str
    messages: List[str] = field(default_factory=list)
