"""Core calculation engine for the amortization calculator.

This module implements the financial logic required to build a fixed-payment
(annuity) amortization schedule with an optional constant extra payment
applied every period. The schedule is built with two rounding regimes:
intermediate values are rounded to 10 decimal places while iterating, and the
headline result is rounded to 2 decimal places for display. Results are
returned as an ``AmortizationOutcome`` holding the list of ``PeriodEntry``
objects, their totals and the interest a plain schedule would have cost.

Every function here is pure. ``compute_amortization`` is the public entry
point; it never raises for bad numeric input but returns a
``CalculationError`` instead.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, getcontext
from typing import Iterable, List, Tuple, Union

from .data_models import (
    AmortizationOutcome,
    CalculationError,
    Frequency,
    LoanInputs,
    LoanResult,
    PeriodEntry,
    ScheduleSummary,
)
from .errors import AmortizationError, DegenerateRate, InvalidInput

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ITERATION_PLACES = Decimal("1E-10")
DISPLAY_PLACES = Decimal("0.01")
# Balance below which the loan is considered paid off.
PAYOFF_TOLERANCE = Decimal("0.01")
ZERO = Decimal("0")


def _round_iteration(value: Decimal) -> Decimal:
    return value.quantize(ITERATION_PLACES, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Return ``value`` rounded half-up to two decimals as a string."""
    return str(value.quantize(DISPLAY_PLACES, rounding=ROUND_HALF_UP))


def _to_decimal(value: object, name: str) -> Decimal:
    """Convert ``value`` into a finite ``Decimal`` or raise ``InvalidInput``."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidInput(f"{name} is not a number: {value!r}") from exc
    if not result.is_finite():
        raise InvalidInput(f"{name} must be a finite number: {value!r}")
    return result


def period_parameters(annual_rate: Decimal, term_years: int, frequency: Frequency) -> Tuple[int, Decimal]:
    """Return the number of periods and the interest rate of one period.

    ``annual_rate`` is given in percentage points. For monthly payments the
    annual rate is split evenly over twelve months.
    """
    frequency = Frequency(frequency)
    per_year = frequency.periods_per_year
    return term_years * per_year, annual_rate / Decimal(100) / Decimal(per_year)


def calculate_payment(principal: Decimal, period_rate: Decimal, periods: int) -> Decimal:
    """Return the fixed payment that amortizes ``principal`` over ``periods``.

    The formula is:

        payment = P * r / (1 - (1 + r)^-n)

    where ``P`` is the principal, ``r`` the period rate and ``n`` the number
    of payments. Without extra payments the balance reaches zero after
    exactly ``n`` payments.

    Raises
    ------
    DegenerateRate
        If ``period_rate`` is zero or negative; the formula divides by zero.
    InvalidInput
        If ``periods`` or ``principal`` is not positive.
    """
    if periods <= 0:
        raise InvalidInput("Number of periods must be positive")
    if principal <= 0:
        raise InvalidInput("Principal must be positive")
    if period_rate <= 0:
        raise DegenerateRate(f"Period rate must be positive; got {period_rate}")
    return principal * period_rate / (1 - (1 + period_rate) ** -periods)


def build_schedule(
    principal: Decimal,
    period_rate: Decimal,
    periods: int,
    payment: Decimal,
    extra_payment: Decimal = ZERO,
) -> List[PeriodEntry]:
    """Build the amortization schedule period by period.

    Each period pays the interest on the outstanding balance, the scheduled
    principal (``payment - interest``) and the extra payment. When scheduled
    principal plus extra would exceed the balance, the payment is clamped so
    the balance is paid off exactly: the scheduled principal is kept and the
    extra shrinks to whatever remains (never below zero). The schedule stops
    early once the balance is within ``PAYOFF_TOLERANCE`` of zero, so extra
    payments can only shorten it.
    """
    balance = principal
    schedule: List[PeriodEntry] = []
    for period in range(1, periods + 1):
        interest = _round_iteration(balance * period_rate)
        scheduled_principal = _round_iteration(payment - interest)

        total_principal = scheduled_principal + extra_payment
        applied_extra = extra_payment
        if total_principal > balance:
            # Payoff: keep the scheduled principal, clamp the extra.
            applied_extra = max(ZERO, _round_iteration(balance - scheduled_principal))
            total_principal = balance

        total_payment = interest + total_principal
        balance -= total_principal

        schedule.append(
            PeriodEntry(
                period=period,
                interest=interest,
                principal=scheduled_principal,
                extra_payment=applied_extra,
                total_payment=total_payment,
                balance=balance if balance > 0 else ZERO,
            )
        )

        if balance <= PAYOFF_TOLERANCE:
            break
    return schedule


def baseline_interest(
    principal: Decimal, annual_rate: Decimal, term_years: int, frequency: Frequency
) -> Decimal:
    """Return the total interest paid over the full term with no extra payments.

    This is a separate pass over the original inputs rather than a reuse of
    the real schedule, which reflects the borrower's extra payments. No
    intermediate rounding is applied.
    """
    periods, period_rate = period_parameters(annual_rate, term_years, frequency)
    payment = calculate_payment(principal, period_rate, periods)

    balance = principal
    total_interest = ZERO
    for _ in range(periods):
        interest = balance * period_rate
        balance -= payment - interest
        total_interest += interest
        if balance <= 0:
            break
    return total_interest


def interest_saved(baseline: Decimal, actual_interest: Decimal) -> Decimal:
    """Interest avoided thanks to extra payments, floored at zero."""
    return max(ZERO, baseline - actual_interest)


def summarize_schedule(schedule: Iterable[PeriodEntry]) -> ScheduleSummary:
    """Sum principal, extra payment, interest and total payment of a schedule."""
    principal = extra = interest = total = ZERO
    count = 0
    for entry in schedule:
        principal += entry.principal
        extra += entry.extra_payment
        interest += entry.interest
        total += entry.total_payment
        count += 1
    return ScheduleSummary(
        principal=principal,
        extra_payment=extra,
        interest=interest,
        total_payment=total,
        periods=count,
    )


def headline_result(payment: Decimal, summary: ScheduleSummary) -> LoanResult:
    return LoanResult(payment=format_amount(payment), total=format_amount(summary.total_payment))


def _checked_inputs(inputs: LoanInputs) -> Tuple[Decimal, Decimal, int, Frequency, Decimal]:
    """Fail fast on inputs that slipped past validation."""
    principal = _to_decimal(inputs.principal, "principal")
    annual_rate = _to_decimal(inputs.annual_rate, "annual rate")
    extra_payment = _to_decimal(inputs.extra_payment or 0, "extra payment")
    if principal <= 0:
        raise InvalidInput("principal must be positive")
    if annual_rate < 0:
        raise InvalidInput("annual rate must not be negative")
    if extra_payment < 0:
        raise InvalidInput("extra payment must not be negative")
    try:
        term_years = int(inputs.term_years)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidInput(f"term is not a whole number: {inputs.term_years!r}") from exc
    if term_years != inputs.term_years or term_years <= 0:
        raise InvalidInput("term must be a positive whole number of years")
    try:
        frequency = Frequency(inputs.frequency)
    except ValueError as exc:
        raise InvalidInput(f"unknown payment frequency: {inputs.frequency!r}") from exc
    return principal, annual_rate, term_years, frequency, extra_payment


def compute_amortization(inputs: LoanInputs) -> Union[AmortizationOutcome, CalculationError]:
    """Compute the schedule, totals and baseline interest for a loan.

    Parameters
    ----------
    inputs: LoanInputs
        The loan to amortize. Inputs are expected to be validated already;
        anything non-positive or non-numeric that slips through is reported
        as an ``invalid_input`` error, and a zero rate as ``degenerate_rate``.

    Returns
    -------
    AmortizationOutcome | CalculationError
        The outcome on success, otherwise a typed error describing why no
        schedule could be produced.
    """
    try:
        principal, annual_rate, term_years, frequency, extra_payment = _checked_inputs(inputs)
        periods, period_rate = period_parameters(annual_rate, term_years, frequency)
        payment = calculate_payment(principal, period_rate, periods)
        schedule = build_schedule(principal, period_rate, periods, payment, extra_payment)
        summary = summarize_schedule(schedule)
        baseline = baseline_interest(principal, annual_rate, term_years, frequency)
    except AmortizationError as exc:
        logger.warning("Amortization rejected (%s): %s", exc.code, exc)
        return CalculationError(code=exc.code, messages=[str(exc)])
    except (InvalidOperation, Overflow):
        # Amounts need more digits than the context holds.
        logger.warning("Amortization rejected: amounts out of range for %r", inputs)
        return CalculationError(code=InvalidInput.code, messages=["amounts are too large to amortize"])

    logger.debug(
        "Amortized %s over %d %s periods: payment=%s, %d entries",
        principal,
        periods,
        frequency.value,
        payment,
        len(schedule),
    )
    return AmortizationOutcome(
        inputs=LoanInputs(principal, annual_rate, term_years, frequency, extra_payment),
        periods=periods,
        period_rate=period_rate,
        payment=payment,
        result=headline_result(payment, summary),
        schedule=schedule,
        summary=summary,
        baseline_interest=baseline,
        interest_saved=interest_saved(baseline, summary.interest),
    )
