"""Validation of raw loan form values.

Values arrive as strings from the command line, an HTML form or a JSON body.
Each field is checked independently so that every problem can be reported at
once; no ``LoanInputs`` is built unless all fields are valid.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from .data_models import Frequency, LoanInputs
from .utils import int_from_str, parse_amount, parse_percent

logger = logging.getLogger(__name__)

# Upper bounds keep the schedule loop and decimal quantization bounded.
MAX_TERM_YEARS = 100
MAX_PRINCIPAL = Decimal("1000000000000")
MAX_ANNUAL_RATE = Decimal("100")

PRINCIPAL_MESSAGE = "Please enter a valid principal amount (number > 0)"
RATE_MESSAGE = "Please enter a valid annual interest rate (number > 0)"
YEARS_MESSAGE = "Please enter a valid term in years (number > 0)"
EXTRA_MESSAGE = "Extra payment must be a non-negative number"
FREQUENCY_MESSAGE = "Payment frequency must be 'monthly' or 'yearly'"


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def validate_loan_form(
    principal: object,
    annual_rate: object,
    years: object,
    frequency: object = Frequency.MONTHLY.value,
    extra_payment: object = "",
) -> Tuple[Optional[LoanInputs], List[str]]:
    """Validate raw form values.

    Returns
    -------
    inputs, messages
        ``inputs`` is ``None`` whenever ``messages`` is not empty.
    """
    messages: List[str] = []

    principal_value = None
    try:
        principal_value = parse_amount(_text(principal))
    except ValueError:
        pass
    if principal_value is None or principal_value <= 0:
        messages.append(PRINCIPAL_MESSAGE)
    elif principal_value > MAX_PRINCIPAL:
        messages.append(f"Principal must not exceed {MAX_PRINCIPAL:,}")

    rate_value = None
    try:
        rate_value = parse_percent(_text(annual_rate))
    except ValueError:
        pass
    if rate_value is None or rate_value <= 0:
        messages.append(RATE_MESSAGE)
    elif rate_value > MAX_ANNUAL_RATE:
        messages.append(f"Annual interest rate must not exceed {MAX_ANNUAL_RATE}%")

    years_value = None
    try:
        years_value = int_from_str(_text(years))
    except ValueError:
        pass
    if years_value is None or years_value <= 0:
        messages.append(YEARS_MESSAGE)
    elif years_value > MAX_TERM_YEARS:
        messages.append(f"Loan term must not exceed {MAX_TERM_YEARS} years")

    frequency_value = None
    try:
        frequency_value = Frequency(_text(frequency).lower() or Frequency.MONTHLY.value)
    except ValueError:
        messages.append(FREQUENCY_MESSAGE)

    extra_value = Decimal("0")
    extra_text = _text(extra_payment)
    if extra_text:
        try:
            extra_value = parse_amount(extra_text)
        except ValueError:
            extra_value = None
        if extra_value is None or extra_value < 0:
            messages.append(EXTRA_MESSAGE)

    if messages:
        logger.info("Rejected loan form: %s", "; ".join(messages))
        return None, messages

    return (
        LoanInputs(
            principal=principal_value,
            annual_rate=rate_value,
            term_years=years_value,
            frequency=frequency_value,
            extra_payment=extra_value,
        ),
        [],
    )
