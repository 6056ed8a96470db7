"""Utility functions for the amortization calculator.

This module provides helpers for parsing user input into Python data types:
amounts (with optional ``k``/``m`` shorthand), plain decimals and whole
numbers, plus the millisecond timestamps used to key calculation history.
"""

from __future__ import annotations

import time
from decimal import Decimal, InvalidOperation, getcontext

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

MAX_INT_DIGITS = 18


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and surrounding whitespace and handles both
    integer and float-like strings. It raises ``ValueError`` if conversion
    fails or the result is not a finite number.
    """
    try:
        cleaned = value.replace(",", "").strip()
        result = Decimal(cleaned)
    except (AttributeError, InvalidOperation) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse a money amount with optional suffixes.

    Accepts plain numbers ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000).
    """
    cleaned = value.strip().lower()
    factor = Decimal(1)
    if cleaned.endswith("k"):
        factor = Decimal(1_000)
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal(1_000_000)
        cleaned = cleaned[:-1]
    amount = decimal_from_str(cleaned)
    try:
        return amount * factor
    except ArithmeticError as exc:
        # Overflow past the context exponent range.
        raise ValueError(f"Invalid numeric value: {value}") from exc


def parse_percent(value: str) -> Decimal:
    """Parse a percentage string such as "5.5" or "5.5%" into percentage points."""
    cleaned = value.strip()
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned)


def int_from_str(value: str) -> int:
    """Convert a whole-number string ("30", "30.0") into an ``int``.

    Numbers with more than 18 integer digits are rejected before conversion.
    """
    number = decimal_from_str(value)
    if number.adjusted() > MAX_INT_DIGITS - 1:
        raise ValueError(f"Whole number too large: {value}")
    if number != number.to_integral_value():
        raise ValueError(f"Invalid whole number: {value}")
    return int(number)


def now_millis() -> int:
    """Current time as milliseconds since the epoch."""
    return int(time.time() * 1000)
