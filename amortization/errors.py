"""Exceptions raised by the amortization engine."""


class AmortizationError(ValueError):
    """Base class for engine failures."""

    code = "amortization_error"


class InvalidInput(AmortizationError):
    """A principal, rate or term is non-positive or not a number."""

    code = "invalid_input"


class DegenerateRate(AmortizationError):
    """The period rate is zero, so the annuity formula is undefined."""

    code = "degenerate_rate"
