"""Output helpers for the amortization calculator.

This module provides simple functions to render the headline result, the
totals and the amortization schedule in a tabular text format, plus the
calculation history.
"""

from __future__ import annotations

from typing import Iterable, Optional

import click

from .data_models import AmortizationOutcome, PeriodEntry, ScheduleSummary
from .engine import format_amount
from .history_store import HistoryRecord


def print_summary(outcome: AmortizationOutcome) -> None:
    """Print the headline result and schedule totals."""
    summary = outcome.summary
    label = outcome.inputs.frequency.label
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Payment per {label.lower():<6} : {outcome.result.payment}")
    click.echo(f"Total repayment    : {outcome.result.total}")
    click.echo(f"Total principal    : {format_amount(summary.principal)}")
    if summary.extra_payment:
        click.echo(f"Total extra paid   : {format_amount(summary.extra_payment)}")
    click.echo(f"Total interest     : {format_amount(summary.interest)}")
    click.echo(f"Baseline interest  : {format_amount(outcome.baseline_interest)}")
    click.echo(f"Interest saved     : {format_amount(outcome.interest_saved)}")
    click.echo(f"Payments made      : {summary.periods} of {outcome.periods}")
    if summary.periods < outcome.periods:
        click.echo(f"Term reduction     : {outcome.periods - summary.periods} {label.lower()}s")
    click.echo("-" * 72)


def print_schedule(
    schedule: Iterable[PeriodEntry],
    summary: Optional[ScheduleSummary] = None,
) -> None:
    """Print the amortization schedule as a simple table.

    When ``summary`` is given a ``Totals`` row is appended.
    """
    headers = ["#", "Principal", "Extra", "Interest", "Total", "Balance"]
    click.echo("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            format_amount(entry.principal),
            format_amount(entry.extra_payment),
            format_amount(entry.interest),
            format_amount(entry.total_payment),
            format_amount(entry.balance),
        ]
        click.echo("\t".join(row))
    if summary is not None:
        totals = [
            "Totals",
            format_amount(summary.principal),
            format_amount(summary.extra_payment),
            format_amount(summary.interest),
            format_amount(summary.total_payment),
            "",
        ]
        click.echo("\t".join(totals))


def print_history(records: Iterable[HistoryRecord]) -> None:
    """Print remembered calculations, most recent first."""
    records = list(records)
    if not records:
        click.echo("No calculations in history.")
        return
    click.echo(f"{'Timestamp':>15s} {'Principal':>14s} {'Rate %':>8s} {'Years':>6s} "
               f"{'Freq':>8s} {'Extra':>10s} {'Payment':>12s} {'Total':>14s}")
    for r in records:
        click.echo(
            f"{r.timestamp:>15d} {r.principal:>14s} {r.annual_rate:>8s} {r.years:>6s} "
            f"{r.frequency:>8s} {r.extra_payment or '-':>10s} {r.result.payment:>12s} {r.result.total:>14s}"
        )
