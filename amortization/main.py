"""Command-line interface for the amortization calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries and
manage the history of past calculations. Schedules can be printed to the
terminal or exported to JSON, CSV or PDF files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

import click

from .data_models import AmortizationOutcome, CalculationError, Frequency
from .engine import compute_amortization
from .export import export_to_csv, export_to_json, export_to_pdf, outcome_to_dict
from .formatter import print_history, print_schedule, print_summary
from .history_store import (
    DEFAULT_DATABASE_URL,
    MAX_HISTORY_ITEMS,
    HistoryStore,
    history_record_from,
)
from .validation import validate_loan_form

logger = logging.getLogger(__name__)


def calculate_from_options(
    principal: str,
    rate: str,
    years: str,
    frequency: str,
    extra: Optional[str],
) -> AmortizationOutcome:
    """Validate raw option values and run the engine.

    Validation messages become a ``click.UsageError``; an engine failure
    becomes a ``click.ClickException``.
    """
    inputs, messages = validate_loan_form(principal, rate, years, frequency, extra or "")
    if messages:
        raise click.UsageError("\n".join(messages))
    outcome = compute_amortization(inputs)
    if isinstance(outcome, CalculationError):
        raise click.ClickException(f"{outcome.code}: {'; '.join(outcome.messages)}")
    return outcome


def _raw_inputs(principal: str, rate: str, years: str, extra: Optional[str]) -> Dict[str, str]:
    return {"principal": principal, "annual_rate": rate, "years": years, "extra_payment": extra or ""}


def _history_store(ctx: click.Context) -> HistoryStore:
    obj = ctx.ensure_object(dict)
    store = obj.get("store")
    if store is None:
        store = HistoryStore(
            obj.get("database_url") or DEFAULT_DATABASE_URL,
            max_items=MAX_HISTORY_ITEMS if obj.get("max_history") is None else obj["max_history"],
        )
        obj["store"] = store
    return store


def loan_options(func: Callable) -> Callable:
    """Attach the options describing a loan to a command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts 500k / 1.2m)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--years", "-y", "years", required=True, help="Loan term in years"),
        click.option(
            "--frequency",
            "-f",
            "frequency",
            type=click.Choice([f.value for f in Frequency], case_sensitive=False),
            default=Frequency.MONTHLY.value,
            show_default=True,
            help="Payment frequency",
        ),
        click.option("--extra", "-e", "extra", help="Extra payment applied every period"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--database-url",
    "database_url",
    envvar="LOAN_HISTORY_DATABASE_URL",
    help=f"History database URL (default {DEFAULT_DATABASE_URL})",
)
@click.option(
    "--max-history",
    "max_history",
    envvar="LOAN_HISTORY_MAX_ITEMS",
    type=click.IntRange(min=1),
    help=f"Number of calculations kept in history (default {MAX_HISTORY_ITEMS})",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str], max_history: Optional[int], verbose: bool) -> None:
    """A command-line loan amortization calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    obj = ctx.ensure_object(dict)
    obj["database_url"] = database_url
    obj["max_history"] = max_history


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json, .csv or .pdf)")
@click.option("--max-rows", "max_rows", type=click.IntRange(min=0), default=120, show_default=True, help="Rows printed to the terminal (0 for all)")
@click.option("--save/--no-save", "save", default=False, help="Record the calculation in history")
@click.pass_context
def schedule(
    ctx: click.Context,
    principal: str,
    rate: str,
    years: str,
    frequency: str,
    extra: Optional[str],
    output: Optional[str],
    max_rows: int,
    save: bool,
) -> None:
    """Compute and print the full amortization schedule."""
    outcome = calculate_from_options(principal, rate, years, frequency, extra)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, outcome)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, outcome.schedule)
        elif path.suffix.lower() == ".pdf":
            export_to_pdf(path, outcome)
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .pdf", param_hint="--output")
        logger.debug("Exported %d rows to %s", len(outcome.schedule), path)
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(outcome)
        rows = outcome.schedule
        if max_rows and len(rows) > max_rows:
            click.echo(f"Schedule has {len(rows)} rows; showing first {max_rows} rows.")
            print_schedule(rows[:max_rows], outcome.summary)
        else:
            print_schedule(rows, outcome.summary)
    if save:
        record = _history_store(ctx).add_entry(
            history_record_from(outcome, _raw_inputs(principal, rate, years, extra))
        )
        click.echo(f"Saved to history as {record.timestamp}")


@cli.command()
@loan_options
@click.option("--json", "as_json", is_flag=True, help="Print the summary as JSON")
@click.option("--save/--no-save", "save", default=False, help="Record the calculation in history")
@click.pass_context
def summary(
    ctx: click.Context,
    principal: str,
    rate: str,
    years: str,
    frequency: str,
    extra: Optional[str],
    as_json: bool,
    save: bool,
) -> None:
    """Compute and print only the summary metrics for a loan."""
    outcome = calculate_from_options(principal, rate, years, frequency, extra)
    if as_json:
        data = outcome_to_dict(outcome)
        data.pop("schedule")
        click.echo(json.dumps(data, indent=2))
    else:
        print_summary(outcome)
    if save:
        _history_store(ctx).add_entry(history_record_from(outcome, _raw_inputs(principal, rate, years, extra)))


@cli.group()
def history() -> None:
    """Inspect or edit the calculation history."""
    pass


@history.command("list")
@click.pass_context
def history_list(ctx: click.Context) -> None:
    """List remembered calculations, most recent first."""
    print_history(_history_store(ctx).list_entries())


@history.command("delete")
@click.argument("timestamp", type=int)
@click.pass_context
def history_delete(ctx: click.Context, timestamp: int) -> None:
    """Delete the calculation recorded at TIMESTAMP."""
    if not _history_store(ctx).delete_entry(timestamp):
        raise click.ClickException(f"No calculation with timestamp {timestamp}")
    click.echo(f"Deleted {timestamp}")


@history.command("clear")
@click.confirmation_option(prompt="Delete the whole calculation history?")
@click.pass_context
def history_clear(ctx: click.Context) -> None:
    """Delete every remembered calculation."""
    _history_store(ctx).clear()
    click.echo("History cleared")


if __name__ == "__main__":
    cli()
