"""Export of amortization results to CSV, JSON and PDF files."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List

from fpdf import FPDF, FontFace, XPos, YPos

from .data_models import AmortizationOutcome, PeriodEntry
from .engine import format_amount

CSV_HEADER = [
    "Period",
    "Principal",
    "Extra Payment",
    "Interest",
    "Total Payment",
    "Remaining Balance",
]

PDF_HEADER = ["#", "Interest", "Principal", "Extra", "Total", "Balance"]


def _csv_rows(schedule: Iterable[PeriodEntry]) -> Iterable[List[Any]]:
    for e in schedule:
        yield [
            e.period,
            format_amount(e.principal),
            format_amount(e.extra_payment),
            format_amount(e.interest),
            format_amount(e.total_payment),
            format_amount(e.balance),
        ]


def write_csv(stream, schedule: Iterable[PeriodEntry]) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(_csv_rows(schedule))


def schedule_to_csv(schedule: Iterable[PeriodEntry]) -> str:
    """Return the schedule as CSV text, amounts formatted to two decimals."""
    buffer = io.StringIO()
    write_csv(buffer, schedule)
    return buffer.getvalue()


def export_to_csv(path: Path, schedule: Iterable[PeriodEntry]) -> None:
    """Export schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, schedule)


def serialize_schedule(schedule: Iterable[PeriodEntry]) -> List[Dict[str, Any]]:
    """Convert schedule entries into JSON-serialisable dictionaries."""
    return [
        {
            "period": e.period,
            "interest": float(e.interest),
            "principal": float(e.principal),
            "extra_payment": float(e.extra_payment),
            "total_payment": float(e.total_payment),
            "balance": float(e.balance),
        }
        for e in schedule
    ]


def outcome_to_dict(outcome: AmortizationOutcome) -> Dict[str, Any]:
    inputs = outcome.inputs
    summary = outcome.summary
    return {
        "inputs": {
            "principal": float(inputs.principal),
            "annual_rate": float(inputs.annual_rate),
            "term_years": inputs.term_years,
            "frequency": inputs.frequency.value,
            "extra_payment": float(inputs.extra_payment),
        },
        "result": {"payment": outcome.result.payment, "total": outcome.result.total},
        "summary": {
            "periods": summary.periods,
            "scheduled_periods": outcome.periods,
            "period_rate": float(outcome.period_rate),
            "total_principal": float(summary.principal),
            "total_extra_payment": float(summary.extra_payment),
            "total_interest": float(summary.interest),
            "total_payment": float(summary.total_payment),
            "baseline_interest": float(outcome.baseline_interest),
            "interest_saved": float(outcome.interest_saved),
        },
        "schedule": serialize_schedule(outcome.schedule),
    }


def export_to_json(path: Path, outcome: AmortizationOutcome) -> None:
    """Export inputs, result, totals and schedule to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(outcome_to_dict(outcome), f, indent=2)


def build_pdf_report(outcome: AmortizationOutcome) -> FPDF:
    """Lay out the loan details, the headline result and the schedule table."""
    inputs = outcome.inputs
    pdf = FPDF()
    pdf.set_title("Loan Amortization Report")
    pdf.add_page()

    pdf.set_font("Helvetica", size=18)
    pdf.cell(0, 10, "Loan Amortization Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", size=12)
    pdf.cell(0, 8, "Loan Details:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    details = [
        f"Principal: ${format_amount(inputs.principal)}",
        f"Annual Interest Rate: {inputs.annual_rate}%",
        f"Loan Term: {inputs.term_years} years",
        f"Payment Frequency: {inputs.frequency.value}",
        f"Extra Payment: ${format_amount(inputs.extra_payment)}",
    ]
    for line in details:
        pdf.cell(0, 6, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.ln(4)
    pdf.cell(0, 8, "Summary:", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    summary_lines = [
        f"{inputs.frequency.label}ly Payment: ${outcome.result.payment}",
        f"Total Payment: ${outcome.result.total}",
        f"Interest Saved: ${format_amount(outcome.interest_saved)}",
    ]
    for line in summary_lines:
        pdf.cell(0, 6, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)

    pdf.set_font("Helvetica", size=8)
    heading = FontFace(emphasis="BOLD", color=255, fill_color=(41, 128, 185))
    with pdf.table(headings_style=heading, text_align="RIGHT") as table:
        table.row(PDF_HEADER)
        for e in outcome.schedule:
            table.row(
                [
                    str(e.period),
                    f"${format_amount(e.interest)}",
                    f"${format_amount(e.principal)}",
                    f"${format_amount(e.extra_payment)}",
                    f"${format_amount(e.total_payment)}",
                    f"${format_amount(e.balance)}",
                ]
            )
    return pdf


def pdf_report_bytes(outcome: AmortizationOutcome) -> bytes:
    return bytes(build_pdf_report(outcome).output())


def export_to_pdf(path: Path, outcome: AmortizationOutcome) -> None:
    """Export a printable report with loan details, summary and schedule."""
    path.write_bytes(pdf_report_bytes(outcome))
