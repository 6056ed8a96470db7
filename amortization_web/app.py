"""Flask JSON API around the amortization engine.

Routes accept either form fields or a JSON body with ``principal``,
``annual_rate``, ``years``, ``frequency`` and ``extra_payment``. Successful
calculations are recorded in the calculation history.
"""

import logging
import os
from typing import Any, Dict, Optional

from flask import Flask, Response, current_app, jsonify, request

from amortization.data_models import CalculationError
from amortization.engine import compute_amortization
from amortization.export import outcome_to_dict, pdf_report_bytes, schedule_to_csv
from amortization.history_store import create_store_from_env, history_record_from
from amortization.validation import validate_loan_form

logger = logging.getLogger(__name__)

FORM_FIELDS = ("principal", "annual_rate", "years", "frequency", "extra_payment")


def _form_values() -> Dict[str, str]:
    payload = request.get_json(silent=True)
    source = payload if isinstance(payload, dict) else request.form
    values = {}
    for name in FORM_FIELDS:
        value = source.get(name)
        values[name] = "" if value is None else str(value).strip()
    return values


def _run_calculation(values: Dict[str, str]):
    """Return ``(outcome, None)`` or ``(None, error_response)``."""
    inputs, messages = validate_loan_form(
        values["principal"],
        values["annual_rate"],
        values["years"],
        values["frequency"],
        values["extra_payment"],
    )
    if messages:
        return None, (jsonify({"errors": messages}), 400)
    outcome = compute_amortization(inputs)
    if isinstance(outcome, CalculationError):
        return None, (jsonify({"code": outcome.code, "errors": outcome.messages}), 422)
    return outcome, None


def _history():
    return current_app.extensions["history_store"]


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config["HISTORY_DATABASE_URL"] = os.environ.get("LOAN_HISTORY_DATABASE_URL")
    app.config["HISTORY_MAX_ITEMS"] = int(os.environ.get("LOAN_HISTORY_MAX_ITEMS", "20"))
    if config:
        app.config.update(config)
    app.extensions["history_store"] = create_store_from_env(
        app.config["HISTORY_DATABASE_URL"], app.config["HISTORY_MAX_ITEMS"]
    )

    @app.post("/api/amortization")
    def calculate():
        values = _form_values()
        outcome, error = _run_calculation(values)
        if error:
            return error
        record = _history().add_entry(history_record_from(outcome, values))
        data = outcome_to_dict(outcome)
        data["history_timestamp"] = record.timestamp
        return jsonify(data)

    @app.post("/api/amortization/export.csv")
    def export_csv():
        outcome, error = _run_calculation(_form_values())
        if error:
            return error
        logger.info("Exporting %d schedule rows as CSV", len(outcome.schedule))
        return Response(
            schedule_to_csv(outcome.schedule),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=loan-amortization.csv"},
        )

    @app.post("/api/amortization/export.pdf")
    def export_pdf():
        outcome, error = _run_calculation(_form_values())
        if error:
            return error
        logger.info("Exporting %d schedule rows as PDF", len(outcome.schedule))
        return Response(
            pdf_report_bytes(outcome),
            mimetype="application/pdf",
            headers={"Content-Disposition": "attachment; filename=loan-amortization.pdf"},
        )

    @app.get("/api/history")
    def list_history():
        return jsonify([record.to_dict() for record in _history().list_entries()])

    @app.delete("/api/history/<int:timestamp>")
    def delete_history_item(timestamp: int):
        if not _history().delete_entry(timestamp):
            return jsonify({"errors": [f"No calculation with timestamp {timestamp}"]}), 404
        return "", 204

    @app.delete("/api/history")
    def clear_history():
        _history().clear()
        return "", 204

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting Loan Amortization API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
