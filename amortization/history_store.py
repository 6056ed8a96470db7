"""Persistence layer for the calculation history.

Every successful calculation can be recorded with the raw values the user
entered and its headline result. The history is a capped list ordered most
recent first: once it holds ``max_items`` records, adding a new one evicts
the oldest. It defaults to SQLite for local use, but accepts any
SQLAlchemy-compatible URL (e.g. PostgreSQL/MySQL).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import BigInteger, Column, DateTime, String, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from .data_models import AmortizationOutcome, LoanResult
from .utils import now_millis

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_DATABASE_URL = "sqlite:///loan_history.sqlite3"
MAX_HISTORY_ITEMS = 20


class CalculationHistoryModel(Base):
    __tablename__ = "calculation_history"

    timestamp = Column(BigInteger, primary_key=True, autoincrement=False)
    principal = Column(String(64), nullable=False)
    annual_rate = Column(String(64), nullable=False)
    years = Column(String(64), nullable=False)
    frequency = Column(String(16), nullable=False)
    extra_payment = Column(String(64), nullable=False, default="")
    payment = Column(String(64), nullable=False)
    total = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


@dataclass
class HistoryRecord:
    """One remembered calculation, keyed by its millisecond timestamp."""

    timestamp: int
    principal: str
    annual_rate: str
    years: str
    frequency: str
    extra_payment: str
    result: LoanResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "principal": self.principal,
            "annual_rate": self.annual_rate,
            "years": self.years,
            "frequency": self.frequency,
            "extra_payment": self.extra_payment,
            "result": {"payment": self.result.payment, "total": self.result.total},
        }


def history_record_from(
    outcome: AmortizationOutcome,
    raw_inputs: Optional[Mapping[str, object]] = None,
    timestamp: Optional[int] = None,
) -> HistoryRecord:
    """Build a history record for ``outcome``.

    ``raw_inputs`` holds the values as the user typed them (keys
    ``principal``, ``annual_rate``, ``years``, ``extra_payment``); missing
    keys fall back to the validated inputs.
    """
    raw = dict(raw_inputs or {})
    inputs = outcome.inputs

    def pick(key: str, fallback: object) -> str:
        value = raw.get(key)
        return str(fallback) if value is None else str(value)

    extra_fallback = inputs.extra_payment if inputs.extra_payment else ""
    return HistoryRecord(
        timestamp=timestamp if timestamp is not None else now_millis(),
        principal=pick("principal", inputs.principal),
        annual_rate=pick("annual_rate", inputs.annual_rate),
        years=pick("years", inputs.term_years),
        frequency=inputs.frequency.value,
        extra_payment=pick("extra_payment", extra_fallback),
        result=outcome.result,
    )


class HistoryStore:
    """Database-backed, capped calculation history."""

    def __init__(self, url: str, *, max_items: int = MAX_HISTORY_ITEMS) -> None:
        self._engine = create_engine(url, future=True)
        Base.metadata.create_all(self._engine)
        self._session_factory = sessionmaker(self._engine, expire_on_commit=False, future=True)
        self._max_items = max_items

    @property
    def max_items(self) -> int:
        return self._max_items

    def list_entries(self) -> List[HistoryRecord]:
        """Return all records, most recent first."""
        with self._session_factory() as session:
            rows: Iterable[CalculationHistoryModel] = session.execute(
                select(CalculationHistoryModel).order_by(CalculationHistoryModel.timestamp.desc())
            ).scalars()
            return [self._to_record(row) for row in rows]

    def add_entry(self, record: HistoryRecord) -> HistoryRecord:
        """Store ``record`` and evict the oldest records beyond the cap.

        Timestamps are unique; a record colliding with an existing one is
        moved to the next free millisecond. The stored record is returned.
        """
        with self._session_factory() as session:
            timestamp = record.timestamp
            while session.get(CalculationHistoryModel, timestamp) is not None:
                timestamp += 1
            session.add(
                CalculationHistoryModel(
                    timestamp=timestamp,
                    principal=record.principal,
                    annual_rate=record.annual_rate,
                    years=record.years,
                    frequency=record.frequency,
                    extra_payment=record.extra_payment,
                    payment=record.result.payment,
                    total=record.result.total,
                )
            )
            session.commit()
        logger.info("Recorded calculation %d in history", timestamp)
        self._trim()
        if timestamp == record.timestamp:
            return record
        return HistoryRecord(
            timestamp=timestamp,
            principal=record.principal,
            annual_rate=record.annual_rate,
            years=record.years,
            frequency=record.frequency,
            extra_payment=record.extra_payment,
            result=record.result,
        )

    def delete_entry(self, timestamp: int) -> bool:
        """Remove the record with ``timestamp``. Returns whether one existed."""
        with self._session_factory() as session:
            row = session.get(CalculationHistoryModel, timestamp)
            if row is None:
                return False
            session.delete(row)
            session.commit()
        logger.info("Deleted calculation %d from history", timestamp)
        return True

    def clear(self) -> None:
        with self._session_factory() as session:
            session.execute(CalculationHistoryModel.__table__.delete())
            session.commit()
        logger.info("Cleared calculation history")

    def _trim(self) -> None:
        if not self._max_items or self._max_items < 0:
            return
        with self._session_factory() as session:
            rows = session.execute(
                select(CalculationHistoryModel).order_by(CalculationHistoryModel.timestamp.desc())
            ).scalars().all()
            if len(rows) <= self._max_items:
                return
            for row in rows[self._max_items :]:
                session.delete(row)
            session.commit()
            logger.debug("Evicted %d old history records", len(rows) - self._max_items)

    @staticmethod
    def _to_record(row: CalculationHistoryModel) -> HistoryRecord:
        return HistoryRecord(
            timestamp=row.timestamp,
            principal=row.principal,
            annual_rate=row.annual_rate,
            years=row.years,
            frequency=row.frequency,
            extra_payment=row.extra_payment,
            result=LoanResult(payment=row.payment, total=row.total),
        )


def create_store_from_env(url: Optional[str], max_items: Optional[int] = None) -> HistoryStore:
    return HistoryStore(url or DEFAULT_DATABASE_URL, max_items=MAX_HISTORY_ITEMS if max_items is None else max_items)
