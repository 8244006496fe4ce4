"""CSV export helpers."""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

from ..models.ledger import HistoryRecord, Transaction

TRANSACTION_HEADERS = ["id", "date", "type", "category", "description", "amount", "created_at"]
HISTORY_HEADERS = [
    "id",
    "cycle_start",
    "cycle_type",
    "starting_budget",
    "total_income",
    "total_expenses",
    "net_flow",
    "transactions",
]


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def export_transactions_csv(*, transactions: Iterable[Transaction], output_path: Path) -> Path:
    """Write transactions to CSV at `output_path`.

    Columns are deterministic: see ``TRANSACTION_HEADERS``. Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=TRANSACTION_HEADERS, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for tx in transactions:
            writer.writerow(
                {
                    "id": tx.id,
                    "date": _serialize_value(tx.date),
                    "type": tx.type,
                    "category": tx.category,
                    "description": tx.description,
                    "amount": _serialize_value(tx.amount),
                    "created_at": _serialize_value(tx.created_at),
                }
            )
    return output_path


def export_history_csv(*, records: Iterable[HistoryRecord], output_path: Path) -> Path:
    """One row per archived cycle, newest first as stored."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=HISTORY_HEADERS, quoting=csv.QUOTE_MINIMAL)
        writer.writeheader()
        for record in records:
            writer.writerow(
                {
                    "id": record.id,
                    "cycle_start": _serialize_value(record.cycle_start),
                    "cycle_type": record.cycle_type,
                    "starting_budget": _serialize_value(record.starting_budget),
                    "total_income": _serialize_value(record.total_income),
                    "total_expenses": _serialize_value(record.total_expenses),
                    "net_flow": _serialize_value(record.net_flow),
                    "transactions": len(record.transactions),
                }
            )
    return output_path
