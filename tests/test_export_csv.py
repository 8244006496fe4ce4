"""Tests for CSV export helpers."""

from __future__ import annotations

import csv

from cycleledger.services import archiver, export_csv


def test_export_transactions_csv_creates_file(tmp_path, transaction_factory):
    txs = [
        transaction_factory(amount="50.25", description="Fuel", category="Transportation / Logistics"),
        transaction_factory(amount="125.00", txn_type="income", category="Sales / Revenue", description="Invoice"),
    ]

    output_path = tmp_path / "out" / "ledger-test.csv"
    export_csv.export_transactions_csv(transactions=txs, output_path=output_path)

    assert output_path.exists()
    with output_path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert [row["description"] for row in rows] == ["Fuel", "Invoice"]
    assert rows[0]["amount"] == "50.25"
    assert rows[1]["type"] == "income"
    assert rows[0]["date"] == "2024-01-20"


def test_export_history_csv(tmp_path, state):
    state.transactions.add(
        txn_type="income", description="Sale", amount=300,
        category="Sales / Revenue", txn_date="2024-01-21",
    )
    archiver.finalize_cycle(state, confirm=lambda _m: True)

    output_path = export_csv.export_history_csv(records=state.history, output_path=tmp_path / "history.csv")

    with output_path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert len(rows) == 1
    assert rows[0]["cycle_start"] == "2024-01-15"
    assert rows[0]["net_flow"] == "300"
    assert rows[0]["transactions"] == "1"
