"""Persistence boundary tests: defaults, tolerance, sorting and round trips."""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlmodel import create_engine

from cycleledger.errors import PersistenceError
from cycleledger.infra import state_store as ss
from cycleledger.infra.database import create_session_factory
from cycleledger.infra.repositories import SQLModelSettingsRepository
from cycleledger.infra.state_store import StateStore
from cycleledger.services import archiver
from cycleledger.services.state import TrackerState
from cycleledger.services.tracker import CycleTracker


class MemoryKeyValueStore:
    """Dict-backed key-value store for boundary tests."""

    def __init__(self, data=None):
        self.data = dict(data or {})

    def get_value(self, key):
        return self.data.get(key)

    def set_value(self, key, value):
        self.data[key] = value

    def set_many(self, values):
        self.data.update(values)


class BrokenKeyValueStore(MemoryKeyValueStore):
    def get_value(self, key):
        raise PersistenceError("disk I/O error")

    def set_many(self, values):
        raise PersistenceError("database is locked")


def _store(data=None):
    backend = MemoryKeyValueStore(data)
    return backend, StateStore(
        backend,
        today=lambda: date(2024, 5, 1),
        now=lambda: datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc),
    )


def test_load_from_empty_store_uses_defaults():
    _, store = _store()
    state = store.load()

    assert state.company_name == "Company"
    assert state.cycle_type == "monthly"
    assert state.cycle_start == date(2024, 5, 1)
    assert state.budgets.as_dict() == {}
    assert len(state.transactions) == 0
    assert state.history == []


def test_load_tolerates_corrupt_entries():
    _, store = _store(
        {
            ss.COMPANY_NAME_KEY: "   ",
            ss.CYCLE_TYPE_KEY: "fortnightly",
            ss.CURRENT_CYCLE_START_KEY: "not-a-date",
            ss.CATEGORY_BUDGETS_KEY: "{broken",
            ss.TRANSACTIONS_KEY: json.dumps({"not": "a list"}),
            ss.HISTORY_KEY: "[[[",
        }
    )
    state = store.load()

    assert state.company_name == "Company"
    assert state.cycle_type == "monthly"
    assert state.cycle_start == date(2024, 5, 1)
    assert state.budgets.as_dict() == {}
    assert len(state.transactions) == 0
    assert state.history == []


def test_load_backfills_transaction_fields():
    _, store = _store(
        {
            ss.TRANSACTIONS_KEY: json.dumps(
                [
                    {"id": "a", "description": "Legacy", "amount": "12.5"},
                    {"id": "b", "type": "income", "amount": 40, "category": "Nonsense",
                     "date": "2024-04-02", "createdAt": "2024-04-02T10:00:00Z"},
                    {"id": "c", "type": "expense", "amount": 3, "category": "Sales / Revenue"},
                    {"id": "d", "amount": "not money"},
                    "garbage",
                ]
            )
        }
    )
    state = store.load()
    by_id = {t.id: t for t in state.transactions}

    assert set(by_id) == {"a", "b", "c", "d"}
    assert by_id["d"].amount == Decimal("0")
    assert by_id["a"].type == "expense"
    assert by_id["a"].amount == Decimal("12.5")
    assert by_id["a"].category == "Administrative"
    assert by_id["a"].date == date(2024, 5, 1)
    assert by_id["a"].created_at == datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
    assert by_id["b"].category == "Other Income"
    assert by_id["b"].amount == Decimal("40")
    assert by_id["b"].created_at == datetime(2024, 4, 2, 10, 0, tzinfo=timezone.utc)
    assert by_id["c"].category == "Administrative"


def test_load_budgets_coerces_and_drops_unknown():
    _, store = _store(
        {ss.CATEGORY_BUDGETS_KEY: json.dumps({"Marketing": "12.50", "Rent / Lease": 100, "Bogus": 5, "Administrative": "x"})}
    )
    budgets = store.load().budgets.as_dict()
    assert budgets == {"Marketing": Decimal("12.50"), "Rent / Lease": Decimal("100")}


def test_save_sorts_transactions_by_date_then_creation(state):
    state.transactions.add(txn_type="expense", description="old", amount=1, category="Marketing", txn_date="2024-01-16")
    state.transactions.add(txn_type="expense", description="new-a", amount=1, category="Marketing", txn_date="2024-01-30")
    state.transactions.add(txn_type="expense", description="mid", amount=1, category="Marketing", txn_date="2024-01-20")
    state.transactions.add(txn_type="expense", description="new-b", amount=1, category="Marketing", txn_date="2024-01-30")
    backend, store = _store()
    live_order = [t.description for t in state.transactions]

    store.save(state)

    saved = json.loads(backend.data[ss.TRANSACTIONS_KEY])
    assert [t["description"] for t in saved] == ["new-b", "new-a", "mid", "old"]
    assert [t["description"] for t in state.transactions] == live_order
    # Reloading picks up the persisted order
    assert [t.description for t in store.load().transactions] == ["new-b", "new-a", "mid", "old"]


def test_save_and_load_round_trip_with_history(state):
    state.company_name = "Acme Corp"
    state.transactions.add(txn_type="income", description="Sale", amount="500.25", category="Sales / Revenue", txn_date="2024-01-21")
    state.budgets.update({"Rent / Lease": "100", "Sales / Revenue": "450"})
    record = archiver.finalize_cycle(state, confirm=lambda _m: True)
    state.transactions.add(txn_type="expense", description="Ads", amount="7", category="Marketing", txn_date="2024-02-20")
    state.budgets.set("Marketing", "10")

    backend, store = _store()
    store.save(state)
    loaded = store.load()

    assert loaded.company_name == "Acme Corp"
    assert loaded.cycle_type == "monthly"
    assert loaded.cycle_start == date(2024, 2, 15)
    assert loaded.budgets.as_dict() == {"Marketing": Decimal("10")}
    assert [(t.id, t.amount, t.category, t.date) for t in loaded.transactions] == [
        (t.id, t.amount, t.category, t.date) for t in state.transactions
    ]
    assert len(loaded.history) == 1
    restored = loaded.history[0]
    assert restored.id == record.id
    assert restored.net_flow == Decimal("500.25")
    assert restored.starting_budget == Decimal("100")
    assert restored.category_summary["Sales / Revenue"]["variance"] == Decimal("50.25")
    assert restored.transactions == record.transactions


def test_persisted_history_uses_camel_case_keys(state):
    archiver.finalize_cycle(state, confirm=lambda _m: True)
    backend, store = _store()
    store.save(state)

    saved = json.loads(backend.data[ss.HISTORY_KEY])[0]
    assert {"cycleStart", "cycleType", "startingBudget", "totalIncome", "totalExpenses",
            "netFlow", "categorySummary", "transactions"} <= set(saved)


def test_read_failure_degrades_to_defaults():
    store = StateStore(BrokenKeyValueStore(), today=lambda: date(2024, 5, 1))
    state = store.load()
    assert state.cycle_type == "monthly"
    assert state.cycle_start == date(2024, 5, 1)


def test_save_failure_raises_persistence_error():
    store = StateStore(BrokenKeyValueStore())
    with pytest.raises(PersistenceError):
        store.save(TrackerState())


def test_sqlmodel_backend_round_trip(state_store, kv_repo):
    state = state_store.load()
    state.transactions.add(txn_type="expense", description="Fuel", amount="35", category="Transportation / Logistics", txn_date="2024-01-18")
    state_store.save(state)

    assert kv_repo.get_value(ss.CYCLE_TYPE_KEY) == "monthly"
    assert set(kv_repo.keys()) == set(ss.STATE_KEYS)
    reloaded = state_store.load()
    assert [t.description for t in reloaded.transactions] == ["Fuel"]

    # Saving twice overwrites rather than duplicating keys
    state_store.save(reloaded)
    assert len(kv_repo.keys()) == len(ss.STATE_KEYS)


def _archived_cycle(**overrides):
    record = {
        "id": "h1",
        "cycleStart": "2024-01-15",
        "cycleType": "monthly",
        "startingBudget": "100",
        "totalIncome": "500",
        "totalExpenses": "80",
        "netFlow": "420",
        "categorySummary": {
            "Rent / Lease": {"budget": "100", "spent": "80", "variance": "20"},
            "Sales / Revenue": {"forecast": "400", "actual": "500", "variance": "100"},
        },
        "transactions": [
            {"id": "t1", "type": "expense", "description": "Rent", "amount": "80",
             "category": "Rent / Lease", "date": "2024-01-20",
             "createdAt": "2024-01-20T09:00:00+00:00"},
        ],
    }
    record.update(overrides)
    return record


def test_history_with_unreadable_amounts_is_kept_field_by_field():
    damaged = _archived_cycle(totalIncome="lots", netFlow=None)
    damaged["categorySummary"]["Rent / Lease"]["variance"] = None
    _, store = _store({ss.HISTORY_KEY: json.dumps([damaged])})

    history = store.load().history

    assert len(history) == 1
    record = history[0]
    assert record.id == "h1"
    assert record.total_income == Decimal("0")
    assert record.net_flow == Decimal("0")
    assert record.total_expenses == Decimal("80")
    assert record.category_summary["Rent / Lease"]["variance"] == Decimal("0")
    assert record.category_summary["Rent / Lease"]["spent"] == Decimal("80")
    assert [t.id for t in record.transactions] == ["t1"]


def test_damaged_history_survives_the_next_save():
    damaged = _archived_cycle()
    damaged["categorySummary"]["Rent / Lease"]["variance"] = None
    backend, store = _store({ss.HISTORY_KEY: json.dumps([damaged])})
    tracker = CycleTracker.open(store)

    tracker.rename_company("Acme")

    persisted = json.loads(backend.data[ss.HISTORY_KEY])
    assert [r["id"] for r in persisted] == ["h1"]
    assert persisted[0]["totalIncome"] == "500"
    assert persisted[0]["categorySummary"]["Rent / Lease"]["variance"] == "0"


def test_dates_with_trailing_text_fall_back_to_defaults():
    _, store = _store(
        {
            ss.CURRENT_CYCLE_START_KEY: "2024-01-20junk",
            ss.TRANSACTIONS_KEY: json.dumps(
                [{"id": "a", "amount": "5", "category": "Marketing", "date": "2024-04-02junk"}]
            ),
        }
    )
    state = store.load()

    assert state.cycle_start == date(2024, 5, 1)
    assert [t.date for t in state.transactions] == [date(2024, 5, 1)]


def test_repository_reports_database_errors_as_persistence_errors(tmp_path):
    # No schema: every statement fails with "no such table"
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    repo = SQLModelSettingsRepository(create_session_factory(engine))

    with pytest.raises(PersistenceError):
        repo.get_value(ss.CYCLE_TYPE_KEY)
    with pytest.raises(PersistenceError):
        repo.set_many({ss.CYCLE_TYPE_KEY: "weekly"})

    state = StateStore(repo, today=lambda: date(2024, 5, 1)).load()
    assert state.cycle_type == "monthly"
    engine.dispose()
