"""Pytest configuration and shared fixtures for cycleledger tests.

Every test runs against its own temporary SQLite file and data directory so
the real application database is never touched.
"""

from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cycleledger.infra.database import create_session_factory, init_database
from cycleledger.infra.repositories import SQLModelSettingsRepository
from cycleledger.infra.state_store import StateStore
from cycleledger.models.ledger import Transaction
from cycleledger.services.budgeting import BudgetRegistry
from cycleledger.services.ledger_service import TransactionStore
from cycleledger.services.state import TrackerState
from cycleledger.services.tracker import CycleTracker
from sqlmodel import create_engine


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point configuration at a throwaway data directory."""

    data_dir = tmp_path / "data"
    monkeypatch.setenv("CYCLELEDGER_DATA_DIR", str(data_dir))
    monkeypatch.delenv("CYCLELEDGER_DATABASE_URL", raising=False)
    monkeypatch.delenv("CYCLELEDGER_CURRENCY_SYMBOL", raising=False)
    monkeypatch.delenv("CYCLELEDGER_COMPANY_NAME", raising=False)
    return data_dir


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create an isolated SQLite database with the key-value table."""

    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", echo=False)
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def kv_repo(session_factory) -> SQLModelSettingsRepository:
    return SQLModelSettingsRepository(session_factory)


@pytest.fixture
def state_store(kv_repo) -> StateStore:
    return StateStore(kv_repo, today=lambda: date(2024, 1, 15))


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def clock():
    """Deterministic, strictly increasing creation timestamps."""

    start = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def store(clock) -> TransactionStore:
    return TransactionStore(clock=clock)


@pytest.fixture
def registry() -> BudgetRegistry:
    return BudgetRegistry()


@pytest.fixture
def state(store, registry) -> TrackerState:
    return TrackerState(
        cycle_type="monthly",
        cycle_start=date(2024, 1, 15),
        budgets=registry,
        transactions=store,
    )


@pytest.fixture
def tracker(state_store) -> CycleTracker:
    """Tracker whose confirmation prompt always accepts."""

    return CycleTracker.open(state_store, confirm=lambda _message: True)


@pytest.fixture
def transaction_factory():
    """Factory for building Transaction records without going through validation."""

    counter = itertools.count(1)

    def _create_transaction(
        amount: str | Decimal = "100",
        txn_type: str = "expense",
        category: str = "Rent / Lease",
        txn_date: date = date(2024, 1, 20),
        created_at: datetime | None = None,
        description: str = "Test transaction",
    ) -> Transaction:
        n = next(counter)
        return Transaction(
            id=f"t{n}",
            type=txn_type,
            description=description,
            amount=Decimal(amount),
            category=category,
            date=txn_date,
            created_at=created_at or datetime(2024, 1, 15, 9, 0, n, tzinfo=timezone.utc),
        )

    return _create_transaction
