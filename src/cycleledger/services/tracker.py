"""Session object owning the tracker state and persisting after every change."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Mapping, Optional

from ..config import BaseConfig
from ..errors import NotFoundError
from ..infra.database import bootstrap_database
from ..infra.repositories import SQLModelSettingsRepository
from ..infra.state_store import StateStore
from ..logging_config import get_logger
from ..models.ledger import HistoryRecord, Transaction
from . import archiver, reports
from .cycles import cycle_end, cycle_label, next_cycle_start
from .state import TrackerState

logger = get_logger(__name__)


def _decline(_message: str) -> bool:
    return False


@dataclass
class CycleTracker:
    """One live session over the persisted tracker state.

    Every successful mutation is flushed straight to the store; there is no
    separate dirty/flush lifecycle. ``confirm`` is asked before destructive
    actions; without one wired in, every destructive action is declined.
    """

    store: StateStore
    state: TrackerState
    confirm: Callable[[str], bool] = _decline

    @classmethod
    def open(cls, store: StateStore, *, confirm: Callable[[str], bool] | None = None) -> "CycleTracker":
        return cls(store=store, state=store.load(), confirm=confirm or _decline)

    def _persist(self) -> None:
        self.store.save(self.state)

    # -- mutations --------------------------------------------------------

    def add_transaction(
        self,
        *,
        txn_type: str,
        description: str,
        amount: object,
        category: str,
        txn_date: date | str | None,
    ) -> Transaction:
        txn = self.state.transactions.add(
            txn_type=txn_type,
            description=description,
            amount=amount,
            category=category,
            txn_date=txn_date,
        )
        self._persist()
        return txn

    def delete_transaction(self, transaction_id: str, *, confirm: Callable[[str], bool] | None = None) -> bool:
        """Delete after confirmation. Unknown ids are reported, not raised."""

        ask = confirm or self.confirm
        if not ask("Are you sure you want to delete this transaction?"):
            return False
        try:
            self.state.transactions.delete(transaction_id)
        except NotFoundError:
            logger.warning("Delete of unknown transaction", extra={"transaction_id": transaction_id})
            return False
        self._persist()
        return True

    def save_budgets(self, amounts: Mapping[str, object]) -> None:
        self.state.budgets.update(amounts)
        self._persist()

    def finalize(self, *, confirm: Callable[[str], bool] | None = None) -> Optional[HistoryRecord]:
        record = archiver.finalize_cycle(self.state, confirm=confirm or self.confirm)
        if record is not None:
            self._persist()
        return record

    def change_cycle_type(self, new_type: str, *, confirm: Callable[[str], bool] | None = None) -> bool:
        previous = self.state.cycle_type
        restarted = archiver.change_cycle_type(self.state, new_type, confirm=confirm or self.confirm)
        if self.state.cycle_type != previous:
            self._persist()
        return restarted

    def rename_company(self, name: str | None) -> str:
        result = archiver.rename_company(self.state, name)
        self._persist()
        return result

    # -- queries ----------------------------------------------------------

    def totals(self) -> reports.CycleTotals:
        return reports.compute_totals(self.state.transactions, self.state.budgets)

    def category_breakdown(self) -> list[reports.ExpenseLine]:
        return reports.category_breakdown(self.state.transactions, self.state.budgets)

    def income_breakdown(self) -> list[reports.IncomeLine]:
        return reports.income_breakdown(self.state.transactions, self.state.budgets)

    def utilization(self) -> reports.BudgetUtilization:
        return reports.budget_utilization(self.totals())

    def cycle_label(self) -> str:
        return cycle_label(self.state.cycle_start, self.state.cycle_type)

    def cycle_end(self) -> date:
        return cycle_end(self.state.cycle_start, self.state.cycle_type)

    def next_cycle_start(self) -> date:
        return next_cycle_start(self.state.cycle_start, self.state.cycle_type)

    @property
    def history(self) -> list[HistoryRecord]:
        return list(self.state.history)


def create_tracker(
    config: BaseConfig | None = None, *, confirm: Callable[[str], bool] | None = None
) -> CycleTracker:
    """Wire database, key-value repository and state store into a tracker."""

    cfg = config or BaseConfig()
    session_factory = bootstrap_database(cfg)
    store = StateStore(
        SQLModelSettingsRepository(session_factory),
        default_company_name=cfg.COMPANY_NAME,
    )
    return CycleTracker.open(store, confirm=confirm)
