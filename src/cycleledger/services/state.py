"""The single explicit object holding all tracker state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..models.ledger import MONTHLY, HistoryRecord
from .budgeting import BudgetRegistry
from .ledger_service import TransactionStore

DEFAULT_COMPANY_NAME = "Company"


@dataclass
class TrackerState:
    """Company settings, the live cycle and the archived cycles (newest first)."""

    company_name: str = DEFAULT_COMPANY_NAME
    cycle_type: str = MONTHLY
    cycle_start: date = field(default_factory=date.today)
    budgets: BudgetRegistry = field(default_factory=BudgetRegistry)
    transactions: TransactionStore = field(default_factory=TransactionStore)
    history: list[HistoryRecord] = field(default_factory=list)
