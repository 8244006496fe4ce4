"""Aggregation of the live cycle: totals, per-category breakdowns and utilization."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..constants.categories import EXPENSE, EXPENSE_CATEGORIES, INCOME, INCOME_CATEGORIES
from ..models.ledger import ZERO, Transaction
from .budgeting import BudgetRegistry
from .ledger_service import TransactionStore

HUNDRED = Decimal("100")


def _percent_of(spent: Decimal, budget: Decimal) -> Decimal:
    """Share of ``budget`` consumed; with no budget any spend counts as 100%."""
    if budget > ZERO:
        return spent / budget * HUNDRED
    return HUNDRED if spent > ZERO else ZERO


@dataclass(frozen=True, slots=True)
class CycleTotals:
    """Headline figures for the live cycle."""

    total_income: Decimal
    total_expenses: Decimal
    total_budget: Decimal

    @property
    def variance(self) -> Decimal:
        return self.total_budget - self.total_expenses

    @property
    def net_flow(self) -> Decimal:
        return self.total_income - self.total_expenses

    def as_dict(self) -> dict[str, Decimal]:
        return {
            "total_income": self.total_income,
            "total_expenses": self.total_expenses,
            "total_budget": self.total_budget,
            "variance": self.variance,
            "net_flow": self.net_flow,
        }


@dataclass(frozen=True, slots=True)
class ExpenseLine:
    """Budget vs actual spend for one expense category."""

    category: str
    amount_spent: Decimal
    budget: Decimal

    @property
    def variance(self) -> Decimal:
        return self.budget - self.amount_spent

    @property
    def is_over(self) -> bool:
        return self.variance < ZERO

    @property
    def spent_percentage(self) -> Decimal:
        return _percent_of(self.amount_spent, self.budget)


@dataclass(frozen=True, slots=True)
class IncomeLine:
    """Forecast vs actual income for one income category."""

    category: str
    forecast: Decimal
    actual: Decimal

    @property
    def variance(self) -> Decimal:
        return self.actual - self.forecast


@dataclass(frozen=True, slots=True)
class BudgetUtilization:
    """How much of the total expense budget has been used."""

    total_budget: Decimal
    total_expenses: Decimal

    @property
    def spent_percentage(self) -> Decimal:
        return _percent_of(self.total_expenses, self.total_budget)

    @property
    def normalized_percentage(self) -> Decimal:
        return min(HUNDRED, self.spent_percentage)

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.total_expenses

    @property
    def is_over(self) -> bool:
        return self.remaining < ZERO

    @property
    def has_data(self) -> bool:
        """False until a budget is set or something is spent."""
        return self.total_budget > ZERO or self.total_expenses != ZERO


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def _sum_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for txn in transactions:
        totals[txn.category] = totals.get(txn.category, ZERO) + txn.amount
    return totals


def compute_totals(store: TransactionStore, budgets: BudgetRegistry) -> CycleTotals:
    """Recompute the headline totals from the full transaction list."""

    return CycleTotals(
        total_income=_sum_amounts(store.filter_by_type(INCOME)),
        total_expenses=_sum_amounts(store.filter_by_type(EXPENSE)),
        total_budget=sum((budgets.get(c) for c in EXPENSE_CATEGORIES), ZERO),
    )


def category_breakdown(store: TransactionStore, budgets: BudgetRegistry) -> list[ExpenseLine]:
    """One line per expense category, biggest spend first.

    Python's sort is stable, so equal spends keep category-list order.
    """

    spent = _sum_by_category(store.filter_by_type(EXPENSE))
    lines = [
        ExpenseLine(category=c, amount_spent=spent.get(c, ZERO), budget=budgets.get(c))
        for c in EXPENSE_CATEGORIES
    ]
    lines.sort(key=lambda line: line.amount_spent, reverse=True)
    return lines


def income_breakdown(store: TransactionStore, budgets: BudgetRegistry) -> list[IncomeLine]:
    """Forecast vs actual for every income category, in category-list order."""

    actual = _sum_by_category(store.filter_by_type(INCOME))
    return [
        IncomeLine(category=c, forecast=budgets.get(c), actual=actual.get(c, ZERO))
        for c in INCOME_CATEGORIES
    ]


def budget_utilization(totals: CycleTotals) -> BudgetUtilization:
    return BudgetUtilization(total_budget=totals.total_budget, total_expenses=totals.total_expenses)
