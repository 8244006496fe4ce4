"""
Centralized category definitions shared by validation, aggregation and storage.
Income and expense lists are disjoint; list order is the display order.
"""

from __future__ import annotations

# Transaction Categories - Income
INCOME_CATEGORIES = (
    "Sales / Revenue",
    "Other Income",
)

# Transaction Categories - Expenses
EXPENSE_CATEGORIES = (
    "Inventory Cost / Service Cost",
    "Administrative",
    "Rent / Lease",
    "Marketing",
    "Salaries & Benefits",
    "Transportation / Logistics",
)

ALL_CATEGORIES = INCOME_CATEGORIES + EXPENSE_CATEGORIES

# Transaction Types
INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

# Used when a stored transaction carries an unknown category
FALLBACK_CATEGORIES = {
    INCOME: "Other Income",
    EXPENSE: "Administrative",
}


def is_income_category(category_name: str) -> bool:
    """Check if a category name is an income category."""
    return category_name in INCOME_CATEGORIES


def is_expense_category(category_name: str) -> bool:
    """Check if a category name is an expense category."""
    return category_name in EXPENSE_CATEGORIES


def categories_for_type(txn_type: str) -> tuple[str, ...]:
    """Return the ordered category list matching a transaction type.

    Unknown types get an empty tuple so membership tests simply fail.
    """
    if txn_type == INCOME:
        return INCOME_CATEGORIES
    if txn_type == EXPENSE:
        return EXPENSE_CATEGORIES
    return ()


def category_type(category_name: str) -> str | None:
    """Return ``"income"``/``"expense"`` for a known category, else None."""
    if is_income_category(category_name):
        return INCOME
    if is_expense_category(category_name):
        return EXPENSE
    return None


def fallback_category(txn_type: str) -> str:
    """Generic category for a type; anything but income maps to the expense fallback."""
    return FALLBACK_CATEGORIES.get(txn_type, FALLBACK_CATEGORIES[EXPENSE])
