"""Ledger records: live transactions and archived cycles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping
from uuid import uuid4

from ..errors import ValidationError

WEEKLY = "weekly"
MONTHLY = "monthly"
YEARLY = "yearly"
CYCLE_TYPES = (WEEKLY, MONTHLY, YEARLY)

ZERO = Decimal("0")


def utcnow() -> datetime:
    """Timezone-aware creation timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return an opaque unique identifier for transactions and history records."""
    return uuid4().hex


def parse_decimal(value: Any, *, field_name: str = "amount") -> Decimal:
    """Coerce numbers and numeric strings to a finite Decimal.

    Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``.
    """

    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number, got {value!r}.")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValidationError(f"{field_name} must be a finite number.")
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation as exc:
            raise ValidationError(f"{field_name} must be a number, got {value!r}.") from exc
    else:
        raise ValidationError(f"{field_name} must be a number, got {value!r}.")

    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number.")
    return result


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense entry of the live cycle."""

    id: str
    type: str
    description: str
    amount: Decimal
    category: str
    date: date
    created_at: datetime

    @property
    def is_income(self) -> bool:
        return self.type == "income"

    @property
    def is_expense(self) -> bool:
        return self.type == "expense"


@dataclass(frozen=True, slots=True)
class HistoryRecord:
    """Frozen snapshot of a finalized cycle.

    ``category_summary`` maps expense categories to ``budget/spent/variance``
    and income categories to ``forecast/actual/variance``.
    """

    id: str
    cycle_start: date
    cycle_type: str
    starting_budget: Decimal
    total_income: Decimal
    total_expenses: Decimal
    net_flow: Decimal
    category_summary: Mapping[str, Mapping[str, Decimal]] = field(default_factory=dict)
    transactions: tuple[Transaction, ...] = ()

    @property
    def is_deficit(self) -> bool:
        return self.net_flow < ZERO
