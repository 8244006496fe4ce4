"""Per-category budgets (expenses) and forecasts (income)."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterator, Mapping

from ..constants.categories import ALL_CATEGORIES, is_expense_category
from ..errors import ValidationError
from ..logging_config import get_logger
from ..models.ledger import ZERO, parse_decimal

logger = get_logger(__name__)


def coerce_budget_amount(category: str, raw_value: object) -> Decimal:
    """Normalize one budget input.

    A blank field means "no budget" and becomes 0. Negative, NaN or
    non-numeric values are rejected.
    """

    if raw_value is None or (isinstance(raw_value, str) and not raw_value.strip()):
        return ZERO
    try:
        amount = parse_decimal(raw_value, field_name=f"Budget for {category}")
    except ValidationError as exc:
        raise ValidationError(
            f"Please enter a valid non-negative number for {category}."
        ) from exc
    if amount < ZERO:
        raise ValidationError(f"Please enter a valid non-negative number for {category}.")
    return amount


def _require_category(category: str) -> None:
    if category not in ALL_CATEGORIES:
        raise ValidationError(f"Unknown budget category {category!r}.")


class BudgetRegistry:
    """Mapping of category name to budget ceiling or income forecast."""

    def __init__(self, amounts: Mapping[str, Decimal] | None = None):
        self._amounts: dict[str, Decimal] = dict(amounts or {})

    def __iter__(self) -> Iterator[str]:
        return iter(self._amounts)

    def __len__(self) -> int:
        return len(self._amounts)

    def __contains__(self, category: object) -> bool:
        return category in self._amounts

    def get(self, category: str) -> Decimal:
        return self._amounts.get(category, ZERO)

    def set(self, category: str, amount: object) -> Decimal:
        _require_category(category)
        value = coerce_budget_amount(category, amount)
        self._amounts[category] = value
        return value

    def update(self, amounts: Mapping[str, object]) -> dict[str, Decimal]:
        """Save a batch of budgets; any invalid entry aborts the whole batch.

        Categories missing from ``amounts`` keep their current value.
        """

        staged: dict[str, Decimal] = {}
        for category, raw_value in amounts.items():
            _require_category(category)
            staged[category] = coerce_budget_amount(category, raw_value)

        self._amounts.update(staged)
        logger.info(
            "Budgets saved",
            extra={
                "categories": len(staged),
                "expense_budget_total": str(self.total_expense_budget()),
            },
        )
        return staged

    def total_expense_budget(self) -> Decimal:
        """Sum of expense budgets only; income forecasts never count."""
        return sum(
            (amount for category, amount in self._amounts.items() if is_expense_category(category)),
            ZERO,
        )

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self._amounts)

    def clear(self) -> None:
        self._amounts.clear()
