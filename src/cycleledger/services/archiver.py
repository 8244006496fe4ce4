"""Cycle finalization and cycle settings changes."""

from __future__ import annotations

from datetime import date
from types import MappingProxyType
from typing import Callable, Optional

from ..logging_config import get_logger
from ..models.ledger import CYCLE_TYPES, HistoryRecord, new_id
from ..errors import ValidationError
from . import reports
from .cycles import cycle_label, next_cycle_start
from .state import DEFAULT_COMPANY_NAME, TrackerState

logger = get_logger(__name__)

Confirm = Callable[[str], bool]


def finalize_message(state: TrackerState) -> str:
    return (
        f"Finalize cycle starting {state.cycle_start.isoformat()}? This archives all "
        f"current data and starts the next {state.cycle_type} cycle."
    )


def build_category_summary(
    expense_lines: list[reports.ExpenseLine], income_lines: list[reports.IncomeLine]
) -> dict[str, MappingProxyType]:
    """Merge both breakdowns into the archived per-category summary."""

    summary: dict[str, MappingProxyType] = {}
    for line in expense_lines:
        summary[line.category] = MappingProxyType(
            {"budget": line.budget, "spent": line.amount_spent, "variance": line.variance}
        )
    for line in income_lines:
        summary[line.category] = MappingProxyType(
            {"forecast": line.forecast, "actual": line.actual, "variance": line.variance}
        )
    return summary


def finalize_cycle(
    state: TrackerState, *, confirm: Confirm, record_id: Optional[str] = None
) -> Optional[HistoryRecord]:
    """Archive the live cycle and start the next one.

    Returns the new history record, or None when ``confirm`` declines. All
    values are computed before the first mutation so a caller never sees a
    half-finalized state.
    """

    if not confirm(finalize_message(state)):
        logger.info("Finalize declined", extra={"cycle_start": state.cycle_start.isoformat()})
        return None

    totals = reports.compute_totals(state.transactions, state.budgets)
    expense_lines = reports.category_breakdown(state.transactions, state.budgets)
    income_lines = reports.income_breakdown(state.transactions, state.budgets)

    record = HistoryRecord(
        id=record_id or new_id(),
        cycle_start=state.cycle_start,
        cycle_type=state.cycle_type,
        starting_budget=totals.total_budget,
        total_income=totals.total_income,
        total_expenses=totals.total_expenses,
        net_flow=totals.net_flow,
        category_summary=MappingProxyType(build_category_summary(expense_lines, income_lines)),
        transactions=state.transactions.snapshot(),
    )
    next_start = next_cycle_start(state.cycle_start, state.cycle_type)

    state.history.insert(0, record)
    state.cycle_start = next_start
    state.budgets.clear()
    state.transactions.clear()

    logger.info(
        "Cycle finalized",
        extra={
            "record_id": record.id,
            "cycle": cycle_label(record.cycle_start, record.cycle_type),
            "net_flow": str(record.net_flow),
            "transactions": len(record.transactions),
            "next_cycle_start": next_start.isoformat(),
        },
    )
    return record


def change_cycle_type(
    state: TrackerState,
    new_type: str,
    *,
    confirm: Confirm,
    today: Callable[[], date] = date.today,
) -> bool:
    """Switch the cycle period.

    When the type really changes the live cycle no longer matches its period,
    so the caller is asked whether to restart it today. Accepting resets the
    start date and discards live transactions; declining keeps the new type
    on the old start date. Returns True when the cycle was restarted.
    """

    if new_type not in CYCLE_TYPES:
        raise ValidationError(
            f"Unknown cycle type {new_type!r}; expected one of {', '.join(CYCLE_TYPES)}."
        )
    if new_type == state.cycle_type:
        return False

    previous = state.cycle_type
    state.cycle_type = new_type
    message = (
        f"Warning: Changing the cycle type to '{new_type}' means the current active cycle "
        "is now considered invalid. Do you want to reset the current cycle start date to TODAY?"
    )
    restarted = bool(confirm(message))
    if restarted:
        state.cycle_start = today()
        state.transactions.clear()

    logger.info(
        "Cycle type changed",
        extra={"from": previous, "to": new_type, "restarted": restarted},
    )
    return restarted


def rename_company(state: TrackerState, name: str | None) -> str:
    state.company_name = (name or "").strip() or DEFAULT_COMPANY_NAME
    return state.company_name
