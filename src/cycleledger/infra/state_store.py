"""Load/save boundary between the tracker state and the key-value store.

Every value is text; structured values are JSON. Loading never fails: missing
or corrupt entries fall back to defaults and are logged. A stored record is
kept even when some of its fields are unreadable, so the next save never
drops archived data. Saving always writes live transactions sorted by
(date desc, createdAt desc).
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from ..constants.categories import (
    ALL_CATEGORIES,
    EXPENSE,
    TRANSACTION_TYPES,
    categories_for_type,
    fallback_category,
)
from ..domain.repositories import KeyValueStore
from ..errors import PersistenceError, ValidationError
from ..logging_config import get_logger
from ..models.ledger import CYCLE_TYPES, MONTHLY, ZERO, HistoryRecord, Transaction, new_id, parse_decimal, utcnow
from ..services.budgeting import BudgetRegistry
from ..services.ledger_service import TransactionStore, parse_date
from ..services.state import DEFAULT_COMPANY_NAME, TrackerState

logger = get_logger(__name__)

COMPANY_NAME_KEY = "cycleledger_company_name"
CYCLE_TYPE_KEY = "cycleledger_cycle_type"
CATEGORY_BUDGETS_KEY = "cycleledger_category_budgets"
TRANSACTIONS_KEY = "cycleledger_current_transactions"
HISTORY_KEY = "cycleledger_cycle_history"
CURRENT_CYCLE_START_KEY = "cycleledger_current_cycle_start"

STATE_KEYS = (
    COMPANY_NAME_KEY,
    CYCLE_TYPE_KEY,
    CATEGORY_BUDGETS_KEY,
    TRANSACTIONS_KEY,
    HISTORY_KEY,
    CURRENT_CYCLE_START_KEY,
)


def _encode_decimal(value: Decimal) -> str:
    return str(value)


def _decimal_or_zero(value: Any, *, field_name: str, entry_id: Any = None) -> Decimal:
    """Read a stored amount; unreadable values count as zero and are logged."""

    try:
        return parse_decimal(value, field_name=field_name)
    except ValidationError:
        logger.warning(
            "Unreadable amount; using zero",
            extra={"field_name": field_name, "entry_id": entry_id, "value": repr(value)},
        )
        return ZERO


def _parse_iso_date(value: Any) -> Optional[date]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return parse_date(value)
    except ValidationError:
        return None


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def transaction_to_dict(txn: Transaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "type": txn.type,
        "description": txn.description,
        "amount": _encode_decimal(txn.amount),
        "category": txn.category,
        "date": txn.date.isoformat(),
        "createdAt": txn.created_at.isoformat(),
    }


def history_to_dict(record: HistoryRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "cycleStart": record.cycle_start.isoformat(),
        "cycleType": record.cycle_type,
        "startingBudget": _encode_decimal(record.starting_budget),
        "totalIncome": _encode_decimal(record.total_income),
        "totalExpenses": _encode_decimal(record.total_expenses),
        "netFlow": _encode_decimal(record.net_flow),
        "categorySummary": {
            category: {field: _encode_decimal(amount) for field, amount in values.items()}
            for category, values in record.category_summary.items()
        },
        "transactions": [transaction_to_dict(t) for t in record.transactions],
    }


def transaction_from_dict(
    raw: Mapping[str, Any], *, now: Callable[[], datetime], today: Callable[[], date]
) -> Transaction:
    """Rebuild a stored transaction, backfilling what older data may lack.

    An unreadable amount is kept as zero so the entry survives the next save.
    """

    entry_id = str(raw.get("id") or new_id())
    txn_type = raw.get("type") if raw.get("type") in TRANSACTION_TYPES else EXPENSE
    category = raw.get("category")
    if category not in ALL_CATEGORIES:
        category = fallback_category(txn_type)
    elif category not in categories_for_type(txn_type):
        # A category of the other type would make the record ambiguous
        category = fallback_category(txn_type)

    return Transaction(
        id=entry_id,
        type=txn_type,
        description=str(raw.get("description") or ""),
        amount=_decimal_or_zero(raw.get("amount"), field_name="amount", entry_id=entry_id),
        category=category,
        date=_parse_iso_date(raw.get("date")) or today(),
        created_at=_parse_timestamp(raw.get("createdAt")) or now(),
    )


def history_from_dict(
    raw: Mapping[str, Any], *, now: Callable[[], datetime], today: Callable[[], date]
) -> HistoryRecord:
    """Rebuild an archived cycle field by field; bad amounts become zero."""

    record_id = str(raw.get("id") or new_id())

    def amount(value: Any, field_name: str) -> Decimal:
        return _decimal_or_zero(value, field_name=field_name, entry_id=record_id)

    summary_raw = raw.get("categorySummary")
    if not isinstance(summary_raw, Mapping):
        summary_raw = {}
    summary = {
        str(category): MappingProxyType(
            {str(k): amount(v, f"{category}.{k}") for k, v in values.items()}
        )
        for category, values in summary_raw.items()
        if isinstance(values, Mapping)
    }
    cycle_type = raw.get("cycleType") if raw.get("cycleType") in CYCLE_TYPES else MONTHLY
    transactions = raw.get("transactions")
    return HistoryRecord(
        id=record_id,
        cycle_start=_parse_iso_date(raw.get("cycleStart")) or today(),
        cycle_type=cycle_type,
        starting_budget=amount(raw.get("startingBudget", 0), "startingBudget"),
        total_income=amount(raw.get("totalIncome", 0), "totalIncome"),
        total_expenses=amount(raw.get("totalExpenses", 0), "totalExpenses"),
        net_flow=amount(raw.get("netFlow", 0), "netFlow"),
        category_summary=MappingProxyType(summary),
        transactions=tuple(
            _load_items(
                transactions if isinstance(transactions, list) else [],
                transaction_from_dict,
                now=now,
                today=today,
            )
        ),
    )


def _load_items(items: Iterable[Any], builder, *, now, today) -> list:
    loaded = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            logger.warning("Skipping non-object entry", extra={"index": index})
            continue
        try:
            loaded.append(builder(item, now=now, today=today))
        except (ValidationError, AttributeError, TypeError) as exc:
            logger.warning(
                "Skipping unreadable entry", extra={"index": index, "error": str(exc)}
            )
    return loaded


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StateStore:
    """Reads and writes a complete ``TrackerState`` through a ``KeyValueStore``."""

    def __init__(
        self,
        backend: KeyValueStore,
        *,
        default_company_name: str = DEFAULT_COMPANY_NAME,
        now: Callable[[], datetime] = utcnow,
        today: Callable[[], date] = date.today,
    ):
        self.backend = backend
        self.default_company_name = default_company_name
        self._now = now
        self._today = today

    # -- load -------------------------------------------------------------

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.backend.get_value(key)
        except PersistenceError:
            logger.exception("Failed to read key; using default", extra={"key": key})
            return None

    def _read_json(self, key: str, default: Any, expected: type) -> Any:
        text = self._read(key)
        if text is None or not text.strip():
            return default
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupt JSON; using default", extra={"key": key, "error": str(exc)})
            return default
        if not isinstance(value, expected):
            logger.warning("Unexpected JSON shape; using default", extra={"key": key})
            return default
        return value

    def _load_budgets(self) -> BudgetRegistry:
        raw = self._read_json(CATEGORY_BUDGETS_KEY, {}, dict)
        amounts: dict[str, Decimal] = {}
        for category, value in raw.items():
            if category not in ALL_CATEGORIES:
                logger.warning("Dropping budget for unknown category", extra={"category": category})
                continue
            try:
                amount = parse_decimal(value, field_name=category)
            except ValidationError:
                logger.warning("Dropping unreadable budget", extra={"category": category})
                continue
            amounts[category] = max(amount, ZERO)
        return BudgetRegistry(amounts)

    def load(self) -> TrackerState:
        """Rebuild the tracker state, substituting defaults for anything unusable."""

        company_name = (self._read(COMPANY_NAME_KEY) or "").strip() or self.default_company_name

        cycle_type = self._read(CYCLE_TYPE_KEY)
        if cycle_type not in CYCLE_TYPES:
            if cycle_type is not None:
                logger.warning("Unknown cycle type; using monthly", extra={"value": cycle_type})
            cycle_type = MONTHLY

        cycle_start = _parse_iso_date(self._read(CURRENT_CYCLE_START_KEY)) or self._today()

        transactions = _load_items(
            self._read_json(TRANSACTIONS_KEY, [], list),
            transaction_from_dict,
            now=self._now,
            today=self._today,
        )
        history = _load_items(
            self._read_json(HISTORY_KEY, [], list),
            history_from_dict,
            now=self._now,
            today=self._today,
        )

        state = TrackerState(
            company_name=company_name,
            cycle_type=cycle_type,
            cycle_start=cycle_start,
            budgets=self._load_budgets(),
            transactions=TransactionStore(transactions),
            history=history,
        )
        logger.info(
            "State loaded",
            extra={
                "cycle_type": cycle_type,
                "cycle_start": cycle_start.isoformat(),
                "transactions": len(transactions),
                "history": len(history),
            },
        )
        return state

    # -- save -------------------------------------------------------------

    def serialize(self, state: TrackerState) -> dict[str, str]:
        """Render every key; live transactions are sorted newest date first."""

        return {
            COMPANY_NAME_KEY: state.company_name,
            CYCLE_TYPE_KEY: state.cycle_type,
            CURRENT_CYCLE_START_KEY: state.cycle_start.isoformat(),
            CATEGORY_BUDGETS_KEY: json.dumps(
                {c: _encode_decimal(v) for c, v in state.budgets.as_dict().items()}
            ),
            TRANSACTIONS_KEY: json.dumps(
                [transaction_to_dict(t) for t in state.transactions.sorted_for_storage()]
            ),
            HISTORY_KEY: json.dumps([history_to_dict(r) for r in state.history]),
        }

    def save(self, state: TrackerState) -> None:
        """Write the full state in one unit of work.

        Raises:
            PersistenceError: the backend rejected the write.
        """

        payload = self.serialize(state)
        try:
            self.backend.set_many(payload)
        except PersistenceError:
            logger.exception("Failed to save state")
            raise
