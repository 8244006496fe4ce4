"""Live transaction store: validation, insertion, deletion and filtering."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional

from ..constants.categories import TRANSACTION_TYPES, categories_for_type
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.ledger import ZERO, Transaction, new_id, parse_decimal, utcnow

logger = get_logger(__name__)


def parse_date(value: date | str | None) -> date:
    """Accept a ``date`` or ISO ``YYYY-MM-DD`` string; anything else is invalid."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise ValidationError(f"Invalid date {value!r}; use YYYY-MM-DD.") from exc
    raise ValidationError("A transaction date is required.")


def validate_transaction_fields(
    *,
    txn_type: str,
    description: str | None,
    amount: object,
    category: str | None,
    txn_date: date | str | None,
) -> tuple[str, Decimal, date]:
    """Check user supplied fields and return the normalized (description, amount, date)."""

    if txn_type not in TRANSACTION_TYPES:
        raise ValidationError(f"Transaction type must be 'income' or 'expense', got {txn_type!r}.")

    clean_description = (description or "").strip()
    if not clean_description:
        raise ValidationError("A description is required.")

    if amount is None or (isinstance(amount, str) and not amount.strip()):
        raise ValidationError("An amount is required.")
    value = parse_decimal(amount)
    if value <= ZERO:
        raise ValidationError("Amount must be greater than zero.")

    parsed_date = parse_date(txn_date)

    if not category:
        raise ValidationError("A category is required.")
    if category not in categories_for_type(txn_type):
        other = "expense" if txn_type == "income" else "income"
        raise ValidationError(
            f"Cannot log an {txn_type.upper()} with an {other.upper()} or unknown "
            f"category ({category}). Please select a valid {txn_type} category."
        )

    return clean_description, value, parsed_date


class _TypeView:
    """Restartable, read-only view over one transaction type."""

    def __init__(self, source: list[Transaction], txn_type: str):
        self._source = source
        self._txn_type = txn_type

    def __iter__(self) -> Iterator[Transaction]:
        return (t for t in self._source if t.type == self._txn_type)

    def __repr__(self) -> str:
        return f"<transactions type={self._txn_type!r}>"


class TransactionStore:
    """Ordered collection of the live cycle's transactions.

    New entries go to the head (most recent first). The persisted copy is
    re-sorted by date at save time, but this in-memory order is left alone.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_id,
    ):
        self._items: list[Transaction] = list(transactions)
        self._clock = clock
        self._id_factory = id_factory

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def get(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._items if t.id == transaction_id), None)

    def add(
        self,
        *,
        txn_type: str,
        description: str,
        amount: object,
        category: str,
        txn_date: date | str | None,
    ) -> Transaction:
        """Validate and insert a new transaction at the head of the store."""

        clean_description, value, parsed_date = validate_transaction_fields(
            txn_type=txn_type,
            description=description,
            amount=amount,
            category=category,
            txn_date=txn_date,
        )
        txn = Transaction(
            id=self._id_factory(),
            type=txn_type,
            description=clean_description,
            amount=value,
            category=category,
            date=parsed_date,
            created_at=self._clock(),
        )
        self._items.insert(0, txn)
        logger.info(
            "Transaction added",
            extra={"transaction_id": txn.id, "type": txn.type, "category": txn.category},
        )
        return txn

    def delete(self, transaction_id: str) -> Transaction:
        """Remove and return the transaction with ``transaction_id``.

        Raises:
            NotFoundError: no such transaction; the store is unchanged.
        """

        for index, txn in enumerate(self._items):
            if txn.id == transaction_id:
                del self._items[index]
                logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
                return txn
        raise NotFoundError(f"Transaction {transaction_id!r} not found.")

    def filter_by_type(self, txn_type: str) -> _TypeView:
        return _TypeView(self._items, txn_type)

    def snapshot(self) -> tuple[Transaction, ...]:
        """Independent copy of the current contents, in live order."""
        return tuple(self._items)

    def sorted_for_storage(self) -> list[Transaction]:
        """Copy ordered by date, then creation time, newest first."""
        return sorted(self._items, key=lambda t: (t.date, t.created_at), reverse=True)

    def clear(self) -> None:
        self._items.clear()
