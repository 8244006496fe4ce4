"""Error kinds raised by the ledger core."""

from __future__ import annotations


class CycleLedgerError(Exception):
    """Base class for all cycleledger errors."""


class ValidationError(CycleLedgerError, ValueError):
    """Invalid user input; the operation was aborted and nothing changed."""


class NotFoundError(CycleLedgerError, LookupError):
    """A referenced record does not exist."""


class PersistenceError(CycleLedgerError):
    """Reading from or writing to the key-value store failed."""


__all__ = ["CycleLedgerError", "NotFoundError", "PersistenceError", "ValidationError"]
