"""Model exports for cycleledger."""

from .ledger import CYCLE_TYPES, HistoryRecord, Transaction
from .settings import AppSetting

__all__ = ["AppSetting", "CYCLE_TYPES", "HistoryRecord", "Transaction"]
