"""Service module exports."""

from . import (
    archiver,
    budgeting,
    cycles,
    export_csv,
    formatting,
    ledger_service,
    reports,
    state,
)

__all__ = [
    "archiver",
    "budgeting",
    "cycles",
    "export_csv",
    "formatting",
    "ledger_service",
    "reports",
    "state",
]
