"""Ledger domain exports"""

from .exceptions import AmbiguousReplacementError, LedgerEntryNotFoundError
from .models import CONFIRMED_STATUSES, LedgerAdjustment, LedgerEntry, LedgerStatus, LedgerSummary
from .service import LedgerService

__all__ = [
    "CONFIRMED_STATUSES",
    "AmbiguousReplacementError",
    "LedgerAdjustment",
    "LedgerEntry",
    "LedgerEntryNotFoundError",
    "LedgerService",
    "LedgerStatus",
    "LedgerSummary",
]
