"""Wallet domain exports"""

from .exceptions import InsufficientBalanceError
from .models import (
    LedgerTotals,
    ReconciliationResult,
    WalletBalance,
    WalletSource,
    WalletTransactionRecord,
    WalletTransactionType,
)
from .service import WalletService

__all__ = [
    "InsufficientBalanceError",
    "LedgerTotals",
    "ReconciliationResult",
    "WalletBalance",
    "WalletService",
    "WalletSource",
    "WalletTransactionRecord",
    "WalletTransactionType",
]
