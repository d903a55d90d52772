"""Domain models for wallet operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class WalletTransactionType(str, Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class WalletSource(str, Enum):
    ORDER_PAYMENT = "order-payment"
    ADJUSTMENT = "adjustment"
    PAYOUT = "payout"
    RECONCILIATION = "reconciliation"


@dataclass(slots=True)
class WalletBalance:
    store_id: str
    available_cents: int
    pending_cents: int
    updated_at: Optional[datetime]

    @property
    def total_cents(self) -> int:
        return self.available_cents + self.pending_cents


@dataclass(slots=True)
class WalletTransactionRecord:
    id: str
    store_id: str
    type: WalletTransactionType
    amount_cents: int
    source: str
    related_entry_id: Optional[str]
    related_payout_id: Optional[str]
    description: Optional[str]
    created_at: datetime

    @property
    def signed_amount_cents(self) -> int:
        return self.amount_cents if self.type is WalletTransactionType.CREDIT else -self.amount_cents


@dataclass(slots=True)
class LedgerTotals:
    """Per-store sums read from the ledger and payout tables for reconciliation."""

    settled_store_cents: int = 0
    pending_store_cents: int = 0
    adjustment_cents: int = 0
    withdrawn_cents: int = 0


@dataclass(slots=True)
class ReconciliationResult:
    store_id: str
    previous_available_cents: int
    available_cents: int
    previous_pending_cents: int
    pending_cents: int
    clamped: bool = False

    @property
    def drift_cents(self) -> int:
        return self.available_cents - self.previous_available_cents
