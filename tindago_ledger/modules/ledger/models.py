"""Domain models for the store ledger."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LedgerStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SETTLED = "SETTLED"
    REFUNDED = "REFUNDED"
    VOIDED = "VOIDED"


CONFIRMED_STATUSES = frozenset({LedgerStatus.PAID, LedgerStatus.SETTLED})


@dataclass(slots=True)
class LedgerEntry:
    id: str
    store_id: str
    amount_cents: int
    commission_rate: float
    commission_cents: int
    store_amount_cents: int
    status: LedgerStatus
    method: str
    created_at: Optional[datetime]
    order_number: Optional[str] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    previous_entry_id: Optional[str] = None
    replaced_by_id: Optional[str] = None

    @property
    def is_confirmed(self) -> bool:
        return self.status in CONFIRMED_STATUSES


@dataclass(slots=True)
class LedgerAdjustment:
    id: str
    entry_id: str
    store_id: str
    delta_cents: int
    reason: str
    actor_id: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class LedgerSummary:
    total_transactions: int = 0
    total_amount_cents: int = 0
    total_commission_cents: int = 0
    total_store_earnings_cents: int = 0
    paid_count: int = 0
    pending_count: int = 0
    refunded_count: int = 0
