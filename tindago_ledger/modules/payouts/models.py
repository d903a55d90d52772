"""Domain models for payout requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class PayoutStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PayoutMethod(str, Enum):
    BANK = "bank"
    GCASH = "gcash"
    PAYMAYA = "paymaya"


@dataclass(slots=True)
class PayoutStatusEvent:
    sequence: int
    status: PayoutStatus
    note: Optional[str]
    actor_id: Optional[str]
    created_at: Optional[datetime]


@dataclass(slots=True)
class PayoutRequest:
    id: str
    store_id: str
    amount_cents: int
    method: PayoutMethod
    account_details: str
    status: PayoutStatus
    requested_at: Optional[datetime]
    notes: Optional[str] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    def is_pending(self) -> bool:
        return self.status is PayoutStatus.PENDING


@dataclass(slots=True)
class PayoutCreateInput:
    store_id: str
    amount_cents: int
    method: str
    account_details: str
    notes: Optional[str] = None
    actor_id: Optional[str] = None


@dataclass(slots=True)
class BulkApprovalFailure:
    payout_id: str
    error: str
    reason: str


@dataclass(slots=True)
class BulkApprovalResult:
    succeeded: list[str] = field(default_factory=list)
    failed: list[BulkApprovalFailure] = field(default_factory=list)

    @property
    def failed_ids(self) -> list[str]:
        return [failure.payout_id for failure in self.failed]


@dataclass(slots=True)
class PayoutStats:
    total_requests: int = 0
    pending_count: int = 0
    approved_count: int = 0
    rejected_count: int = 0
    completed_count: int = 0
    total_amount_cents: int = 0
    pending_amount_cents: int = 0
    approved_amount_cents: int = 0
