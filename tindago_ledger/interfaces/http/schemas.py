"""Pydantic schemas used by the HTTP layer."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tindago_ledger.modules.ledger.models import LedgerStatus
from tindago_ledger.modules.payouts.models import PayoutMethod, PayoutStatus
from tindago_ledger.modules.wallets.models import WalletTransactionType


class TokenData(BaseModel):
    actor_id: str
    role: str
    store_id: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


class CommissionRateUpdate(BaseModel):
    rate: float = Field(..., description="Fraction of the order amount, between 0 and 1")


class CommissionRateResponse(BaseModel):
    rate: float
    scope: str
    store_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryCreate(BaseModel):
    store_id: str = Field(..., min_length=1)
    amount_cents: int
    method: str = "online"
    rate: Optional[float] = None
    order_number: Optional[str] = None
    entry_id: Optional[str] = Field(default=None, description="Payment provider invoice id")


class LedgerEntryResponse(BaseModel):
    id: str
    store_id: str
    order_number: Optional[str] = None
    amount_cents: int
    commission_rate: float
    commission_cents: int
    store_amount_cents: int
    status: LedgerStatus
    method: str
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    previous_entry_id: Optional[str] = None
    replaced_by_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryListResponse(BaseModel):
    entries: list[LedgerEntryResponse] = Field(default_factory=list)


class LedgerSummaryResponse(BaseModel):
    total_transactions: int
    total_amount_cents: int
    total_commission_cents: int
    total_store_earnings_cents: int
    paid_count: int
    pending_count: int
    refunded_count: int

    model_config = ConfigDict(from_attributes=True)


class MarkPaidRequest(BaseModel):
    status: LedgerStatus = LedgerStatus.PAID
    paid_at: Optional[datetime] = None


class RefundRequest(BaseModel):
    reason: str = ""


class ReplaceInvoiceRequest(BaseModel):
    new_rate: Optional[float] = None
    new_fee_cents: Optional[int] = None
    new_entry_id: Optional[str] = None


class AdjustmentCreate(BaseModel):
    delta_cents: int
    reason: str = ""


class AdjustmentResponse(BaseModel):
    id: str
    entry_id: str
    store_id: str
    delta_cents: int
    reason: str
    actor_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdjustmentListResponse(BaseModel):
    adjustments: list[AdjustmentResponse] = Field(default_factory=list)


class WalletBalanceResponse(BaseModel):
    store_id: str
    available_cents: int
    pending_cents: int
    total_cents: int
    currency: str
    updated_at: Optional[datetime] = None


class WalletTransactionResponse(BaseModel):
    id: str
    type: WalletTransactionType
    amount_cents: int
    source: str
    related_entry_id: Optional[str] = None
    related_payout_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse] = Field(default_factory=list)


class ReconciliationResponse(BaseModel):
    store_id: str
    previous_available_cents: int
    available_cents: int
    previous_pending_cents: int
    pending_cents: int
    drift_cents: int
    clamped: bool


class WalletReplayResponse(BaseModel):
    store_id: str
    stored_available_cents: int
    replayed_available_cents: int
    consistent: bool


class PayoutCreate(BaseModel):
    amount_cents: int
    method: str = Field(..., description="bank, gcash or paymaya")
    account_details: str
    notes: Optional[str] = None


class PayoutResponse(BaseModel):
    id: str
    store_id: str
    amount_cents: int
    method: PayoutMethod
    account_details: str
    status: PayoutStatus
    notes: Optional[str] = None
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    admin_notes: Optional[str] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PayoutListResponse(BaseModel):
    payouts: list[PayoutResponse] = Field(default_factory=list)


class PayoutStatusEventResponse(BaseModel):
    sequence: int
    status: PayoutStatus
    note: Optional[str] = None
    actor_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PayoutHistoryResponse(BaseModel):
    payout_id: str
    events: list[PayoutStatusEventResponse] = Field(default_factory=list)


class PayoutReviewRequest(BaseModel):
    notes: Optional[str] = None


class PayoutRejectRequest(BaseModel):
    reason: str = ""


class BulkApproveRequest(BaseModel):
    payout_ids: list[str] = Field(..., min_length=1)
    notes: Optional[str] = None


class BulkApprovalFailureResponse(BaseModel):
    payout_id: str
    error: str
    reason: str

    model_config = ConfigDict(from_attributes=True)


class BulkApprovalResponse(BaseModel):
    succeeded: list[str] = Field(default_factory=list)
    failed: list[BulkApprovalFailureResponse] = Field(default_factory=list)


class PayoutStatsResponse(BaseModel):
    total_requests: int
    pending_count: int
    approved_count: int
    rejected_count: int
    completed_count: int
    total_amount_cents: int
    pending_amount_cents: int
    approved_amount_cents: int

    model_config = ConfigDict(from_attributes=True)


class PaymentWebhookPayload(BaseModel):
    id: str
    status: str
    amount: Optional[float] = None
    external_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    payment_channel: Optional[str] = None
    failure_reason: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True
    idempotent: bool = False
    action: Optional[str] = None
