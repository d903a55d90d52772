"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from tindago_ledger.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class CommissionSetting(Base):
    __tablename__ = "commission_settings"

    # "global" for the platform default, "store:<store id>" for overrides
    scope = Column(String(80), primary_key=True)
    rate = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    store_id = Column(String(64), nullable=False, index=True)
    order_number = Column(String(64))
    amount_cents = Column(Integer, nullable=False)
    commission_rate = Column(Float, nullable=False)
    commission_cents = Column(Integer, nullable=False)
    store_amount_cents = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default="PENDING", index=True)
    method = Column(String(30), nullable=False, default="online")
    previous_entry_id = Column(String(64), ForeignKey("ledger_entries.id"), nullable=True)
    replaced_by_id = Column(String(64), nullable=True)
    refund_reason = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    paid_at = Column(DateTime(timezone=True))
    refunded_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    adjustments = relationship("LedgerAdjustment", back_populates="entry")


class LedgerAdjustment(Base):
    __tablename__ = "ledger_adjustments"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    entry_id = Column(String(64), ForeignKey("ledger_entries.id"), nullable=False, index=True)
    store_id = Column(String(64), nullable=False, index=True)
    delta_cents = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    actor_id = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    entry = relationship("LedgerEntry", back_populates="adjustments")


class Wallet(Base):
    __tablename__ = "wallets"

    store_id = Column(String(64), primary_key=True)
    available_cents = Column(Integer, nullable=False, default=0)
    pending_cents = Column(Integer, nullable=False, default=0)
    # bumped on every balance write; optimistic-concurrency marker
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    transactions = relationship("WalletTransaction", back_populates="wallet", cascade="all, delete-orphan")


class WalletTransaction(Base):
    __tablename__ = "wallet_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    store_id = Column(String(64), ForeignKey("wallets.store_id"), nullable=False, index=True)
    type = Column(String(10), nullable=False)  # credit, debit
    amount_cents = Column(Integer, nullable=False)
    source = Column(String(40), nullable=False)
    related_entry_id = Column(String(64), nullable=True, index=True)
    related_payout_id = Column(String(36), nullable=True, index=True)
    description = Column(String(255))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    wallet = relationship("Wallet", back_populates="transactions")


class Payout(Base):
    __tablename__ = "payouts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    store_id = Column(String(64), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    method = Column(String(20), nullable=False)  # bank, gcash, paymaya
    account_details = Column(Text, nullable=False)
    notes = Column(Text)
    status = Column(String(20), nullable=False, default="pending", index=True)
    requested_at = Column(DateTime(timezone=True), server_default=func.now())
    processed_at = Column(DateTime(timezone=True))
    processed_by = Column(String(64))
    admin_notes = Column(Text)
    completed_at = Column(DateTime(timezone=True))

    history = relationship(
        "PayoutStatusEvent",
        back_populates="payout",
        order_by="PayoutStatusEvent.sequence",
    )


class PayoutStatusEvent(Base):
    __tablename__ = "payout_status_history"
    __table_args__ = (Index("ix_payout_status_history_payout_seq", "payout_id", "sequence", unique=True),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    payout_id = Column(String(36), ForeignKey("payouts.id"), nullable=False)
    sequence = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    note = Column(Text)
    actor_id = Column(String(64))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    payout = relationship("Payout", back_populates="history")


class ProcessedWebhook(Base):
    __tablename__ = "processed_webhooks"

    event_id = Column(String(100), primary_key=True)
    status = Column(String(20))
    processed_at = Column(DateTime(timezone=True), server_default=func.now())
