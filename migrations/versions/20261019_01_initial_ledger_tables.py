"""initial ledger, wallet and payout tables

Revision ID: 3f9c1a7d2b10
Revises: 
Create Date: 2026-10-19 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9c1a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "commission_settings",
        sa.Column("scope", sa.String(length=80), primary_key=True),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "ledger_entries",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("order_number", sa.String(length=64)),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("commission_rate", sa.Float(), nullable=False),
        sa.Column("commission_cents", sa.Integer(), nullable=False),
        sa.Column("store_amount_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("method", sa.String(length=30), nullable=False, server_default="online"),
        sa.Column("previous_entry_id", sa.String(length=64), sa.ForeignKey("ledger_entries.id")),
        sa.Column("replaced_by_id", sa.String(length=64)),
        sa.Column("refund_reason", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("refunded_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_ledger_entries_store_id", "ledger_entries", ["store_id"])
    op.create_index("ix_ledger_entries_status", "ledger_entries", ["status"])

    op.create_table(
        "ledger_adjustments",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("entry_id", sa.String(length=64), sa.ForeignKey("ledger_entries.id"), nullable=False),
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("delta_cents", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("actor_id", sa.String(length=64)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_adjustments_entry_id", "ledger_adjustments", ["entry_id"])
    op.create_index("ix_ledger_adjustments_store_id", "ledger_adjustments", ["store_id"])

    op.create_table(
        "wallets",
        sa.Column("store_id", sa.String(length=64), primary_key=True),
        sa.Column("available_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pending_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "wallet_transactions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("store_id", sa.String(length=64), sa.ForeignKey("wallets.store_id"), nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("source", sa.String(length=40), nullable=False),
        sa.Column("related_entry_id", sa.String(length=64)),
        sa.Column("related_payout_id", sa.String(length=36)),
        sa.Column("description", sa.String(length=255)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_wallet_transactions_store_id", "wallet_transactions", ["store_id"])
    op.create_index("ix_wallet_transactions_related_entry_id", "wallet_transactions", ["related_entry_id"])
    op.create_index("ix_wallet_transactions_related_payout_id", "wallet_transactions", ["related_payout_id"])

    op.create_table(
        "payouts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("store_id", sa.String(length=64), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("method", sa.String(length=20), nullable=False),
        sa.Column("account_details", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("requested_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("processed_at", sa.DateTime(timezone=True)),
        sa.Column("processed_by", sa.String(length=64)),
        sa.Column("admin_notes", sa.Text()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_payouts_store_id", "payouts", ["store_id"])
    op.create_index("ix_payouts_status", "payouts", ["status"])

    op.create_table(
        "payout_status_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("payout_id", sa.String(length=36), sa.ForeignKey("payouts.id"), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("note", sa.Text()),
        sa.Column("actor_id", sa.String(length=64)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_payout_status_history_payout_seq",
        "payout_status_history",
        ["payout_id", "sequence"],
        unique=True,
    )

    op.create_table(
        "processed_webhooks",
        sa.Column("event_id", sa.String(length=100), primary_key=True),
        sa.Column("status", sa.String(length=20)),
        sa.Column("processed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("processed_webhooks")

    op.drop_index("ix_payout_status_history_payout_seq", table_name="payout_status_history")
    op.drop_table("payout_status_history")

    op.drop_index("ix_payouts_status", table_name="payouts")
    op.drop_index("ix_payouts_store_id", table_name="payouts")
    op.drop_table("payouts")

    op.drop_index("ix_wallet_transactions_related_payout_id", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_related_entry_id", table_name="wallet_transactions")
    op.drop_index("ix_wallet_transactions_store_id", table_name="wallet_transactions")
    op.drop_table("wallet_transactions")

    op.drop_table("wallets")

    op.drop_index("ix_ledger_adjustments_store_id", table_name="ledger_adjustments")
    op.drop_index("ix_ledger_adjustments_entry_id", table_name="ledger_adjustments")
    op.drop_table("ledger_adjustments")

    op.drop_index("ix_ledger_entries_status", table_name="ledger_entries")
    op.drop_index("ix_ledger_entries_store_id", table_name="ledger_entries")
    op.drop_table("ledger_entries")

    op.drop_table("commission_settings")
