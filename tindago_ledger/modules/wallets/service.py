"""Wallet domain service"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.db.models import Wallet as WalletModel, WalletTransaction as WalletTransactionModel
from tindago_ledger.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from tindago_ledger.modules.common.exceptions import InvalidAmountError

from .exceptions import InsufficientBalanceError
from .models import (
    LedgerTotals,
    ReconciliationResult,
    WalletBalance,
    WalletSource,
    WalletTransactionRecord,
    WalletTransactionType,
)
from .repository import WalletRepository

logger = logging.getLogger(__name__)


def _require_positive(store_id: str, amount_cents: int) -> None:
    if amount_cents <= 0:
        raise InvalidAmountError(
            f"amount must be greater than zero, got {amount_cents} cents",
            entity="wallet",
            entity_id=store_id,
        )


@dataclass(slots=True)
class WalletService:
    """Every balance change goes through ``credit``/``debit`` and leaves a transaction record."""

    repository: WalletRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "WalletService":
        return cls(SqlWalletRepository(session))

    async def get_balance(self, store_id: str) -> WalletBalance:
        wallet = await self.repository.get_wallet(store_id)
        if wallet is None:
            return WalletBalance(store_id=store_id, available_cents=0, pending_cents=0, updated_at=None)
        return self._to_balance(wallet)

    async def credit(
        self,
        *,
        store_id: str,
        amount_cents: int,
        source: str = WalletSource.ORDER_PAYMENT.value,
        related_entry_id: Optional[str] = None,
        related_payout_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> WalletBalance:
        _require_positive(store_id, amount_cents)
        wallet = await self.repository.increase_available(store_id, amount_cents)
        await self.repository.add_transaction(
            store_id=store_id,
            type=WalletTransactionType.CREDIT.value,
            amount_cents=amount_cents,
            source=source,
            related_entry_id=related_entry_id,
            related_payout_id=related_payout_id,
            description=description or "Wallet credit",
        )
        logger.info("Wallet credited: store=%s amount_cents=%s source=%s", store_id, amount_cents, source)
        return self._to_balance(wallet)

    async def debit(
        self,
        *,
        store_id: str,
        amount_cents: int,
        payout_id: Optional[str] = None,
        description: Optional[str] = None,
        source: str = WalletSource.PAYOUT.value,
        related_entry_id: Optional[str] = None,
    ) -> WalletBalance:
        _require_positive(store_id, amount_cents)
        wallet = await self.repository.decrease_available_if_sufficient(store_id, amount_cents)
        if wallet is None:
            current = await self.get_balance(store_id)
            logger.warning(
                "Wallet debit refused: store=%s requested_cents=%s available_cents=%s",
                store_id,
                amount_cents,
                current.available_cents,
            )
            raise InsufficientBalanceError(store_id, amount_cents, current.available_cents)
        await self.repository.add_transaction(
            store_id=store_id,
            type=WalletTransactionType.DEBIT.value,
            amount_cents=amount_cents,
            source=source,
            related_entry_id=related_entry_id,
            related_payout_id=payout_id,
            description=description or "Wallet debit",
        )
        logger.info("Wallet debited: store=%s amount_cents=%s source=%s", store_id, amount_cents, source)
        return self._to_balance(wallet)

    async def adjust_pending(self, store_id: str, delta_cents: int) -> WalletBalance:
        """Move the unsettled total as invoices are issued, confirmed or voided; floored at zero."""
        wallet = await self.repository.adjust_pending(store_id, delta_cents)
        return self._to_balance(wallet)

    async def list_transactions(self, store_id: str, limit: int = 50, offset: int = 0) -> list[WalletTransactionRecord]:
        rows = await self.repository.list_transactions(store_id, limit, offset)
        return [self._to_transaction(row) for row in rows]

    async def replay_balance(self, store_id: str) -> int:
        """Available balance re-derived as the fold of the store's wallet transactions."""
        credits, debits = await self.repository.sum_transactions(store_id)
        return credits - debits

    async def reconcile_from_ledger(self, store_id: str) -> ReconciliationResult:
        """Overwrite the wallet with the balance derived from ledger entries and payouts.

        Drift on the available balance is written as a single ``reconciliation``
        transaction so the transaction fold keeps matching the stored balance.
        """
        totals = LedgerTotals(*await self.repository.ledger_totals(store_id))
        current = await self.get_balance(store_id)

        derived = totals.settled_store_cents + totals.adjustment_cents - totals.withdrawn_cents
        clamped = derived < 0
        if clamped:
            logger.warning(
                "Derived balance for store %s is negative (%s cents); clamping to zero", store_id, derived
            )
            derived = 0

        drift = derived - current.available_cents
        pending = max(totals.pending_store_cents, 0)
        if drift or pending != current.pending_cents or current.updated_at is None:
            await self.repository.overwrite_balance(store_id, available_cents=derived, pending_cents=pending)

        if drift:
            await self.repository.add_transaction(
                store_id=store_id,
                type=(WalletTransactionType.CREDIT if drift > 0 else WalletTransactionType.DEBIT).value,
                amount_cents=abs(drift),
                source=WalletSource.RECONCILIATION.value,
                related_entry_id=None,
                related_payout_id=None,
                description="Balance repaired from ledger",
            )
            logger.warning("Wallet drift repaired: store=%s drift_cents=%s", store_id, drift)

        return ReconciliationResult(
            store_id=store_id,
            previous_available_cents=current.available_cents,
            available_cents=derived,
            previous_pending_cents=current.pending_cents,
            pending_cents=pending,
            clamped=clamped,
        )

    @staticmethod
    def _to_balance(model: WalletModel) -> WalletBalance:
        return WalletBalance(
            store_id=model.store_id,
            available_cents=model.available_cents,
            pending_cents=model.pending_cents,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_transaction(model: WalletTransactionModel) -> WalletTransactionRecord:
        return WalletTransactionRecord(
            id=model.id,
            store_id=model.store_id,
            type=WalletTransactionType(model.type),
            amount_cents=model.amount_cents,
            source=model.source,
            related_entry_id=model.related_entry_id,
            related_payout_id=model.related_payout_id,
            description=model.description,
            created_at=model.created_at,
        )
