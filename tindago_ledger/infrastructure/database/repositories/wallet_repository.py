"""SQLAlchemy implementation for wallet domain"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import case, desc, func, select, update
from sqlalchemy.exc import IntegrityError

from tindago_ledger.db.models import LedgerAdjustment, LedgerEntry, Payout, Wallet, WalletTransaction
from tindago_ledger.modules.common.exceptions import NotFoundError
from tindago_ledger.modules.common.repository import AsyncRepository

SETTLED_STATUSES = ("PAID", "SETTLED")
WITHDRAWN_STATUSES = ("approved", "completed")


class SqlWalletRepository(AsyncRepository[Wallet]):
    async def get_wallet(self, store_id: str) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.store_id == store_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def ensure_wallet(self, store_id: str) -> Wallet:
        wallet = await self.get_wallet(store_id)
        if wallet is not None:
            return wallet
        try:
            async with self.savepoint():
                wallet = await self.add(Wallet(store_id=store_id, available_cents=0, pending_cents=0, version=0))
        except IntegrityError:
            # created concurrently by another session
            wallet = await self.get_wallet(store_id)
            if wallet is None:
                raise
        return wallet

    async def load_wallet(self, store_id: str) -> Wallet:
        wallet = await self.session.get(Wallet, store_id, populate_existing=True)
        if wallet is None:
            raise NotFoundError("no wallet record", entity="wallet", entity_id=store_id)
        return wallet

    async def increase_available(self, store_id: str, amount_cents: int) -> Wallet:
        await self.ensure_wallet(store_id)
        stmt = (
            update(Wallet)
            .where(Wallet.store_id == store_id)
            .values(
                available_cents=Wallet.available_cents + amount_cents,
                version=Wallet.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return await self.load_wallet(store_id)

    async def decrease_available_if_sufficient(self, store_id: str, amount_cents: int) -> Wallet | None:
        """Compare-and-swap debit: only applies when the stored balance covers the amount."""
        stmt = (
            update(Wallet)
            .where(Wallet.store_id == store_id, Wallet.available_cents >= amount_cents)
            .values(
                available_cents=Wallet.available_cents - amount_cents,
                version=Wallet.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.load_wallet(store_id)

    async def adjust_pending(self, store_id: str, delta_cents: int) -> Wallet:
        await self.ensure_wallet(store_id)
        pending = Wallet.pending_cents + delta_cents
        stmt = (
            update(Wallet)
            .where(Wallet.store_id == store_id)
            .values(
                pending_cents=case((pending < 0, 0), else_=pending),
                version=Wallet.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return await self.load_wallet(store_id)

    async def overwrite_balance(self, store_id: str, *, available_cents: int, pending_cents: int) -> Wallet:
        await self.ensure_wallet(store_id)
        stmt = (
            update(Wallet)
            .where(Wallet.store_id == store_id)
            .values(
                available_cents=available_cents,
                pending_cents=pending_cents,
                version=Wallet.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        return await self.load_wallet(store_id)

    async def add_transaction(
        self,
        *,
        store_id: str,
        type: str,
        amount_cents: int,
        source: str,
        related_entry_id: str | None,
        related_payout_id: str | None,
        description: str | None,
    ) -> WalletTransaction:
        tx = WalletTransaction(
            store_id=store_id,
            type=type,
            amount_cents=amount_cents,
            source=source,
            related_entry_id=related_entry_id,
            related_payout_id=related_payout_id,
            description=description[:255] if description else None,
            created_at=datetime.now(timezone.utc),
        )
        return await self.add(tx)

    async def list_transactions(self, store_id: str, limit: int, offset: int) -> list[WalletTransaction]:
        stmt = (
            select(WalletTransaction)
            .where(WalletTransaction.store_id == store_id)
            .order_by(desc(WalletTransaction.created_at))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_transactions(self, store_id: str) -> tuple[int, int]:
        stmt = select(
            func.coalesce(
                func.sum(case((WalletTransaction.type == "credit", WalletTransaction.amount_cents), else_=0)), 0
            ),
            func.coalesce(
                func.sum(case((WalletTransaction.type == "debit", WalletTransaction.amount_cents), else_=0)), 0
            ),
        ).where(WalletTransaction.store_id == store_id)
        credits, debits = (await self.session.execute(stmt)).one()
        return int(credits), int(debits)

    async def ledger_totals(self, store_id: str) -> tuple[int, int, int, int]:
        """``(settled store amounts, pending store amounts, adjustments, withdrawn payouts)``.

        Adjustments count only while their entry is PAID or SETTLED, so a
        refunded entry drops out together with its reversal.
        """
        entry_stmt = (
            select(LedgerEntry.status, func.coalesce(func.sum(LedgerEntry.store_amount_cents), 0))
            .where(LedgerEntry.store_id == store_id)
            .group_by(LedgerEntry.status)
        )
        by_status = {status: int(total) for status, total in (await self.session.execute(entry_stmt)).all()}

        adjustment_stmt = (
            select(func.coalesce(func.sum(LedgerAdjustment.delta_cents), 0))
            .join(LedgerEntry, LedgerEntry.id == LedgerAdjustment.entry_id)
            .where(LedgerAdjustment.store_id == store_id, LedgerEntry.status.in_(SETTLED_STATUSES))
        )
        payout_stmt = select(func.coalesce(func.sum(Payout.amount_cents), 0)).where(
            Payout.store_id == store_id,
            Payout.status.in_(WITHDRAWN_STATUSES),
        )
        return (
            sum(by_status.get(status, 0) for status in SETTLED_STATUSES),
            by_status.get("PENDING", 0),
            int((await self.session.execute(adjustment_stmt)).scalar_one()),
            int((await self.session.execute(payout_stmt)).scalar_one()),
        )
