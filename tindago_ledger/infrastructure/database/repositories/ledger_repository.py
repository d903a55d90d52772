"""SQLAlchemy implementation for the store ledger"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import desc, func, select, update

from tindago_ledger.db.models import LedgerAdjustment, LedgerEntry
from tindago_ledger.modules.common.repository import AsyncRepository


class SqlLedgerRepository(AsyncRepository[LedgerEntry]):
    async def get_entry(self, entry_id: str) -> LedgerEntry | None:
        stmt = select(LedgerEntry).where(LedgerEntry.id == entry_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_entry(
        self,
        *,
        entry_id: str | None,
        store_id: str,
        amount_cents: int,
        commission_rate: float,
        commission_cents: int,
        store_amount_cents: int,
        method: str,
        order_number: str | None,
        previous_entry_id: str | None,
        created_at: datetime,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            store_id=store_id,
            amount_cents=amount_cents,
            commission_rate=commission_rate,
            commission_cents=commission_cents,
            store_amount_cents=store_amount_cents,
            status="PENDING",
            method=method,
            order_number=order_number,
            previous_entry_id=previous_entry_id,
            created_at=created_at,
        )
        if entry_id:
            entry.id = entry_id
        return await self.add(entry)

    async def transition(
        self,
        entry_id: str,
        *,
        from_statuses: Iterable[str],
        to_status: str,
        **values: Any,
    ) -> LedgerEntry | None:
        """Move an entry to ``to_status`` only if it is still in one of ``from_statuses``."""
        stmt = (
            update(LedgerEntry)
            .where(LedgerEntry.id == entry_id, LedgerEntry.status.in_(list(from_statuses)))
            .values(status=to_status, updated_at=datetime.now(timezone.utc), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.session.get(LedgerEntry, entry_id, populate_existing=True)

    async def list_entries(
        self,
        *,
        store_id: str | None,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[LedgerEntry]:
        stmt = select(LedgerEntry)
        if store_id:
            stmt = stmt.where(LedgerEntry.store_id == store_id)
        if status and status != "all":
            stmt = stmt.where(LedgerEntry.status == status.upper())
        stmt = stmt.order_by(desc(LedgerEntry.created_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_adjustment(
        self,
        *,
        entry_id: str,
        store_id: str,
        delta_cents: int,
        reason: str,
        actor_id: str | None,
    ) -> LedgerAdjustment:
        adjustment = LedgerAdjustment(
            entry_id=entry_id,
            store_id=store_id,
            delta_cents=delta_cents,
            reason=reason,
            actor_id=actor_id,
            created_at=datetime.now(timezone.utc),
        )
        return await self.add(adjustment)

    async def list_adjustments(self, entry_id: str) -> list[LedgerAdjustment]:
        stmt = (
            select(LedgerAdjustment)
            .where(LedgerAdjustment.entry_id == entry_id)
            .order_by(LedgerAdjustment.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def status_totals(self, store_id: str | None) -> list[tuple[str, int, int, int, int]]:
        """Rows of ``(status, count, amount, commission, store_amount)``."""
        stmt = select(
            LedgerEntry.status,
            func.count(LedgerEntry.id),
            func.coalesce(func.sum(LedgerEntry.amount_cents), 0),
            func.coalesce(func.sum(LedgerEntry.commission_cents), 0),
            func.coalesce(func.sum(LedgerEntry.store_amount_cents), 0),
        ).group_by(LedgerEntry.status)
        if store_id:
            stmt = stmt.where(LedgerEntry.store_id == store_id)
        result = await self.session.execute(stmt)
        return [
            (status, int(count), int(amount), int(commission), int(store_amount))
            for status, count, amount, commission, store_amount in result.all()
        ]
