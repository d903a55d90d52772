"""SQLAlchemy implementation for payout requests"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import desc, func, select, update

from tindago_ledger.db.models import Payout, PayoutStatusEvent
from tindago_ledger.modules.common.repository import AsyncRepository


class SqlPayoutRepository(AsyncRepository[Payout]):
    async def get_payout(self, payout_id: str) -> Payout | None:
        stmt = select(Payout).where(Payout.id == payout_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_payout(
        self,
        *,
        store_id: str,
        amount_cents: int,
        method: str,
        account_details: str,
        notes: str | None,
        requested_at: datetime,
    ) -> Payout:
        payout = Payout(
            store_id=store_id,
            amount_cents=amount_cents,
            method=method,
            account_details=account_details,
            notes=notes,
            status="pending",
            requested_at=requested_at,
        )
        return await self.add(payout)

    async def transition(
        self,
        payout_id: str,
        *,
        from_status: str,
        to_status: str,
        **values: Any,
    ) -> Payout | None:
        """Conditional status change; ``None`` when another writer moved the payout first."""
        stmt = (
            update(Payout)
            .where(Payout.id == payout_id, Payout.status == from_status)
            .values(status=to_status, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.session.get(Payout, payout_id, populate_existing=True)

    async def append_event(
        self,
        payout_id: str,
        *,
        status: str,
        note: str | None,
        actor_id: str | None,
    ) -> PayoutStatusEvent:
        last = await self.session.execute(
            select(func.coalesce(func.max(PayoutStatusEvent.sequence), 0)).where(
                PayoutStatusEvent.payout_id == payout_id
            )
        )
        event = PayoutStatusEvent(
            payout_id=payout_id,
            sequence=int(last.scalar_one()) + 1,
            status=status,
            note=note,
            actor_id=actor_id,
            created_at=datetime.now(timezone.utc),
        )
        return await self.add(event)

    async def list_events(self, payout_id: str) -> list[PayoutStatusEvent]:
        stmt = (
            select(PayoutStatusEvent)
            .where(PayoutStatusEvent.payout_id == payout_id)
            .order_by(PayoutStatusEvent.sequence)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_payouts(
        self,
        *,
        store_id: str | None,
        status: str | None,
        limit: int,
        offset: int,
    ) -> list[Payout]:
        stmt = select(Payout)
        if store_id:
            stmt = stmt.where(Payout.store_id == store_id)
        if status and status != "all":
            stmt = stmt.where(Payout.status == status)
        stmt = stmt.order_by(desc(Payout.requested_at)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def status_totals(self, store_id: str | None) -> list[tuple[str, int, int]]:
        """Rows of ``(status, count, amount)``."""
        stmt = select(
            Payout.status,
            func.count(Payout.id),
            func.coalesce(func.sum(Payout.amount_cents), 0),
        ).group_by(Payout.status)
        if store_id:
            stmt = stmt.where(Payout.store_id == store_id)
        result = await self.session.execute(stmt)
        return [(status, int(count), int(amount)) for status, count, amount in result.all()]
