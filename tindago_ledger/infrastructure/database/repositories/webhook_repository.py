"""Idempotency records for payment provider callbacks"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from tindago_ledger.db.models import ProcessedWebhook
from tindago_ledger.modules.common.repository import AsyncRepository


class SqlWebhookRepository(AsyncRepository[ProcessedWebhook]):
    async def get_processed(self, event_id: str) -> ProcessedWebhook | None:
        stmt = select(ProcessedWebhook).where(ProcessedWebhook.event_id == event_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def claim(self, event_id: str, status: str) -> bool:
        """Record the event; ``False`` when it was already recorded."""
        if await self.get_processed(event_id) is not None:
            return False
        try:
            async with self.savepoint():
                await self.add(
                    ProcessedWebhook(event_id=event_id, status=status, processed_at=datetime.now(timezone.utc))
                )
        except IntegrityError:
            return False
        return True
