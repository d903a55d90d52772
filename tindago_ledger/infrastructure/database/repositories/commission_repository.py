"""SQLAlchemy implementation for commission settings"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import delete, select

from tindago_ledger.db.models import CommissionSetting
from tindago_ledger.modules.common.repository import AsyncRepository


class SqlCommissionRepository(AsyncRepository[CommissionSetting]):
    async def get_setting(self, scope: str) -> CommissionSetting | None:
        stmt = select(CommissionSetting).where(CommissionSetting.scope == scope).execution_options(
            populate_existing=True
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert_setting(self, scope: str, rate: float) -> CommissionSetting:
        setting = await self.get_setting(scope)
        now = datetime.now(timezone.utc)
        if setting is None:
            return await self.add(CommissionSetting(scope=scope, rate=rate, updated_at=now))
        setting.rate = rate
        setting.updated_at = now
        await self.session.flush()
        return setting

    async def delete_setting(self, scope: str) -> bool:
        result = await self.session.execute(delete(CommissionSetting).where(CommissionSetting.scope == scope))
        return result.rowcount > 0
