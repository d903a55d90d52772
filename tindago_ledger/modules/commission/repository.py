"""Repository protocol for commission settings."""

from __future__ import annotations

from typing import Protocol

from tindago_ledger.db.models import CommissionSetting as CommissionSettingModel


class CommissionRepository(Protocol):
    async def get_setting(self, scope: str) -> CommissionSettingModel | None:
        ...

    async def upsert_setting(self, scope: str, rate: float) -> CommissionSettingModel:
        ...

    async def delete_setting(self, scope: str) -> bool:
        ...
