"""Repository protocol for ledger entries and adjustments."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Protocol, Sequence

from tindago_ledger.db.models import (
    LedgerAdjustment as LedgerAdjustmentModel,
    LedgerEntry as LedgerEntryModel,
)


class LedgerRepository(Protocol):
    def savepoint(self) -> Any:
        ...

    async def get_entry(self, entry_id: str) -> LedgerEntryModel | None:
        ...

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
    ) -> LedgerEntryModel:
        ...

    async def transition(
        self,
        entry_id: str,
        *,
        from_statuses: Iterable[str],
        to_status: str,
        **values: Any,
    ) -> LedgerEntryModel | None:
        ...

    async def list_entries(
        self,
        *,
        store_id: str | None,
        status: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[LedgerEntryModel]:
        ...

    async def add_adjustment(
        self,
        *,
        entry_id: str,
        store_id: str,
        delta_cents: int,
        reason: str,
        actor_id: str | None,
    ) -> LedgerAdjustmentModel:
        ...

    async def list_adjustments(self, entry_id: str) -> Sequence[LedgerAdjustmentModel]:
        ...

    async def status_totals(self, store_id: str | None) -> Sequence[tuple[str, int, int, int, int]]:
        ...
