"""Repository protocol for payout requests and their status history."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from tindago_ledger.db.models import Payout as PayoutModel, PayoutStatusEvent as PayoutStatusEventModel


class PayoutRepository(Protocol):
    def savepoint(self) -> Any:
        ...

    async def get_payout(self, payout_id: str) -> PayoutModel | None:
        ...

    async def create_payout(
        self,
        *,
        store_id: str,
        amount_cents: int,
        method: str,
        account_details: str,
        notes: str | None,
        requested_at: datetime,
    ) -> PayoutModel:
        ...

    async def transition(
        self,
        payout_id: str,
        *,
        from_status: str,
        to_status: str,
        **values: Any,
    ) -> PayoutModel | None:
        ...

    async def append_event(
        self,
        payout_id: str,
        *,
        status: str,
        note: str | None,
        actor_id: str | None,
    ) -> PayoutStatusEventModel:
        ...

    async def list_events(self, payout_id: str) -> Sequence[PayoutStatusEventModel]:
        ...

    async def list_payouts(
        self,
        *,
        store_id: str | None,
        status: str | None,
        limit: int,
        offset: int,
    ) -> Sequence[PayoutModel]:
        ...

    async def status_totals(self, store_id: str | None) -> Sequence[tuple[str, int, int]]:
        ...
