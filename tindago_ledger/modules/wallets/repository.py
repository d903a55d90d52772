"""Repository protocol for wallet operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from tindago_ledger.db.models import Wallet as WalletModel, WalletTransaction as WalletTransactionModel


class WalletRepository(Protocol):
    async def get_wallet(self, store_id: str) -> WalletModel | None:
        ...

    async def ensure_wallet(self, store_id: str) -> WalletModel:
        ...

    async def load_wallet(self, store_id: str) -> WalletModel:
        ...

    async def adjust_pending(self, store_id: str, delta_cents: int) -> WalletModel:
        ...

    async def increase_available(self, store_id: str, amount_cents: int) -> WalletModel:
        ...

    async def decrease_available_if_sufficient(self, store_id: str, amount_cents: int) -> WalletModel | None:
        ...

    async def overwrite_balance(self, store_id: str, *, available_cents: int, pending_cents: int) -> WalletModel:
        ...

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
    ) -> WalletTransactionModel:
        ...

    async def list_transactions(self, store_id: str, limit: int, offset: int) -> Sequence[WalletTransactionModel]:
        ...

    async def sum_transactions(self, store_id: str) -> tuple[int, int]:
        ...

    async def ledger_totals(self, store_id: str) -> tuple[int, int, int, int]:
        ...
