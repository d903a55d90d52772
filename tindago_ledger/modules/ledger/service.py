"""Ledger domain service.

Entries are created ``PENDING`` when an invoice is issued and confirmed by the
payment provider's callback. Confirmation credits the store wallet inside the
same database transaction, so a ledger entry is never ``PAID`` without the
matching wallet credit (or the other way round).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.money import apply_rate
from tindago_ledger.db.models import (
    LedgerAdjustment as LedgerAdjustmentModel,
    LedgerEntry as LedgerEntryModel,
)
from tindago_ledger.infrastructure.database.repositories.ledger_repository import SqlLedgerRepository
from tindago_ledger.modules.commission import CommissionResolver, validate_rate
from tindago_ledger.modules.common.exceptions import InvalidAmountError, InvalidTransitionError
from tindago_ledger.modules.wallets import WalletService, WalletSource

from .exceptions import AmbiguousReplacementError, LedgerEntryNotFoundError
from .models import CONFIRMED_STATUSES, LedgerAdjustment, LedgerEntry, LedgerStatus, LedgerSummary
from .repository import LedgerRepository

logger = logging.getLogger(__name__)

_CONFIRMED = [status.value for status in CONFIRMED_STATUSES]


class LedgerService:
    """Append-only record of per-store order payments."""

    def __init__(
        self,
        repository: LedgerRepository,
        wallets: WalletService,
        resolver: CommissionResolver,
    ) -> None:
        self._repository = repository
        self._wallets = wallets
        self._resolver = resolver

    @classmethod
    def with_session(cls, session: AsyncSession) -> "LedgerService":
        return cls(
            SqlLedgerRepository(session),
            WalletService.with_session(session),
            CommissionResolver.with_session(session),
        )

    async def record_transaction(
        self,
        *,
        store_id: str,
        amount_cents: int,
        method: str,
        rate: float | None = None,
        order_number: str | None = None,
        entry_id: str | None = None,
    ) -> LedgerEntry:
        if amount_cents <= 0:
            raise InvalidAmountError(
                f"amount must be greater than zero, got {amount_cents} cents",
                entity="ledger entry",
                entity_id=entry_id or order_number,
            )
        if rate is None:
            rate = await self._resolver.resolve_rate(store_id)
        rate = validate_rate(rate, scope=store_id)

        commission = apply_rate(amount_cents, rate)
        async with self._repository.savepoint():
            model = await self._repository.create_entry(
                entry_id=entry_id,
                store_id=store_id,
                amount_cents=amount_cents,
                commission_rate=rate,
                commission_cents=commission,
                store_amount_cents=amount_cents - commission,
                method=method.lower(),
                order_number=order_number,
                previous_entry_id=None,
                created_at=datetime.now(timezone.utc),
            )
            if model.store_amount_cents > 0:
                await self._wallets.adjust_pending(store_id, model.store_amount_cents)
        logger.info(
            "Ledger entry %s recorded: store=%s amount_cents=%s commission_cents=%s",
            model.id,
            store_id,
            amount_cents,
            commission,
        )
        return self._to_domain(model)

    async def get_entry(self, entry_id: str) -> LedgerEntry:
        model = await self._repository.get_entry(entry_id)
        if model is None:
            raise LedgerEntryNotFoundError(entry_id)
        return self._to_domain(model)

    async def list_entries(
        self,
        store_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[LedgerEntry]:
        rows = await self._repository.list_entries(store_id=store_id, status=status, limit=limit, offset=offset)
        return [self._to_domain(row) for row in rows]

    async def mark_paid(
        self,
        entry_id: str,
        paid_at: datetime | None = None,
        status: LedgerStatus = LedgerStatus.PAID,
    ) -> LedgerEntry:
        """Confirm payment of a pending entry and credit the store's share to its wallet."""
        status = LedgerStatus(status)
        if status not in CONFIRMED_STATUSES:
            raise InvalidTransitionError(
                f"payment confirmation must be PAID or SETTLED, not {status.value}",
                entity="ledger entry",
                entity_id=entry_id,
            )
        async with self._repository.savepoint():
            model = await self._repository.transition(
                entry_id,
                from_statuses=[LedgerStatus.PENDING.value],
                to_status=status.value,
                paid_at=paid_at or datetime.now(timezone.utc),
            )
            if model is None:
                await self._raise_transition_error(entry_id, "mark paid", "PENDING")
            if model.store_amount_cents > 0:
                await self._wallets.adjust_pending(model.store_id, -model.store_amount_cents)
                await self._wallets.credit(
                    store_id=model.store_id,
                    amount_cents=model.store_amount_cents,
                    source=WalletSource.ORDER_PAYMENT.value,
                    related_entry_id=model.id,
                    description=f"Order payment {model.order_number or model.id}",
                )
        logger.info("Ledger entry %s marked %s", entry_id, status.value)
        return self._to_domain(model)

    async def mark_settled(self, entry_id: str) -> LedgerEntry:
        model = await self._repository.transition(
            entry_id,
            from_statuses=[LedgerStatus.PAID.value],
            to_status=LedgerStatus.SETTLED.value,
        )
        if model is None:
            await self._raise_transition_error(entry_id, "settle", "PAID")
        return self._to_domain(model)

    async def mark_refunded(self, entry_id: str, reason: str) -> LedgerEntry:
        """Flag a confirmed entry as refunded; the wallet is reversed separately by an admin."""
        model = await self._repository.transition(
            entry_id,
            from_statuses=_CONFIRMED,
            to_status=LedgerStatus.REFUNDED.value,
            refunded_at=datetime.now(timezone.utc),
            refund_reason=reason or None,
        )
        if model is None:
            await self._raise_transition_error(entry_id, "refund", "PAID or SETTLED")
        logger.info("Ledger entry %s refunded: %s", entry_id, reason)
        return self._to_domain(model)

    async def replace_invoice(
        self,
        entry_id: str,
        *,
        new_rate: Optional[float] = None,
        new_fee_cents: Optional[int] = None,
        new_entry_id: Optional[str] = None,
    ) -> LedgerEntry:
        """Void a pending entry and issue a replacement with a different commission."""
        if (new_rate is None) == (new_fee_cents is None):
            raise AmbiguousReplacementError(
                "supply exactly one of new_rate or new_fee_cents", entity_id=entry_id
            )
        current = await self.get_entry(entry_id)
        if current.status is not LedgerStatus.PENDING:
            raise InvalidTransitionError(
                f"only PENDING entries can be replaced, entry is {current.status.value}",
                entity="ledger entry",
                entity_id=entry_id,
            )

        if new_fee_cents is not None:
            if new_fee_cents < 0 or new_fee_cents > current.amount_cents:
                raise InvalidAmountError(
                    f"fee of {new_fee_cents} cents must be between 0 and the amount {current.amount_cents}",
                    entity="ledger entry",
                    entity_id=entry_id,
                )
            commission = new_fee_cents
            rate = commission / current.amount_cents
        else:
            rate = validate_rate(new_rate, scope=entry_id)
            commission = apply_rate(current.amount_cents, rate)

        async with self._repository.savepoint():
            replacement = await self._repository.create_entry(
                entry_id=new_entry_id,
                store_id=current.store_id,
                amount_cents=current.amount_cents,
                commission_rate=rate,
                commission_cents=commission,
                store_amount_cents=current.amount_cents - commission,
                method=current.method,
                order_number=current.order_number,
                previous_entry_id=current.id,
                created_at=datetime.now(timezone.utc),
            )
            voided = await self._repository.transition(
                entry_id,
                from_statuses=[LedgerStatus.PENDING.value],
                to_status=LedgerStatus.VOIDED.value,
                replaced_by_id=replacement.id,
            )
            if voided is None:
                await self._raise_transition_error(entry_id, "replace", "PENDING")
            if replacement.store_amount_cents != current.store_amount_cents:
                await self._wallets.adjust_pending(
                    current.store_id, replacement.store_amount_cents - current.store_amount_cents
                )
        logger.info("Ledger entry %s voided and replaced by %s", entry_id, replacement.id)
        return self._to_domain(replacement)

    async def record_adjustment(
        self,
        entry_id: str,
        delta_cents: int,
        reason: str,
        actor_id: str | None = None,
    ) -> LedgerAdjustment:
        """Append a signed correction to a confirmed entry and move the wallet by the same delta."""
        if delta_cents == 0:
            raise InvalidAmountError("adjustment delta must be non-zero", entity="ledger entry", entity_id=entry_id)
        entry = await self.get_entry(entry_id)
        if not entry.is_confirmed:
            raise InvalidTransitionError(
                f"only PAID or SETTLED entries can be adjusted, entry is {entry.status.value}",
                entity="ledger entry",
                entity_id=entry_id,
            )
        reason = (reason or "").strip() or "Manual adjustment"

        async with self._repository.savepoint():
            model = await self._repository.add_adjustment(
                entry_id=entry_id,
                store_id=entry.store_id,
                delta_cents=delta_cents,
                reason=reason,
                actor_id=actor_id,
            )
            description = f"Adjustment on {entry.order_number or entry_id}: {reason}"
            if delta_cents > 0:
                await self._wallets.credit(
                    store_id=entry.store_id,
                    amount_cents=delta_cents,
                    source=WalletSource.ADJUSTMENT.value,
                    related_entry_id=entry_id,
                    description=description,
                )
            else:
                await self._wallets.debit(
                    store_id=entry.store_id,
                    amount_cents=-delta_cents,
                    source=WalletSource.ADJUSTMENT.value,
                    related_entry_id=entry_id,
                    description=description,
                )
        logger.info("Adjustment %s on entry %s: delta_cents=%s", model.id, entry_id, delta_cents)
        return self._to_adjustment(model)

    async def list_adjustments(self, entry_id: str) -> list[LedgerAdjustment]:
        rows = await self._repository.list_adjustments(entry_id)
        return [self._to_adjustment(row) for row in rows]

    async def summarize(self, store_id: str | None = None) -> LedgerSummary:
        summary = LedgerSummary()
        for status, count, amount, commission, store_amount in await self._repository.status_totals(store_id):
            if status == LedgerStatus.VOIDED.value:
                continue
            summary.total_transactions += count
            summary.total_amount_cents += amount
            summary.total_commission_cents += commission
            summary.total_store_earnings_cents += store_amount
            if status in _CONFIRMED:
                summary.paid_count += count
            elif status == LedgerStatus.PENDING.value:
                summary.pending_count += count
            elif status == LedgerStatus.REFUNDED.value:
                summary.refunded_count += count
        return summary

    async def _raise_transition_error(self, entry_id: str, action: str, required: str) -> None:
        current = await self._repository.get_entry(entry_id)
        if current is None:
            raise LedgerEntryNotFoundError(entry_id)
        raise InvalidTransitionError(
            f"cannot {action}: entry must be {required}, is {current.status}",
            entity="ledger entry",
            entity_id=entry_id,
        )

    @staticmethod
    def _to_domain(model: LedgerEntryModel) -> LedgerEntry:
        return LedgerEntry(
            id=model.id,
            store_id=model.store_id,
            amount_cents=model.amount_cents,
            commission_rate=model.commission_rate,
            commission_cents=model.commission_cents,
            store_amount_cents=model.store_amount_cents,
            status=LedgerStatus(model.status),
            method=model.method,
            created_at=model.created_at,
            order_number=model.order_number,
            paid_at=model.paid_at,
            refunded_at=model.refunded_at,
            refund_reason=model.refund_reason,
            previous_entry_id=model.previous_entry_id,
            replaced_by_id=model.replaced_by_id,
        )

    @staticmethod
    def _to_adjustment(model: LedgerAdjustmentModel) -> LedgerAdjustment:
        return LedgerAdjustment(
            id=model.id,
            entry_id=model.entry_id,
            store_id=model.store_id,
            delta_cents=model.delta_cents,
            reason=model.reason,
            actor_id=model.actor_id,
            created_at=model.created_at,
        )
