"""Payout workflow.

``pending -> approved -> completed`` or ``pending -> rejected``. Approval
debits the store wallet; the debit, the status change and the history event
share one savepoint so a refused debit leaves the payout untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.config import get_settings
from tindago_ledger.db.models import Payout as PayoutModel, PayoutStatusEvent as PayoutStatusEventModel
from tindago_ledger.infrastructure.database.repositories.payout_repository import SqlPayoutRepository
from tindago_ledger.modules.common.exceptions import FinanceError, InvalidAmountError, InvalidTransitionError
from tindago_ledger.modules.wallets import InsufficientBalanceError, WalletService

from .exceptions import AlreadyProcessedError, InvalidPayoutRequestError, MissingReasonError, PayoutNotFoundError
from .models import (
    BulkApprovalFailure,
    BulkApprovalResult,
    PayoutCreateInput,
    PayoutMethod,
    PayoutRequest,
    PayoutStats,
    PayoutStatus,
    PayoutStatusEvent,
)
from .repository import PayoutRepository

logger = logging.getLogger(__name__)


class PayoutService:
    """Encapsulates payout request use cases."""

    def __init__(
        self,
        repository: PayoutRepository,
        wallets: WalletService,
        validate_balance_on_create: bool | None = None,
    ) -> None:
        self._repository = repository
        self._wallets = wallets
        if validate_balance_on_create is None:
            validate_balance_on_create = get_settings().payouts.validate_balance_on_create
        self._validate_balance_on_create = validate_balance_on_create

    @classmethod
    def with_session(cls, session: AsyncSession, **kwargs) -> "PayoutService":
        return cls(SqlPayoutRepository(session), WalletService.with_session(session), **kwargs)

    async def create(self, payload: PayoutCreateInput) -> PayoutRequest:
        if payload.amount_cents <= 0:
            raise InvalidAmountError(
                f"payout amount must be greater than zero, got {payload.amount_cents} cents",
                entity="wallet",
                entity_id=payload.store_id,
            )
        try:
            method = PayoutMethod(str(payload.method).lower())
        except ValueError as exc:
            raise InvalidPayoutRequestError(
                f"unknown payout method {payload.method!r}", entity_id=payload.store_id
            ) from exc
        account_details = (payload.account_details or "").strip()
        if not account_details:
            raise InvalidPayoutRequestError("destination account details are required", entity_id=payload.store_id)

        if self._validate_balance_on_create:
            # advisory only; approval re-checks against the balance at that moment
            balance = await self._wallets.get_balance(payload.store_id)
            if balance.available_cents < payload.amount_cents:
                raise InsufficientBalanceError(payload.store_id, payload.amount_cents, balance.available_cents)

        model = await self._repository.create_payout(
            store_id=payload.store_id,
            amount_cents=payload.amount_cents,
            method=method.value,
            account_details=account_details,
            notes=payload.notes or None,
            requested_at=datetime.now(timezone.utc),
        )
        await self._repository.append_event(
            model.id,
            status=PayoutStatus.PENDING.value,
            note=payload.notes or "Payout requested",
            actor_id=payload.actor_id,
        )
        logger.info(
            "Payout %s requested: store=%s amount_cents=%s method=%s",
            model.id,
            payload.store_id,
            payload.amount_cents,
            method.value,
        )
        return self._to_domain(model)

    async def get(self, payout_id: str) -> PayoutRequest:
        model = await self._repository.get_payout(payout_id)
        if model is None:
            raise PayoutNotFoundError(payout_id)
        return self._to_domain(model)

    async def list_payouts(
        self,
        store_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PayoutRequest]:
        rows = await self._repository.list_payouts(store_id=store_id, status=status, limit=limit, offset=offset)
        return [self._to_domain(row) for row in rows]

    async def history(self, payout_id: str) -> list[PayoutStatusEvent]:
        await self.get(payout_id)
        rows = await self._repository.list_events(payout_id)
        return [self._to_event(row) for row in rows]

    async def approve(self, payout_id: str, admin_id: str, notes: Optional[str] = None) -> PayoutRequest:
        payout = await self.get(payout_id)
        if not payout.is_pending():
            raise AlreadyProcessedError(f"payout is already {payout.status.value}", entity_id=payout_id)

        now = datetime.now(timezone.utc)
        async with self._repository.savepoint():
            model = await self._repository.transition(
                payout_id,
                from_status=PayoutStatus.PENDING.value,
                to_status=PayoutStatus.APPROVED.value,
                processed_at=now,
                processed_by=admin_id,
                admin_notes=notes or None,
            )
            if model is None:
                raise AlreadyProcessedError("payout was processed concurrently", entity_id=payout_id)
            await self._wallets.debit(
                store_id=payout.store_id,
                amount_cents=payout.amount_cents,
                payout_id=payout_id,
                description=f"Payout approved - {payout.method.value}",
            )
            await self._repository.append_event(
                payout_id,
                status=PayoutStatus.APPROVED.value,
                note=notes,
                actor_id=admin_id,
            )
        logger.info("Payout %s approved by %s", payout_id, admin_id)
        return self._to_domain(model)

    async def reject(self, payout_id: str, admin_id: str, reason: str) -> PayoutRequest:
        if not reason or not reason.strip():
            raise MissingReasonError("a rejection reason is required", entity_id=payout_id)
        payout = await self.get(payout_id)
        if not payout.is_pending():
            raise AlreadyProcessedError(f"payout is already {payout.status.value}", entity_id=payout_id)

        async with self._repository.savepoint():
            model = await self._repository.transition(
                payout_id,
                from_status=PayoutStatus.PENDING.value,
                to_status=PayoutStatus.REJECTED.value,
                processed_at=datetime.now(timezone.utc),
                processed_by=admin_id,
                admin_notes=reason.strip(),
            )
            if model is None:
                raise AlreadyProcessedError("payout was processed concurrently", entity_id=payout_id)
            await self._repository.append_event(
                payout_id,
                status=PayoutStatus.REJECTED.value,
                note=reason.strip(),
                actor_id=admin_id,
            )
        logger.info("Payout %s rejected by %s: %s", payout_id, admin_id, reason)
        return self._to_domain(model)

    async def complete(self, payout_id: str, admin_id: str, note: Optional[str] = None) -> PayoutRequest:
        """Confirm the out-of-band transfer happened; moves no money."""
        payout = await self.get(payout_id)
        if payout.status is not PayoutStatus.APPROVED:
            raise InvalidTransitionError(
                f"payout must be approved first, is {payout.status.value}",
                entity="payout",
                entity_id=payout_id,
            )

        async with self._repository.savepoint():
            model = await self._repository.transition(
                payout_id,
                from_status=PayoutStatus.APPROVED.value,
                to_status=PayoutStatus.COMPLETED.value,
                completed_at=datetime.now(timezone.utc),
            )
            if model is None:
                raise InvalidTransitionError(
                    "payout changed status concurrently", entity="payout", entity_id=payout_id
                )
            await self._repository.append_event(
                payout_id,
                status=PayoutStatus.COMPLETED.value,
                note=note,
                actor_id=admin_id,
            )
        logger.info("Payout %s completed by %s", payout_id, admin_id)
        return self._to_domain(model)

    async def bulk_approve(
        self,
        payout_ids: Iterable[str],
        admin_id: str,
        notes: Optional[str] = None,
    ) -> BulkApprovalResult:
        """Approve each payout independently; one failure never blocks the rest."""
        notes = notes or get_settings().payouts.bulk_approval_note
        result = BulkApprovalResult()
        for payout_id in dict.fromkeys(payout_ids):
            try:
                await self.approve(payout_id, admin_id, notes)
            except FinanceError as exc:
                logger.warning("Bulk approval skipped payout %s: %s", payout_id, exc)
                result.failed.append(
                    BulkApprovalFailure(payout_id=payout_id, error=type(exc).__name__, reason=str(exc))
                )
            else:
                result.succeeded.append(payout_id)
        logger.info(
            "Bulk approval by %s: %s approved, %s failed",
            admin_id,
            len(result.succeeded),
            len(result.failed),
        )
        return result

    async def stats(self, store_id: str | None = None) -> PayoutStats:
        stats = PayoutStats()
        for status, count, amount in await self._repository.status_totals(store_id):
            stats.total_requests += count
            stats.total_amount_cents += amount
            if status == PayoutStatus.PENDING.value:
                stats.pending_count += count
                stats.pending_amount_cents += amount
            elif status == PayoutStatus.APPROVED.value:
                stats.approved_count += count
                stats.approved_amount_cents += amount
            elif status == PayoutStatus.REJECTED.value:
                stats.rejected_count += count
            elif status == PayoutStatus.COMPLETED.value:
                stats.completed_count += count
        return stats

    @staticmethod
    def _to_domain(model: PayoutModel) -> PayoutRequest:
        return PayoutRequest(
            id=model.id,
            store_id=model.store_id,
            amount_cents=model.amount_cents,
            method=PayoutMethod(model.method),
            account_details=model.account_details,
            status=PayoutStatus(model.status),
            requested_at=model.requested_at,
            notes=model.notes,
            processed_at=model.processed_at,
            processed_by=model.processed_by,
            admin_notes=model.admin_notes,
            completed_at=model.completed_at,
        )

    @staticmethod
    def _to_event(model: PayoutStatusEventModel) -> PayoutStatusEvent:
        return PayoutStatusEvent(
            sequence=model.sequence,
            status=PayoutStatus(model.status),
            note=model.note,
            actor_id=model.actor_id,
            created_at=model.created_at,
        )
