"""Payment provider callbacks.

The provider retries deliveries, so each ``(invoice id, status)`` pair is
handled at most once; the idempotency record commits together with the ledger
change it triggered.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.config import get_settings
from tindago_ledger.infrastructure.database.repositories.webhook_repository import SqlWebhookRepository
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.schemas import PaymentWebhookPayload, WebhookAck
from tindago_ledger.modules.common.exceptions import InvalidTransitionError
from tindago_ledger.modules.ledger import LedgerEntryNotFoundError, LedgerService, LedgerStatus

logger = logging.getLogger(__name__)

router = APIRouter()


def _verify_token(token: Optional[str]) -> None:
    expected = get_settings().webhooks.callback_token
    if not expected or token != expected:
        logger.warning("Payment callback rejected: invalid callback token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid callback token")


@router.post("/payments", response_model=WebhookAck, summary="Payment status callback")
async def payment_callback(
    payload: PaymentWebhookPayload,
    x_callback_token: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> WebhookAck:
    _verify_token(x_callback_token)

    provider_status = payload.status.upper()
    event_id = f"{payload.id}:{provider_status}"
    if not await SqlWebhookRepository(db).claim(event_id, provider_status):
        logger.info("Payment callback %s already processed", event_id)
        return WebhookAck(idempotent=True, action="duplicate")

    ledger = LedgerService.with_session(db)
    try:
        if provider_status == LedgerStatus.SETTLED.value:
            entry = await ledger.get_entry(payload.id)
            if entry.status is LedgerStatus.PAID:
                await ledger.mark_settled(payload.id)
                action = "settled"
            else:
                await ledger.mark_paid(payload.id, paid_at=payload.paid_at, status=LedgerStatus.SETTLED)
                action = "credited"
        elif provider_status == LedgerStatus.PAID.value:
            await ledger.mark_paid(payload.id, paid_at=payload.paid_at)
            action = "credited"
        elif provider_status == LedgerStatus.REFUNDED.value:
            await ledger.mark_refunded(payload.id, payload.failure_reason or "Refunded by payment provider")
            action = "refunded"
        else:
            logger.info("Payment callback for %s with status %s needs no ledger change", payload.id, provider_status)
            action = "ignored"
    except LedgerEntryNotFoundError:
        # not recorded, so a redelivery after the entry exists is still applied
        await db.rollback()
        logger.warning("Payment callback for unknown ledger entry %s (%s)", payload.id, provider_status)
        return WebhookAck(action="unknown-entry")
    except InvalidTransitionError as exc:
        # not recorded either; an out-of-order event applies on redelivery
        await db.rollback()
        logger.warning("Payment callback %s left the ledger unchanged: %s", event_id, exc)
        return WebhookAck(action="skipped")

    await db.commit()
    logger.info("Payment callback %s processed: %s", event_id, action)
    return WebhookAck(action=action)
