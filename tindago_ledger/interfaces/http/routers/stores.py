"""Store-facing endpoints: own wallet and own payout requests."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.config import get_settings
from tindago_ledger.core.security import ensure_store_access, get_current_actor
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.errors import to_http_exception
from tindago_ledger.interfaces.http.schemas import (
    PayoutCreate,
    PayoutHistoryResponse,
    PayoutListResponse,
    PayoutResponse,
    PayoutStatusEventResponse,
    TokenData,
    WalletBalanceResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)
from tindago_ledger.modules.common.exceptions import FinanceError
from tindago_ledger.modules.payouts import PayoutCreateInput, PayoutService
from tindago_ledger.modules.wallets import WalletService

router = APIRouter()


@router.get("/{store_id}/wallet", response_model=WalletBalanceResponse, summary="Own wallet balance")
async def get_wallet(
    store_id: str,
    actor: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> WalletBalanceResponse:
    ensure_store_access(actor, store_id)
    balance = await WalletService.with_session(db).get_balance(store_id)
    return WalletBalanceResponse(
        store_id=balance.store_id,
        available_cents=balance.available_cents,
        pending_cents=balance.pending_cents,
        total_cents=balance.total_cents,
        currency=get_settings().currency,
        updated_at=balance.updated_at,
    )


@router.get(
    "/{store_id}/wallet/transactions",
    response_model=WalletTransactionListResponse,
    summary="Own wallet transaction log",
)
async def list_wallet_transactions(
    store_id: str,
    limit: int = 50,
    offset: int = 0,
    actor: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTransactionListResponse:
    ensure_store_access(actor, store_id)
    transactions = await WalletService.with_session(db).list_transactions(store_id, limit=limit, offset=offset)
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(tx) for tx in transactions]
    )


@router.get("/{store_id}/payouts", response_model=PayoutListResponse, summary="Own payout requests")
async def list_payouts(
    store_id: str,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = 50,
    offset: int = 0,
    actor: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutListResponse:
    ensure_store_access(actor, store_id)
    service = PayoutService.with_session(db)
    payouts = await service.list_payouts(store_id=store_id, status=status_filter, limit=limit, offset=offset)
    return PayoutListResponse(payouts=[PayoutResponse.model_validate(payout) for payout in payouts])


@router.post(
    "/{store_id}/payouts",
    response_model=PayoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a payout",
)
async def request_payout(
    store_id: str,
    payload: PayoutCreate,
    actor: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutResponse:
    ensure_store_access(actor, store_id)
    service = PayoutService.with_session(db)
    try:
        payout = await service.create(
            PayoutCreateInput(
                store_id=store_id,
                amount_cents=payload.amount_cents,
                method=payload.method,
                account_details=payload.account_details,
                notes=payload.notes,
                actor_id=actor.actor_id,
            )
        )
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return PayoutResponse.model_validate(payout)


@router.get(
    "/{store_id}/payouts/{payout_id}/history",
    response_model=PayoutHistoryResponse,
    summary="Status history of an own payout",
)
async def payout_history(
    store_id: str,
    payout_id: str,
    actor: TokenData = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutHistoryResponse:
    ensure_store_access(actor, store_id)
    service = PayoutService.with_session(db)
    try:
        payout = await service.get(payout_id)
        if payout.store_id != store_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"payout {payout_id}: no such payout request")
        events = await service.history(payout_id)
    except FinanceError as exc:
        raise to_http_exception(exc) from exc
    return PayoutHistoryResponse(
        payout_id=payout_id,
        events=[PayoutStatusEventResponse.model_validate(event) for event in events],
    )
