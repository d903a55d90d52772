"""Administrative endpoints for store wallets."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.config import get_settings
from tindago_ledger.core.security import get_current_admin
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.schemas import (
    ReconciliationResponse,
    TokenData,
    WalletBalanceResponse,
    WalletReplayResponse,
    WalletTransactionListResponse,
    WalletTransactionResponse,
)
from tindago_ledger.modules.wallets import WalletService

router = APIRouter()


@router.get("/{store_id}", response_model=WalletBalanceResponse, summary="Store wallet balance")
async def get_wallet(
    store_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletBalanceResponse:
    service = WalletService.with_session(db)
    balance = await service.get_balance(store_id)
    return WalletBalanceResponse(
        store_id=balance.store_id,
        available_cents=balance.available_cents,
        pending_cents=balance.pending_cents,
        total_cents=balance.total_cents,
        currency=get_settings().currency,
        updated_at=balance.updated_at,
    )


@router.get(
    "/{store_id}/transactions",
    response_model=WalletTransactionListResponse,
    summary="Store wallet transaction log",
)
async def list_wallet_transactions(
    store_id: str,
    limit: int = 50,
    offset: int = 0,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletTransactionListResponse:
    service = WalletService.with_session(db)
    transactions = await service.list_transactions(store_id, limit=limit, offset=offset)
    return WalletTransactionListResponse(
        transactions=[WalletTransactionResponse.model_validate(tx) for tx in transactions]
    )


@router.get("/{store_id}/replay", response_model=WalletReplayResponse, summary="Compare balance with its transactions")
async def replay_wallet(
    store_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> WalletReplayResponse:
    service = WalletService.with_session(db)
    balance = await service.get_balance(store_id)
    replayed = await service.replay_balance(store_id)
    return WalletReplayResponse(
        store_id=store_id,
        stored_available_cents=balance.available_cents,
        replayed_available_cents=replayed,
        consistent=replayed == balance.available_cents,
    )


@router.post(
    "/{store_id}/reconcile",
    response_model=ReconciliationResponse,
    summary="Rebuild the wallet balance from the ledger",
)
async def reconcile_wallet(
    store_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ReconciliationResponse:
    service = WalletService.with_session(db)
    result = await service.reconcile_from_ledger(store_id)
    await db.commit()
    return ReconciliationResponse.model_validate(result, from_attributes=True)
