"""Administrative endpoints for the payout workflow."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.security import get_current_admin
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.errors import to_http_exception
from tindago_ledger.interfaces.http.schemas import (
    BulkApprovalFailureResponse,
    BulkApprovalResponse,
    BulkApproveRequest,
    PayoutHistoryResponse,
    PayoutListResponse,
    PayoutRejectRequest,
    PayoutResponse,
    PayoutReviewRequest,
    PayoutStatsResponse,
    PayoutStatusEventResponse,
    TokenData,
)
from tindago_ledger.modules.common.exceptions import FinanceError
from tindago_ledger.modules.payouts import PayoutService

router = APIRouter()


@router.get("", response_model=PayoutListResponse, summary="List payout requests")
async def list_payouts(
    store_id: Optional[str] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = 50,
    offset: int = 0,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutListResponse:
    service = PayoutService.with_session(db)
    payouts = await service.list_payouts(store_id=store_id, status=status_filter, limit=limit, offset=offset)
    return PayoutListResponse(payouts=[PayoutResponse.model_validate(payout) for payout in payouts])


@router.get("/stats", response_model=PayoutStatsResponse, summary="Payout counts and amounts by status")
async def payout_stats(
    store_id: Optional[str] = None,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutStatsResponse:
    service = PayoutService.with_session(db)
    return PayoutStatsResponse.model_validate(await service.stats(store_id))


@router.post("/bulk-approve", response_model=BulkApprovalResponse, summary="Approve several payouts")
async def bulk_approve(
    payload: BulkApproveRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> BulkApprovalResponse:
    service = PayoutService.with_session(db)
    result = await service.bulk_approve(payload.payout_ids, admin.actor_id, payload.notes)
    await db.commit()
    return BulkApprovalResponse(
        succeeded=result.succeeded,
        failed=[BulkApprovalFailureResponse.model_validate(failure) for failure in result.failed],
    )


@router.get("/{payout_id}", response_model=PayoutResponse, summary="Payout request detail")
async def get_payout(
    payout_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutResponse:
    service = PayoutService.with_session(db)
    try:
        payout = await service.get(payout_id)
    except FinanceError as exc:
        raise to_http_exception(exc) from exc
    return PayoutResponse.model_validate(payout)


@router.get("/{payout_id}/history", response_model=PayoutHistoryResponse, summary="Payout status history")
async def payout_history(
    payout_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutHistoryResponse:
    service = PayoutService.with_session(db)
    try:
        events = await service.history(payout_id)
    except FinanceError as exc:
        raise to_http_exception(exc) from exc
    return PayoutHistoryResponse(
        payout_id=payout_id,
        events=[PayoutStatusEventResponse.model_validate(event) for event in events],
    )


@router.post("/{payout_id}/approve", response_model=PayoutResponse, summary="Approve and debit the wallet")
async def approve_payout(
    payout_id: str,
    payload: PayoutReviewRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutResponse:
    service = PayoutService.with_session(db)
    try:
        payout = await service.approve(payout_id, admin.actor_id, payload.notes)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return PayoutResponse.model_validate(payout)


@router.post("/{payout_id}/reject", response_model=PayoutResponse, summary="Reject a pending payout")
async def reject_payout(
    payout_id: str,
    payload: PayoutRejectRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutResponse:
    service = PayoutService.with_session(db)
    try:
        payout = await service.reject(payout_id, admin.actor_id, payload.reason)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return PayoutResponse.model_validate(payout)


@router.post("/{payout_id}/complete", response_model=PayoutResponse, summary="Confirm the transfer was sent")
async def complete_payout(
    payout_id: str,
    payload: PayoutReviewRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> PayoutResponse:
    service = PayoutService.with_session(db)
    try:
        payout = await service.complete(payout_id, admin.actor_id, payload.notes)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return PayoutResponse.model_validate(payout)
