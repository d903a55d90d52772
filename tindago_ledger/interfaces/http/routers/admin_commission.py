"""Administrative endpoints for commission rates."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.security import get_current_admin
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.errors import to_http_exception
from tindago_ledger.interfaces.http.schemas import (
    CommissionRateResponse,
    CommissionRateUpdate,
    SuccessResponse,
    TokenData,
)
from tindago_ledger.modules.commission import CommissionResolver
from tindago_ledger.modules.common.exceptions import FinanceError

router = APIRouter()


@router.get("", response_model=CommissionRateResponse, summary="Current global commission rate")
async def get_global_rate(
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CommissionRateResponse:
    resolver = CommissionResolver.with_session(db)
    detail = await resolver.get_rate_detail()
    await db.commit()
    return CommissionRateResponse.model_validate(detail)


@router.put("", response_model=CommissionRateResponse, summary="Set the global commission rate")
async def set_global_rate(
    payload: CommissionRateUpdate,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CommissionRateResponse:
    resolver = CommissionResolver.with_session(db)
    try:
        detail = await resolver.set_global_rate(payload.rate)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    resolver.invalidate_cache()
    return CommissionRateResponse.model_validate(detail)


@router.get("/stores/{store_id}", response_model=CommissionRateResponse, summary="Effective rate for a store")
async def get_store_rate(
    store_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CommissionRateResponse:
    resolver = CommissionResolver.with_session(db)
    detail = await resolver.get_rate_detail(store_id)
    await db.commit()
    return CommissionRateResponse.model_validate(detail)


@router.put("/stores/{store_id}", response_model=CommissionRateResponse, summary="Override a store's rate")
async def set_store_rate(
    store_id: str,
    payload: CommissionRateUpdate,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CommissionRateResponse:
    resolver = CommissionResolver.with_session(db)
    try:
        detail = await resolver.set_store_rate(store_id, payload.rate)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return CommissionRateResponse.model_validate(detail)


@router.delete("/stores/{store_id}", response_model=SuccessResponse, summary="Remove a store override")
async def clear_store_rate(
    store_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    resolver = CommissionResolver.with_session(db)
    removed = await resolver.clear_store_rate(store_id)
    await db.commit()
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"store {store_id} has no override")
    return SuccessResponse(message=f"Commission override for {store_id} removed")
