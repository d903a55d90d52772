"""Administrative endpoints for the store ledger."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.security import get_current_admin
from tindago_ledger.interfaces.http.deps import get_db_session
from tindago_ledger.interfaces.http.errors import to_http_exception
from tindago_ledger.interfaces.http.schemas import (
    AdjustmentCreate,
    AdjustmentListResponse,
    AdjustmentResponse,
    LedgerEntryCreate,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    LedgerSummaryResponse,
    MarkPaidRequest,
    RefundRequest,
    ReplaceInvoiceRequest,
    TokenData,
)
from tindago_ledger.modules.common.exceptions import FinanceError
from tindago_ledger.modules.ledger import LedgerService

router = APIRouter()


@router.get("", response_model=LedgerEntryListResponse, summary="List ledger entries")
async def list_entries(
    store_id: Optional[str] = None,
    status_filter: Optional[str] = Query(default=None, alias="status"),
    limit: int = 50,
    offset: int = 0,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryListResponse:
    service = LedgerService.with_session(db)
    entries = await service.list_entries(store_id=store_id, status=status_filter, limit=limit, offset=offset)
    return LedgerEntryListResponse(entries=[LedgerEntryResponse.model_validate(entry) for entry in entries])


@router.get("/summary", response_model=LedgerSummaryResponse, summary="Totals across ledger entries")
async def summarize_entries(
    store_id: Optional[str] = None,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerSummaryResponse:
    service = LedgerService.with_session(db)
    summary = await service.summarize(store_id)
    return LedgerSummaryResponse.model_validate(summary)


@router.post(
    "",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an invoiced order payment",
)
async def record_transaction(
    payload: LedgerEntryCreate,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.record_transaction(
            store_id=payload.store_id,
            amount_cents=payload.amount_cents,
            method=payload.method,
            rate=payload.rate,
            order_number=payload.order_number,
            entry_id=payload.entry_id,
        )
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return LedgerEntryResponse.model_validate(entry)


@router.get("/{entry_id}", response_model=LedgerEntryResponse, summary="Ledger entry detail")
async def get_entry(
    entry_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.get_entry(entry_id)
    except FinanceError as exc:
        raise to_http_exception(exc) from exc
    return LedgerEntryResponse.model_validate(entry)


@router.post("/{entry_id}/paid", response_model=LedgerEntryResponse, summary="Confirm payment of an entry")
async def mark_paid(
    entry_id: str,
    payload: MarkPaidRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.mark_paid(entry_id, paid_at=payload.paid_at, status=payload.status)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return LedgerEntryResponse.model_validate(entry)


@router.post("/{entry_id}/settle", response_model=LedgerEntryResponse, summary="Mark a paid entry settled")
async def mark_settled(
    entry_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.mark_settled(entry_id)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return LedgerEntryResponse.model_validate(entry)


@router.post("/{entry_id}/refund", response_model=LedgerEntryResponse, summary="Flag an entry as refunded")
async def mark_refunded(
    entry_id: str,
    payload: RefundRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.mark_refunded(entry_id, payload.reason)
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return LedgerEntryResponse.model_validate(entry)


@router.post(
    "/{entry_id}/replace-invoice",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Void a pending entry and issue a replacement",
)
async def replace_invoice(
    entry_id: str,
    payload: ReplaceInvoiceRequest,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryResponse:
    service = LedgerService.with_session(db)
    try:
        entry = await service.replace_invoice(
            entry_id,
            new_rate=payload.new_rate,
            new_fee_cents=payload.new_fee_cents,
            new_entry_id=payload.new_entry_id,
        )
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return LedgerEntryResponse.model_validate(entry)


@router.post(
    "/{entry_id}/adjustment",
    response_model=AdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply a signed correction to a confirmed entry",
)
async def record_adjustment(
    entry_id: str,
    payload: AdjustmentCreate,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdjustmentResponse:
    service = LedgerService.with_session(db)
    try:
        adjustment = await service.record_adjustment(
            entry_id, payload.delta_cents, payload.reason, actor_id=admin.actor_id
        )
    except FinanceError as exc:
        await db.rollback()
        raise to_http_exception(exc) from exc
    await db.commit()
    return AdjustmentResponse.model_validate(adjustment)


@router.get("/{entry_id}/adjustments", response_model=AdjustmentListResponse, summary="Adjustments on an entry")
async def list_adjustments(
    entry_id: str,
    admin: TokenData = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> AdjustmentListResponse:
    service = LedgerService.with_session(db)
    try:
        await service.get_entry(entry_id)
    except FinanceError as exc:
        raise to_http_exception(exc) from exc
    adjustments = await service.list_adjustments(entry_id)
    return AdjustmentListResponse(
        adjustments=[AdjustmentResponse.model_validate(adjustment) for adjustment in adjustments]
    )
