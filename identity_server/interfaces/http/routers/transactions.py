"""Queries over the caller's reconciled transactions."""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from identity_server.core.exceptions import TransactionNotFound
from identity_server.interfaces.http.deps import get_current_wallet, get_transaction_query_service
from identity_server.modules.transactions import TransactionCategory, TransactionQueryService, TransactionStatus
from identity_server.modules.transactions.service import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from identity_server.schemas import (
    DailyVolumeResponse,
    Envelope,
    PaginationResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionStatsResponse,
)

router = APIRouter()


@router.get("", response_model=Envelope[TransactionListResponse], summary="List stored transactions")
async def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    category: Optional[TransactionCategory] = None,
    status: Optional[TransactionStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    wallet_key: str = Depends(get_current_wallet),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[TransactionListResponse]:
    result = await transactions.list_transactions(
        wallet_key,
        page=page,
        limit=limit,
        category=category.value if category else None,
        status=status.value if status else None,
        start=start_date,
        end=end_date,
    )
    return Envelope[TransactionListResponse](
        data=TransactionListResponse(
            transactions=[TransactionResponse.model_validate(tx) for tx in result.items],
            pagination=PaginationResponse.model_validate(result.pagination),
        )
    )


@router.get("/stats", response_model=Envelope[TransactionStatsResponse], summary="Transaction statistics")
async def transaction_stats(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    wallet_key: str = Depends(get_current_wallet),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[TransactionStatsResponse]:
    stats = await transactions.stats(wallet_key, start_date, end_date)
    return Envelope[TransactionStatsResponse](data=TransactionStatsResponse.model_validate(stats))


@router.get("/daily-volume", response_model=Envelope[list[DailyVolumeResponse]], summary="Per-day volume")
async def daily_volume(
    days: int = Query(30, ge=1, le=365),
    wallet_key: str = Depends(get_current_wallet),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[list[DailyVolumeResponse]]:
    rows = await transactions.daily_volume(wallet_key, days)
    return Envelope[list[DailyVolumeResponse]](data=[DailyVolumeResponse.model_validate(row) for row in rows])


@router.get("/export", summary="Export transactions as CSV")
async def export_transactions(
    category: Optional[TransactionCategory] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    wallet_key: str = Depends(get_current_wallet),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Response:
    content = await transactions.export_csv(
        wallet_key,
        category=category.value if category else None,
        start=start_date,
        end=end_date,
    )
    filename = f"transactions-{wallet_key}-{datetime.now():%Y%m%d}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{signature}", response_model=Envelope[TransactionResponse], summary="Single stored transaction")
async def get_transaction(
    signature: str,
    wallet_key: str = Depends(get_current_wallet),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[TransactionResponse]:
    record = await transactions.get_by_signature(signature)
    if record.wallet_key != wallet_key:
        raise TransactionNotFound(signature=signature)
    return Envelope[TransactionResponse](data=TransactionResponse.model_validate(record))
