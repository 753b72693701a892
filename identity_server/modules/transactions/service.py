"""Read projections over the transaction store."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.cache import CacheService, cache_key
from identity_server.core.exceptions import TransactionNotFound

from .models import DailyVolume, Pagination, TransactionPage, TransactionRecord, TransactionStats
from .repository import TransactionRepository

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
EXPORT_HEADER = ["Signature", "Type", "Amount", "Fee", "Status", "Date"]


@dataclass(slots=True)
class TransactionQueryService:
    repository: TransactionRepository
    cache: CacheService
    stats_ttl: float = 60

    @classmethod
    def with_session(cls, session: AsyncSession, cache: CacheService, stats_ttl: float = 60) -> "TransactionQueryService":
        from identity_server.infrastructure.database.repositories import SqlTransactionRepository

        return cls(SqlTransactionRepository(session), cache, stats_ttl)

    async def list_transactions(
        self,
        wallet_key: str,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        category: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> TransactionPage:
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_SIZE)
        items, total = await self.repository.list_for_wallet(
            wallet_key,
            limit=limit,
            offset=(page - 1) * limit,
            category=category,
            status=status,
            start=start,
            end=end,
        )
        return TransactionPage(items=list(items), pagination=Pagination.build(page, limit, total))

    async def get_by_signature(self, signature: str) -> TransactionRecord:
        record = await self.repository.get_by_signature(signature)
        if record is None:
            raise TransactionNotFound(signature=signature)
        return record

    async def recent(self, wallet_key: str, limit: int = 10) -> list[TransactionRecord]:
        items, _ = await self.repository.list_for_wallet(wallet_key, limit=limit)
        return list(items)

    async def stats(
        self,
        wallet_key: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> TransactionStats:
        key = cache_key("transactions", wallet_key, "stats", _iso(start), _iso(end))
        return await self.cache.get_or_compute(key, self.stats_ttl, lambda: self._stats(wallet_key, start, end, now))

    async def _stats(
        self,
        wallet_key: str,
        start: Optional[datetime],
        end: Optional[datetime],
        now: Optional[datetime],
    ) -> TransactionStats:
        now = now or datetime.now(timezone.utc)
        return TransactionStats(
            totals=await self.repository.totals(wallet_key, start, end),
            by_category=await self.repository.breakdown(wallet_key, "category", start, end),
            by_status=await self.repository.breakdown(wallet_key, "status", start, end),
            last_7_days=await self.repository.count_since(wallet_key, now - timedelta(days=7)),
        )

    async def daily_volume(self, wallet_key: str, days: int = 30, now: Optional[datetime] = None) -> list[DailyVolume]:
        now = now or datetime.now(timezone.utc)
        key = cache_key("transactions", wallet_key, "daily", days)
        return await self.cache.get_or_compute(
            key,
            self.stats_ttl,
            lambda: self.repository.daily_volume(wallet_key, now - timedelta(days=days)),
        )

    async def export_csv(
        self,
        wallet_key: str,
        *,
        category: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> str:
        items, _ = await self.repository.list_for_wallet(
            wallet_key, limit=None, category=category, start=start, end=end
        )
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(EXPORT_HEADER)
        for tx in items:
            writer.writerow([tx.signature, tx.category, tx.amount, tx.fee, tx.status, tx.block_time.isoformat()])
        return buffer.getvalue()


def _iso(value: Optional[datetime]) -> str:
    return value.isoformat() if value else "-"


__all__ = ["TransactionQueryService", "DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE"]
