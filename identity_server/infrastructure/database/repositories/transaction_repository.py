"""SQLAlchemy implementation of the transaction store."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.exceptions import DuplicateSignature
from identity_server.db.models import LedgerTransaction
from identity_server.modules.transactions.models import (
    BreakdownRow,
    DailyVolume,
    NewTransaction,
    TransactionRecord,
    TransactionTotals,
)
from identity_server.modules.transactions.repository import TransactionRepository

BREAKDOWN_COLUMNS = {"category", "status"}


class SqlTransactionRepository(TransactionRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_signature(self, signature: str) -> TransactionRecord | None:
        stmt = (
            select(LedgerTransaction)
            .where(LedgerTransaction.signature == signature)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def insert(self, transaction: NewTransaction) -> TransactionRecord:
        model = LedgerTransaction(
            signature=transaction.signature,
            wallet_key=transaction.wallet_key,
            category=transaction.category,
            amount=transaction.amount,
            fee=transaction.fee,
            token_mint=transaction.token_mint,
            block_time=transaction.block_time,
            slot=transaction.slot,
            status=transaction.status,
            meta=json.dumps(transaction.metadata) if transaction.metadata else None,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateSignature(transaction.signature) from exc
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_status(self, signature: str, status: str) -> bool:
        stmt = (
            update(LedgerTransaction)
            .where(LedgerTransaction.signature == signature, LedgerTransaction.status != status)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def list_for_wallet(
        self,
        wallet_key: str,
        *,
        limit: int | None,
        offset: int = 0,
        category: str | None = None,
        status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> tuple[Sequence[TransactionRecord], int]:
        filters = self._filters(wallet_key, start, end)
        if category:
            filters.append(LedgerTransaction.category == category)
        if status:
            filters.append(LedgerTransaction.status == status)

        count_stmt = select(func.count(LedgerTransaction.id)).where(*filters)
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt = (
            select(LedgerTransaction)
            .where(*filters)
            .order_by(desc(LedgerTransaction.block_time), desc(LedgerTransaction.slot))
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()], int(total)

    async def totals(self, wallet_key: str, start: datetime | None = None, end: datetime | None = None) -> TransactionTotals:
        stmt = select(
            func.count(LedgerTransaction.id),
            func.coalesce(func.sum(LedgerTransaction.amount), 0.0),
            func.coalesce(func.sum(LedgerTransaction.fee), 0.0),
            func.coalesce(func.avg(LedgerTransaction.amount), 0.0),
            func.coalesce(func.avg(LedgerTransaction.fee), 0.0),
        ).where(*self._filters(wallet_key, start, end))
        count, total_amount, total_fees, avg_amount, avg_fee = (await self._session.execute(stmt)).one()
        return TransactionTotals(
            total_transactions=int(count),
            total_amount=float(total_amount),
            total_fees=float(total_fees),
            avg_amount=float(avg_amount),
            avg_fee=float(avg_fee),
        )

    async def breakdown(
        self,
        wallet_key: str,
        column: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BreakdownRow]:
        if column not in BREAKDOWN_COLUMNS:
            raise ValueError(f"Cannot group transactions by {column!r}")
        group_col = getattr(LedgerTransaction, column)
        stmt = (
            select(
                group_col,
                func.count(LedgerTransaction.id),
                func.coalesce(func.sum(LedgerTransaction.amount), 0.0),
            )
            .where(*self._filters(wallet_key, start, end))
            .group_by(group_col)
            .order_by(group_col)
        )
        result = await self._session.execute(stmt)
        return [BreakdownRow(key=key, count=int(count), total_amount=float(amount)) for key, count, amount in result.all()]

    async def count_since(self, wallet_key: str, since: datetime) -> int:
        stmt = select(func.count(LedgerTransaction.id)).where(*self._filters(wallet_key, since, None))
        return int((await self._session.execute(stmt)).scalar_one())

    async def daily_volume(self, wallet_key: str, since: datetime) -> list[DailyVolume]:
        day = func.date(LedgerTransaction.block_time).label("day")
        stmt = (
            select(
                day,
                func.count(LedgerTransaction.id),
                func.coalesce(func.sum(LedgerTransaction.amount), 0.0),
                func.coalesce(func.sum(LedgerTransaction.fee), 0.0),
            )
            .where(*self._filters(wallet_key, since, None))
            .group_by(day)
            .order_by(day)
        )
        result = await self._session.execute(stmt)
        return [
            DailyVolume(date=str(row_day), count=int(count), volume=float(volume), fees=float(fees))
            for row_day, count, volume, fees in result.all()
        ]

    @staticmethod
    def _filters(wallet_key: str, start: datetime | None, end: datetime | None) -> list[Any]:
        filters: list[Any] = [LedgerTransaction.wallet_key == wallet_key]
        if start is not None:
            filters.append(LedgerTransaction.block_time >= start)
        if end is not None:
            filters.append(LedgerTransaction.block_time <= end)
        return filters

    @staticmethod
    def _to_domain(model: LedgerTransaction | None) -> TransactionRecord | None:
        if model is None:
            return None
        return TransactionRecord(
            id=model.id,
            signature=model.signature,
            wallet_key=model.wallet_key,
            category=model.category,
            amount=model.amount,
            fee=model.fee,
            block_time=model.block_time,
            slot=model.slot,
            status=model.status,
            token_mint=model.token_mint,
            metadata=json.loads(model.meta) if model.meta else {},
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
