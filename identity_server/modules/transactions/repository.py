"""Repository protocol for the transaction store."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from .models import BreakdownRow, DailyVolume, NewTransaction, TransactionRecord, TransactionTotals


class TransactionRepository(Protocol):
    async def get_by_signature(self, signature: str) -> TransactionRecord | None:
        ...

    async def insert(self, transaction: NewTransaction) -> TransactionRecord:
        """Insert a new row; raises ``DuplicateSignature`` when the signature exists."""
        ...

    async def update_status(self, signature: str, status: str) -> bool:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...

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
        ...

    async def totals(self, wallet_key: str, start: datetime | None = None, end: datetime | None = None) -> TransactionTotals:
        ...

    async def breakdown(
        self,
        wallet_key: str,
        column: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BreakdownRow]:
        ...

    async def count_since(self, wallet_key: str, since: datetime) -> int:
        ...

    async def daily_volume(self, wallet_key: str, since: datetime) -> list[DailyVolume]:
        ...
