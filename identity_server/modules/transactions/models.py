"""Domain models for reconciled ledger transactions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class TransactionStatus(str, Enum):
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    FAILED = "failed"


class TransactionCategory(str, Enum):
    SEND = "send"
    RECEIVE = "receive"
    SWAP = "swap"
    NFT_MINT = "nft_mint"
    NFT_TRANSFER = "nft_transfer"
    STAKE = "stake"
    UNSTAKE = "unstake"
    OTHER = "other"


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


@dataclass(slots=True)
class TransactionRecord:
    id: str
    signature: str
    wallet_key: str
    category: str
    amount: float
    fee: float
    block_time: datetime
    slot: int
    status: str
    token_mint: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class NewTransaction:
    signature: str
    wallet_key: str
    block_time: datetime
    slot: int
    status: str
    fee: float
    amount: float = 0.0
    category: str = TransactionCategory.OTHER.value
    token_mint: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SyncResult:
    fetched: int = 0
    created: int = 0
    updated: int = 0


@dataclass(slots=True)
class Pagination:
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


@dataclass(slots=True)
class TransactionPage:
    items: list[TransactionRecord]
    pagination: Pagination


@dataclass(slots=True)
class TransactionTotals:
    total_transactions: int = 0
    total_amount: float = 0.0
    total_fees: float = 0.0
    avg_amount: float = 0.0
    avg_fee: float = 0.0


@dataclass(slots=True)
class BreakdownRow:
    key: str
    count: int
    total_amount: float = 0.0


@dataclass(slots=True)
class TransactionStats:
    totals: TransactionTotals
    by_category: list[BreakdownRow]
    by_status: list[BreakdownRow]
    last_7_days: int


@dataclass(slots=True)
class DailyVolume:
    date: str
    count: int
    volume: float
    fees: float
