"""Transaction store models, reconciliation and read services."""

from .models import (
    DailyVolume,
    NewTransaction,
    Pagination,
    SyncResult,
    TransactionCategory,
    TransactionPage,
    TransactionRecord,
    TransactionStats,
    TransactionStatus,
    UpsertOutcome,
)
from .repository import TransactionRepository
from .service import TransactionQueryService
from .sync import ReconciliationService, derive_status

__all__ = [
    "DailyVolume",
    "NewTransaction",
    "Pagination",
    "ReconciliationService",
    "SyncResult",
    "TransactionCategory",
    "TransactionPage",
    "TransactionQueryService",
    "TransactionRecord",
    "TransactionRepository",
    "TransactionStats",
    "TransactionStatus",
    "UpsertOutcome",
    "derive_status",
]
