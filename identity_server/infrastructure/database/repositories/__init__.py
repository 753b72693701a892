"""SQLAlchemy-backed repository implementations."""

from .identity_repository import SqlIdentityRepository
from .transaction_repository import SqlTransactionRepository

__all__ = [
    "SqlIdentityRepository",
    "SqlTransactionRepository",
]
