"""Reusable FastAPI dependencies."""

from .auth import get_current_identity, get_current_wallet
from .container import get_app_settings, get_cache, get_container, get_ledger
from .database import get_db_session
from .services import (
    get_challenge_service,
    get_ledger_service,
    get_profile_service,
    get_reconciliation_service,
    get_session_service,
    get_transaction_query_service,
)

__all__ = [
    "get_app_settings",
    "get_cache",
    "get_challenge_service",
    "get_container",
    "get_current_identity",
    "get_current_wallet",
    "get_db_session",
    "get_ledger",
    "get_ledger_service",
    "get_profile_service",
    "get_reconciliation_service",
    "get_session_service",
    "get_transaction_query_service",
]
