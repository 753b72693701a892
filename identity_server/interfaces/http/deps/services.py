"""Service providers bound to the request's database session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.container import ApplicationContainer
from identity_server.modules.identities import ChallengeService, ProfileService
from identity_server.modules.ledger import LedgerService
from identity_server.modules.sessions import SessionService
from identity_server.modules.transactions import ReconciliationService, TransactionQueryService

from .container import get_container
from .database import get_db_session


def get_challenge_service(db: AsyncSession = Depends(get_db_session)) -> ChallengeService:
    return ChallengeService.with_session(db)


def get_profile_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> ProfileService:
    return ProfileService.with_session(db, container.cache, container.settings.cache.profile_ttl)


def get_session_service(container: ApplicationContainer = Depends(get_container)) -> SessionService:
    return SessionService(container.settings)


def get_ledger_service(container: ApplicationContainer = Depends(get_container)) -> LedgerService:
    return LedgerService(container.ledger, container.cache, container.settings.cache)


def get_reconciliation_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> ReconciliationService:
    return ReconciliationService.with_session(db, container.ledger, container.cache)


def get_transaction_query_service(
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_container),
) -> TransactionQueryService:
    return TransactionQueryService.with_session(db, container.cache, container.settings.cache.transactions_ttl)


__all__ = [
    "get_challenge_service",
    "get_profile_service",
    "get_session_service",
    "get_ledger_service",
    "get_reconciliation_service",
    "get_transaction_query_service",
]
