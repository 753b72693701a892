"""Reconciliation of on-chain history into the transaction store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.cache import CacheService
from identity_server.core.crypto import canonical_wallet_key
from identity_server.core.exceptions import DuplicateSignature, LedgerUnavailable
from identity_server.modules.identities.repository import IdentityRepository
from identity_server.modules.ledger.gateway import LedgerGateway
from identity_server.modules.ledger.models import TransactionDetail, TransactionSummary, lamports_to_sol

from .models import NewTransaction, SyncResult, TransactionCategory, TransactionStatus, UpsertOutcome
from .repository import TransactionRepository

logger = logging.getLogger(__name__)

DEFAULT_SYNC_LIMIT = 50


def derive_status(summary: TransactionSummary, detail: TransactionDetail) -> str:
    if summary.err is not None or detail.err is not None:
        return TransactionStatus.FAILED.value
    if summary.confirmation_status == TransactionStatus.FINALIZED.value:
        return TransactionStatus.FINALIZED.value
    return TransactionStatus.CONFIRMED.value


def _block_time(summary: TransactionSummary, detail: TransactionDetail) -> datetime:
    timestamp = summary.block_time if summary.block_time is not None else detail.block_time
    if timestamp is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


@dataclass(slots=True)
class ReconciliationService:
    """Merges recent ledger transactions for a wallet into local storage.

    Every upsert is committed on its own, so an interrupted run leaves the
    store valid. Identity aggregates are recomputed from the stored rows at
    the end of each run rather than incremented.
    """

    transactions: TransactionRepository
    identities: IdentityRepository
    gateway: LedgerGateway
    cache: CacheService | None = None

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        gateway: LedgerGateway,
        cache: CacheService | None = None,
    ) -> "ReconciliationService":
        from identity_server.infrastructure.database.repositories import SqlIdentityRepository, SqlTransactionRepository

        return cls(SqlTransactionRepository(session), SqlIdentityRepository(session), gateway, cache)

    async def sync(self, wallet_key: str, limit: int = DEFAULT_SYNC_LIMIT) -> SyncResult:
        wallet_key = canonical_wallet_key(wallet_key)
        await self.identities.get_or_create(wallet_key)
        await self.transactions.commit()

        summaries = await self.gateway.get_recent_transaction_summaries(wallet_key, limit)
        result = SyncResult()
        try:
            for summary in summaries:
                try:
                    detail = await self.gateway.get_transaction_detail(summary.signature)
                except LedgerUnavailable as exc:
                    logger.warning("Skipping transaction %s: %s", summary.signature, exc.message)
                    continue
                except Exception as exc:
                    logger.warning("Skipping transaction %s: %r", summary.signature, exc)
                    continue
                if detail is None:
                    logger.warning("Skipping transaction %s: not found on ledger", summary.signature)
                    continue

                result.fetched += 1
                outcome = await self._upsert(wallet_key, summary, detail)
                if outcome is UpsertOutcome.CREATED:
                    result.created += 1
                elif outcome is UpsertOutcome.UPDATED:
                    result.updated += 1
        finally:
            # Rows committed before an abort still count.
            await self.transactions.rollback()
            await self.refresh_aggregates(wallet_key)
            if self.cache is not None:
                self.cache.invalidate(wallet_key)
        logger.info(
            "Synced %s: fetched=%d created=%d updated=%d",
            wallet_key,
            result.fetched,
            result.created,
            result.updated,
        )
        return result

    async def refresh_aggregates(self, wallet_key: str) -> None:
        totals = await self.transactions.totals(wallet_key)
        await self.identities.update_aggregates(
            wallet_key,
            transaction_count=totals.total_transactions,
            total_volume=totals.total_amount,
        )
        await self.transactions.commit()

    async def _upsert(self, wallet_key: str, summary: TransactionSummary, detail: TransactionDetail) -> UpsertOutcome:
        status = derive_status(summary, detail)
        existing = await self.transactions.get_by_signature(summary.signature)
        if existing is None:
            try:
                await self.transactions.insert(self._new_transaction(wallet_key, summary, detail, status))
                await self.transactions.commit()
                return UpsertOutcome.CREATED
            except DuplicateSignature:
                logger.info("Transaction %s inserted concurrently, updating instead", summary.signature)
                existing = await self.transactions.get_by_signature(summary.signature)
                if existing is None:
                    raise

        if existing.status != status:
            updated = await self.transactions.update_status(summary.signature, status)
            await self.transactions.commit()
            if updated:
                return UpsertOutcome.UPDATED
        return UpsertOutcome.UNCHANGED

    @staticmethod
    def _new_transaction(
        wallet_key: str,
        summary: TransactionSummary,
        detail: TransactionDetail,
        status: str,
    ) -> NewTransaction:
        metadata = {"instructions": len(detail.instructions)}
        if summary.memo:
            metadata["memo"] = summary.memo
        err = summary.err if summary.err is not None else detail.err
        if err is not None:
            metadata["err"] = err
        return NewTransaction(
            signature=summary.signature,
            wallet_key=wallet_key,
            block_time=_block_time(summary, detail),
            slot=summary.slot or detail.slot,
            status=status,
            fee=lamports_to_sol(detail.fee),
            amount=abs(lamports_to_sol(detail.balance_change(wallet_key))),
            category=detail.category or TransactionCategory.OTHER.value,
            metadata=metadata,
        )


__all__ = ["ReconciliationService", "derive_status", "DEFAULT_SYNC_LIMIT"]
