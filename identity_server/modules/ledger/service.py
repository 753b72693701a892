"""Cached read access to the ledger gateway."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from identity_server.core.cache import NETWORK_STATUS_KEY, CacheService, cache_key
from identity_server.core.config import CacheSettings
from identity_server.core.crypto import canonical_wallet_key, is_valid_wallet_key
from identity_server.core.exceptions import LedgerUnavailable

from .gateway import LedgerGateway
from .models import Balance, NetworkStatus, SignatureStatus, TokenHolding, TransactionDetail, lamports_to_sol

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletValidation:
    valid: bool
    exists: bool
    balance: float = 0.0
    error: str | None = None


@dataclass(slots=True)
class TransactionVerification:
    signature: str
    status: SignatureStatus
    detail: TransactionDetail | None


class LedgerService:
    def __init__(self, gateway: LedgerGateway, cache: CacheService, ttl: CacheSettings | None = None) -> None:
        self.gateway = gateway
        self.cache = cache
        self.ttl = ttl or cache.settings

    async def get_balance(self, wallet_key: str) -> Balance:
        wallet_key = canonical_wallet_key(wallet_key)
        return await self.cache.get_or_compute(
            cache_key("balance", wallet_key),
            self.ttl.balance_ttl,
            lambda: self.gateway.get_balance(wallet_key),
        )

    async def get_token_holdings(self, wallet_key: str) -> list[TokenHolding]:
        wallet_key = canonical_wallet_key(wallet_key)
        holdings = await self.cache.get_or_compute(
            cache_key("tokens", wallet_key),
            self.ttl.tokens_ttl,
            lambda: self.gateway.get_token_holdings(wallet_key),
        )
        return list(holdings)

    async def get_transaction_history(self, wallet_key: str, limit: int = 20) -> list[dict[str, Any]]:
        """Live history straight from the ledger; items whose detail fails are dropped."""
        wallet_key = canonical_wallet_key(wallet_key)
        return await self.cache.get_or_compute(
            cache_key("transactions", wallet_key, "live", limit),
            self.ttl.transactions_ttl,
            lambda: self._load_history(wallet_key, limit),
        )

    async def _load_history(self, wallet_key: str, limit: int) -> list[dict[str, Any]]:
        history = []
        for summary in await self.gateway.get_recent_transaction_summaries(wallet_key, limit):
            try:
                detail = await self.gateway.get_transaction_detail(summary.signature)
            except LedgerUnavailable as exc:
                logger.warning("Error fetching transaction %s: %s", summary.signature, exc.message)
                continue
            history.append(
                {
                    "signature": summary.signature,
                    "block_time": summary.block_time,
                    "slot": summary.slot,
                    "err": summary.err,
                    "fee": lamports_to_sol(detail.fee) if detail else 0.0,
                    "status": "failed" if summary.err is not None else "confirmed",
                    "instructions": len(detail.instructions) if detail else 0,
                }
            )
        return history

    async def get_network_status(self) -> NetworkStatus:
        return await self.cache.get_or_compute(
            NETWORK_STATUS_KEY,
            self.ttl.network_status_ttl,
            self.gateway.get_network_status,
        )

    async def verify_transaction(self, signature: str) -> TransactionVerification:
        status = await self.gateway.get_signature_status(signature)
        detail = await self.gateway.get_transaction_detail(signature) if status.exists else None
        return TransactionVerification(signature=signature, status=status, detail=detail)

    async def validate_wallet(self, wallet_key: str) -> WalletValidation:
        if not is_valid_wallet_key(wallet_key):
            return WalletValidation(valid=False, exists=False, error="Invalid Solana wallet address")
        account = await self.gateway.get_account_info(canonical_wallet_key(wallet_key))
        if account is None:
            return WalletValidation(valid=True, exists=False)
        return WalletValidation(valid=True, exists=True, balance=lamports_to_sol(account.lamports))


__all__ = ["LedgerService", "TransactionVerification", "WalletValidation"]
