"""Read-only interface to the distributed ledger."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import AccountInfo, Balance, NetworkStatus, SignatureStatus, TokenHolding, TransactionDetail, TransactionSummary


class LedgerGateway(Protocol):
    """Opaque data source for balances, holdings and transaction history.

    Implementations raise ``LedgerUnavailable`` for transport and upstream
    failures and never retry on their own.
    """

    async def get_balance(self, wallet_key: str) -> Balance:
        ...

    async def get_token_holdings(self, wallet_key: str) -> Sequence[TokenHolding]:
        ...

    async def get_recent_transaction_summaries(self, wallet_key: str, limit: int) -> Sequence[TransactionSummary]:
        ...

    async def get_transaction_detail(self, signature: str) -> TransactionDetail | None:
        ...

    async def get_signature_status(self, signature: str) -> SignatureStatus:
        ...

    async def get_account_info(self, wallet_key: str) -> AccountInfo | None:
        ...

    async def get_network_status(self) -> NetworkStatus:
        ...

    async def aclose(self) -> None:
        ...
