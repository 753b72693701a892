"""Solana JSON-RPC implementation of the ledger gateway."""

from __future__ import annotations

import itertools
import logging
from typing import Any

import httpx

from identity_server.core.config import Settings
from identity_server.core.exceptions import LedgerUnavailable

from .models import (
    TOKEN_PROGRAM_ID,
    AccountInfo,
    Balance,
    NetworkStatus,
    SignatureStatus,
    TokenHolding,
    TransactionDetail,
    TransactionSummary,
)

logger = logging.getLogger(__name__)


class SolanaRpcGateway:
    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.commitment = commitment
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SolanaRpcGateway":
        return cls(
            settings.solana_rpc_url,
            commitment=settings.solana.commitment,
            timeout=settings.solana.request_timeout,
        )

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            response = await self._client.post(self.rpc_url, json=body)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Solana RPC %s failed: %s", method, exc)
            raise LedgerUnavailable(f"Solana RPC {method} failed", reason=str(exc)) from exc
        if "error" in data:
            logger.warning("Solana RPC %s returned error: %s", method, data["error"])
            raise LedgerUnavailable(f"Solana RPC {method} failed", reason=data["error"])
        return data.get("result")

    async def get_balance(self, wallet_key: str) -> Balance:
        result = await self._rpc("getBalance", [wallet_key, {"commitment": self.commitment}])
        return Balance(lamports=int(result["value"]))

    async def get_token_holdings(self, wallet_key: str) -> list[TokenHolding]:
        result = await self._rpc(
            "getTokenAccountsByOwner",
            [wallet_key, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed", "commitment": self.commitment}],
        )
        holdings = []
        for account in result.get("value") or []:
            info = account["account"]["data"]["parsed"]["info"]
            token_amount = info.get("tokenAmount") or {}
            holdings.append(
                TokenHolding(
                    mint=info["mint"],
                    amount=token_amount.get("uiAmount"),
                    decimals=int(token_amount.get("decimals", 0)),
                    owner=info.get("owner"),
                )
            )
        return holdings

    async def get_recent_transaction_summaries(self, wallet_key: str, limit: int) -> list[TransactionSummary]:
        result = await self._rpc("getSignaturesForAddress", [wallet_key, {"limit": limit, "commitment": self.commitment}])
        return [
            TransactionSummary(
                signature=item["signature"],
                slot=int(item.get("slot") or 0),
                block_time=item.get("blockTime"),
                err=item.get("err"),
                confirmation_status=item.get("confirmationStatus"),
                memo=item.get("memo"),
            )
            for item in result or []
        ]

    async def get_transaction_detail(self, signature: str) -> TransactionDetail | None:
        result = await self._rpc(
            "getTransaction",
            [signature, {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0, "commitment": self.commitment}],
        )
        if not result:
            return None
        meta = result.get("meta") or {}
        message = (result.get("transaction") or {}).get("message") or {}
        return TransactionDetail(
            signature=signature,
            slot=int(result.get("slot") or 0),
            block_time=result.get("blockTime"),
            fee=int(meta.get("fee") or 0),
            err=meta.get("err"),
            account_keys=_account_keys(message),
            pre_balances=list(meta.get("preBalances") or []),
            post_balances=list(meta.get("postBalances") or []),
            instructions=list(message.get("instructions") or []),
        )

    async def get_signature_status(self, signature: str) -> SignatureStatus:
        result = await self._rpc("getSignatureStatuses", [[signature], {"searchTransactionHistory": True}])
        values = (result or {}).get("value") or [None]
        status = values[0]
        if status is None:
            return SignatureStatus(exists=False)
        confirmation = status.get("confirmationStatus")
        return SignatureStatus(
            exists=True,
            confirmed=confirmation in {"confirmed", "finalized"},
            finalized=confirmation == "finalized",
            err=status.get("err"),
        )

    async def get_account_info(self, wallet_key: str) -> AccountInfo | None:
        result = await self._rpc("getAccountInfo", [wallet_key, {"encoding": "base64", "commitment": self.commitment}])
        value = (result or {}).get("value")
        if value is None:
            return None
        return AccountInfo(
            lamports=int(value.get("lamports") or 0),
            owner=value.get("owner"),
            executable=bool(value.get("executable")),
        )

    async def get_network_status(self) -> NetworkStatus:
        version = await self._rpc("getVersion", [])
        slot = int(await self._rpc("getSlot", [{"commitment": self.commitment}]))
        try:
            block_time = await self._rpc("getBlockTime", [slot])
        except LedgerUnavailable:
            # recent slots may not have a block time yet
            block_time = None
        epoch = await self._rpc("getEpochInfo", [{"commitment": self.commitment}])
        return NetworkStatus(
            version=(version or {}).get("solana-core"),
            current_slot=slot,
            block_time=block_time,
            epoch=int(epoch["epoch"]),
            slot_index=int(epoch["slotIndex"]),
            slots_in_epoch=int(epoch["slotsInEpoch"]),
        )

    async def aclose(self) -> None:
        await self._client.aclose()


def _account_keys(message: dict[str, Any]) -> list[str]:
    keys = []
    for key in message.get("accountKeys") or []:
        if isinstance(key, str):
            keys.append(key)
        elif isinstance(key, dict) and key.get("pubkey"):
            keys.append(str(key["pubkey"]))
    return keys


__all__ = ["SolanaRpcGateway"]
