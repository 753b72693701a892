"""Value objects returned by the ledger gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

LAMPORTS_PER_SOL = 1_000_000_000
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


def lamports_to_sol(lamports: int | float) -> float:
    return lamports / LAMPORTS_PER_SOL


@dataclass(slots=True)
class Balance:
    lamports: int

    @property
    def sol(self) -> float:
        return lamports_to_sol(self.lamports)


@dataclass(slots=True)
class TokenHolding:
    mint: str
    amount: Optional[float]
    decimals: int
    owner: Optional[str] = None


@dataclass(slots=True)
class TransactionSummary:
    """One entry of a wallet's recent signature list."""

    signature: str
    slot: int
    block_time: Optional[int] = None
    err: Any = None
    confirmation_status: Optional[str] = None
    memo: Optional[str] = None


@dataclass(slots=True)
class TransactionDetail:
    signature: str
    slot: int
    block_time: Optional[int]
    fee: int  # lamports
    err: Any = None
    account_keys: list[str] = field(default_factory=list)
    pre_balances: list[int] = field(default_factory=list)
    post_balances: list[int] = field(default_factory=list)
    instructions: list[Any] = field(default_factory=list)
    category: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.err is None

    def balance_change(self, wallet_key: str) -> int:
        """Lamport delta of ``wallet_key`` in this transaction, 0 when absent."""
        try:
            index = self.account_keys.index(wallet_key)
        except ValueError:
            return 0
        if index >= len(self.pre_balances) or index >= len(self.post_balances):
            return 0
        return self.post_balances[index] - self.pre_balances[index]


@dataclass(slots=True)
class SignatureStatus:
    exists: bool
    confirmed: bool = False
    finalized: bool = False
    err: Any = None


@dataclass(slots=True)
class AccountInfo:
    lamports: int
    owner: Optional[str] = None
    executable: bool = False


@dataclass(slots=True)
class NetworkStatus:
    version: Optional[str]
    current_slot: int
    block_time: Optional[int]
    epoch: int
    slot_index: int
    slots_in_epoch: int
