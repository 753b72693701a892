"""Ledger gateway abstraction, Solana implementation and cached reads."""

from .gateway import LedgerGateway
from .models import (
    LAMPORTS_PER_SOL,
    AccountInfo,
    Balance,
    NetworkStatus,
    SignatureStatus,
    TokenHolding,
    TransactionDetail,
    TransactionSummary,
    lamports_to_sol,
)
from .service import LedgerService, TransactionVerification, WalletValidation
from .solana import SolanaRpcGateway

__all__ = [
    "LAMPORTS_PER_SOL",
    "AccountInfo",
    "Balance",
    "LedgerGateway",
    "LedgerService",
    "NetworkStatus",
    "SignatureStatus",
    "SolanaRpcGateway",
    "TokenHolding",
    "TransactionDetail",
    "TransactionSummary",
    "TransactionVerification",
    "WalletValidation",
    "lamports_to_sol",
]
