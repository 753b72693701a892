"""Wallet identity server: challenge-response login and ledger reconciliation."""

__version__ = "1.0.0"
