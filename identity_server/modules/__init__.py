"""Feature modules and their public exports."""

from . import identities, ledger, sessions, transactions

__all__ = [
    "identities",
    "ledger",
    "sessions",
    "transactions",
]
