"""Repository protocol for identities."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from .models import Identity


class IdentityRepository(Protocol):
    """Abstract repository interface for identity persistence."""

    async def get(self, wallet_key: str) -> Identity | None:
        ...

    async def get_or_create(self, wallet_key: str) -> Identity:
        ...

    async def set_nonce(self, wallet_key: str, nonce: str) -> None:
        ...

    async def consume_nonce(self, wallet_key: str, nonce: str, authenticated_at: datetime) -> bool:
        """Clear ``nonce`` only if it is still the stored one; True when it was."""
        ...

    async def update_profile(self, wallet_key: str, **fields: Any) -> Identity:
        ...

    async def update_aggregates(self, wallet_key: str, *, transaction_count: int, total_volume: float) -> None:
        ...
