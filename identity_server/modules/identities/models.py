"""Domain models for wallet identities."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

DEFAULT_PREFERENCES: dict[str, Any] = {"theme": "dark", "notifications": True}


@dataclass(slots=True)
class Identity:
    wallet_key: str
    current_nonce: Optional[str] = field(default=None, repr=False)
    username: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    preferences: dict[str, Any] = field(default_factory=lambda: dict(DEFAULT_PREFERENCES))
    is_active: bool = True
    last_authenticated_at: Optional[datetime] = None
    transaction_count: int = 0
    total_volume: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_live_challenge(self) -> bool:
        return self.current_nonce is not None


@dataclass(slots=True, frozen=True)
class Challenge:
    wallet_key: str
    nonce: str
    message: str


# Sentinel used to differentiate between "not provided" and explicit None.
UNSET = object()


@dataclass(slots=True)
class ProfileUpdateInput:
    username: Optional[str] | object = UNSET
    email: Optional[str] | object = UNSET
    bio: Optional[str] | object = UNSET
    avatar: Optional[str] | object = UNSET
    preferences: Optional[dict[str, Any]] | object = UNSET
