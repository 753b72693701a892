"""Session token issuance for authenticated wallets."""

from __future__ import annotations

from dataclasses import dataclass

from identity_server.core.config import Settings
from identity_server.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
)


@dataclass(frozen=True, slots=True)
class SessionTokens:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SessionService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def login(self, wallet_key: str) -> SessionTokens:
        return SessionTokens(
            access_token=create_access_token(self._settings, wallet_key),
            refresh_token=create_refresh_token(self._settings, wallet_key),
        )

    def refresh(self, refresh_token: str) -> SessionTokens:
        """Mint a new access token; the refresh token itself is returned as is."""
        wallet_key = decode_token(self._settings, refresh_token, REFRESH_TOKEN)
        return SessionTokens(
            access_token=create_access_token(self._settings, wallet_key),
            refresh_token=refresh_token,
        )

    def verify_session(self, token: str, token_type: str = ACCESS_TOKEN) -> str:
        return decode_token(self._settings, token, token_type)


__all__ = ["SessionService", "SessionTokens"]
