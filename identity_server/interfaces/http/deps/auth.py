"""Bearer-token authentication dependencies."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity_server.core.exceptions import IdentityNotFound, InvalidToken
from identity_server.modules.identities import Identity, ProfileService
from identity_server.modules.sessions import SessionService

from .services import get_profile_service, get_session_service

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_wallet(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    sessions: SessionService = Depends(get_session_service),
) -> str:
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Access token required")
    return sessions.verify_session(credentials.credentials)


async def get_current_identity(
    wallet_key: str = Depends(get_current_wallet),
    profiles: ProfileService = Depends(get_profile_service),
) -> Identity:
    identity = await profiles.get_profile(wallet_key)
    if not identity.is_active:
        raise IdentityNotFound()
    return identity


__all__ = ["bearer_scheme", "get_current_wallet", "get_current_identity"]
