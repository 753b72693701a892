"""JWT helpers for wallet sessions."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from identity_server.core.config import Settings
from identity_server.core.exceptions import ExpiredToken, InvalidToken

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def create_token(
    settings: Settings,
    wallet_key: str,
    token_type: str = ACCESS_TOKEN,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta is None:
        minutes = (
            settings.refresh_token_expire_minutes
            if token_type == REFRESH_TOKEN
            else settings.access_token_expire_minutes
        )
        expires_delta = timedelta(minutes=minutes)
    now = datetime.now(timezone.utc)
    payload = {
        "sub": wallet_key,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(settings: Settings, wallet_key: str, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(settings, wallet_key, ACCESS_TOKEN, expires_delta)


def create_refresh_token(settings: Settings, wallet_key: str, expires_delta: Optional[timedelta] = None) -> str:
    return create_token(settings, wallet_key, REFRESH_TOKEN, expires_delta)


def decode_token(settings: Settings, token: str, token_type: str = ACCESS_TOKEN) -> str:
    """Return the wallet key bound to ``token``.

    Raises :class:`ExpiredToken` for a well-formed token past its expiry and
    :class:`InvalidToken` for anything else (bad signature, wrong type,
    missing claims).
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError as exc:
        raise ExpiredToken() from exc
    except JWTError as exc:
        raise InvalidToken() from exc

    wallet_key = payload.get("sub")
    if not wallet_key or payload.get("type") != token_type:
        raise InvalidToken()
    return wallet_key


__all__ = [
    "ACCESS_TOKEN",
    "REFRESH_TOKEN",
    "create_token",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
