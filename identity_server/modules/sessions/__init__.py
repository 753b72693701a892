"""JWT session issuance."""

from .service import SessionService, SessionTokens

__all__ = ["SessionService", "SessionTokens"]
