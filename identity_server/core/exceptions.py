"""Service error taxonomy.

Every user-visible failure carries a stable machine-checkable ``code`` and the
HTTP status the interface layer renders it with.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "SERVICE_ERROR"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, **detail: Any) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code}
        if self.detail:
            payload["detail"] = self.detail
        return payload


class InvalidIdentity(ServiceError):
    """Raised when a wallet key is not a well-formed public key."""

    code = "INVALID_IDENTITY"
    default_message = "Invalid Solana wallet address"


class DecodeError(ServiceError):
    """Raised when a signature or key is not valid base58 of the expected length."""

    code = "DECODE_ERROR"
    default_message = "Failed to decode signature or wallet address"


class ChallengeNotFound(ServiceError):
    """Raised when the identity holds no live challenge."""

    code = "CHALLENGE_NOT_FOUND"
    status_code = 401
    default_message = "Please get a nonce first"


class MessageMismatch(ChallengeNotFound):
    """Raised when the asserted nonce is not the identity's current challenge."""

    code = "MESSAGE_MISMATCH"
    default_message = "Signed message does not match the current challenge"


class SignatureMismatch(ServiceError):
    code = "SIGNATURE_MISMATCH"
    status_code = 401
    default_message = "Invalid wallet signature"


class ExpiredToken(ServiceError):
    code = "EXPIRED_TOKEN"
    status_code = 401
    default_message = "Token has expired"


class InvalidToken(ServiceError):
    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid or expired token"


class IdentityNotFound(ServiceError):
    code = "IDENTITY_NOT_FOUND"
    status_code = 404
    default_message = "User not found"


class TransactionNotFound(ServiceError):
    code = "TRANSACTION_NOT_FOUND"
    status_code = 404
    default_message = "Transaction not found"


class LedgerUnavailable(ServiceError):
    """Upstream ledger failure; the caller may retry."""

    code = "LEDGER_UNAVAILABLE"
    status_code = 503
    default_message = "Solana network error"


class RateLimited(ServiceError):
    code = "RATE_LIMITED"
    status_code = 429
    default_message = "Too many requests, please try again later."


class DuplicateSignature(Exception):
    """Benign: a transaction signature is already stored. Never surfaced."""


__all__ = [
    "ServiceError",
    "InvalidIdentity",
    "DecodeError",
    "ChallengeNotFound",
    "MessageMismatch",
    "SignatureMismatch",
    "ExpiredToken",
    "InvalidToken",
    "IdentityNotFound",
    "TransactionNotFound",
    "LedgerUnavailable",
    "RateLimited",
    "DuplicateSignature",
]
