"""Wallet key, nonce and detached-signature helpers."""

from __future__ import annotations

import re
import secrets

import base58
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from identity_server.core.exceptions import DecodeError, InvalidIdentity

PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
NONCE_BYTES = 16

CHALLENGE_PREFIX = "Sign this message to authenticate with nonce: "
_NONCE_RE = re.compile(re.escape(CHALLENGE_PREFIX) + r"(?P<nonce>[0-9a-f]+)\s*$")


def _b58decode(value: str) -> bytes:
    try:
        return base58.b58decode(value.strip())
    except ValueError as exc:
        raise DecodeError(f"Not valid base58: {exc}") from exc


def canonical_wallet_key(wallet_key: str) -> str:
    """Return the canonical base58 form of ``wallet_key``.

    Base58 is case-sensitive, so normalisation is a decode/re-encode round
    trip rather than case folding. Raises :class:`InvalidIdentity` for anything
    that does not decode to a 32-byte public key.
    """
    if not isinstance(wallet_key, str) or not wallet_key.strip():
        raise InvalidIdentity("Wallet address is required")
    try:
        raw = _b58decode(wallet_key)
    except DecodeError as exc:
        raise InvalidIdentity(wallet_key=wallet_key) from exc
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise InvalidIdentity(wallet_key=wallet_key)
    return base58.b58encode(raw).decode("ascii")


def is_valid_wallet_key(wallet_key: str) -> bool:
    try:
        canonical_wallet_key(wallet_key)
    except InvalidIdentity:
        return False
    return True


def decode_public_key(wallet_key: str) -> bytes:
    raw = _b58decode(wallet_key)
    if len(raw) != PUBLIC_KEY_LENGTH:
        raise DecodeError("Wallet address must decode to 32 bytes", field="wallet_key")
    return raw


def decode_signature(signature: str) -> bytes:
    if not signature:
        raise DecodeError("Signature is required", field="signature")
    raw = _b58decode(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise DecodeError("Signature must decode to 64 bytes", field="signature")
    return raw


def generate_nonce() -> str:
    """Return a fresh 128-bit nonce from the OS CSPRNG."""
    return secrets.token_hex(NONCE_BYTES)


def build_challenge_message(nonce: str) -> str:
    return f"{CHALLENGE_PREFIX}{nonce}"


def extract_nonce(message: str) -> str | None:
    match = _NONCE_RE.search(message or "")
    return match.group("nonce") if match else None


def verify_detached(message: bytes, signature: bytes, public_key: bytes) -> bool:
    """Check an Ed25519 detached signature."""
    try:
        VerifyKey(public_key).verify(message, signature)
    except BadSignatureError:
        return False
    return True


__all__ = [
    "PUBLIC_KEY_LENGTH",
    "SIGNATURE_LENGTH",
    "CHALLENGE_PREFIX",
    "canonical_wallet_key",
    "is_valid_wallet_key",
    "decode_public_key",
    "decode_signature",
    "generate_nonce",
    "build_challenge_message",
    "extract_nonce",
    "verify_detached",
]
