"""Identity use cases: challenge issuance, signature login and profiles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.cache import CacheService, cache_key
from identity_server.core.crypto import (
    build_challenge_message,
    canonical_wallet_key,
    decode_public_key,
    decode_signature,
    generate_nonce,
    verify_detached,
)
from identity_server.core.exceptions import (
    ChallengeNotFound,
    IdentityNotFound,
    MessageMismatch,
    SignatureMismatch,
)
from .models import UNSET, Challenge, Identity, ProfileUpdateInput
from .repository import IdentityRepository

logger = logging.getLogger(__name__)


class ChallengeService:
    """Issues single-use nonces and verifies signatures over them."""

    def __init__(self, repository: IdentityRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ChallengeService":
        from identity_server.infrastructure.database.repositories.identity_repository import SqlIdentityRepository

        return cls(SqlIdentityRepository(session))

    async def issue_challenge(self, wallet_key: str) -> Challenge:
        wallet_key = canonical_wallet_key(wallet_key)
        await self._repository.get_or_create(wallet_key)
        nonce = generate_nonce()
        await self._repository.set_nonce(wallet_key, nonce)
        logger.debug("Issued challenge for %s", wallet_key)
        return Challenge(wallet_key=wallet_key, nonce=nonce, message=build_challenge_message(nonce))

    async def verify(self, wallet_key: str, nonce: str | None, signature: str) -> bool:
        """Check ``signature`` against the challenge currently stored for the wallet.

        The message is rebuilt from the stored nonce, never from the client's
        copy. ``nonce`` is the value the client claims to have signed; when
        given it must equal the stored one.
        """
        await self._verify(wallet_key, nonce, signature)
        return True

    async def authenticate(self, wallet_key: str, nonce: str | None, signature: str) -> Identity:
        """Verify the signature and consume the challenge it was made over.

        The nonce is cleared with a conditional update, so of two concurrent
        requests replaying the same signature at most one succeeds.
        """
        identity = await self._verify(wallet_key, nonce, signature)
        authenticated_at = datetime.now(timezone.utc)
        consumed = await self._repository.consume_nonce(identity.wallet_key, identity.current_nonce, authenticated_at)
        if not consumed:
            logger.warning("Challenge for %s was consumed concurrently", identity.wallet_key)
            raise ChallengeNotFound()

        identity.current_nonce = None
        identity.last_authenticated_at = authenticated_at
        logger.info("Wallet %s authenticated", identity.wallet_key)
        return identity

    async def _verify(self, wallet_key: str, nonce: str | None, signature: str) -> Identity:
        public_key = decode_public_key(wallet_key)
        signature_bytes = decode_signature(signature)
        wallet_key = canonical_wallet_key(wallet_key)

        identity = await self._repository.get(wallet_key)
        if identity is None or not identity.has_live_challenge:
            raise ChallengeNotFound()
        if nonce is not None and nonce != identity.current_nonce:
            raise MessageMismatch()

        message = build_challenge_message(identity.current_nonce).encode("utf-8")
        if not verify_detached(message, signature_bytes, public_key):
            raise SignatureMismatch()
        return identity


@dataclass(slots=True)
class ProfileService:
    repository: IdentityRepository
    cache: CacheService
    profile_ttl: float = 300

    @classmethod
    def with_session(cls, session: AsyncSession, cache: CacheService, profile_ttl: float = 300) -> "ProfileService":
        from identity_server.infrastructure.database.repositories.identity_repository import SqlIdentityRepository

        return cls(SqlIdentityRepository(session), cache, profile_ttl)

    async def get_profile(self, wallet_key: str) -> Identity:
        wallet_key = canonical_wallet_key(wallet_key)
        identity = await self.cache.get_or_compute(
            cache_key("profile", wallet_key),
            self.profile_ttl,
            lambda: self.repository.get(wallet_key),
        )
        if identity is None:
            raise IdentityNotFound()
        return identity

    async def update_profile(self, wallet_key: str, payload: ProfileUpdateInput) -> Identity:
        wallet_key = canonical_wallet_key(wallet_key)
        current = await self.repository.get(wallet_key)
        if current is None:
            raise IdentityNotFound()

        fields = {}
        for name in ("username", "email", "bio", "avatar"):
            value = getattr(payload, name)
            if value is not UNSET:
                fields[name] = value
        if payload.preferences is not UNSET and payload.preferences is not None:
            fields["preferences"] = {**current.preferences, **payload.preferences}

        identity = await self.repository.update_profile(wallet_key, **fields)
        self.cache.delete(cache_key("profile", wallet_key))
        return identity
