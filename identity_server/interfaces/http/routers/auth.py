"""Wallet challenge-response authentication endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.cache import CacheService, cache_key
from identity_server.core.crypto import extract_nonce
from identity_server.core.exceptions import MessageMismatch
from identity_server.interfaces.http.deps import (
    get_cache,
    get_challenge_service,
    get_current_wallet,
    get_db_session,
    get_session_service,
)
from identity_server.modules.identities import ChallengeService
from identity_server.modules.sessions import SessionService
from identity_server.schemas import (
    AccessTokenResponse,
    ChallengeResponse,
    Envelope,
    IdentityResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    VerifySessionResponse,
)

router = APIRouter()


@router.get("/challenge/{wallet_key}", response_model=Envelope[ChallengeResponse], summary="Issue a sign-in challenge")
@router.get("/nonce/{wallet_key}", response_model=Envelope[ChallengeResponse], include_in_schema=False)
async def issue_challenge(
    wallet_key: str,
    challenges: ChallengeService = Depends(get_challenge_service),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ChallengeResponse]:
    challenge = await challenges.issue_challenge(wallet_key)
    await db.commit()
    return Envelope[ChallengeResponse](data=ChallengeResponse.model_validate(challenge))


@router.post("/login", response_model=Envelope[LoginResponse], summary="Sign in with a wallet signature")
async def login(
    payload: LoginRequest,
    challenges: ChallengeService = Depends(get_challenge_service),
    sessions: SessionService = Depends(get_session_service),
    cache: CacheService = Depends(get_cache),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[LoginResponse]:
    nonce = payload.nonce
    if nonce is None and payload.message is not None:
        nonce = extract_nonce(payload.message)
        if nonce is None:
            raise MessageMismatch("Signed message is not a sign-in challenge")

    identity = await challenges.authenticate(payload.wallet_key, nonce, payload.signature)
    await db.commit()
    cache.delete(cache_key("profile", identity.wallet_key))

    tokens = sessions.login(identity.wallet_key)
    return Envelope[LoginResponse](
        message="Authentication successful",
        data=LoginResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            user=IdentityResponse.model_validate(identity),
        ),
    )


@router.post("/refresh", response_model=Envelope[AccessTokenResponse], summary="Exchange a refresh token")
async def refresh(
    payload: RefreshRequest,
    sessions: SessionService = Depends(get_session_service),
) -> Envelope[AccessTokenResponse]:
    tokens = sessions.refresh(payload.refresh_token)
    return Envelope[AccessTokenResponse](data=AccessTokenResponse(access_token=tokens.access_token))


@router.post("/logout", response_model=Envelope[None], summary="Acknowledge logout")
async def logout(wallet_key: str = Depends(get_current_wallet)) -> Envelope[None]:
    # tokens are stateless; the client discards them
    return Envelope[None](message="Logged out successfully")


@router.get("/verify", response_model=Envelope[VerifySessionResponse], summary="Check an access token")
async def verify(wallet_key: str = Depends(get_current_wallet)) -> Envelope[VerifySessionResponse]:
    return Envelope[VerifySessionResponse](data=VerifySessionResponse(wallet_key=wallet_key))
