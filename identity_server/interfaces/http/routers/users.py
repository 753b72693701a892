"""Profile and per-user statistics endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.interfaces.http.deps import (
    get_current_identity,
    get_db_session,
    get_profile_service,
    get_transaction_query_service,
)
from identity_server.modules.identities import Identity, ProfileService, ProfileUpdateInput
from identity_server.modules.transactions import TransactionQueryService
from identity_server.schemas import (
    BreakdownResponse,
    Envelope,
    IdentityResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    PublicProfileResponse,
    TotalsResponse,
    TransactionResponse,
    UserStatsResponse,
)

router = APIRouter()


async def _profile_response(identity: Identity, transactions: TransactionQueryService) -> ProfileResponse:
    stats = await transactions.stats(identity.wallet_key)
    return ProfileResponse(
        user=IdentityResponse.model_validate(identity),
        stats=[BreakdownResponse.model_validate(row) for row in stats.by_category],
    )


@router.get("/profile", response_model=Envelope[ProfileResponse], summary="Current user's profile")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[ProfileResponse]:
    return Envelope[ProfileResponse](data=await _profile_response(identity, transactions))


@router.put("/profile", response_model=Envelope[ProfileResponse], summary="Update the current user's profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    profiles: ProfileService = Depends(get_profile_service),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProfileResponse]:
    provided = payload.model_dump(exclude_unset=True)
    if "preferences" in provided and provided["preferences"] is not None:
        provided["preferences"] = payload.preferences.model_dump(exclude_none=True)
    updated = await profiles.update_profile(identity.wallet_key, ProfileUpdateInput(**provided))
    await db.commit()
    return Envelope[ProfileResponse](
        message="Profile updated successfully",
        data=await _profile_response(updated, transactions),
    )


@router.get("/stats", response_model=Envelope[UserStatsResponse], summary="Aggregate stats and recent activity")
async def user_stats(
    identity: Identity = Depends(get_current_identity),
    transactions: TransactionQueryService = Depends(get_transaction_query_service),
) -> Envelope[UserStatsResponse]:
    stats = await transactions.stats(identity.wallet_key)
    recent = await transactions.recent(identity.wallet_key, limit=10)
    return Envelope[UserStatsResponse](
        data=UserStatsResponse(
            totals=TotalsResponse.model_validate(stats.totals),
            recent_transactions=[TransactionResponse.model_validate(tx) for tx in recent],
            member_since=identity.created_at,
        )
    )


@router.get("/{wallet_key}", response_model=Envelope[PublicProfileResponse], summary="Public profile")
async def public_profile(
    wallet_key: str,
    profiles: ProfileService = Depends(get_profile_service),
) -> Envelope[PublicProfileResponse]:
    identity = await profiles.get_profile(wallet_key)
    return Envelope[PublicProfileResponse](data=PublicProfileResponse.model_validate(identity))
