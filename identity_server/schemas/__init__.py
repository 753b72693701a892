"""Pydantic schemas used across the HTTP surface."""
from datetime import datetime
from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ChallengeResponse(BaseModel):
    wallet_key: str
    nonce: str
    message: str

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    wallet_key: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
    message: Optional[str] = None
    nonce: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: str


class IdentityResponse(BaseModel):
    wallet_key: str
    username: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    transaction_count: int = 0
    total_volume: float = 0.0
    last_authenticated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PublicProfileResponse(BaseModel):
    wallet_key: str
    username: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    transaction_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: IdentityResponse


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class VerifySessionResponse(BaseModel):
    wallet_key: str
    valid: bool = True


class PreferencesUpdate(BaseModel):
    theme: Optional[Literal["dark", "light"]] = None
    notifications: Optional[bool] = None


class ProfileUpdateRequest(BaseModel):
    username: Optional[str] = Field(default=None, pattern=r"^[a-zA-Z0-9_-]{3,20}$")
    email: Optional[str] = Field(default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = Field(default=None, max_length=500)
    preferences: Optional[PreferencesUpdate] = None


class BreakdownResponse(BaseModel):
    key: str
    count: int
    total_amount: float

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    user: IdentityResponse
    stats: list[BreakdownResponse] = Field(default_factory=list)


class TransactionResponse(BaseModel):
    id: str
    signature: str
    wallet_key: str
    category: str
    amount: float
    fee: float
    block_time: datetime
    slot: int
    status: str
    token_mint: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TotalsResponse(BaseModel):
    total_transactions: int
    total_amount: float
    total_fees: float
    avg_amount: float
    avg_fee: float

    model_config = ConfigDict(from_attributes=True)


class UserStatsResponse(BaseModel):
    totals: TotalsResponse
    recent_transactions: list[TransactionResponse]
    member_since: Optional[datetime] = None


class PaginationResponse(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_prev_page: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    pagination: PaginationResponse


class TransactionStatsResponse(BaseModel):
    totals: TotalsResponse
    by_category: list[BreakdownResponse]
    by_status: list[BreakdownResponse]
    last_7_days: int

    model_config = ConfigDict(from_attributes=True)


class DailyVolumeResponse(BaseModel):
    date: str
    count: int
    volume: float
    fees: float

    model_config = ConfigDict(from_attributes=True)


class BalanceResponse(BaseModel):
    wallet_key: str
    lamports: int
    sol: float


class TokenHoldingResponse(BaseModel):
    mint: str
    amount: Optional[float] = None
    decimals: int
    owner: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TokenListResponse(BaseModel):
    wallet_key: str
    tokens: list[TokenHoldingResponse]


class LiveTransactionListResponse(BaseModel):
    wallet_key: str
    transactions: list[dict[str, Any]]


class SyncResponse(BaseModel):
    fetched: int
    created: int
    updated: int

    model_config = ConfigDict(from_attributes=True)


class SignatureStatusResponse(BaseModel):
    exists: bool
    confirmed: bool = False
    finalized: bool = False
    err: Any = None

    model_config = ConfigDict(from_attributes=True)


class TransactionDetailResponse(BaseModel):
    signature: str
    slot: int
    block_time: Optional[int] = None
    fee: int
    err: Any = None
    account_keys: list[str] = Field(default_factory=list)
    success: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionVerificationResponse(BaseModel):
    signature: str
    status: SignatureStatusResponse
    detail: Optional[TransactionDetailResponse] = None

    model_config = ConfigDict(from_attributes=True)


class NetworkStatusResponse(BaseModel):
    network: str
    version: Optional[str] = None
    current_slot: int
    block_time: Optional[int] = None
    epoch: int
    slot_index: int
    slots_in_epoch: int


class WalletValidationResponse(BaseModel):
    wallet_key: str
    valid: bool
    exists: bool
    balance: float = 0.0
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    environment: str
    timestamp: datetime
