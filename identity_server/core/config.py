"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SECRET_KEY = "change-me-please"

SOLANA_CLUSTER_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./identity.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default=DEFAULT_SECRET_KEY, min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    refresh_token_expire_minutes: int = 60 * 24 * 30


class SolanaSettings(BaseModel):
    network: Literal["devnet", "testnet", "mainnet-beta"] = "devnet"
    rpc_url: Optional[str] = None
    commitment: Literal["processed", "confirmed", "finalized"] = "confirmed"
    request_timeout: float = 10.0


class CacheSettings(BaseModel):
    """TTL in seconds per data class."""

    balance_ttl: int = 30
    transactions_ttl: int = 60
    tokens_ttl: int = 60
    network_status_ttl: int = 120
    profile_ttl: int = 300
    check_period: int = 120


class RateLimitSettings(BaseModel):
    enabled: bool = True
    window_seconds: int = 15 * 60
    max_requests: int = 100
    auth_max_requests: int = 50


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"
    project_name: str = "Wallet Identity Server"
    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    solana: SolanaSettings = SolanaSettings()
    cache: CacheSettings = CacheSettings()
    rate_limit: RateLimitSettings = RateLimitSettings()

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.environment == "production" and self.security.secret_key == DEFAULT_SECRET_KEY:
            raise ValueError("SECURITY__SECRET_KEY must be set in production")
        return self

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def refresh_token_expire_minutes(self) -> int:
        return self.security.refresh_token_expire_minutes

    @property
    def solana_rpc_url(self) -> str:
        return self.solana.rpc_url or SOLANA_CLUSTER_URLS[self.solana.network]

    @property
    def is_development(self) -> bool:
        return self.debug or self.environment == "development"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
