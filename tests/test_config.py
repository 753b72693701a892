import pytest
from pydantic import ValidationError

from identity_server.core.config import DEFAULT_SECRET_KEY, SecuritySettings, Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.port == 5000
    assert settings.api_prefix == "/api"
    assert settings.database_url.startswith("sqlite+aiosqlite")
    assert settings.access_token_expire_minutes == 7 * 24 * 60
    assert settings.refresh_token_expire_minutes == 30 * 24 * 60
    assert settings.cache.balance_ttl == 30
    assert settings.cache.network_status_ttl == 120
    assert settings.cache.profile_ttl == 300
    assert settings.cache.check_period == 120
    assert settings.rate_limit.window_seconds == 900
    assert settings.solana_rpc_url == "https://api.devnet.solana.com"


def test_nested_sections_read_from_environment(monkeypatch):
    monkeypatch.setenv("SECURITY__SECRET_KEY", "from-the-environment")
    monkeypatch.setenv("CACHE__BALANCE_TTL", "5")
    monkeypatch.setenv("SOLANA__NETWORK", "testnet")
    monkeypatch.setenv("RATE_LIMIT__AUTH_MAX_REQUESTS", "7")

    settings = Settings(_env_file=None)

    assert settings.secret_key == "from-the-environment"
    assert settings.cache.balance_ttl == 5
    assert settings.solana_rpc_url == "https://api.testnet.solana.com"
    assert settings.rate_limit.auth_max_requests == 7


def test_production_refuses_default_secret():
    with pytest.raises(ValidationError, match="SECURITY__SECRET_KEY"):
        Settings(_env_file=None, environment="production")

    settings = Settings(
        _env_file=None,
        environment="production",
        security=SecuritySettings(secret_key="a-real-production-secret"),
    )
    assert settings.secret_key == "a-real-production-secret"


def test_default_secret_is_allowed_outside_production():
    assert Settings(_env_file=None, environment="staging").secret_key == DEFAULT_SECRET_KEY
