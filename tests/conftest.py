"""
Shared fixtures: temporary SQLite database, in-memory ledger stub and
wallets backed by real Ed25519 keys.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone

import base58
import pytest
from fastapi.testclient import TestClient
from nacl.signing import SigningKey

from identity_server.core.cache import CacheService
from identity_server.core.config import DatabaseSettings, RateLimitSettings, SecuritySettings, Settings
from identity_server.core.container import ApplicationContainer
from identity_server.core.exceptions import LedgerUnavailable
from identity_server.infrastructure.database import build_engine, build_session_factory, init_db
from identity_server.main import create_app
from identity_server.modules.ledger.models import (
    AccountInfo,
    Balance,
    NetworkStatus,
    SignatureStatus,
    TokenHolding,
    TransactionDetail,
    TransactionSummary,
)


class Wallet:
    def __init__(self) -> None:
        self.signing_key = SigningKey.generate()
        self.address = base58.b58encode(bytes(self.signing_key.verify_key)).decode("ascii")

    def sign(self, message: str) -> str:
        signature = self.signing_key.sign(message.encode("utf-8")).signature
        return base58.b58encode(signature).decode("ascii")


class StubLedgerGateway:
    """In-memory ledger; tests script summaries, details and failures."""

    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self.tokens: dict[str, list[TokenHolding]] = {}
        self.summaries: dict[str, list[TransactionSummary]] = {}
        self.details: dict[str, TransactionDetail] = {}
        self.failing_details: set[str] = set()
        self.detail_errors: dict[str, Exception] = {}
        self.fail_summaries = False
        self.calls: Counter[str] = Counter()
        self.closed = False

    def add_transaction(
        self,
        wallet_key: str,
        signature: str,
        *,
        slot: int = 100,
        block_time: datetime | None = None,
        fee: int = 5000,
        delta: int = -1_000_000_000,
        err=None,
        confirmation_status: str = "confirmed",
    ) -> None:
        block_time = block_time or datetime.now(timezone.utc) - timedelta(hours=1)
        timestamp = int(block_time.timestamp())
        self.summaries.setdefault(wallet_key, []).append(
            TransactionSummary(
                signature=signature,
                slot=slot,
                block_time=timestamp,
                err=err,
                confirmation_status=confirmation_status,
            )
        )
        start = 10_000_000_000
        self.details[signature] = TransactionDetail(
            signature=signature,
            slot=slot,
            block_time=timestamp,
            fee=fee,
            err=err,
            account_keys=[wallet_key],
            pre_balances=[start],
            post_balances=[start + delta],
        )

    def set_status(self, wallet_key: str, signature: str, *, err=None, confirmation_status: str | None = None) -> None:
        for summary in self.summaries[wallet_key]:
            if summary.signature == signature:
                summary.err = err
                if confirmation_status is not None:
                    summary.confirmation_status = confirmation_status
        self.details[signature].err = err

    async def get_balance(self, wallet_key: str) -> Balance:
        self.calls["get_balance"] += 1
        return Balance(lamports=self.balances.get(wallet_key, 0))

    async def get_token_holdings(self, wallet_key: str) -> list[TokenHolding]:
        self.calls["get_token_holdings"] += 1
        return list(self.tokens.get(wallet_key, []))

    async def get_recent_transaction_summaries(self, wallet_key: str, limit: int) -> list[TransactionSummary]:
        self.calls["get_recent_transaction_summaries"] += 1
        if self.fail_summaries:
            raise LedgerUnavailable("Solana RPC getSignaturesForAddress failed", reason="connection refused")
        return list(self.summaries.get(wallet_key, []))[:limit]

    async def get_transaction_detail(self, signature: str) -> TransactionDetail | None:
        self.calls["get_transaction_detail"] += 1
        if signature in self.failing_details:
            raise LedgerUnavailable("Solana RPC getTransaction failed", reason="timeout")
        if signature in self.detail_errors:
            raise self.detail_errors[signature]
        return self.details.get(signature)

    async def get_signature_status(self, signature: str) -> SignatureStatus:
        detail = self.details.get(signature)
        if detail is None:
            return SignatureStatus(exists=False)
        return SignatureStatus(exists=True, confirmed=True, finalized=False, err=detail.err)

    async def get_account_info(self, wallet_key: str) -> AccountInfo | None:
        if wallet_key not in self.balances:
            return None
        return AccountInfo(lamports=self.balances[wallet_key])

    async def get_network_status(self) -> NetworkStatus:
        self.calls["get_network_status"] += 1
        return NetworkStatus(
            version="1.18.0",
            current_slot=250_000_000,
            block_time=1_700_000_000,
            epoch=580,
            slot_index=1234,
            slots_in_epoch=432_000,
        )

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'identity.db'}"),
        security=SecuritySettings(secret_key="test-secret-key-0123456789"),
        rate_limit=RateLimitSettings(enabled=False),
    )


@pytest.fixture
def ledger() -> StubLedgerGateway:
    return StubLedgerGateway()


@pytest.fixture
def cache(settings) -> CacheService:
    return CacheService(settings.cache)


@pytest.fixture
def make_wallet():
    return Wallet


@pytest.fixture
def wallet() -> Wallet:
    return Wallet()


@pytest.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await init_db(engine)
    try:
        yield build_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def container(settings, ledger, cache) -> ApplicationContainer:
    return ApplicationContainer.build(settings, ledger=ledger, cache=cache)


@pytest.fixture
def client(container):
    app = create_app(container=container)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def login(client):
    """Run the challenge/sign/login round trip and return auth headers."""

    def _login(wallet: Wallet) -> dict[str, str]:
        challenge = client.get(f"/api/auth/challenge/{wallet.address}").json()["data"]
        response = client.post(
            "/api/auth/login",
            json={
                "wallet_key": wallet.address,
                "signature": wallet.sign(challenge["message"]),
                "message": challenge["message"],
            },
        )
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['data']['access_token']}"}

    return _login
