"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from identity_server.core.cache import CacheService
from identity_server.core.config import Settings
from identity_server.infrastructure.database.session import build_engine, build_session_factory, init_db
from identity_server.modules.ledger.gateway import LedgerGateway
from identity_server.modules.ledger.solana import SolanaRpcGateway


@dataclass(slots=True)
class ApplicationContainer:
    """Per-application singletons, stored on ``app.state.container``."""

    settings: Settings
    cache: CacheService
    ledger: LedgerGateway
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]

    @classmethod
    def build(
        cls,
        settings: Settings,
        *,
        ledger: Optional[LedgerGateway] = None,
        cache: Optional[CacheService] = None,
    ) -> "ApplicationContainer":
        engine = build_engine(settings)
        return cls(
            settings=settings,
            cache=cache or CacheService(settings.cache),
            ledger=ledger or SolanaRpcGateway.from_settings(settings),
            engine=engine,
            session_factory=build_session_factory(engine),
        )

    async def startup(self) -> None:
        """Ensure infrastructure (database schema, etc.) is initialised."""
        await init_db(self.engine)

    async def shutdown(self) -> None:
        await self.ledger.aclose()
        await self.engine.dispose()


__all__ = ["ApplicationContainer"]
