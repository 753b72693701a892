"""SQLAlchemy implementation of the identity repository."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_server.core.exceptions import IdentityNotFound
from identity_server.db.models import Identity as IdentityModel
from identity_server.modules.identities.models import DEFAULT_PREFERENCES, Identity
from identity_server.modules.identities.repository import IdentityRepository


class SqlIdentityRepository(IdentityRepository):
    """Identity repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, wallet_key: str) -> Identity | None:
        model = await self._get_model(wallet_key)
        return self._to_domain(model)

    async def get_or_create(self, wallet_key: str) -> Identity:
        model = await self._get_model(wallet_key)
        if model is not None:
            return self._to_domain(model)

        model = IdentityModel(
            wallet_key=wallet_key,
            preferences=json.dumps(DEFAULT_PREFERENCES),
            transaction_count=0,
            total_volume=0.0,
            is_active=True,
        )
        self._session.add(model)
        try:
            await self._session.flush()
            await self._session.refresh(model)
        except IntegrityError:
            # another request created the row first
            await self._session.rollback()
            model = await self._get_model(wallet_key)
            if model is None:
                raise
        return self._to_domain(model)

    async def set_nonce(self, wallet_key: str, nonce: str) -> None:
        stmt = (
            update(IdentityModel)
            .where(IdentityModel.wallet_key == wallet_key)
            .values(current_nonce=nonce)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise IdentityNotFound(wallet_key=wallet_key)

    async def consume_nonce(self, wallet_key: str, nonce: str, authenticated_at: datetime) -> bool:
        stmt = (
            update(IdentityModel)
            .where(IdentityModel.wallet_key == wallet_key, IdentityModel.current_nonce == nonce)
            .values(current_nonce=None, last_authenticated_at=authenticated_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def update_profile(self, wallet_key: str, **fields: Any) -> Identity:
        model = await self._get_model(wallet_key)
        if model is None:
            raise IdentityNotFound(wallet_key=wallet_key)

        for name, value in fields.items():
            if name == "preferences":
                value = json.dumps(value)
            setattr(model, name, value)

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_domain(model)

    async def update_aggregates(self, wallet_key: str, *, transaction_count: int, total_volume: float) -> None:
        stmt = (
            update(IdentityModel)
            .where(IdentityModel.wallet_key == wallet_key)
            .values(transaction_count=transaction_count, total_volume=total_volume)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def _get_model(self, wallet_key: str) -> IdentityModel | None:
        # populate_existing: nonce updates above bypass the identity map
        stmt = (
            select(IdentityModel)
            .where(IdentityModel.wallet_key == wallet_key)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: IdentityModel | None) -> Identity | None:
        if model is None:
            return None
        preferences = dict(DEFAULT_PREFERENCES)
        if model.preferences:
            preferences.update(json.loads(model.preferences))
        return Identity(
            wallet_key=model.wallet_key,
            current_nonce=model.current_nonce,
            username=model.username,
            email=model.email,
            bio=model.bio,
            avatar=model.avatar,
            preferences=preferences,
            is_active=bool(model.is_active),
            last_authenticated_at=model.last_authenticated_at,
            transaction_count=model.transaction_count or 0,
            total_volume=model.total_volume or 0.0,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
