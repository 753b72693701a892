"""Accessors for the application container stored on ``app.state``."""

from fastapi import Depends, Request

from identity_server.core.cache import CacheService
from identity_server.core.config import Settings
from identity_server.core.container import ApplicationContainer
from identity_server.modules.ledger.gateway import LedgerGateway


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_app_settings(container: ApplicationContainer = Depends(get_container)) -> Settings:
    return container.settings


def get_cache(container: ApplicationContainer = Depends(get_container)) -> CacheService:
    return container.cache


def get_ledger(container: ApplicationContainer = Depends(get_container)) -> LedgerGateway:
    return container.ledger


__all__ = ["get_container", "get_app_settings", "get_cache", "get_ledger"]
