from fastapi import APIRouter

from identity_server.interfaces.http.routers import auth, solana, transactions, users


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(auth.router, prefix="/auth", tags=["auth"])
    router.include_router(users.router, prefix="/users", tags=["users"])
    router.include_router(solana.router, prefix="/solana", tags=["solana"])
    router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
    return router


__all__ = [
    "create_api_router",
]
