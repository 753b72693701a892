from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from identity_server import __version__
from identity_server.core.config import Settings, get_settings
from identity_server.core.container import ApplicationContainer
from identity_server.core.logging import configure_logging
from identity_server.core.rate_limit import RateLimitMiddleware
from identity_server.interfaces.http.errors import register_exception_handlers
from identity_server.interfaces.http.routers import create_api_router
from identity_server.schemas import HealthResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ApplicationContainer = app.state.container
    await container.startup()
    try:
        yield
    finally:
        await container.shutdown()


def create_app(settings: Optional[Settings] = None, container: Optional[ApplicationContainer] = None) -> FastAPI:
    if container is None:
        container = ApplicationContainer.build(settings or get_settings())
    settings = container.settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.project_name,
        description="Wallet challenge-response authentication and Solana transaction reconciliation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.rate_limit.enabled:
        app.add_middleware(RateLimitMiddleware, settings=settings.rate_limit, api_prefix=settings.api_prefix)

    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health(request: Request) -> HealthResponse:
        return HealthResponse(
            version=__version__,
            environment=request.app.state.container.settings.environment,
            timestamp=datetime.now(timezone.utc),
        )

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "identity_server.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    run()
