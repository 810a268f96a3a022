"""Main FastAPI application."""
import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, get_settings
from .core.logging import configure_logging
from .database import Database
from .api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    SecurityHeadersMiddleware
)
from .api.routes import admin, artisans, auth
from .schemas.common import HealthResponse
from .services import IdentityServices, build_email_dispatcher, build_services
from .store import SqlAlchemyCredentialStore


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[IdentityServices] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    When ``services`` is given the application uses it as is and does not
    open its own database.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        # Startup
        configure_logging(settings)
        database = None
        if app.state.services is None:
            database = Database(settings.database)
            await database.create_all()
            store = SqlAlchemyCredentialStore(
                database.session_factory,
                timeout=settings.database.operation_timeout_seconds,
            )
            app.state.services = build_services(
                settings,
                store,
                build_email_dispatcher(settings.email, settings.environment),
            )

        sweeper = None
        if settings.cleanup.enabled:
            sweeper = asyncio.create_task(
                app.state.services.cleanup.run_forever(settings.cleanup.interval_minutes * 60)
            )
        yield
        # Shutdown
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        if database is not None:
            await database.dispose()

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )
    app.state.services = services

    # Add middleware
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(artisans.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="healthy", version=settings.api.version)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "homie_identity.main:create_app",
        factory=True,
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
