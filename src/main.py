"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestContextMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.middleware.session_guard import SessionGuardMiddleware
from api.routes.health import VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import Settings, settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from domain.entities.profile import utcnow
from domain.services.auth_service import AuthService
from domain.services.profile_service import ProfileService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.supabase_identity import SupabaseIdentityProvider
from infrastructure.database.session import create_engine, create_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


def wire_services(
    app: FastAPI,
    app_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    http_client: httpx.AsyncClient,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    """Construct the backend clients and services once and attach them to app.state."""

    def uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    auth_provider = JWTAuthProvider(
        secret_key=app_settings.jwt_secret_key,
        algorithm=app_settings.jwt_algorithm,
        expire_minutes=app_settings.jwt_expire_minutes,
        jwks_url=app_settings.supabase_jwks_url,
        http_client=http_client,
    )
    identity_provider = SupabaseIdentityProvider(
        http_client=http_client,
        base_url=app_settings.supabase_url,
        anon_key=app_settings.supabase_anon_key,
        timeout=app_settings.identity_timeout_seconds,
    )
    profile_service = ProfileService(uow_factory, clock=clock)

    app.state.session_factory = session_factory
    app.state.auth_provider = auth_provider
    app.state.identity_provider = identity_provider
    app.state.profile_service = profile_service
    app.state.auth_service = AuthService(identity_provider, profile_service)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build backend clients at startup and release them at shutdown."""
        engine = create_engine(app_settings)
        http_client = httpx.AsyncClient(timeout=app_settings.identity_timeout_seconds)
        wire_services(app, app_settings, create_session_factory(engine), http_client)
        logger.info("application_started", environment=app_settings.app_env)
        try:
            yield
        finally:
            await http_client.aclose()
            await engine.dispose()
            logger.info("application_stopped")

    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=app_settings.app_name,
        description=(
            "## User Profiles\n\n"
            "Registration, authentication and profile management on top of "
            "a hosted identity provider.\n\n"
            "### Authentication\n"
            "All `/api/v1/profile*` endpoints require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST endpoints: 10 requests/minute\n"
            "- Sign-up/sign-in: 5 requests/minute"
        ),
        version=VERSION,
        debug=app_settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Sign-up, sign-in and sign-out",
            },
            {
                "name": "profiles",
                "description": "Profile read and merge-update operations",
            },
        ],
    )

    app.state.settings = app_settings

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Page routing pre-filter (not an authorization boundary)
    app.add_middleware(
        SessionGuardMiddleware,
        protected_patterns=app_settings.protected_paths_list,
        cookie_name=app_settings.session_cookie_name,
        sign_in_path=app_settings.sign_in_path,
    )

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app, app_settings)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
