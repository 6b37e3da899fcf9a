"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import Settings
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base

# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_SECRET_KEY = "test-secret-key"

# Fixed test user ID for consistency
TEST_USER_ID = "7c1e0f52-9d0b-4a57-8e0e-2b6a1f3c9d10"
OTHER_USER_ID = "e4a2b9d3-5f61-4c8a-b0d7-91c3e8f2a6b4"


class TickingClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings pointing at the test database and a known signing key."""
    return Settings(
        app_env="test",
        database_url=TEST_DATABASE_URL,
        jwt_secret_key=TEST_SECRET_KEY,
        supabase_url="",
        supabase_anon_key="",
        rate_limit_enabled=False,
    )


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an isolated in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def other_user() -> TokenUser:
    """A second signed-in user."""
    return TokenUser(
        id=OTHER_USER_ID,
        email="other@example.com",
        display_name="Other User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key=TEST_SECRET_KEY,
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def other_headers(auth_provider: JWTAuthProvider, other_user: TokenUser) -> dict[str, str]:
    """Authorization headers for the second user."""
    return {"Authorization": f"Bearer {auth_provider.create_token(other_user)}"}


@pytest.fixture
def app(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    clock: TickingClock,
) -> FastAPI:
    """
    Create an application wired against the test database.

    ASGITransport does not run the lifespan, so services are attached to
    app.state here. The identity provider's HTTP client is a mock; auth
    route tests replace the identity provider entirely.
    """
    from main import create_app, wire_services

    app = create_app(test_settings)
    wire_services(
        app,
        test_settings,
        session_factory,
        AsyncMock(spec=httpx.AsyncClient),
        clock=clock,
    )
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def authenticated_client(
    app: FastAPI,
    test_user: TokenUser,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create authenticated test client.

    This client:
    - Uses an in-memory SQLite database
    - Provisions a profile for the test user
    - Sends a real HS256 bearer token, verified by the app's JWT provider
    """
    await app.state.profile_service.provision(
        test_user.id, test_user.display_name or "", test_user.email
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c
