"""Pytest fixtures for testing."""
import os

# Must be set before any app imports that trigger Settings validation.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
# Ensure tests run in dev mode (bypasses auth) regardless of local .env
os.environ["DEV_MODE"] = "true"

from collections.abc import AsyncGenerator, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.auth import AuthenticatedUser, get_current_user, get_optional_user  # noqa: E402
from core.config import Settings, get_settings  # noqa: E402
from models.base import Base  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(**overrides: object) -> Settings:
    """Settings for tests, defaulting to an Auth0-enabled (non dev mode) configuration."""
    values: dict[str, object] = {
        "database_url": TEST_DATABASE_URL,
        "dev_mode": False,
        "auth0_domain": "test.auth0.com",
        "auth0_audience": "https://api.test",
        "auth0_client_id": "client-id",
        "auth0_client_secret": "client-secret",
        "app_url": "http://testserver",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """
    Create a fresh in-memory database for each test.

    StaticPool keeps the single in-memory connection alive for the engine's lifetime,
    so every session sees the same database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create an async session on the per-test database."""
    session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    db_session: AsyncSession,
) -> AsyncGenerator[AsyncClient]:
    """Create a test client with database session override."""
    # Clear the settings cache so it picks up DATABASE_URL from environment
    get_settings.cache_clear()

    from api.main import app
    from db.session import get_async_session

    async def override_get_async_session() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def sign_in(client: AsyncClient) -> Callable[..., AuthenticatedUser]:  # noqa: ARG001
    """
    Return a function that makes the `client` fixture authenticate as a given user.

    Calling it again switches to another user.
    """
    from api.main import app

    def _sign_in(user_id: str, email: str | None = None) -> AuthenticatedUser:
        user = AuthenticatedUser(id=user_id, email=email)

        async def override_user() -> AuthenticatedUser:
            return user

        app.dependency_overrides[get_current_user] = override_user
        app.dependency_overrides[get_optional_user] = override_user
        return user

    return _sign_in


@pytest.fixture
def auth_settings(client: AsyncClient) -> Settings:  # noqa: ARG001
    """Disable dev mode so requests without a valid token are unauthenticated."""
    from api.main import app

    settings = make_settings()
    app.dependency_overrides[get_settings] = lambda: settings
    return settings


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build Settings for Auth0-enabled (non dev mode) tests, with keyword overrides."""
    return make_settings
