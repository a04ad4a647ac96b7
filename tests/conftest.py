import os

# Must be set before the app modules read their settings
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_DIR", "test-logs")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from main import app
from core.config import AuthConfig, settings
from core.database import Base
from repositories.token_store import SqlAlchemyTokenStore
from repositories.user_store import SqlAlchemyUserStore
from services.auth_service import AuthService
from services.token_service import TokenService
from utils.deps import get_db

TEST_PASSWORD = "pw12345678"


@pytest.fixture
async def engine():
    """
    Fresh, empty tables for each test.
    NullPool keeps connections from outliving the test's event loop.
    """
    engine = create_async_engine(settings.DATABASE_URL, poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as db:
        yield db


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig.from_settings(settings)


@pytest.fixture
def user_store(session):
    return SqlAlchemyUserStore(session)


@pytest.fixture
def token_store(session):
    return SqlAlchemyTokenStore(session)


@pytest.fixture
def token_service(auth_config, token_store, user_store):
    return TokenService(auth_config, token_store, user_store)


@pytest.fixture
def auth_service(auth_config, user_store, token_service):
    return AuthService(auth_config, user_store, token_service)


@pytest.fixture
async def registered_user(auth_service):
    """Registers alice@example.com and returns the register() result."""
    return await auth_service.register("alice@example.com", TEST_PASSWORD, "Alice Example")


@pytest.fixture
async def admin_user(auth_service):
    return await auth_service.register("admin@example.com", TEST_PASSWORD, "Shop Admin", role="admin")


@pytest.fixture
async def client(session):
    """
    Yields an HTTP client that talks to the app with the test session.
    """
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
