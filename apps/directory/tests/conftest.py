# apps/directory/tests/conftest.py
import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import StaticPool

os.environ.setdefault("ENV", "test")

from auth_sdk.db.session import close_db, create_db_and_tables, init_db, managed_session
from auth_sdk.security import CredentialSigner
from auth_sdk.services.token_service import TokenService

from apps.directory.config import Settings
from apps.directory.data_access.user_manager import InMemoryUserManager, LocalUserManager
from apps.directory.main import create_app
from apps.directory.models.user import User
from apps.directory.schemas.user import UserCreate

TEST_SECRET_KEY = "directory-test-secret"
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
ADMIN_USERNAME = "admin"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "password"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENV="test",
        DATABASE_URL=TEST_DB_URL,
        SECRET_KEY=TEST_SECRET_KEY,
        USER_STORE="sql",
        BACKEND_CORS_ORIGINS=[],
    )


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[None, None]:
    """Чистая SQLite БД в памяти на каждый тест."""
    init_db(TEST_DB_URL, engine_options={"poolclass": StaticPool})
    await create_db_and_tables()
    yield
    await close_db()


@pytest_asyncio.fixture
async def admin_user(db) -> User:
    async with managed_session() as session:
        return await LocalUserManager(session).create_user(
            UserCreate(username=ADMIN_USERNAME, email=ADMIN_EMAIL, password=ADMIN_PASSWORD)
        )


@pytest.fixture
def app(test_settings: Settings, db) -> FastAPI:
    return create_app(test_settings)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def memory_client(test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    memory_settings = test_settings.model_copy(update={"USER_STORE": "memory"})
    app = create_app(memory_settings, user_manager=InMemoryUserManager())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def tokens(async_client: AsyncClient, admin_user: User) -> Dict[str, str]:
    response = await async_client.post(
        "/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def auth_headers(tokens: Dict[str, str]) -> Dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest.fixture
def expired_token_service(test_settings: Settings) -> TokenService:
    return TokenService(
        CredentialSigner(TEST_SECRET_KEY),
        access_lifetime=test_settings.access_token_lifetime,
        refresh_lifetime=test_settings.refresh_token_lifetime,
        issuer=test_settings.JWT_ISSUER,
        clock=lambda: datetime.now(timezone.utc) - timedelta(days=30),
    )
