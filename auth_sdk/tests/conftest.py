# auth_sdk/tests/conftest.py
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from auth_sdk.config import BaseAppSettings
from auth_sdk.data_access import BaseIdentityLookup
from auth_sdk.schemas.identity import Identity, StoredIdentity
from auth_sdk.security import CredentialSigner, get_password_hash
from auth_sdk.services.token_service import TokenService

TEST_SECRET_KEY = "a-very-secret-key-for-testing-jwt-tokens"
TEST_ISSUER = "authdir-test"
TEST_PASSWORD = "strongpassword123"
ACCESS_LIFETIME = timedelta(minutes=15)
REFRESH_LIFETIME = timedelta(hours=72)


class SdkTestSettings(BaseAppSettings):
    PROJECT_NAME: str = "SDKTestProject"
    SECRET_KEY: str = TEST_SECRET_KEY
    JWT_ISSUER: str = TEST_ISSUER
    DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"


class FakeIdentityLookup(BaseIdentityLookup):
    """Список пользователей в памяти для тестов сценариев login/refresh."""

    def __init__(self, *identities: StoredIdentity):
        self.by_id = {i.subject_id: i for i in identities}

    async def get_identity_by_username(self, username: str) -> Optional[StoredIdentity]:
        for identity in self.by_id.values():
            if identity.username == username:
                return identity
        return None

    async def get_identity_by_id(self, subject_id: str) -> Optional[StoredIdentity]:
        return self.by_id.get(subject_id)


@pytest.fixture
def sdk_settings() -> SdkTestSettings:
    return SdkTestSettings()


@pytest.fixture
def signer() -> CredentialSigner:
    return CredentialSigner(TEST_SECRET_KEY)


@pytest.fixture
def token_service(signer: CredentialSigner) -> TokenService:
    return TokenService(
        signer,
        access_lifetime=ACCESS_LIFETIME,
        refresh_lifetime=REFRESH_LIFETIME,
        issuer=TEST_ISSUER,
    )


@pytest.fixture
def past_clock():
    """Часы, отстающие на 30 дней: и access, и refresh токены, выпущенные по ним, уже истекли."""
    return lambda: datetime.now(timezone.utc) - timedelta(days=30)


@pytest.fixture
def expired_token_service(signer: CredentialSigner, past_clock) -> TokenService:
    return TokenService(
        signer,
        access_lifetime=ACCESS_LIFETIME,
        refresh_lifetime=REFRESH_LIFETIME,
        issuer=TEST_ISSUER,
        clock=past_clock,
    )


@pytest.fixture
def identity() -> Identity:
    return Identity(subject_id="1", username="admin")


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture
def stored_admin(admin_password_hash: str) -> StoredIdentity:
    return StoredIdentity(subject_id="1", username="admin", hashed_password=admin_password_hash)


@pytest.fixture
def identity_lookup(stored_admin: StoredIdentity) -> FakeIdentityLookup:
    return FakeIdentityLookup(stored_admin)
