"""
Global pytest configuration and fixtures for Tradewire testing.

Google is never contacted: the OAuth and Gmail clients are replaced with
AsyncMock-backed doubles, and every test gets its own in-memory SQLite.
"""
import itertools
import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-0123456789abcdef")
os.environ.setdefault("ENCRYPTION_KEY", "test-encryption-key")
os.environ.setdefault("REQUEST_LOGGING_ENABLED", "false")

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from tradewire.main import app
from tradewire.database import get_db
from tradewire.models.base import Base
from tradewire.models.advisor import Advisor
from tradewire.auth.jwt import create_access_token
from tradewire.auth.password import hash_password
from tradewire.core.cipher import CredentialCipher, get_cipher
from tradewire.google.gmail import GmailClient, get_gmail_client
from tradewire.google.oauth import GoogleOAuthClient, TokenSet, get_oauth_client

ADVISOR_EMAIL = "advisor@test.com"
ADVISOR_PASSWORD = "Advisor123"
REFRESH_TOKEN = "1//test-refresh-token"
ACCESS_TOKEN = "ya29.test-access-token"


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (fast, no dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (full HTTP flow)"
    )


@pytest_asyncio.fixture
async def test_db():
    """Create an isolated in-memory test database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def cipher() -> CredentialCipher:
    return CredentialCipher("test-encryption-key")


@pytest.fixture
def oauth_client() -> GoogleOAuthClient:
    """Real URL building, mocked token endpoint."""
    client = GoogleOAuthClient(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://test/oauth2callback",
    )
    client.exchange_code = AsyncMock(
        return_value=TokenSet(access_token=ACCESS_TOKEN, refresh_token=REFRESH_TOKEN)
    )
    client.refresh_access_token = AsyncMock(return_value=ACCESS_TOKEN)
    return client


@pytest.fixture
def gmail_client() -> MagicMock:
    """Gmail double returning gmail-1, gmail-2, ... per send."""
    message_ids = (f"gmail-{i}" for i in itertools.count(1))
    client = MagicMock(spec=GmailClient)
    client.send_raw = AsyncMock(side_effect=lambda access_token, raw: next(message_ids))
    return client


@pytest_asyncio.fixture
async def advisor(test_db) -> Advisor:
    advisor = Advisor(
        email=ADVISOR_EMAIL,
        full_name="Test Advisor",
        password_hash=hash_password(ADVISOR_PASSWORD),
    )
    test_db.add(advisor)
    await test_db.commit()
    await test_db.refresh(advisor)
    return advisor


@pytest.fixture
def auth_headers(advisor) -> dict:
    token = create_access_token(advisor.id, advisor.email)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(test_db, cipher, oauth_client, gmail_client):
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cipher] = lambda: cipher
    app.dependency_overrides[get_oauth_client] = lambda: oauth_client
    app.dependency_overrides[get_gmail_client] = lambda: gmail_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
