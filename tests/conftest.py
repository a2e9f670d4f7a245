import os

# Settings are read at import time
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("CONTACT_TO_EMAIL", "support@example.com")
os.environ.setdefault("SMTP_USER", "relay@example.com")
os.environ.setdefault("SMTP_PASS", "relay-password")
os.environ.setdefault("FIREBASE_API_KEY", "test-api-key")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "glownexa-test")
os.environ.setdefault("CLOUDINARY_UPLOAD_PRESET", "unsigned-preset")
os.environ.setdefault("CLOUDINARY_API_KEY", "123456")
os.environ.setdefault("CLOUDINARY_API_SECRET", "cloud-secret")

import mongomock
import pytest
from httpx import ASGITransport, AsyncClient
from unittest.mock import AsyncMock, patch

from glownexa.main import app
from glownexa.api.deps import get_db, get_current_user
from glownexa.api.v1 import auth, contact
from glownexa.models.user import CurrentUser

@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    """Rate limiting runs on the in-memory window; every test starts with fresh counters"""
    monkeypatch.setattr("glownexa.core.rate_limit.get_redis", lambda: None)
    contact.contact_rate_limit.reset()
    auth.auth_rate_limit.reset()
    yield
    app.dependency_overrides.clear()

@pytest.fixture
def test_db():
    """In-memory MongoDB"""
    test_client = mongomock.MongoClient()
    test_database = test_client.glownexa_test

    app.dependency_overrides[get_db] = lambda: test_database

    yield test_database

    test_client.close()

@pytest.fixture
async def client(test_db):
    """Create test client"""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

@pytest.fixture
def current_user():
    """Signed-in user with a verified email"""
    user = CurrentUser(uid="user-1", email="jane@example.com", email_verified=True, name="Jane")
    app.dependency_overrides[get_current_user] = lambda: user
    return user

@pytest.fixture
def unverified_user():
    user = CurrentUser(uid="user-2", email="new@example.com", email_verified=False)
    app.dependency_overrides[get_current_user] = lambda: user
    return user

@pytest.fixture
def mock_smtp_send():
    """Replace the SMTP transport"""
    with patch("glownexa.services.mail_service.aiosmtplib.send", new_callable=AsyncMock) as send:
        yield send

@pytest.fixture
def contact_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "subject": "Question about my results",
        "message": "Hello,\nI have a question.",
    }
