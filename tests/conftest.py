"""
Shared fixtures.

Environment variables are set before anything under `app` is imported: the
module-level settings instance needs its secrets, and the password hash cost
is lowered to libsodium's minimum so the suite stays fast.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret-not-for-production")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("PASSWORD_HASH_OPSLIMIT", "1")
os.environ.setdefault("PASSWORD_HASH_MEMLIMIT", "8192")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import Database
from app.core.middleware import limiter
from app.core.security import PasswordHasher, TokenService
from app.main import create_app


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-wide; start every test from zero."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path}/mailroom-test.db")


@pytest.fixture
def app(test_settings):
    return create_app(test_settings)


def _attach_csrf_header(client: TestClient) -> None:
    """Echo the csrf_token cookie into X-CSRF-Token, like the SPA does."""

    def add_header(request):
        token = client.cookies.get("csrf_token")
        if token and "X-CSRF-Token" not in request.headers:
            request.headers["X-CSRF-Token"] = token

    client.event_hooks = {"request": [add_header], "response": []}


@pytest.fixture
def client(app):
    """Browser-like client: keeps cookies and sends the CSRF header."""
    with TestClient(app) as c:
        _attach_csrf_header(c)
        yield c


@pytest.fixture
def raw_client(app):
    """Client that never adds a CSRF header."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_client(app):
    """Factory for extra independent clients (separate cookie jars)."""
    clients = []

    def _make() -> TestClient:
        c = TestClient(app)
        c.__enter__()
        _attach_csrf_header(c)
        clients.append(c)
        return c

    yield _make

    for c in clients:
        c.__exit__(None, None, None)


def register(client: TestClient, username: str = "alice", email: str = None, password: str = "password123"):
    """Register a user through the API and return the response."""
    return client.post(
        "/api/register",
        json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
        },
    )


@pytest.fixture
def register_user():
    return register


@pytest.fixture
def alice(client):
    """`client` logged in (session cookie) as alice. Returns the auth payload."""
    response = register(client, "alice")
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def bob_client(make_client):
    """Second client, logged in as bob."""
    c = make_client()
    response = register(c, "bob")
    assert response.status_code == 201
    c.bob = response.json()
    return c


@pytest.fixture
async def database(test_settings):
    """Storage context with tables created, for service-level tests."""
    db = Database(test_settings)
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher(opslimit=1, memlimit=8192)


@pytest.fixture
def tokens():
    return TokenService(secret_key="unit-test-secret", algorithm="HS256", expires_hours=24)
