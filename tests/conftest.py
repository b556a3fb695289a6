from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from taskmanager.config import Settings
from taskmanager.database import Database
from taskmanager.main import create_app
from taskmanager.security import PasswordHasher, TokenIssuer
from taskmanager.services.auth import AuthService
from taskmanager.services.sessions import SessionManager


@pytest.fixture
def settings():
    """Isolated in-memory settings with a cheap bcrypt cost."""
    return Settings(
        database_url="sqlite://",
        session_secret="test-session-secret",
        jwt_secret="test-jwt-secret",
        bcrypt_rounds=4,
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_callback_url="http://testserver/api/auth/google/callback",
        client_url="http://client.test",
        log_json=False,
        log_level="WARNING",
    )


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.create_tables()
    return database


@pytest.fixture
def db(database):
    with database.session() as session:
        yield session


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def session_manager(settings):
    return SessionManager(settings.session_secret, timedelta(seconds=settings.session_max_age_seconds))


@pytest.fixture
def token_issuer(settings):
    return TokenIssuer(settings.jwt_secret, timedelta(minutes=60))


@pytest.fixture
def auth_service(hasher, token_issuer, session_manager):
    return AuthService(hasher=hasher, tokens=token_issuer, sessions=session_manager)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def other_client(app, client):
    """Second browser with its own cookie jar, against the same app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup_user():
    """POST /api/auth/signup through the given client and return the JSON body."""

    def _signup(client, email="a@x.com", password="Secret123!"):
        response = client.post("/api/auth/signup", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        return response.json()

    return _signup
