import pytest
from pydantic import ValidationError

from taskmanager.config import DEFAULT_SECRET, Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ENVIRONMENT",
        "DATABASE_URL",
        "SESSION_SECRET",
        "JWT_SECRET",
        "ACCESS_TOKEN_EXPIRE_MINUTES",
        "SESSION_MAX_AGE_SECONDS",
        "BCRYPT_ROUNDS",
        "GOOGLE_CLIENT_ID",
        "GOOGLE_CLIENT_SECRET",
        "GOOGLE_CALLBACK_URL",
        "CLIENT_URL",
        "CORS_ORIGINS",
        "PORT",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)
    # Keep stray .env files out of the picture.
    monkeypatch.setattr("taskmanager.config.load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.environment == "development"
    assert settings.access_token_expire_minutes == 60
    assert settings.session_max_age_seconds == 24 * 60 * 60
    assert settings.bcrypt_rounds == 10
    assert settings.port == 5000
    assert settings.cors_origins == ["http://localhost:3000"]
    assert not settings.google_configured


def test_reads_environment(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db/tasks")
    clean_env.setenv("JWT_SECRET", "jwt")
    clean_env.setenv("SESSION_SECRET", "sess")
    clean_env.setenv("GOOGLE_CLIENT_ID", "id")
    clean_env.setenv("GOOGLE_CLIENT_SECRET", "secret")
    clean_env.setenv("GOOGLE_CALLBACK_URL", "http://api/cb")
    clean_env.setenv("CLIENT_URL", "http://app.test")
    clean_env.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("LOG_JSON", "no")

    settings = Settings.from_env()

    assert settings.database_url == "postgresql://u:p@db/tasks"
    assert settings.jwt_secret == "jwt"
    assert settings.session_secret == "sess"
    assert settings.google_configured
    assert settings.client_url == "http://app.test"
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.port == 8080
    assert settings.log_json is False


def test_production_requires_real_secrets():
    with pytest.raises(ValidationError):
        Settings(environment="production", jwt_secret="jwt", session_secret=DEFAULT_SECRET)
    with pytest.raises(ValidationError):
        Settings(environment="production", jwt_secret=DEFAULT_SECRET, session_secret="sess")


def test_production_flags():
    settings = Settings(environment="production", jwt_secret="jwt", session_secret="sess")
    assert settings.is_production


def test_bcrypt_rounds_bounds():
    with pytest.raises(ValidationError):
        Settings(bcrypt_rounds=3)
