from pathlib import Path
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

REPO_ROOT = Path(__file__).resolve().parents[1]

DEFAULT_SECRET = "change-me"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and handed to components."""

    environment: str = "development"
    database_url: str = "sqlite:///./taskmanager.db"

    session_secret: str = DEFAULT_SECRET
    session_cookie_name: str = "sid"
    session_max_age_seconds: int = Field(default=24 * 60 * 60, gt=0)

    jwt_secret: str = DEFAULT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=60, gt=0)

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_callback_url: Optional[str] = None

    client_url: str = "http://localhost:3000"
    cors_origins: List[str] = Field(default_factory=list)
    port: int = 5000

    log_level: str = "INFO"
    log_json: bool = True

    @model_validator(mode="after")
    def _check_production_secrets(self) -> "Settings":
        if self.is_production:
            for name in ("session_secret", "jwt_secret"):
                if getattr(self, name) == DEFAULT_SECRET:
                    raise ValueError(f"{name} must be set in production")
        if not self.cors_origins:
            self.cors_origins = [self.client_url]
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret and self.google_callback_url)

    @classmethod
    def from_env(cls) -> "Settings":
        # Load environment variables from repo root and its parent (if present).
        load_dotenv(REPO_ROOT / ".env")
        load_dotenv(REPO_ROOT.parent / ".env")

        client_url = os.getenv("CLIENT_URL", "http://localhost:3000")
        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///./taskmanager.db"),
            session_secret=os.getenv("SESSION_SECRET", DEFAULT_SECRET),
            session_max_age_seconds=int(os.getenv("SESSION_MAX_AGE_SECONDS", str(24 * 60 * 60))),
            jwt_secret=os.getenv("JWT_SECRET", DEFAULT_SECRET),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            google_client_id=os.getenv("GOOGLE_CLIENT_ID") or None,
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET") or None,
            google_callback_url=os.getenv("GOOGLE_CALLBACK_URL") or None,
            client_url=client_url,
            cors_origins=_split_origins(os.getenv("CORS_ORIGINS", client_url)),
            port=int(os.getenv("PORT", "5000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_json=_env_bool("LOG_JSON", True),
        )
