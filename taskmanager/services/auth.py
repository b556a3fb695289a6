"""Authentication core.

Two entry points, local credentials and an identity vouched for by an
external provider, funnel through ``AuthService.authenticate`` and end in the
same session + bearer token issuance step.
"""
from dataclasses import dataclass
from typing import Optional, Union

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import Conflict, InvalidCredentials, Unauthorized, ValidationFailed
from ..logging import get_logger
from ..models import User
from ..security import PasswordHasher, TokenIssuer
from .sessions import SessionManager

logger = get_logger(__name__)


@dataclass(frozen=True)
class LocalCredentials:
    email: str
    password: str


@dataclass(frozen=True)
class ExternalIdentity:
    provider: str
    external_id: str
    email: Optional[str] = None


Credentials = Union[LocalCredentials, ExternalIdentity]


@dataclass
class AuthResult:
    user: User
    token: str
    session_id: str


SUPPORTED_PROVIDERS = ("google",)


def normalize_email(email: str) -> str:
    """Canonical form of an address, as stored at signup.

    The domain is lowercased the way ``EmailStr`` does it. Input that does not
    parse is returned stripped and otherwise untouched.
    """
    email = email.strip()
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError:
        return email


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.exec(select(User).where(User.email == normalize_email(email))).first()


def get_user_by_google_id(db: Session, google_id: str) -> Optional[User]:
    return db.exec(select(User).where(User.google_id == google_id)).first()


class AuthService:
    def __init__(self, hasher: PasswordHasher, tokens: TokenIssuer, sessions: SessionManager):
        self.hasher = hasher
        self.tokens = tokens
        self.sessions = sessions

    def signup(self, db: Session, email: Optional[str], password: Optional[str]) -> AuthResult:
        """Create a local account and log it in."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationFailed("Email and password are required.")
        email = normalize_email(email)

        if get_user_by_email(db, email):
            raise Conflict("User with this email already exists.")

        user = User(email=email, password_hash=self.hasher.hash(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email.
            db.rollback()
            raise Conflict("User with this email already exists.")
        db.refresh(user)

        logger.info("user_signed_up", user_id=user.id)
        return self._establish(db, user)

    def login_local(self, db: Session, email: str, password: str) -> AuthResult:
        return self.authenticate(db, LocalCredentials(email=email, password=password))

    def login_with_external_identity(
        self,
        db: Session,
        provider: str,
        external_id: str,
        candidate_email: Optional[str] = None,
    ) -> AuthResult:
        return self.authenticate(
            db, ExternalIdentity(provider=provider, external_id=external_id, email=candidate_email)
        )

    def authenticate(self, db: Session, credentials: Credentials) -> AuthResult:
        if isinstance(credentials, LocalCredentials):
            user = self._verify_local(db, credentials)
        elif isinstance(credentials, ExternalIdentity):
            user = self._resolve_external(db, credentials)
        else:
            raise TypeError(f"unsupported credentials: {type(credentials).__name__}")
        return self._establish(db, user)

    def get_current_user(self, db: Session, session_id: Optional[str]) -> User:
        user_id = self.sessions.resolve(db, session_id)
        user = db.get(User, user_id) if user_id else None
        if user is None:
            raise Unauthorized("Unauthorized: Please log in to access this resource.")
        return user

    def logout(self, db: Session, session_id: Optional[str]) -> None:
        self.sessions.destroy(db, session_id)

    def _verify_local(self, db: Session, credentials: LocalCredentials) -> User:
        user = get_user_by_email(db, credentials.email) if credentials.email else None
        # Same outcome for unknown email, Google-only account and bad password.
        if user is None or not self.hasher.verify(credentials.password, user.password_hash):
            logger.info("login_failed")
            raise InvalidCredentials("Incorrect email or password.")
        return user

    def _resolve_external(self, db: Session, identity: ExternalIdentity) -> User:
        if identity.provider not in SUPPORTED_PROVIDERS:
            raise ValidationFailed(f"Unsupported identity provider: {identity.provider}")
        if not identity.external_id:
            raise ValidationFailed("External identity is missing a subject id.")

        user = get_user_by_google_id(db, identity.external_id)
        if user is not None:
            return user

        email = normalize_email(identity.email) if identity.email else None
        if email and get_user_by_email(db, email):
            # Never attach an address that belongs to another account.
            logger.warning("oauth_email_in_use", provider=identity.provider)
            email = None

        user = User(google_id=identity.external_id, email=email)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            existing = get_user_by_google_id(db, identity.external_id)
            if existing is not None:
                return existing
            # The email was claimed concurrently; keep the identity without it.
            user = User(google_id=identity.external_id)
            db.add(user)
            db.commit()
        db.refresh(user)

        logger.info("oauth_user_created", user_id=user.id, provider=identity.provider)
        return user

    def _establish(self, db: Session, user: User) -> AuthResult:
        session_id = self.sessions.create(db, user.id)
        token = self.tokens.mint(user.id)
        return AuthResult(user=user, token=token, session_id=session_id)
