import hashlib
import hmac
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete
from sqlmodel import Session

from ..logging import get_logger
from ..models import UserSession
from ..models.base import utcnow

logger = get_logger(__name__)


class SessionManager:
    """Server-side sessions keyed by an opaque identifier carried in a cookie.

    The store maps an HMAC of the identifier to a user id and an absolute
    expiry. Nothing but the user id is kept; callers re-read the user row on
    every resolution.
    """

    def __init__(self, secret: str, max_age: timedelta):
        self._key = secret.encode("utf-8")
        self.max_age = max_age

    def _digest(self, session_id: str) -> str:
        return hmac.new(self._key, session_id.encode("utf-8"), hashlib.sha256).hexdigest()

    def create(self, db: Session, user_id: str) -> str:
        session_id = secrets.token_urlsafe(32)
        now = utcnow()
        db.add(
            UserSession(
                id_hash=self._digest(session_id),
                user_id=user_id,
                created_at=now,
                expires_at=now + self.max_age,
            )
        )
        db.commit()
        logger.info("session_created", user_id=user_id)
        return session_id

    def resolve(self, db: Session, session_id: Optional[str]) -> Optional[str]:
        if not session_id:
            return None
        record = db.get(UserSession, self._digest(session_id))
        if record is None:
            return None
        if record.expires_at <= utcnow():
            db.delete(record)
            db.commit()
            logger.info("session_expired", user_id=record.user_id)
            return None
        return record.user_id

    def destroy(self, db: Session, session_id: Optional[str]) -> None:
        if not session_id:
            return
        record = db.get(UserSession, self._digest(session_id))
        if record is None:
            return
        db.delete(record)
        db.commit()
        logger.info("session_destroyed", user_id=record.user_id)

    def destroy_all(self, db: Session, user_id: str) -> None:
        """Queue deletion of every session of a user; the caller commits."""
        db.exec(delete(UserSession).where(UserSession.user_id == user_id))
