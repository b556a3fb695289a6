from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ..errors import NotFound, ValidationFailed
from ..logging import get_logger
from ..models import Task, User
from ..models.base import utcnow
from ..security import PasswordHasher
from .auth import get_user_by_email, normalize_email
from .sessions import SessionManager

logger = get_logger(__name__)


def update_profile(
    db: Session,
    hasher: PasswordHasher,
    user_id: str,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Change a user's email and/or password.

    A supplied password is always hashed afresh; absent fields are left alone.
    """
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")

    if email:
        email = normalize_email(email)
    if email and email != user.email:
        existing = get_user_by_email(db, email)
        if existing and existing.id != user_id:
            raise ValidationFailed("Email already exists.")
        user.email = email

    if password:
        user.password_hash = hasher.hash(password)

    user.updated_at = utcnow()
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Email already exists.")
    db.refresh(user)

    logger.info("profile_updated", user_id=user_id, password_changed=bool(password))
    return user


def delete_user(db: Session, sessions: SessionManager, user_id: str) -> None:
    """Remove a user together with their tasks and sessions in one transaction."""
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.")

    try:
        db.exec(delete(Task).where(Task.user_id == user_id))
        sessions.destroy_all(db, user_id)
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("user_deleted", user_id=user_id)
