from sqlmodel import SQLModel, Field
from datetime import datetime

from .base import UTCDateTime, utcnow


class UserSession(SQLModel, table=True):
    """Server-side login session.

    Only a keyed digest of the cookie value is stored, never the value itself.
    """
    __tablename__ = "sessions"

    id_hash: str = Field(primary_key=True)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    expires_at: datetime = Field(sa_type=UTCDateTime)
