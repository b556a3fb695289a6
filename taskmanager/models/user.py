from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional, List
from uuid import uuid4

from .base import UTCDateTime, utcnow


class User(SQLModel, table=True):
    """User account, local (email + password hash) or Google-linked.

    At least one of ``email`` / ``google_id`` is set; a Google-only account
    has no ``password_hash``.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    email: Optional[str] = Field(default=None, unique=True, index=True)
    password_hash: Optional[str] = None
    google_id: Optional[str] = Field(default=None, unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    tasks: List["Task"] = Relationship(back_populates="user")
