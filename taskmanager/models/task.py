from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, Enum as SAEnum
from datetime import datetime
from typing import Optional
from uuid import uuid4
import enum

from .base import UTCDateTime, utcnow


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Task(SQLModel, table=True):
    """Task owned by exactly one user."""
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=Column(
            SAEnum(
                TaskStatus,
                name="task_status",
                values_callable=lambda statuses: [s.value for s in statuses],
            ),
            nullable=False,
            default=TaskStatus.PENDING,
        ),
    )
    due_date: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime, index=True)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    user_id: str = Field(foreign_key="users.id", ondelete="CASCADE", index=True)

    # Relationship back to user
    user: Optional["User"] = Relationship(back_populates="tasks")
