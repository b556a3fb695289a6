from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List, Optional

from ..models.task import TaskStatus


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case keys, renders camelCase."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class TaskCreate(CamelModel):
    """Schema for creating new tasks."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date_is_none(cls, value):
        return None if value == "" else value


class TaskUpdate(CamelModel):
    """Schema for updating existing tasks; only fields the client sends are applied."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date_is_none(cls, value):
        # An explicit "" clears the due date.
        return None if value == "" else value


class Task(CamelModel):
    """Complete task schema with all fields."""
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    due_date: Optional[datetime] = None
    user_id: str
    created_at: datetime
    updated_at: datetime


class TaskResponse(BaseModel):
    message: str
    task: Task


class TaskListResponse(BaseModel):
    message: str
    tasks: List[Task]
