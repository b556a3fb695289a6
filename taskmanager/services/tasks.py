from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from ..errors import NotFound, ValidationFailed
from ..logging import get_logger
from ..models import Task, TaskStatus
from ..models.base import utcnow

logger = get_logger(__name__)

# Fields a client may change, and which of them accept an explicit null.
UPDATABLE_FIELDS = ("title", "description", "status", "due_date")
NULLABLE_FIELDS = ("description", "due_date")


def _owned_task(db: Session, owner_id: str, task_id: str) -> Task:
    task = db.exec(select(Task).where(Task.id == task_id, Task.user_id == owner_id)).first()
    if not task:
        raise NotFound("Task not found.")
    return task


def list_tasks(db: Session, owner_id: str) -> List[Task]:
    """All tasks of one owner, newest first."""
    query = select(Task).where(Task.user_id == owner_id).order_by(Task.created_at.desc())
    return list(db.exec(query).all())


def get_task(db: Session, owner_id: str, task_id: str) -> Task:
    return _owned_task(db, owner_id, task_id)


def create_task(
    db: Session,
    owner_id: str,
    title: Optional[str],
    description: Optional[str] = None,
    status: Optional[TaskStatus] = None,
    due_date: Optional[datetime] = None,
) -> Task:
    if not title or not title.strip():
        raise ValidationFailed("Task title is required.")

    task = Task(
        title=title,
        description=description,
        status=status or TaskStatus.PENDING,
        due_date=due_date,
        user_id=owner_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task_created", task_id=task.id, user_id=owner_id)
    return task


def update_task(db: Session, owner_id: str, task_id: str, changes: Dict[str, Any]) -> Task:
    """Apply a partial update.

    ``changes`` holds only the fields the client actually sent. A nullable
    field that is present is written even when empty; ``title`` and
    ``status`` keep their value when sent empty.
    """
    task = _owned_task(db, owner_id, task_id)

    for field in UPDATABLE_FIELDS:
        if field not in changes:
            continue
        value = changes[field]
        if field in NULLABLE_FIELDS:
            setattr(task, field, value)
        elif value:
            setattr(task, field, value)

    task.updated_at = utcnow()
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, owner_id: str, task_id: str) -> None:
    task = _owned_task(db, owner_id, task_id)
    db.delete(task)
    db.commit()
    logger.info("task_deleted", task_id=task_id, user_id=owner_id)
