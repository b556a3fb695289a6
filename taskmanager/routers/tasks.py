from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ..database import get_db
from ..models import User
from ..schemas.task import TaskCreate, TaskListResponse, TaskResponse, TaskUpdate
from ..schemas.user import MessageResponse
from ..services import tasks as task_service
from .auth import get_current_user

router = APIRouter()


@router.get("", response_model=TaskListResponse)
def get_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get all tasks of the current user, newest first."""
    return {
        "message": "Tasks fetched successfully.",
        "tasks": task_service.list_tasks(db, current_user.id),
    }


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task for the user."""
    db_task = task_service.create_task(
        db,
        current_user.id,
        title=task.title,
        description=task.description,
        status=task.status,
        due_date=task.due_date,
    )
    return {"message": "Task created successfully!", "task": db_task}


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get a specific task by ID."""
    return {
        "message": "Task fetched successfully.",
        "task": task_service.get_task(db, current_user.id, task_id),
    }


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update a specific task; fields missing from the body are kept."""
    task = task_service.update_task(
        db, current_user.id, task_id, task_update.model_dump(exclude_unset=True)
    )
    return {"message": "Task updated successfully!", "task": task}


@router.delete("/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a specific task."""
    task_service.delete_task(db, current_user.id, task_id)
    return {"message": "Task deleted successfully!"}
