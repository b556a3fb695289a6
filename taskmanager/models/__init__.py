from .task import Task, TaskStatus
from .user import User
from .session import UserSession

# Export all models for easy importing
__all__ = ["Task", "TaskStatus", "User", "UserSession"]
