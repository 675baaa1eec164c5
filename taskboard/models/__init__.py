"""Data models"""

from .task import Task, TaskPage, TaskStats, TaskStatus
from .user import AuthResult, User, UserPublic

__all__ = [
    "AuthResult",
    "Task",
    "TaskPage",
    "TaskStats",
    "TaskStatus",
    "User",
    "UserPublic",
]
