"""
FastAPI dependencies for authentication.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from taskboard.app import TaskboardApp
from taskboard.auth.service import AuthService
from taskboard.models.user import User
from taskboard.services.task_service import TaskService


def get_taskboard(request: Request) -> TaskboardApp:
    """The application container stored on app.state by create_app"""
    return request.app.state.taskboard


def get_auth_service(taskboard: TaskboardApp = Depends(get_taskboard)) -> AuthService:
    return taskboard.auth_service


def get_task_service(taskboard: TaskboardApp = Depends(get_taskboard)) -> TaskService:
    return taskboard.task_service


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Dependency for protected routes.

    Reads `Authorization: Bearer <token>` only and re-fetches the user so a
    deleted account stops working immediately. Raises UnauthenticatedError
    (401) otherwise.
    """
    return auth_service.authenticate_header(authorization)
