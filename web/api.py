"""REST API routes: authentication, tasks and service endpoints"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from taskboard.app import TaskboardApp
from taskboard.auth.service import AuthService
from taskboard.models.task import Task, TaskPage, TaskStats
from taskboard.models.user import AuthResult, User, UserPublic
from taskboard.services.task_service import TaskService

from .auth_deps import get_auth_service, get_current_user, get_task_service, get_taskboard
from .models import HealthResponse, MessageResponse, TaskDeletedResponse

router = APIRouter(tags=["service"])
auth_router = APIRouter(prefix="/api/auth", tags=["auth"])
task_router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("/", response_model=MessageResponse)
def welcome() -> MessageResponse:
    return MessageResponse(message="Welcome to the Task API")


@router.get("/api/health", response_model=HealthResponse)
def health_check(taskboard: TaskboardApp = Depends(get_taskboard)) -> HealthResponse:
    healthy = taskboard.database.ping()
    return HealthResponse(status="ok" if healthy else "degraded", storage=taskboard.database.backend)


# ---- auth ----


@auth_router.post("/register", response_model=AuthResult, status_code=status.HTTP_201_CREATED)
def register(
    payload: Dict[str, Any] = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    """
    Register a new user.

    Request: {"name", "email", "password"}
    Response: {"_id", "name", "email", "token"}
    """
    return auth_service.register(
        payload.get("name"), payload.get("email"), payload.get("password")
    )


@auth_router.post("/login", response_model=AuthResult)
def login(
    payload: Dict[str, Any] = Body(...),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    return auth_service.login(payload.get("email"), payload.get("password"))


@auth_router.get("/me", response_model=UserPublic)
def me(current_user: User = Depends(get_current_user)) -> UserPublic:
    """Return the authenticated user (never the password hash)."""
    return current_user.public()


@auth_router.put("/profile", response_model=AuthResult)
def update_profile(
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResult:
    """Update name and/or email; the response carries a fresh token."""
    return auth_service.update_profile(current_user.id, payload)


# ---- tasks ----


@task_router.get("", response_model=TaskPage)
def list_tasks(
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskPage:
    return task_service.list_tasks(current_user.id, page=page, limit=limit, status=status_filter)


@task_router.get("/stats", response_model=TaskStats)
def task_stats(
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskStats:
    return task_service.stats(current_user.id)


@task_router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.create_task(current_user.id, payload)


@task_router.put("/{task_id}", response_model=Task)
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> Task:
    return task_service.update_task(task_id, current_user.id, payload)


@task_router.delete("/{task_id}", response_model=TaskDeletedResponse)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
) -> TaskDeletedResponse:
    return TaskDeletedResponse(id=task_service.delete_task(task_id, current_user.id))
