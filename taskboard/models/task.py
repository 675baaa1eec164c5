"""Task data models"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .user import utcnow


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class Task(BaseModel):
    """Stored task. `owner` is set once at creation and never reassigned."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, use_enum_values=True)

    id: str = Field(alias="_id")
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    owner: str = Field(alias="user")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class TaskPage(BaseModel):
    """One page of a user's tasks"""

    model_config = ConfigDict(populate_by_name=True)

    tasks: List[Task]
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")
    total_tasks: int = Field(alias="totalTasks")


class TaskStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
