"""
Task service: listing, creation and owner-only mutation of tasks.

Update and delete always check existence before ownership, so a missing
task reads as NotFound for every caller and Forbidden is only reported
for a task that exists but belongs to someone else.
"""

import math
from typing import Any, Dict, Optional

from ..models.requests import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    TaskCreateInput,
    TaskUpdateInput,
    parse_input,
    parse_positive_int,
)
from ..models.task import Task, TaskPage, TaskStats, TaskStatus
from ..utils.exceptions import ForbiddenError, NotFoundError
from ..utils.logger import get_logger
from .task_store import TaskStore

logger = get_logger(__name__)


class TaskService:
    """Task operations scoped to an authenticated owner"""

    def __init__(self, task_store: TaskStore):
        self.task_store = task_store

    def _owned_task(self, task_id: str, owner_id: str) -> Task:
        task = self.task_store.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task.owner != owner_id:
            logger.warning("Task ownership check failed", task_id=task_id, user_id=owner_id)
            raise ForbiddenError("User not authorized")
        return task

    def list_tasks(
        self,
        owner_id: str,
        page: Any = None,
        limit: Any = None,
        status: Optional[str] = None,
    ) -> TaskPage:
        """
        Return one page of the owner's tasks, newest first.

        page and limit come straight from the query string; anything that is
        not a positive integer falls back to page 1 / limit 10. A status
        outside the known values (including "all") means no filter.
        """
        page_number = parse_positive_int(page, DEFAULT_PAGE)
        page_size = parse_positive_int(limit, DEFAULT_LIMIT)
        status_filter = status if status in TaskStatus.values() else None

        skip = (page_number - 1) * page_size
        tasks, total = self.task_store.list_by_owner(owner_id, skip, page_size, status=status_filter)
        return TaskPage(
            tasks=tasks,
            page=page_number,
            limit=page_size,
            totalPages=math.ceil(total / page_size),
            totalTasks=total,
        )

    def create_task(self, owner_id: str, fields: Dict[str, Any]) -> Task:
        """
        Raises:
            ValidationError: missing/empty title or description, or unknown status.
        """
        data = parse_input(TaskCreateInput, fields)
        task = self.task_store.create(data.model_dump(mode="json"), owner_id)
        logger.info("Task created", task_id=task.id, user_id=owner_id)
        return task

    def update_task(self, task_id: str, owner_id: str, fields: Dict[str, Any]) -> Task:
        """
        Partial update of title, description and/or status.

        Raises:
            NotFoundError: no such task.
            ForbiddenError: the caller does not own it.
            ValidationError: a provided field fails its check.
        """
        self._owned_task(task_id, owner_id)
        data = parse_input(TaskUpdateInput, fields)
        task = self.task_store.update(task_id, data.model_dump(mode="json", exclude_none=True))
        logger.info("Task updated", task_id=task_id, user_id=owner_id)
        return task

    def delete_task(self, task_id: str, owner_id: str) -> str:
        """
        Raises:
            NotFoundError: no such task.
            ForbiddenError: the caller does not own it.
        """
        self._owned_task(task_id, owner_id)
        self.task_store.delete(task_id)
        logger.info("Task deleted", task_id=task_id, user_id=owner_id)
        return task_id

    def stats(self, owner_id: str) -> TaskStats:
        counts = {status: self.task_store.count_by_owner(owner_id, status) for status in TaskStatus.values()}
        return TaskStats(total=self.task_store.count_by_owner(owner_id), **counts)
