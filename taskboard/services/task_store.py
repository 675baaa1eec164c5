"""
Task storage service.

Tasks live in the "tasks" collection keyed by ObjectId strings. Every task
document carries its owner in the "user" field.
"""

from typing import Any, Dict, List, Optional, Tuple

from ..models.task import Task, TaskStatus
from ..models.user import utcnow
from ..storage.base import ASCENDING, DESCENDING, Database, new_object_id
from ..utils.exceptions import NotFoundError
from ..utils.logger import get_logger

logger = get_logger(__name__)

TASKS_COLLECTION = "tasks"

# newest first; the id breaks ties between tasks created in the same instant
NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]

UPDATABLE_FIELDS = ("title", "description", "status")


class TaskStore:
    """CRUD and paging over task records"""

    def __init__(self, database: Database):
        self.tasks = database.collection(TASKS_COLLECTION)
        self.tasks.create_index([("user", ASCENDING), ("createdAt", DESCENDING)])

    def create(self, fields: Dict[str, Any], owner_id: str) -> Task:
        now = utcnow()
        task = Task(
            _id=new_object_id(),
            title=fields["title"],
            description=fields["description"],
            status=fields.get("status") or TaskStatus.PENDING,
            user=owner_id,
            createdAt=now,
            updatedAt=now,
        )
        self.tasks.insert_one(task.to_document())
        return task

    def find_by_id(self, task_id: str) -> Optional[Task]:
        document = self.tasks.find_one({"_id": task_id})
        return None if document is None else Task.model_validate(document)

    def list_by_owner(
        self,
        owner_id: str,
        offset: int,
        page_size: int,
        status: Optional[str] = None,
    ) -> Tuple[List[Task], int]:
        """Return (page of tasks newest first, total matching count)."""
        query: Dict[str, Any] = {"user": owner_id}
        if status:
            query["status"] = status
        total = self.tasks.count(query)
        documents = self.tasks.find(query, sort=NEWEST_FIRST, skip=offset, limit=page_size)
        return [Task.model_validate(d) for d in documents], total

    def count_by_owner(self, owner_id: str, status: Optional[str] = None) -> int:
        query: Dict[str, Any] = {"user": owner_id}
        if status:
            query["status"] = status
        return self.tasks.count(query)

    def update(self, task_id: str, fields: Dict[str, Any]) -> Task:
        """Apply a partial update; owner and timestamps other than updatedAt are untouched.

        Raises:
            NotFoundError: the task vanished.
        """
        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS and v is not None}
        updates["updatedAt"] = utcnow()
        document = self.tasks.update_one(task_id, updates)
        if document is None:
            raise NotFoundError("Task not found")
        return Task.model_validate(document)

    def delete(self, task_id: str) -> None:
        if not self.tasks.delete_one(task_id):
            raise NotFoundError("Task not found")
