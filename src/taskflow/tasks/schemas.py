"""Request/response schemas for task endpoints."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from taskflow.db.models import Task
from taskflow.db.types import parse_enum
from taskflow.tasks.dates import is_overdue, utcnow


class BulkOperation(str, Enum):
    DELETE = "DELETE"
    COMPLETE = "COMPLETE"
    MOVE_TO_CATEGORY = "MOVE_TO_CATEGORY"
    UPDATE_STATUS = "UPDATE_STATUS"


# Short form accepted as an alias.
_BULK_ALIASES = {"MOVE_CATEGORY": BulkOperation.MOVE_TO_CATEGORY}


def parse_bulk_operation(raw: str | None) -> BulkOperation | None:
    if not raw:
        return None
    key = raw.strip().upper()
    return _BULK_ALIASES.get(key) or parse_enum(BulkOperation, key)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class TaskCreate(BaseModel):
    title: str | None = None
    description: str | None = None
    priority: str | None = None
    dueDate: datetime | None = None
    categoryId: int | None = None
    tagIds: list[int] | None = None


class TaskUpdate(BaseModel):
    """Partial update sent with PUT. Omitted or null fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    dueDate: datetime | None = None
    categoryId: int | None = None
    tagIds: list[int] | None = None


class TaskImportItem(TaskCreate):
    """One element of an imported JSON array. Unknown keys (e.g. exported ids) are ignored."""

    status: str | None = None


class StatusUpdate(BaseModel):
    status: str | None = None


class BulkOperationRequest(BaseModel):
    operation: str | None = None
    taskIds: list[int] = []
    categoryId: int | None = None
    status: str | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TagSummary(BaseModel):
    id: int
    name: str
    color: str


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    status: str
    priority: str
    dueDate: datetime | None = None
    completedAt: datetime | None = None
    createdAt: datetime
    updatedAt: datetime
    categoryId: int | None = None
    categoryName: str | None = None
    categoryColor: str | None = None
    tags: list[TagSummary] = []
    overdue: bool = False


class TaskPage(BaseModel):
    content: list[TaskResponse]
    page: int
    size: int
    totalElements: int
    totalPages: int


class BulkOperationResponse(BaseModel):
    operation: str
    count: int


class ImportItemError(BaseModel):
    index: int
    message: str


class ImportResponse(BaseModel):
    imported: int
    errors: list[ImportItemError] = []


def task_response(task: Task, now: datetime | None = None) -> TaskResponse:
    """Build a TaskResponse; ``overdue`` is derived against ``now``."""
    now = now or utcnow()
    category = task.category
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status.value,
        priority=task.priority.value,
        dueDate=task.due_date,
        completedAt=task.completed_at,
        createdAt=task.created_at,
        updatedAt=task.updated_at,
        categoryId=category.id if category is not None else None,
        categoryName=category.name if category is not None else None,
        categoryColor=category.color if category is not None else None,
        tags=[TagSummary(id=t.id, name=t.name, color=t.color) for t in task.tags],
        overdue=is_overdue(task, now),
    )
