"""Category request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from taskflow.categories.service import TaskCounts
from taskflow.db.models import Category


class CategoryCreate(BaseModel):
    name: str | None = None
    color: str | None = None
    description: str | None = None


class CategoryUpdate(BaseModel):
    """Partial update. Omitted or null fields are left unchanged."""

    name: str | None = None
    color: str | None = None
    description: str | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    color: str
    description: str | None = None
    createdAt: datetime
    updatedAt: datetime
    taskCount: int = 0
    completedTaskCount: int = 0
    pendingTaskCount: int = 0


def category_response(category: Category, counts: TaskCounts | None = None) -> CategoryResponse:
    counts = counts or TaskCounts()
    return CategoryResponse(
        id=category.id,
        name=category.name,
        color=category.color,
        description=category.description,
        createdAt=category.created_at,
        updatedAt=category.updated_at,
        taskCount=counts.total,
        completedTaskCount=counts.completed,
        pendingTaskCount=counts.pending,
    )
