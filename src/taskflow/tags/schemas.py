"""Tag request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from taskflow.db.models import Tag


class TagCreate(BaseModel):
    name: str | None = None
    color: str | None = None


class TagUpdate(BaseModel):
    """Partial update. Omitted or null fields are left unchanged."""

    name: str | None = None
    color: str | None = None


class TagResponse(BaseModel):
    id: int
    name: str
    color: str
    createdAt: datetime
    updatedAt: datetime
    taskCount: int = 0


def tag_response(tag: Tag, task_count: int = 0) -> TagResponse:
    return TagResponse(
        id=tag.id,
        name=tag.name,
        color=tag.color,
        createdAt=tag.created_at,
        updatedAt=tag.updated_at,
        taskCount=task_count,
    )
