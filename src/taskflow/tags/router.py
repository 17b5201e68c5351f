"""Tag endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.auth.schemas import MessageResponse
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.errors import raise_if_errors
from taskflow.tags.schemas import TagCreate, TagResponse, TagUpdate, tag_response
from taskflow.tags.service import (
    create_tag,
    delete_tag,
    get_tag,
    list_tags,
    task_counts_by_tag,
    update_tag,
)
from taskflow.tags.validation import validate_tag_create, validate_tag_update

router = APIRouter(prefix="/api/tags", tags=["Tags"])


@router.get("", response_model=list[TagResponse])
async def list_tags_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TagResponse]:
    """All of the user's tags, ordered by name, with task counts."""
    tags = await list_tags(db, user.id)
    counts = await task_counts_by_tag(db, user.id)
    return [tag_response(t, counts.get(t.id, 0)) for t in tags]


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag_endpoint(
    tag_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TagResponse:
    tag = await get_tag(db, user.id, tag_id)
    counts = await task_counts_by_tag(db, user.id)
    return tag_response(tag, counts.get(tag.id, 0))


@router.post("", response_model=TagResponse)
async def create_tag_endpoint(
    body: TagCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TagResponse:
    raise_if_errors(validate_tag_create(body))
    tag = await create_tag(db, user.id, name=body.name or "", color=body.color)
    await db.commit()
    return tag_response(tag)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag_endpoint(
    tag_id: int,
    body: TagUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TagResponse:
    raise_if_errors(validate_tag_update(body))
    tag = await update_tag(db, user.id, tag_id, name=body.name, color=body.color)
    await db.commit()
    counts = await task_counts_by_tag(db, user.id)
    return tag_response(tag, counts.get(tag.id, 0))


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag_endpoint(
    tag_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete a tag. Fails while any non-deleted task carries it."""
    await delete_tag(db, user.id, tag_id)
    await db.commit()
    return MessageResponse(message="Tag deleted successfully")
