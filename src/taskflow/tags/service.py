"""
Tag business logic.

Names are unique per owner. A tag cannot be deleted while any non-deleted
task carries it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, select

from taskflow.db.models import Tag, Task, task_tags
from taskflow.db.repository import OwnedRepository, unique_guard
from taskflow.db.types import TaskStatus
from taskflow.errors import Conflict, Invalid

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_TAG_COLOR = "#6B7280"


def _repo(db: AsyncSession) -> OwnedRepository[Tag]:
    return OwnedRepository(db, Tag)


def _duplicate_name(name: str) -> Conflict:
    return Conflict(f"Tag with name '{name}' already exists")


async def task_counts_by_tag(db: AsyncSession, user_id: int) -> dict[int, int]:
    """Number of the owner's non-deleted tasks carrying each tag."""
    result = await db.execute(
        select(task_tags.c.tag_id, func.count())
        .join(Task, Task.id == task_tags.c.task_id)
        .where(Task.user_id == user_id, Task.status != TaskStatus.DELETED)
        .group_by(task_tags.c.tag_id)
    )
    return {tag_id: int(count) for tag_id, count in result.all()}


async def list_tags(db: AsyncSession, user_id: int) -> list[Tag]:
    return await _repo(db).list_for_owner(user_id, order_by=(Tag.name,))


async def get_tag(db: AsyncSession, user_id: int, tag_id: int) -> Tag:
    """Raises NotFound if absent or owned by someone else."""
    return await _repo(db).get_for_owner(tag_id, user_id)


async def create_tag(db: AsyncSession, user_id: int, name: str, color: str | None = None) -> Tag:
    """
    Create a tag.

    Raises:
        Conflict: If the owner already has a tag with this name.
    """
    repo = _repo(db)
    name = name.strip()
    if await repo.exists_by_name_for_owner(name, user_id):
        raise _duplicate_name(name)

    now = datetime.now(timezone.utc)
    tag = Tag(
        user_id=user_id,
        name=name,
        color=color or DEFAULT_TAG_COLOR,
        created_at=now,
        updated_at=now,
    )
    async with unique_guard(db, _duplicate_name(name)):
        await repo.save(tag)
    logger.info("tag_created", user_id=user_id, tag_id=tag.id)
    return tag


async def update_tag(
    db: AsyncSession,
    user_id: int,
    tag_id: int,
    name: str | None = None,
    color: str | None = None,
) -> Tag:
    """
    Partially update a tag. The name is re-checked only when it changes.

    Raises:
        NotFound: If the tag is absent or not owned.
        Conflict: If the new name collides with another of the owner's tags.
    """
    repo = _repo(db)
    tag = await repo.get_for_owner(tag_id, user_id)

    if name is not None:
        name = name.strip()
        if name != tag.name:
            if await repo.exists_by_name_for_owner(name, user_id, exclude_id=tag.id):
                raise _duplicate_name(name)
            async with unique_guard(db, _duplicate_name(name)):
                tag.name = name
    if color is not None:
        tag.color = color

    tag.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("tag_updated", user_id=user_id, tag_id=tag.id)
    return tag


async def delete_tag(db: AsyncSession, user_id: int, tag_id: int) -> None:
    """
    Hard-delete a tag that no live task carries.

    Links from soft-deleted tasks are removed first.

    Raises:
        NotFound: If the tag is absent or not owned.
        Invalid: If a non-deleted task carries the tag.
    """
    repo = _repo(db)
    tag = await repo.get_for_owner(tag_id, user_id)

    result = await db.execute(
        select(func.count())
        .select_from(task_tags)
        .join(Task, Task.id == task_tags.c.task_id)
        .where(task_tags.c.tag_id == tag.id, Task.status != TaskStatus.DELETED)
    )
    if int(result.scalar_one()) > 0:
        msg = "Cannot delete tag that is used by tasks"
        raise Invalid(msg)

    await db.execute(delete(task_tags).where(task_tags.c.tag_id == tag.id))
    await repo.delete_for_owner(tag.id, user_id)
    logger.info("tag_deleted", user_id=user_id, tag_id=tag.id)
