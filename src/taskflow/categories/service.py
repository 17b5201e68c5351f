"""
Category business logic.

Names are unique per owner. A category cannot be deleted while any
non-deleted task still references it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, NamedTuple

import structlog
from sqlalchemy import func, select, update

from taskflow.db.models import Category, Task
from taskflow.db.repository import OwnedRepository, unique_guard
from taskflow.db.types import TaskStatus
from taskflow.errors import Conflict, Invalid

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_CATEGORY_COLOR = "#3B82F6"


class TaskCounts(NamedTuple):
    total: int = 0
    completed: int = 0
    pending: int = 0


def _repo(db: AsyncSession) -> OwnedRepository[Category]:
    return OwnedRepository(db, Category)


def _duplicate_name(name: str) -> Conflict:
    return Conflict(f"Category with name '{name}' already exists")


async def task_counts_by_category(db: AsyncSession, user_id: int) -> dict[int, TaskCounts]:
    """Per-category counts of the owner's non-deleted tasks."""
    result = await db.execute(
        select(Task.category_id, Task.status, func.count())
        .where(
            Task.user_id == user_id,
            Task.category_id.is_not(None),
            Task.status != TaskStatus.DELETED,
        )
        .group_by(Task.category_id, Task.status)
    )
    raw: dict[int, dict[TaskStatus, int]] = {}
    for category_id, status, count in result.all():
        raw.setdefault(category_id, {})[status] = int(count)
    return {
        category_id: TaskCounts(
            total=sum(by_status.values()),
            completed=by_status.get(TaskStatus.COMPLETED, 0),
            pending=by_status.get(TaskStatus.PENDING, 0),
        )
        for category_id, by_status in raw.items()
    }


async def list_categories(db: AsyncSession, user_id: int) -> list[Category]:
    return await _repo(db).list_for_owner(user_id, order_by=(Category.name,))


async def get_category(db: AsyncSession, user_id: int, category_id: int) -> Category:
    """Raises NotFound if absent or owned by someone else."""
    return await _repo(db).get_for_owner(category_id, user_id)


async def create_category(
    db: AsyncSession,
    user_id: int,
    name: str,
    color: str | None = None,
    description: str | None = None,
) -> Category:
    """
    Create a category.

    Raises:
        Conflict: If the owner already has a category with this name.
    """
    repo = _repo(db)
    name = name.strip()
    if await repo.exists_by_name_for_owner(name, user_id):
        raise _duplicate_name(name)

    now = datetime.now(timezone.utc)
    category = Category(
        user_id=user_id,
        name=name,
        color=color or DEFAULT_CATEGORY_COLOR,
        description=description,
        created_at=now,
        updated_at=now,
    )
    async with unique_guard(db, _duplicate_name(name)):
        await repo.save(category)
    logger.info("category_created", user_id=user_id, category_id=category.id)
    return category


async def update_category(
    db: AsyncSession,
    user_id: int,
    category_id: int,
    name: str | None = None,
    color: str | None = None,
    description: str | None = None,
) -> Category:
    """
    Partially update a category. The name is re-checked only when it changes.

    Raises:
        NotFound: If the category is absent or not owned.
        Conflict: If the new name collides with another of the owner's categories.
    """
    repo = _repo(db)
    category = await repo.get_for_owner(category_id, user_id)

    if name is not None:
        name = name.strip()
        if name != category.name:
            if await repo.exists_by_name_for_owner(name, user_id, exclude_id=category.id):
                raise _duplicate_name(name)
            async with unique_guard(db, _duplicate_name(name)):
                category.name = name
    if color is not None:
        category.color = color
    if description is not None:
        category.description = description

    category.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("category_updated", user_id=user_id, category_id=category.id)
    return category


async def delete_category(db: AsyncSession, user_id: int, category_id: int) -> None:
    """
    Hard-delete a category that no live task references.

    Soft-deleted tasks that still point at it are detached first.

    Raises:
        NotFound: If the category is absent or not owned.
        Invalid: If a non-deleted task references the category.
    """
    repo = _repo(db)
    category = await repo.get_for_owner(category_id, user_id)

    result = await db.execute(
        select(func.count())
        .select_from(Task)
        .where(Task.category_id == category.id, Task.status != TaskStatus.DELETED)
    )
    if int(result.scalar_one()) > 0:
        msg = "Cannot delete category with existing tasks"
        raise Invalid(msg)

    await db.execute(
        update(Task).where(Task.category_id == category.id).values(category_id=None),
        execution_options={"synchronize_session": False},
    )
    await repo.delete_for_owner(category.id, user_id)
    logger.info("category_deleted", user_id=user_id, category_id=category.id)
