"""
Task lifecycle business logic.

Status rules:
- ``completed_at`` is set exactly when status is COMPLETED and cleared otherwise.
- Delete is a soft delete (status DELETED); rows are never removed here.
- Categories and tags attached to a task must belong to the task's owner.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError
from sqlalchemy import select

from taskflow.db.models import Category, Tag, Task
from taskflow.db.repository import OwnedRepository
from taskflow.db.types import TaskPriority, TaskStatus, ensure_utc, parse_enum
from taskflow.errors import Invalid, NotFound
from taskflow.tasks.dates import today_window, upcoming_window, utcnow
from taskflow.tasks.query import TaskFilter, order_by_for
from taskflow.tasks.schemas import BulkOperation, TaskImportItem, task_response
from taskflow.tasks.validation import validate_import_item

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

SUPPORTED_FORMATS = frozenset({"json"})


def _repo(db: AsyncSession) -> OwnedRepository[Task]:
    return OwnedRepository(db, Task)


def _check_format(fmt: str, action: str) -> None:
    if (fmt or "").strip().lower() not in SUPPORTED_FORMATS:
        msg = f"Unsupported {action} format: {fmt}"
        raise Invalid(msg)


def apply_status(task: Task, status: TaskStatus, now: datetime | None = None) -> None:
    """Set ``status`` and keep ``completed_at`` consistent with it."""
    now = now or utcnow()
    if status == TaskStatus.COMPLETED:
        if task.status != TaskStatus.COMPLETED or task.completed_at is None:
            task.completed_at = now
    else:
        task.completed_at = None
    task.status = status
    task.updated_at = now


# ---------------------------------------------------------------------------
# Ownership checks for related rows
# ---------------------------------------------------------------------------


async def _owned_category(db: AsyncSession, user_id: int, category_id: int) -> Category:
    return await OwnedRepository(db, Category).get_for_owner(category_id, user_id)


async def _owned_tags(db: AsyncSession, user_id: int, tag_ids: Sequence[int]) -> list[Tag]:
    """Resolve ``tag_ids`` for the owner. Any id not owned raises NotFound."""
    unique_ids = list(dict.fromkeys(tag_ids))
    tags = await OwnedRepository(db, Tag).list_by_ids_for_owner(unique_ids, user_id)
    found = {t.id for t in tags}
    missing = [i for i in unique_ids if i not in found]
    if missing:
        msg = f"Tag not found with id: {missing[0]}"
        raise NotFound(msg)
    return sorted(tags, key=lambda t: t.name)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_task(
    db: AsyncSession,
    user_id: int,
    title: str,
    description: str | None = None,
    priority: TaskPriority | None = None,
    due_date: datetime | None = None,
    category_id: int | None = None,
    tag_ids: Sequence[int] | None = None,
) -> Task:
    """
    Create a PENDING task.

    Raises:
        NotFound: If the category or any tag does not exist for this owner.
    """
    category = await _owned_category(db, user_id, category_id) if category_id is not None else None
    tags = await _owned_tags(db, user_id, tag_ids) if tag_ids else []

    now = utcnow()
    task = Task(
        user_id=user_id,
        title=title.strip(),
        description=description,
        status=TaskStatus.PENDING,
        priority=priority or TaskPriority.MEDIUM,
        due_date=ensure_utc(due_date) if due_date is not None else None,
        category=category,
        tags=tags,
        created_at=now,
        updated_at=now,
    )
    await _repo(db).save(task)
    logger.info("task_created", user_id=user_id, task_id=task.id)
    return task


async def get_task(db: AsyncSession, user_id: int, task_id: int) -> Task:
    """Raises NotFound if absent or owned by someone else."""
    return await _repo(db).get_for_owner(task_id, user_id)


async def list_tasks(
    db: AsyncSession,
    user_id: int,
    filters: TaskFilter,
    page: int = 0,
    size: int = 20,
    sort: str = "createdAt,desc",
) -> tuple[list[Task], int]:
    """
    One page of the owner's tasks matching all given filters.

    Returns:
        Tuple of (tasks on this page, total matching tasks).
    """
    criteria = filters.criteria()
    total = await _repo(db).count_for_owner(user_id, *criteria)
    result = await db.execute(
        select(Task)
        .where(Task.user_id == user_id, *criteria)
        .order_by(*order_by_for(sort))
        .offset(page * size)
        .limit(size)
    )
    return list(result.scalars().all()), total


def total_pages(total: int, size: int) -> int:
    return math.ceil(total / size) if size > 0 else 0


async def update_task(
    db: AsyncSession,
    user_id: int,
    task_id: int,
    title: str | None = None,
    description: str | None = None,
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
    due_date: datetime | None = None,
    category_id: int | None = None,
    tag_ids: Sequence[int] | None = None,
) -> Task:
    """
    Apply a partial update: provided values overwrite, ``None`` leaves a field unchanged.

    An empty ``tag_ids`` list clears the task's tags.

    Raises:
        NotFound: If the task, category or a tag is absent or not owned.
    """
    task = await get_task(db, user_id, task_id)
    now = utcnow()

    if category_id is not None:
        task.category = await _owned_category(db, user_id, category_id)
    if tag_ids is not None:
        task.tags = await _owned_tags(db, user_id, tag_ids)
    if title is not None:
        task.title = title.strip()
    if description is not None:
        task.description = description
    if priority is not None:
        task.priority = priority
    if due_date is not None:
        task.due_date = ensure_utc(due_date)
    if status is not None:
        apply_status(task, status, now)

    task.updated_at = now
    await db.flush()
    logger.info("task_updated", user_id=user_id, task_id=task.id)
    return task


async def set_status(db: AsyncSession, user_id: int, task_id: int, status: TaskStatus) -> Task:
    task = await get_task(db, user_id, task_id)
    previous = task.status
    apply_status(task, status)
    await db.flush()
    logger.info(
        "task_status_changed",
        user_id=user_id,
        task_id=task.id,
        previous=previous.value,
        status=status.value,
    )
    return task


async def delete_task(db: AsyncSession, user_id: int, task_id: int) -> Task:
    """Soft delete. Deleting an already deleted task is a no-op."""
    task = await get_task(db, user_id, task_id)
    if task.status != TaskStatus.DELETED:
        apply_status(task, TaskStatus.DELETED)
        await db.flush()
        logger.info("task_deleted", user_id=user_id, task_id=task.id)
    return task


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------


async def bulk_operate(
    db: AsyncSession,
    user_id: int,
    operation: BulkOperation,
    task_ids: Sequence[int],
    category_id: int | None = None,
    status: TaskStatus | None = None,
) -> int:
    """
    Apply ``operation`` to every listed task the caller owns.

    Ids that are missing or belong to someone else are skipped silently.

    Returns:
        Number of owned tasks processed.

    Raises:
        Invalid: If a required operand (category id, status) is missing.
        NotFound: If the move target category is not owned.
    """
    category: Category | None = None
    if operation is BulkOperation.MOVE_TO_CATEGORY:
        if category_id is None:
            msg = "Category ID is required for move operation"
            raise Invalid(msg)
        category = await _owned_category(db, user_id, category_id)
    if operation is BulkOperation.UPDATE_STATUS and status is None:
        msg = "Status is required for update_status operation"
        raise Invalid(msg)

    tasks = await _repo(db).list_by_ids_for_owner(list(dict.fromkeys(task_ids)), user_id)
    now = utcnow()
    for task in tasks:
        if operation is BulkOperation.DELETE:
            apply_status(task, TaskStatus.DELETED, now)
        elif operation is BulkOperation.COMPLETE:
            apply_status(task, TaskStatus.COMPLETED, now)
        elif operation is BulkOperation.UPDATE_STATUS and status is not None:
            apply_status(task, status, now)
        elif operation is BulkOperation.MOVE_TO_CATEGORY:
            task.category = category
            task.updated_at = now

    await db.flush()
    logger.info(
        "bulk_operation",
        user_id=user_id,
        operation=operation.value,
        requested=len(set(task_ids)),
        processed=len(tasks),
    )
    return len(tasks)


# ---------------------------------------------------------------------------
# Derived lists
# ---------------------------------------------------------------------------


async def list_overdue(db: AsyncSession, user_id: int, now: datetime | None = None) -> list[Task]:
    """PENDING tasks whose due date has passed, oldest due first."""
    now = now or utcnow()
    return await _repo(db).list_for_owner(
        user_id,
        Task.status == TaskStatus.PENDING,
        Task.due_date < now,
        order_by=(Task.due_date.asc(), Task.id.asc()),
    )


async def list_due_between(
    db: AsyncSession,
    user_id: int,
    start: datetime,
    end: datetime,
) -> list[Task]:
    """PENDING tasks with ``start <= due_date < end``, soonest first."""
    return await _repo(db).list_for_owner(
        user_id,
        Task.status == TaskStatus.PENDING,
        Task.due_date >= start,
        Task.due_date < end,
        order_by=(Task.due_date.asc(), Task.id.asc()),
    )


async def list_due_today(db: AsyncSession, user_id: int, now: datetime | None = None) -> list[Task]:
    start, end = today_window(now or utcnow())
    return await list_due_between(db, user_id, start, end)


async def list_upcoming(db: AsyncSession, user_id: int, now: datetime | None = None, days: int = 7) -> list[Task]:
    start, end = upcoming_window(now or utcnow(), days)
    return await list_due_between(db, user_id, start, end)


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


async def export_tasks(db: AsyncSession, user_id: int, fmt: str) -> str:
    """
    Serialize the owner's non-deleted tasks.

    Raises:
        Invalid: For any format other than JSON.
    """
    _check_format(fmt, "export")
    tasks = await _repo(db).list_for_owner(
        user_id,
        Task.status != TaskStatus.DELETED,
        order_by=(Task.created_at.asc(), Task.id.asc()),
    )
    now = utcnow()
    payload = [task_response(t, now).model_dump(mode="json") for t in tasks]
    logger.info("tasks_exported", user_id=user_id, count=len(payload), format="json")
    return json.dumps(payload, indent=2)


async def import_tasks(
    db: AsyncSession,
    user_id: int,
    items: Sequence[Any],
    fmt: str,
) -> tuple[int, list[tuple[int, str]]]:
    """
    Create tasks from a decoded JSON array.

    Each element is validated like a create request. Invalid elements are
    skipped and reported by index; valid ones are created.

    Returns:
        Tuple of (number imported, [(index, error message), ...]).

    Raises:
        Invalid: For any format other than JSON.
    """
    _check_format(fmt, "import")
    imported = 0
    errors: list[tuple[int, str]] = []

    for index, raw in enumerate(items):
        try:
            item = TaskImportItem.model_validate(raw)
        except ValidationError as e:
            errors.append((index, "; ".join(str(err["msg"]) for err in e.errors())))
            continue

        field_errors = validate_import_item(item)
        if field_errors:
            errors.append((index, "; ".join(f"{fe.field}: {fe.message}" for fe in field_errors)))
            continue

        try:
            task = await create_task(
                db,
                user_id,
                title=item.title or "",
                description=item.description,
                priority=parse_enum(TaskPriority, item.priority),
                due_date=item.dueDate,
                category_id=item.categoryId,
                tag_ids=item.tagIds,
            )
        except NotFound as e:
            errors.append((index, e.detail))
            continue

        status = parse_enum(TaskStatus, item.status)
        if status is not None and status != TaskStatus.PENDING:
            apply_status(task, status)
        imported += 1

    await db.flush()
    logger.info("tasks_imported", user_id=user_id, imported=imported, failed=len(errors))
    return imported, errors
