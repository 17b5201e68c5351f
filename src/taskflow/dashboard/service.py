"""Dashboard aggregation.

Read-only rollups over the owner's tasks. DELETED tasks never count toward
any total.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import func, select

from taskflow.config import get_settings
from taskflow.db.models import Task
from taskflow.db.types import TaskStatus
from taskflow.tasks.dates import today_window, upcoming_window, utcnow
from taskflow.tasks.service import list_due_today, list_overdue, list_upcoming

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement


class TaskStatistics(NamedTuple):
    total: int
    completed: int
    pending: int
    overdue: int
    today: int
    upcoming: int
    completion_rate: float


class RecentActivity(NamedTuple):
    recent_tasks: list[Task]
    completed_this_week: int
    created_this_week: int


def completion_rate(completed: int, total: int) -> float:
    """Percentage of completed tasks, rounded half up to 2 places. 0.0 when there are none."""
    if total <= 0:
        return 0.0
    rate = Decimal(str(completed / total * 100))
    return float(rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


async def _count(db: AsyncSession, user_id: int, *criteria: ColumnElement[bool]) -> int:
    result = await db.execute(
        select(func.count()).select_from(Task).where(Task.user_id == user_id, *criteria)
    )
    return int(result.scalar_one())


async def get_statistics(db: AsyncSession, user_id: int, now: datetime | None = None) -> TaskStatistics:
    now = now or utcnow()
    settings = get_settings()

    rows = await db.execute(
        select(Task.status, func.count())
        .where(Task.user_id == user_id, Task.status != TaskStatus.DELETED)
        .group_by(Task.status)
    )
    by_status = {status: int(count) for status, count in rows.all()}
    completed = by_status.get(TaskStatus.COMPLETED, 0)
    pending = by_status.get(TaskStatus.PENDING, 0)
    total = completed + pending

    pending_clause = Task.status == TaskStatus.PENDING
    overdue = await _count(db, user_id, pending_clause, Task.due_date < now)
    today_start, today_end = today_window(now)
    today = await _count(db, user_id, pending_clause, Task.due_date >= today_start, Task.due_date < today_end)
    up_start, up_end = upcoming_window(now, settings.upcoming_window_days)
    upcoming = await _count(db, user_id, pending_clause, Task.due_date >= up_start, Task.due_date < up_end)

    return TaskStatistics(
        total=total,
        completed=completed,
        pending=pending,
        overdue=overdue,
        today=today,
        upcoming=upcoming,
        completion_rate=completion_rate(completed, total),
    )


async def get_today_tasks(db: AsyncSession, user_id: int, now: datetime | None = None) -> list[Task]:
    return await list_due_today(db, user_id, now)


async def get_upcoming_tasks(db: AsyncSession, user_id: int, now: datetime | None = None) -> list[Task]:
    return await list_upcoming(db, user_id, now, days=get_settings().upcoming_window_days)


async def get_overdue_tasks(db: AsyncSession, user_id: int, now: datetime | None = None) -> list[Task]:
    return await list_overdue(db, user_id, now)


async def get_recent_activity(db: AsyncSession, user_id: int, now: datetime | None = None) -> RecentActivity:
    """Tasks created recently (newest first) plus completed/created counts for the last 7 days."""
    now = now or utcnow()
    recent_since = now - timedelta(days=get_settings().recent_activity_days)
    week_ago = now - timedelta(days=7)
    not_deleted = Task.status != TaskStatus.DELETED

    result = await db.execute(
        select(Task)
        .where(Task.user_id == user_id, not_deleted, Task.created_at >= recent_since)
        .order_by(Task.created_at.desc(), Task.id.desc())
    )
    recent = list(result.scalars().all())

    completed_this_week = await _count(
        db,
        user_id,
        Task.status == TaskStatus.COMPLETED,
        Task.completed_at >= week_ago,
    )
    created_this_week = await _count(db, user_id, not_deleted, Task.created_at >= week_ago)
    return RecentActivity(
        recent_tasks=recent,
        completed_this_week=completed_this_week,
        created_this_week=created_this_week,
    )
