"""UTC date windows used for the overdue / today / upcoming derivations."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from taskflow.db.models import Task
from taskflow.db.types import TaskStatus, ensure_utc


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def start_of_day(moment: datetime) -> datetime:
    """Midnight UTC of the day containing ``moment``."""
    return ensure_utc(moment).replace(hour=0, minute=0, second=0, microsecond=0)


def today_window(now: datetime) -> tuple[datetime, datetime]:
    """Half-open ``[start_of_today, start_of_tomorrow)``."""
    start = start_of_day(now)
    return start, start + timedelta(days=1)


def upcoming_window(now: datetime, days: int = 7) -> tuple[datetime, datetime]:
    """Half-open ``[start_of_today, start_of_today + days)``."""
    start = start_of_day(now)
    return start, start + timedelta(days=days)


def is_overdue(task: Task, now: datetime) -> bool:
    return task.status == TaskStatus.PENDING and task.due_date is not None and task.due_date < now
