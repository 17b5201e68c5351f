"""Dashboard endpoints: statistics, due-date buckets, recent activity."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.dashboard.schemas import ActivityResponse, StatisticsResponse
from taskflow.dashboard.service import (
    get_overdue_tasks,
    get_recent_activity,
    get_statistics,
    get_today_tasks,
    get_upcoming_tasks,
)
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.tasks.dates import utcnow
from taskflow.tasks.schemas import TaskResponse, task_response

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/statistics", response_model=StatisticsResponse)
async def statistics(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StatisticsResponse:
    stats = await get_statistics(db, user.id)
    return StatisticsResponse(
        totalTasks=stats.total,
        completedTasks=stats.completed,
        pendingTasks=stats.pending,
        overdueTasks=stats.overdue,
        todayTasks=stats.today,
        upcomingTasks=stats.upcoming,
        completionRate=stats.completion_rate,
    )


@router.get("/today", response_model=list[TaskResponse])
async def today(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TaskResponse]:
    """PENDING tasks due today (UTC)."""
    now = utcnow()
    return [task_response(t, now) for t in await get_today_tasks(db, user.id, now)]


@router.get("/upcoming", response_model=list[TaskResponse])
async def upcoming(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TaskResponse]:
    """PENDING tasks due within the upcoming window, soonest first."""
    now = utcnow()
    return [task_response(t, now) for t in await get_upcoming_tasks(db, user.id, now)]


@router.get("/overdue", response_model=list[TaskResponse])
async def overdue(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[TaskResponse]:
    now = utcnow()
    return [task_response(t, now) for t in await get_overdue_tasks(db, user.id, now)]


@router.get("/activity", response_model=list[ActivityResponse])
async def activity(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[ActivityResponse]:
    """Recent activity summary, returned as a single-element list."""
    now = utcnow()
    recent = await get_recent_activity(db, user.id, now)
    return [
        ActivityResponse(
            recentTasks=[task_response(t, now) for t in recent.recent_tasks],
            completedThisWeek=recent.completed_this_week,
            createdThisWeek=recent.created_this_week,
        )
    ]
