"""Dashboard Pydantic schemas."""

from __future__ import annotations

from pydantic import BaseModel

from taskflow.tasks.schemas import TaskResponse


class StatisticsResponse(BaseModel):
    """Task totals for the dashboard header. DELETED tasks are excluded."""

    totalTasks: int
    completedTasks: int
    pendingTasks: int
    overdueTasks: int
    todayTasks: int
    upcomingTasks: int
    completionRate: float


class ActivityResponse(BaseModel):
    recentTasks: list[TaskResponse]
    completedThisWeek: int
    createdThisWeek: int
