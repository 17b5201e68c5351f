"""Request/response schemas for user profile and settings endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from taskflow.auth.schemas import UserResponse, user_response
from taskflow.db.models import UserSettings

__all__ = [
    "UpdateProfileRequest",
    "UpdateSettingsRequest",
    "UserResponse",
    "UserSettingsResponse",
    "settings_response",
    "user_response",
]


class UpdateProfileRequest(BaseModel):
    """Partial profile update. Omitted or null fields are left unchanged."""

    name: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    email: str | None = None
    avatarUrl: str | None = None


class UpdateSettingsRequest(BaseModel):
    theme: str | None = None
    language: str | None = None
    timeZone: str | None = None
    dateFormat: str | None = None
    timeFormat: str | None = None
    emailNotifications: bool | None = None
    pushNotifications: bool | None = None
    taskReminders: bool | None = None
    dailyDigest: bool | None = None
    weeklyReport: bool | None = None


class UserSettingsResponse(BaseModel):
    theme: str
    language: str
    timeZone: str
    dateFormat: str
    timeFormat: str
    emailNotifications: bool
    pushNotifications: bool
    taskReminders: bool
    dailyDigest: bool
    weeklyReport: bool
    updatedAt: datetime


def settings_response(settings: UserSettings) -> UserSettingsResponse:
    return UserSettingsResponse(
        theme=settings.theme.value,
        language=settings.language,
        timeZone=settings.timezone,
        dateFormat=settings.date_format,
        timeFormat=settings.time_format,
        emailNotifications=settings.email_notifications,
        pushNotifications=settings.push_notifications,
        taskReminders=settings.task_reminders,
        dailyDigest=settings.daily_digest,
        weeklyReport=settings.weekly_report,
        updatedAt=settings.updated_at,
    )
