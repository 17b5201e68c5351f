"""Notification request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from taskflow.db.models import Notification, UserSettings


class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str | None = None
    read: bool
    createdAt: datetime
    scheduledFor: datetime | None = None
    metadata: dict[str, Any] | None = None


class UnreadCountResponse(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    message: str
    count: int


class NotificationSettingsResponse(BaseModel):
    emailNotifications: bool
    pushNotifications: bool
    taskReminders: bool
    dailyDigest: bool
    weeklyReport: bool


class NotificationSettingsUpdate(BaseModel):
    emailNotifications: bool | None = None
    pushNotifications: bool | None = None
    taskReminders: bool | None = None
    dailyDigest: bool | None = None
    weeklyReport: bool | None = None


def notification_response(n: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=n.id,
        type=n.type,
        title=n.title,
        message=n.message,
        read=n.read,
        createdAt=n.created_at,
        scheduledFor=n.scheduled_for,
        metadata=n.notification_metadata,
    )


def notification_settings_response(settings: UserSettings) -> NotificationSettingsResponse:
    return NotificationSettingsResponse(
        emailNotifications=settings.email_notifications,
        pushNotifications=settings.push_notifications,
        taskReminders=settings.task_reminders,
        dailyDigest=settings.daily_digest,
        weeklyReport=settings.weekly_report,
    )
