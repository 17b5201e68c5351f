"""Notification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.auth.schemas import MessageResponse
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.errors import NotFound
from taskflow.notifications.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    UnreadCountResponse,
    notification_response,
    notification_settings_response,
)
from taskflow.notifications.service import (
    get_notification_settings,
    get_notifications,
    get_unread_count,
    mark_all_as_read,
    mark_as_read,
    update_notification_settings,
)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[NotificationResponse]:
    """List the user's notifications, newest first."""
    notifications = await get_notifications(db, user.id)
    return [notification_response(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await get_unread_count(db, user.id))


@router.post("/{notification_id}/read", response_model=MessageResponse)
async def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Mark a notification as read."""
    found = await mark_as_read(db, user.id, notification_id)
    if not found:
        msg = f"Notification not found with id: {notification_id}"
        raise NotFound(msg)
    await db.commit()
    return MessageResponse(message="Notification marked as read")


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MarkAllReadResponse:
    """Mark all notifications as read."""
    count = await mark_all_as_read(db, user.id)
    await db.commit()
    return MarkAllReadResponse(message=f"Marked {count} notifications as read", count=count)


@router.get("/settings", response_model=NotificationSettingsResponse)
async def get_settings_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> NotificationSettingsResponse:
    """Get notification preferences (created with defaults on first access)."""
    settings = await get_notification_settings(db, user.id)
    await db.commit()
    return notification_settings_response(settings)


@router.put("/settings", response_model=NotificationSettingsResponse)
async def update_settings_endpoint(
    body: NotificationSettingsUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> NotificationSettingsResponse:
    """Partially update notification preferences."""
    settings = await update_notification_settings(
        db,
        user.id,
        email_notifications=body.emailNotifications,
        push_notifications=body.pushNotifications,
        task_reminders=body.taskReminders,
        daily_digest=body.dailyDigest,
        weekly_report=body.weeklyReport,
    )
    await db.commit()
    return notification_settings_response(settings)
