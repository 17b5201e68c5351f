"""Notification inbox and notification-channel preferences.

Notifications are append-only; the only mutation is flipping ``read`` from
false to true. Channel preferences live on the shared UserSettings row.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

from taskflow.db.models import Notification, UserSettings
from taskflow.db.repository import OwnedRepository
from taskflow.users.service import get_user_settings, update_user_settings

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


def _repo(db: AsyncSession) -> OwnedRepository[Notification]:
    return OwnedRepository(db, Notification)


async def create_notification(
    db: AsyncSession,
    user_id: int,
    type_: str,
    title: str,
    message: str | None = None,
    scheduled_for: datetime | None = None,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    """Persist a notification for ``user_id``."""
    notification = Notification(
        user_id=user_id,
        type=type_,
        title=title,
        message=message,
        read=False,
        scheduled_for=scheduled_for,
        notification_metadata=metadata,
        created_at=datetime.now(timezone.utc),
    )
    await _repo(db).save(notification)
    logger.info("notification_created", user_id=user_id, notification_id=notification.id, type=type_)
    return notification


async def get_notifications(db: AsyncSession, user_id: int) -> list[Notification]:
    """All of a user's notifications, newest first."""
    return await _repo(db).list_for_owner(
        user_id,
        order_by=(Notification.created_at.desc(), Notification.id.desc()),
    )


async def get_unread_count(db: AsyncSession, user_id: int) -> int:
    return await _repo(db).count_for_owner(user_id, Notification.read == False)  # noqa: E712


async def mark_as_read(db: AsyncSession, user_id: int, notification_id: int) -> bool:
    """Mark one notification read. Returns False if it does not exist for this user."""
    return await _repo(db).update_for_owner(notification_id, user_id, read=True)


async def mark_all_as_read(db: AsyncSession, user_id: int) -> int:
    """Mark every unread notification read. Returns how many changed."""
    return await _repo(db).update_all_for_owner(user_id, Notification.read == False, read=True)  # noqa: E712


async def get_notification_settings(db: AsyncSession, user_id: int) -> UserSettings:
    return await get_user_settings(db, user_id)


async def update_notification_settings(
    db: AsyncSession,
    user_id: int,
    email_notifications: bool | None = None,
    push_notifications: bool | None = None,
    task_reminders: bool | None = None,
    daily_digest: bool | None = None,
    weekly_report: bool | None = None,
) -> UserSettings:
    """Partially update the channel booleans."""
    settings = await update_user_settings(
        db,
        user_id,
        email_notifications=email_notifications,
        push_notifications=push_notifications,
        task_reminders=task_reminders,
        daily_digest=daily_digest,
        weekly_report=weekly_report,
    )
    logger.info("notification_settings_updated", user_id=user_id)
    return settings
