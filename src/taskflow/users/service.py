"""User management business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from taskflow.db.models import (
    Category,
    EmailVerificationToken,
    Notification,
    PasswordResetToken,
    Tag,
    Task,
    User,
    UserSettings,
    task_tags,
)
from taskflow.db.repository import OwnedRepository, unique_guard
from taskflow.db.types import Theme, coerce_enum
from taskflow.errors import Conflict

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def update_profile(
    db: AsyncSession,
    user: User,
    name: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    avatar_url: str | None = None,
) -> User:
    """
    Update user profile fields. ``None`` means "leave unchanged".

    Raises:
        Conflict: If the new email belongs to another account.
    """
    if email is not None:
        normalized = email.strip().lower()
        if normalized != user.email:
            result = await db.execute(
                select(User.id).where(func.lower(User.email) == normalized).where(User.id != user.id)
            )
            conflict = Conflict("Email is already in use")
            if result.first() is not None:
                raise conflict
            async with unique_guard(db, conflict):
                user.email = normalized
                # A changed address has not been verified yet.
                user.email_verified = False

    if name is not None:
        user.name = name.strip()
    if first_name is not None:
        user.first_name = first_name
    if last_name is not None:
        user.last_name = last_name
    if avatar_url is not None:
        user.avatar_url = avatar_url

    user.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("profile_updated", user_id=user.id)
    return user


async def delete_account(db: AsyncSession, user: User) -> None:
    """Delete the user and every row they own. Runs inside the caller's transaction."""
    user_id = user.id
    owned_task_ids = select(Task.id).where(Task.user_id == user_id)
    await db.execute(delete(task_tags).where(task_tags.c.task_id.in_(owned_task_ids)))
    for model in (Task, Tag, Category, Notification, UserSettings, EmailVerificationToken, PasswordResetToken):
        await OwnedRepository(db, model).delete_all_for_owner(user_id)
    await db.delete(user)
    await db.flush()
    logger.info("account_deleted", user_id=user_id)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


async def get_user_settings(db: AsyncSession, user_id: int) -> UserSettings:
    """Get user settings, creating defaults if they don't exist."""
    result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
    settings = result.scalar_one_or_none()

    if settings is None:
        settings = UserSettings(
            user_id=user_id,
            theme=Theme.LIGHT,
            language="en",
            timezone="UTC",
            date_format="MM/DD/YYYY",
            time_format="12h",
            email_notifications=True,
            push_notifications=True,
            task_reminders=True,
            daily_digest=False,
            weekly_report=True,
            updated_at=datetime.now(timezone.utc),
        )
        try:
            async with db.begin_nested():
                db.add(settings)
                await db.flush()
        except IntegrityError:
            # A concurrent request inserted the row first.
            result = await db.execute(select(UserSettings).where(UserSettings.user_id == user_id))
            return result.scalar_one()
        logger.info("settings_created", user_id=user_id)

    return settings


async def update_user_settings(
    db: AsyncSession,
    user_id: int,
    theme: str | None = None,
    language: str | None = None,
    timezone_name: str | None = None,
    date_format: str | None = None,
    time_format: str | None = None,
    email_notifications: bool | None = None,
    push_notifications: bool | None = None,
    task_reminders: bool | None = None,
    daily_digest: bool | None = None,
    weekly_report: bool | None = None,
) -> UserSettings:
    """
    Partially update user settings.

    Only the provided values are written. An unrecognized theme falls back
    to LIGHT rather than being rejected.
    """
    settings = await get_user_settings(db, user_id)

    if theme is not None:
        settings.theme = coerce_enum(Theme, theme, Theme.LIGHT)
    if language is not None:
        settings.language = language
    if timezone_name is not None:
        settings.timezone = timezone_name
    if date_format is not None:
        settings.date_format = date_format
    if time_format is not None:
        settings.time_format = time_format

    flags = {
        "email_notifications": email_notifications,
        "push_notifications": push_notifications,
        "task_reminders": task_reminders,
        "daily_digest": daily_digest,
        "weekly_report": weekly_report,
    }
    for attr, value in flags.items():
        if value is not None:
            setattr(settings, attr, value)

    settings.updated_at = datetime.now(timezone.utc)
    await db.flush()
    return settings
