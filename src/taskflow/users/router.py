"""User profile and settings endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.auth.schemas import MessageResponse
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.errors import raise_if_errors
from taskflow.users.schemas import (
    UpdateProfileRequest,
    UpdateSettingsRequest,
    UserResponse,
    UserSettingsResponse,
    settings_response,
    user_response,
)
from taskflow.users.service import (
    delete_account,
    get_user_settings,
    update_profile,
    update_user_settings,
)
from taskflow.users.validation import validate_profile_update, validate_settings_update

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    user: User = Depends(get_current_user),
) -> UserResponse:
    """Get the authenticated user's profile."""
    return user_response(user)


@router.put("/profile", response_model=UserResponse)
async def update_my_profile(
    body: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update profile fields; omitted fields are left unchanged."""
    raise_if_errors(validate_profile_update(body))
    user = await update_profile(
        db,
        user,
        name=body.name,
        first_name=body.firstName,
        last_name=body.lastName,
        email=body.email,
        avatar_url=body.avatarUrl,
    )
    await db.commit()
    return user_response(user)


@router.delete("/account", response_model=MessageResponse)
async def delete_my_account(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete the account and all owned data."""
    await delete_account(db, user)
    await db.commit()
    return MessageResponse(message="Account deleted successfully")


@router.get("/settings", response_model=UserSettingsResponse)
async def get_settings_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserSettingsResponse:
    """Get user settings (created with defaults on first access)."""
    settings = await get_user_settings(db, user.id)
    await db.commit()
    return settings_response(settings)


@router.put("/settings", response_model=UserSettingsResponse)
async def update_settings_endpoint(
    body: UpdateSettingsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserSettingsResponse:
    """Partially update user settings."""
    raise_if_errors(validate_settings_update(body))
    settings = await update_user_settings(
        db,
        user.id,
        theme=body.theme,
        language=body.language,
        timezone_name=body.timeZone,
        date_format=body.dateFormat,
        time_format=body.timeFormat,
        email_notifications=body.emailNotifications,
        push_notifications=body.pushNotifications,
        task_reminders=body.taskReminders,
        daily_digest=body.dailyDigest,
        weekly_report=body.weeklyReport,
    )
    await db.commit()
    return settings_response(settings)
