"""Request/response schemas for authentication endpoints.

Field names are the camelCase wire names. Constraints beyond basic types are
checked by the validators in ``taskflow.auth.validation``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from taskflow.db.models import User

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: str = ""
    password: str = ""
    confirmPassword: str = ""
    name: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ForgotPasswordRequest(BaseModel):
    email: str = ""


class ResetPasswordRequest(BaseModel):
    token: str = ""
    newPassword: str = ""


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password hash."""

    id: int
    email: str
    name: str
    firstName: str | None = None
    lastName: str | None = None
    avatarUrl: str | None = None
    active: bool
    emailVerified: bool
    createdAt: datetime
    updatedAt: datetime


class TokenResponse(BaseModel):
    token: str
    refreshToken: str
    tokenType: str = "Bearer"
    expiresIn: int
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


def user_response(user: User) -> UserResponse:
    """Build a UserResponse from a User model."""
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        firstName=user.first_name,
        lastName=user.last_name,
        avatarUrl=user.avatar_url,
        active=user.is_active,
        emailVerified=user.email_verified,
        createdAt=user.created_at,
        updatedAt=user.updated_at,
    )
