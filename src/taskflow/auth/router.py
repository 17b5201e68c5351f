"""Authentication router: all /api/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.auth.jwt import create_access_token, create_refresh_token
from taskflow.auth.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    user_response,
)
from taskflow.auth.service import (
    authenticate_user,
    create_reset_token,
    create_verification_token,
    get_user_by_email,
    register_user,
    reset_password,
    user_from_refresh_header,
    verify_email_token,
)
from taskflow.auth.validation import (
    validate_forgot_password,
    validate_login,
    validate_register,
    validate_reset_password,
)
from taskflow.config import get_settings
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.email.service import get_email_service
from taskflow.errors import raise_if_errors
from taskflow.notifications.service import create_notification

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _issue_tokens(user: User) -> TokenResponse:
    """Create a session + refresh token pair for ``user``."""
    settings = get_settings()
    return TokenResponse(
        token=create_access_token(user.email),
        refreshToken=create_refresh_token(user.email),
        tokenType="Bearer",
        expiresIn=settings.jwt_access_token_expire_minutes * 60,
        user=user_response(user),
    )


@router.post("/register", response_model=TokenResponse)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Register with email + password and receive a token pair."""
    raise_if_errors(validate_register(body))
    user = await register_user(
        db,
        email=body.email,
        password=body.password,
        confirm_password=body.confirmPassword,
        name=body.name,
    )
    await create_notification(
        db,
        user.id,
        type_="welcome",
        title="Welcome to Taskflow",
        message="Create your first task to get started.",
    )
    raw_token = await create_verification_token(db, user.id)
    await db.commit()

    # Send verification email
    try:
        settings = get_settings()
        verify_url = f"{settings.frontend_base_url}/verify-email?token={raw_token}"
        email_service = get_email_service()
        await email_service.send_template(
            to=user.email,
            template_name="welcome",
            context={
                "name": user.name,
                "verify_url": verify_url,
                "expires_hours": settings.email_verification_token_ttl_hours,
            },
        )
    except Exception:
        logger.exception("verification_email_failed", user_id=user.id)

    return _issue_tokens(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Login with email + password."""
    raise_if_errors(validate_login(body))
    user = await authenticate_user(db, body.email, body.password)
    await db.commit()
    return _issue_tokens(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(user: User = Depends(get_current_user)) -> MessageResponse:
    """Tokens are stateless; the client discards them."""
    logger.info("user_logged_out", user_id=user.id)
    return MessageResponse(message="Logged out successfully")


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Exchange a refresh token (sent as a bearer credential) for a new token pair."""
    user = await user_from_refresh_header(db, authorization)
    logger.info("token_refreshed", user_id=user.id)
    return _issue_tokens(user)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Request a password reset email. The response never reveals whether the email exists."""
    raise_if_errors(validate_forgot_password(body))
    user = await get_user_by_email(db, body.email)

    if user is not None:
        try:
            settings = get_settings()
            raw_token = await create_reset_token(
                db,
                user.id,
                ip_address=request.client.host if request.client else None,
            )
            await db.commit()
            reset_url = f"{settings.frontend_base_url}/reset-password?token={raw_token}"
            email_service = get_email_service()
            await email_service.send_template(
                to=user.email,
                template_name="password_reset",
                context={
                    "reset_url": reset_url,
                    "expires_minutes": settings.password_reset_token_ttl_minutes,
                },
            )
        except Exception:
            logger.exception("password_reset_email_failed", user_id=user.id)

    return MessageResponse(message="If that email is registered, a reset link has been sent.")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password_endpoint(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Reset the password with a valid one-time token."""
    raise_if_errors(validate_reset_password(body))
    user = await reset_password(db, body.token, body.newPassword)
    await db.commit()

    try:
        email_service = get_email_service()
        await email_service.send_template(
            to=user.email,
            template_name="password_changed",
            context={"name": user.name},
        )
    except Exception:
        logger.exception("password_changed_email_failed", user_id=user.id)

    return MessageResponse(message="Password reset successfully")


@router.get("/verify-email", response_model=MessageResponse)
async def verify_email_endpoint(
    token: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Verify an email address with the token from the welcome email."""
    await verify_email_token(db, token)
    await db.commit()
    return MessageResponse(message="Email verified successfully")
