"""
Authentication business logic.

Handles user creation, credential checks, and the one-time token flows for
email verification and password reset. Raw one-time tokens are only ever
handed to the caller; the database stores their SHA-256 hashes.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import jwt as pyjwt
import structlog
from sqlalchemy import func, select, update

from taskflow.auth.jwt import get_subject
from taskflow.auth.password import check_needs_rehash, hash_password, verify_password
from taskflow.config import get_settings
from taskflow.db.models import EmailVerificationToken, PasswordResetToken, User
from taskflow.db.repository import unique_guard
from taskflow.errors import Conflict, Forbidden, Invalid, TokenExpired, Unauthorized

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "


def _hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.strip().lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration & login
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    email: str,
    password: str,
    confirm_password: str,
    name: str,
) -> User:
    """
    Register a new user with email + password.

    Raises:
        Invalid: If password and confirmation differ.
        Conflict: If the email is already registered.
    """
    if password != confirm_password:
        msg = "Passwords do not match"
        raise Invalid(msg)

    conflict = Conflict("User with this email already exists")
    existing = await get_user_by_email(db, email)
    if existing is not None:
        raise conflict

    now = datetime.now(timezone.utc)
    user = User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        name=name.strip(),
        is_active=True,
        email_verified=False,
        created_at=now,
        updated_at=now,
    )
    async with unique_guard(db, conflict):
        db.add(user)
    logger.info("user_registered", user_id=user.id)
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate a user with email + password.

    Raises:
        Unauthorized: Unknown email or wrong password (same message for both).
        Forbidden: The account is deactivated.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login_failed")
        msg = "Invalid email or password"
        raise Unauthorized(msg)

    if not user.is_active:
        msg = "Account is disabled"
        raise Forbidden(msg)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    logger.info("user_logged_in", user_id=user.id)
    return user


async def user_from_refresh_header(db: AsyncSession, authorization: str | None) -> User:
    """
    Resolve the user for a ``Bearer <refresh token>`` header.

    Raises:
        Invalid: Header missing or not a bearer credential.
        Unauthorized: Bad signature, expired, wrong token type, or unknown user.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        msg = "Refresh token must be sent as 'Authorization: Bearer <token>'"
        raise Invalid(msg)

    raw_token = authorization[len(BEARER_PREFIX):].strip()
    try:
        email = get_subject(raw_token, expected_type="refresh")
    except pyjwt.ExpiredSignatureError as e:
        msg = "Refresh token has expired"
        raise Unauthorized(msg) from e
    except pyjwt.InvalidTokenError as e:
        msg = "Invalid refresh token"
        raise Unauthorized(msg) from e

    user = await get_user_by_email(db, email)
    if user is None or not user.is_active:
        msg = "Invalid refresh token"
        raise Unauthorized(msg)
    return user


# ---------------------------------------------------------------------------
# Email verification tokens
# ---------------------------------------------------------------------------


async def create_verification_token(db: AsyncSession, user_id: int) -> str:
    """
    Create an email verification token.

    Returns the raw token to send to the user.
    The hash is stored in the database.
    """
    settings = get_settings()
    raw_token = secrets.token_urlsafe(48)
    now = datetime.now(timezone.utc)

    # Invalidate any existing unused tokens for this user
    await db.execute(
        update(EmailVerificationToken)
        .where(EmailVerificationToken.user_id == user_id)
        .where(EmailVerificationToken.used_at == None)  # noqa: E711
        .values(used_at=now)
    )

    token = EmailVerificationToken(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        created_at=now,
        expires_at=now + timedelta(hours=settings.email_verification_token_ttl_hours),
    )
    db.add(token)
    await db.flush()
    return raw_token


async def verify_email_token(db: AsyncSession, raw_token: str) -> int:
    """
    Consume an email verification token and mark the user verified.

    Returns the user_id.

    Raises:
        Unauthorized: If the token is unknown or already used.
        TokenExpired: If the token is past its expiry.
    """
    result = await db.execute(
        select(EmailVerificationToken).where(EmailVerificationToken.token_hash == _hash_token(raw_token))
    )
    token = result.scalar_one_or_none()

    if token is None:
        msg = "Invalid verification token"
        raise Unauthorized(msg)
    if token.used_at is not None:
        msg = "Token has already been used"
        raise Unauthorized(msg)
    if token.expires_at < datetime.now(timezone.utc):
        msg = "Token expired"
        raise TokenExpired(msg)

    token.used_at = datetime.now(timezone.utc)
    await db.execute(update(User).where(User.id == token.user_id).values(email_verified=True))
    await db.flush()
    logger.info("email_verified", user_id=token.user_id)
    return token.user_id


# ---------------------------------------------------------------------------
# Password reset tokens
# ---------------------------------------------------------------------------


async def create_reset_token(db: AsyncSession, user_id: int, ip_address: str | None = None) -> str:
    """Create a password reset token. Returns the raw token; only its hash is stored."""
    settings = get_settings()
    raw_token = secrets.token_urlsafe(48)
    now = datetime.now(timezone.utc)

    await db.execute(
        update(PasswordResetToken)
        .where(PasswordResetToken.user_id == user_id)
        .where(PasswordResetToken.used_at == None)  # noqa: E711
        .values(used_at=now)
    )

    token = PasswordResetToken(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        created_at=now,
        expires_at=now + timedelta(minutes=settings.password_reset_token_ttl_minutes),
        ip_address=ip_address,
    )
    db.add(token)
    await db.flush()
    return raw_token


async def reset_password(db: AsyncSession, raw_token: str, new_password: str) -> User:
    """
    Consume a reset token and set a new password.

    Raises:
        Unauthorized: If the token is unknown, used, or its user is gone.
        TokenExpired: If the token is past its expiry.
    """
    result = await db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == _hash_token(raw_token))
    )
    token = result.scalar_one_or_none()

    if token is None:
        msg = "Invalid reset token"
        raise Unauthorized(msg)
    if token.used_at is not None:
        msg = "Token has already been used"
        raise Unauthorized(msg)
    if token.expires_at < datetime.now(timezone.utc):
        msg = "Token expired"
        raise TokenExpired(msg)

    user = await get_user_by_id(db, token.user_id)
    if user is None:
        msg = "Invalid reset token"
        raise Unauthorized(msg)

    token.used_at = datetime.now(timezone.utc)
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("password_reset", user_id=user.id)
    return user
