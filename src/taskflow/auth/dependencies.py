"""FastAPI authentication dependencies."""

from __future__ import annotations

import jwt
from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.jwt import get_subject
from taskflow.auth.service import get_user_by_email
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.errors import Forbidden, Unauthorized

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Extract and verify the session JWT, return the User model.

    This is the single place a request's owner identity is resolved; handlers
    pass ``user.id`` explicitly into services from here on.
    Raises 401/403 on failure.
    """
    if credentials is None:
        msg = "Authentication required"
        raise Unauthorized(msg)

    try:
        email = get_subject(credentials.credentials, expected_type="access")
    except jwt.ExpiredSignatureError as e:
        msg = "Token has expired"
        raise Unauthorized(msg) from e
    except jwt.InvalidTokenError as e:
        msg = "Invalid token"
        raise Unauthorized(msg) from e

    user = await get_user_by_email(db, email)
    if user is None:
        msg = "User not found"
        raise Unauthorized(msg)
    if not user.is_active:
        msg = "Account is disabled"
        raise Forbidden(msg)
    return user
