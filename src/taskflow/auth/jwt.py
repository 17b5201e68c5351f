"""
HMAC JWT token management.

Session and refresh tokens are signed with two independent secrets, so a
refresh token can never be accepted as a session token and vice versa even
before the ``type`` claim is checked. The subject is the user's email.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt

from taskflow.config import get_settings

TokenType = Literal["access", "refresh"]


def _secret_for(token_type: TokenType) -> str:
    settings = get_settings()
    return settings.jwt_refresh_secret if token_type == "refresh" else settings.jwt_secret


def _encode(email: str, token_type: TokenType, lifetime: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": email,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + lifetime,
        "type": token_type,
    }
    return jwt.encode(payload, _secret_for(token_type), algorithm=settings.jwt_algorithm)


def create_access_token(email: str) -> str:
    """
    Create a short-lived session token (30 minutes by default).

    Args:
        email: The user's email, used as the token subject.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    return _encode(email, "access", timedelta(minutes=settings.jwt_access_token_expire_minutes))


def create_refresh_token(email: str) -> str:
    """Create a long-lived refresh token (7 days by default) signed with the refresh secret."""
    settings = get_settings()
    return _encode(email, "refresh", timedelta(days=settings.jwt_refresh_token_expire_days))


def verify_token(token: str, expected_type: TokenType = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: The encoded JWT string.
        expected_type: Expected token type ("access" or "refresh").

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the signature is bad or the type is wrong.
    """
    settings = get_settings()
    payload: dict[str, Any] = jwt.decode(
        token,
        _secret_for(expected_type),
        algorithms=[settings.jwt_algorithm],
        options={"require": ["sub", "exp", "iat"]},
    )

    if payload.get("type") != expected_type:
        msg = f"Expected token type '{expected_type}', got '{payload.get('type')}'"
        raise jwt.InvalidTokenError(msg)

    return payload


def get_subject(token: str, expected_type: TokenType = "access") -> str:
    """Verify ``token`` and return its subject (the user's email)."""
    return str(verify_token(token, expected_type)["sub"])
