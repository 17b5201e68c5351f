"""Tests for JWT token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from taskflow.auth.jwt import (
    create_access_token,
    create_refresh_token,
    get_subject,
    verify_token,
)
from taskflow.config import get_settings


class TestAccessToken:
    def test_create_and_verify(self):
        token = create_access_token("alice@example.com")
        payload = verify_token(token, expected_type="access")
        assert payload["sub"] == "alice@example.com"
        assert payload["type"] == "access"
        assert payload["exp"] - payload["iat"] == 30 * 60

    def test_uses_hs512(self):
        header = jwt.get_unverified_header(create_access_token("alice@example.com"))
        assert header["alg"] == "HS512"

    def test_unique_jti(self):
        first = verify_token(create_access_token("a@example.com"))
        second = verify_token(create_access_token("a@example.com"))
        assert first["jti"] != second["jti"]

    def test_expired_rejected(self):
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=1)
        token = jwt.encode(
            {"sub": "a@example.com", "iat": past, "exp": past + timedelta(minutes=1), "type": "access"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.ExpiredSignatureError):
            verify_token(token, expected_type="access")

    def test_missing_subject_rejected(self):
        settings = get_settings()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"iat": now, "exp": now + timedelta(minutes=5), "type": "access"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)


class TestRefreshToken:
    def test_create_and_verify(self):
        token = create_refresh_token("alice@example.com")
        payload = verify_token(token, expected_type="refresh")
        assert payload["type"] == "refresh"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_refresh_not_accepted_as_access(self):
        token = create_refresh_token("alice@example.com")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token, expected_type="access")

    def test_access_not_accepted_as_refresh(self):
        token = create_access_token("alice@example.com")
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token, expected_type="refresh")

    def test_type_claim_checked_even_with_right_secret(self):
        settings = get_settings()
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "a@example.com", "iat": now, "exp": now + timedelta(minutes=5), "type": "access"},
            settings.jwt_refresh_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token, expected_type="refresh")

    def test_get_subject(self):
        assert get_subject(create_refresh_token("bob@example.com"), "refresh") == "bob@example.com"
