"""Tests for password hashing and length rules."""

import pytest

from taskflow.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)


class TestHashing:
    def test_hash_is_argon2id(self):
        assert hash_password("secret123").startswith("$argon2id$")

    def test_verify_roundtrip(self):
        hashed = hash_password("secret123")
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_same_password_different_hashes(self):
        assert hash_password("secret123") != hash_password("secret123")

    def test_garbage_hash_does_not_raise(self):
        assert verify_password("secret123", "not-a-hash") is False

    def test_fresh_hash_needs_no_rehash(self):
        assert check_needs_rehash(hash_password("secret123")) is False


class TestStrength:
    def test_accepts_min_length(self):
        validate_password_strength("a" * 6)

    @pytest.mark.parametrize("password", ["", "   ", "abc", "a" * 129])
    def test_rejects(self, password):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength(password)

    def test_message_mentions_minimum(self):
        with pytest.raises(PasswordStrengthError, match="at least 6"):
            validate_password_strength("abc")
