"""Field validation for authentication requests."""

from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from taskflow.auth.password import PasswordStrengthError, validate_password_strength
from taskflow.auth.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
)
from taskflow.errors import FieldError
from taskflow.validation import required_text

NAME_MAX_LENGTH = 100


def check_email(value: str | None, field: str = "email") -> list[FieldError]:
    """Shared email rule: required and syntactically valid. No DNS lookups."""
    if not value or not value.strip():
        return [FieldError(field, "Email is required")]
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        return [FieldError(field, "Email should be valid")]
    return []


def check_new_password(value: str, field: str = "password") -> list[FieldError]:
    try:
        validate_password_strength(value)
    except PasswordStrengthError as e:
        return [FieldError(field, str(e))]
    return []


def validate_register(body: RegisterRequest) -> list[FieldError]:
    errors = check_email(body.email)
    errors += check_new_password(body.password)
    if not body.confirmPassword:
        errors.append(FieldError("confirmPassword", "Password confirmation is required"))
    errors += required_text("name", body.name, NAME_MAX_LENGTH, "Name")
    return errors


def validate_login(body: LoginRequest) -> list[FieldError]:
    errors = check_email(body.email)
    if not body.password:
        errors.append(FieldError("password", "Password is required"))
    return errors


def validate_forgot_password(body: ForgotPasswordRequest) -> list[FieldError]:
    return check_email(body.email)


def validate_reset_password(body: ResetPasswordRequest) -> list[FieldError]:
    errors: list[FieldError] = []
    if not body.token:
        errors.append(FieldError("token", "Token is required"))
    errors += check_new_password(body.newPassword, field="newPassword")
    return errors
