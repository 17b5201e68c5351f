"""Field validation for profile and settings updates."""

from __future__ import annotations

from taskflow.auth.validation import NAME_MAX_LENGTH, check_email
from taskflow.errors import FieldError
from taskflow.users.schemas import UpdateProfileRequest, UpdateSettingsRequest
from taskflow.validation import max_length_text, optional_text


def validate_profile_update(body: UpdateProfileRequest) -> list[FieldError]:
    errors = optional_text("name", body.name, NAME_MAX_LENGTH, "Name")
    errors += max_length_text("firstName", body.firstName, 50, "First name")
    errors += max_length_text("lastName", body.lastName, 50, "Last name")
    errors += max_length_text("avatarUrl", body.avatarUrl, 500, "Avatar URL")
    if body.email is not None:
        errors += check_email(body.email)
    return errors


def validate_settings_update(body: UpdateSettingsRequest) -> list[FieldError]:
    errors = optional_text("language", body.language, 5, "Language")
    errors += optional_text("timeZone", body.timeZone, 50, "Timezone")
    errors += optional_text("dateFormat", body.dateFormat, 20, "Date format")
    errors += optional_text("timeFormat", body.timeFormat, 5, "Time format")
    return errors
