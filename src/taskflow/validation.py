"""Reusable field checks. Each returns a (possibly empty) list of FieldError."""

from __future__ import annotations

import re

from taskflow.errors import FieldError

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


def required_text(field: str, value: str | None, max_length: int, label: str) -> list[FieldError]:
    if value is None or not value.strip():
        return [FieldError(field, f"{label} is required")]
    return max_length_text(field, value, max_length, label)


def optional_text(field: str, value: str | None, max_length: int, label: str) -> list[FieldError]:
    """Like required_text, but None is allowed. A present value must not be blank."""
    if value is None:
        return []
    return required_text(field, value, max_length, label)


def max_length_text(field: str, value: str | None, max_length: int, label: str) -> list[FieldError]:
    if value is not None and len(value) > max_length:
        return [FieldError(field, f"{label} must not exceed {max_length} characters")]
    return []


def hex_color(field: str, value: str | None) -> list[FieldError]:
    if value is not None and not HEX_COLOR.match(value):
        return [FieldError(field, "Color must be a valid hex color code")]
    return []
