"""Field validation for category requests."""

from __future__ import annotations

from taskflow.categories.schemas import CategoryCreate, CategoryUpdate
from taskflow.errors import FieldError
from taskflow.validation import hex_color, max_length_text, optional_text, required_text

NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 200


def validate_category_create(body: CategoryCreate) -> list[FieldError]:
    errors = required_text("name", body.name, NAME_MAX_LENGTH, "Category name")
    errors += hex_color("color", body.color)
    errors += max_length_text("description", body.description, DESCRIPTION_MAX_LENGTH, "Description")
    return errors


def validate_category_update(body: CategoryUpdate) -> list[FieldError]:
    errors = optional_text("name", body.name, NAME_MAX_LENGTH, "Category name")
    errors += hex_color("color", body.color)
    errors += max_length_text("description", body.description, DESCRIPTION_MAX_LENGTH, "Description")
    return errors
