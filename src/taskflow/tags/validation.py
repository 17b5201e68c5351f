"""Field validation for tag requests."""

from __future__ import annotations

from taskflow.errors import FieldError
from taskflow.tags.schemas import TagCreate, TagUpdate
from taskflow.validation import hex_color, optional_text, required_text

NAME_MAX_LENGTH = 30


def validate_tag_create(body: TagCreate) -> list[FieldError]:
    return required_text("name", body.name, NAME_MAX_LENGTH, "Tag name") + hex_color("color", body.color)


def validate_tag_update(body: TagUpdate) -> list[FieldError]:
    return optional_text("name", body.name, NAME_MAX_LENGTH, "Tag name") + hex_color("color", body.color)
