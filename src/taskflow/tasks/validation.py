"""Field validation for task requests."""

from __future__ import annotations

from enum import Enum

from taskflow.config import get_settings
from taskflow.db.types import TaskPriority, TaskStatus, parse_enum
from taskflow.errors import FieldError
from taskflow.tasks.query import SORT_FIELDS
from taskflow.tasks.schemas import (
    BulkOperation,
    BulkOperationRequest,
    StatusUpdate,
    TaskCreate,
    TaskImportItem,
    TaskUpdate,
    parse_bulk_operation,
)
from taskflow.validation import max_length_text, optional_text, required_text

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _choices(enum_cls: type[Enum]) -> str:
    return ", ".join(m.name for m in enum_cls)


def _check_enum(field: str, value: str | None, enum_cls: type[Enum]) -> list[FieldError]:
    if value is not None and parse_enum(enum_cls, value) is None:
        return [FieldError(field, f"{field.capitalize()} must be one of: {_choices(enum_cls)}")]
    return []


def validate_task_create(body: TaskCreate) -> list[FieldError]:
    errors = required_text("title", body.title, TITLE_MAX_LENGTH, "Title")
    errors += max_length_text("description", body.description, DESCRIPTION_MAX_LENGTH, "Description")
    errors += _check_enum("priority", body.priority, TaskPriority)
    return errors


def validate_task_update(body: TaskUpdate) -> list[FieldError]:
    errors = optional_text("title", body.title, TITLE_MAX_LENGTH, "Title")
    errors += max_length_text("description", body.description, DESCRIPTION_MAX_LENGTH, "Description")
    errors += _check_enum("priority", body.priority, TaskPriority)
    errors += _check_enum("status", body.status, TaskStatus)
    return errors


def validate_status_update(body: StatusUpdate) -> list[FieldError]:
    if not body.status:
        return [FieldError("status", "Status is required")]
    return _check_enum("status", body.status, TaskStatus)


def validate_bulk_operation(body: BulkOperationRequest) -> list[FieldError]:
    errors: list[FieldError] = []
    if not body.taskIds:
        errors.append(FieldError("taskIds", "At least one task ID is required"))

    if not body.operation:
        errors.append(FieldError("operation", "Operation is required"))
        return errors
    operation = parse_bulk_operation(body.operation)
    if operation is None:
        errors.append(FieldError("operation", f"Operation must be one of: {_choices(BulkOperation)}"))
    elif operation is BulkOperation.MOVE_TO_CATEGORY and body.categoryId is None:
        errors.append(FieldError("categoryId", "Category ID is required for move operation"))
    elif operation is BulkOperation.UPDATE_STATUS:
        if not body.status:
            errors.append(FieldError("status", "Status is required for update_status operation"))
        else:
            errors += _check_enum("status", body.status, TaskStatus)
    return errors


def validate_list_query(
    status: str | None,
    priority: str | None,
    page: int,
    size: int,
    sort: str,
) -> list[FieldError]:
    settings = get_settings()
    errors = _check_enum("status", status, TaskStatus)
    errors += _check_enum("priority", priority, TaskPriority)
    if page < 0:
        errors.append(FieldError("page", "Page must not be negative"))
    if size < 1 or size > settings.task_page_size_max:
        errors.append(FieldError("size", f"Size must be between 1 and {settings.task_page_size_max}"))

    field, _, direction = sort.partition(",")
    if field.strip() not in SORT_FIELDS:
        errors.append(FieldError("sort", f"Sort field must be one of: {', '.join(SORT_FIELDS)}"))
    if direction.strip().lower() not in ("", "asc", "desc"):
        errors.append(FieldError("sort", "Sort direction must be 'asc' or 'desc'"))
    return errors


def validate_import_item(item: TaskImportItem) -> list[FieldError]:
    errors = validate_task_create(item)
    errors += _check_enum("status", item.status, TaskStatus)
    return errors
