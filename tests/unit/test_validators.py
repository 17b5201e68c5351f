"""Tests for request validators."""

import dataclasses

import pytest

from taskflow.auth.schemas import RegisterRequest
from taskflow.auth.validation import check_email, validate_register
from taskflow.categories.schemas import CategoryCreate
from taskflow.categories.validation import validate_category_create
from taskflow.errors import FieldError, ValidationFailed
from taskflow.tasks.schemas import BulkOperationRequest, TaskCreate, TaskUpdate
from taskflow.tasks.validation import (
    validate_bulk_operation,
    validate_list_query,
    validate_task_create,
    validate_task_update,
)
from taskflow.validation import hex_color, max_length_text, optional_text, required_text


class TestSharedRules:
    def test_required_text(self):
        assert required_text("name", None, 10, "Name") == [FieldError("name", "Name is required")]
        assert required_text("name", "  ", 10, "Name") == [FieldError("name", "Name is required")]
        assert required_text("name", "ok", 10, "Name") == []

    def test_max_length(self):
        assert max_length_text("d", "x" * 11, 10, "D") == [FieldError("d", "D must not exceed 10 characters")]
        assert max_length_text("d", None, 10, "D") == []

    def test_optional_text_allows_none_but_not_blank(self):
        assert optional_text("t", None, 10, "T") == []
        assert optional_text("t", "", 10, "T") == [FieldError("t", "T is required")]

    def test_hex_color(self):
        assert hex_color("color", "#A1b2C3") == []
        assert hex_color("color", None) == []
        for bad in ("A1B2C3", "#FFF", "#GGGGGG", "#1234567"):
            assert hex_color("color", bad) == [FieldError("color", "Color must be a valid hex color code")]

    def test_email(self):
        assert check_email("user@example.com") == []
        assert check_email("") == [FieldError("email", "Email is required")]
        assert check_email("user@") == [FieldError("email", "Email should be valid")]

    def test_validation_failed_content(self):
        exc = ValidationFailed([FieldError("title", "Title is required")])
        assert exc.to_content() == {
            "detail": "Validation failed",
            "error": "validation_failed",
            "errors": [{"field": "title", "message": "Title is required"}],
        }

    def test_field_error_is_an_immutable_value(self):
        error = FieldError("title", "Title is required")
        assert error == FieldError("title", "Title is required")
        assert error != FieldError("title", "Title must not exceed 100 characters")
        assert len({error, FieldError("title", "Title is required")}) == 1
        with pytest.raises(dataclasses.FrozenInstanceError):
            error.field = "name"  # type: ignore[misc]


class TestRegisterValidation:
    def test_all_missing(self):
        fields = [e.field for e in validate_register(RegisterRequest())]
        assert fields == ["email", "password", "confirmPassword", "name"]

    def test_name_too_long(self):
        body = RegisterRequest(email="a@example.com", password="secret123", confirmPassword="secret123", name="n" * 101)
        assert [e.field for e in validate_register(body)] == ["name"]


class TestTaskValidation:
    def test_valid_create(self):
        assert validate_task_create(TaskCreate(title="Do it", priority="low")) == []

    def test_update_with_nothing_is_valid(self):
        assert validate_task_update(TaskUpdate()) == []

    def test_update_unknown_status(self):
        errors = validate_task_update(TaskUpdate(status="archived"))
        assert errors == [FieldError("status", "Status must be one of: PENDING, COMPLETED, DELETED")]

    def test_bulk_missing_operation(self):
        errors = validate_bulk_operation(BulkOperationRequest(taskIds=[1]))
        assert errors == [FieldError("operation", "Operation is required")]

    def test_bulk_complete_ok(self):
        assert validate_bulk_operation(BulkOperationRequest(operation="complete", taskIds=[1, 2])) == []

    def test_list_query_defaults_ok(self):
        assert validate_list_query(None, None, 0, 20, "createdAt,desc") == []

    def test_list_query_sort_without_direction_ok(self):
        assert validate_list_query(None, None, 0, 20, "title") == []


class TestCategoryValidation:
    def test_description_limit(self):
        errors = validate_category_create(CategoryCreate(name="Work", description="d" * 201))
        assert [e.field for e in errors] == ["description"]
