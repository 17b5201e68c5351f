"""Tests for enum parsing and the persisted lower-case enum column."""

import pytest
from sqlalchemy.dialects import sqlite

from taskflow.db.types import (
    LowerCaseEnum,
    TaskPriority,
    TaskStatus,
    Theme,
    coerce_enum,
    parse_enum,
)


class TestParseEnum:
    @pytest.mark.parametrize("raw", ["COMPLETED", "completed", " Completed "])
    def test_case_insensitive(self, raw):
        assert parse_enum(TaskStatus, raw) is TaskStatus.COMPLETED

    def test_member_passthrough(self):
        assert parse_enum(TaskPriority, TaskPriority.HIGH) is TaskPriority.HIGH

    @pytest.mark.parametrize("raw", [None, "", "urgent", 3])
    def test_unknown_returns_none(self, raw):
        assert parse_enum(TaskPriority, raw) is None

    def test_coerce_falls_back(self):
        assert coerce_enum(Theme, "neon", Theme.LIGHT) is Theme.LIGHT
        assert coerce_enum(Theme, "dark", Theme.LIGHT) is Theme.DARK


class TestLowerCaseEnum:
    def setup_method(self):
        self.column_type = LowerCaseEnum(TaskStatus, TaskStatus.PENDING)
        self.dialect = sqlite.dialect()

    def test_stored_lower_case(self):
        assert self.column_type.process_bind_param(TaskStatus.COMPLETED, self.dialect) == "completed"
        assert self.column_type.process_bind_param("DELETED", self.dialect) == "deleted"

    def test_invalid_bind_raises(self):
        with pytest.raises(ValueError):
            self.column_type.process_bind_param("archived", self.dialect)

    def test_read_maps_back(self):
        assert self.column_type.process_result_value("completed", self.dialect) is TaskStatus.COMPLETED

    def test_unknown_stored_value_falls_back(self):
        assert self.column_type.process_result_value("archived", self.dialect) is TaskStatus.PENDING

    def test_null_passthrough(self):
        assert self.column_type.process_bind_param(None, self.dialect) is None
        assert self.column_type.process_result_value(None, self.dialect) is None
