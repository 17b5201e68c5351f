"""
Column types and enum mappings used at the persistence boundary.

Enums are stored as lower-case strings. Reading a value that no longer maps
to a member falls back to a per-column default and logs a warning instead of
failing the request.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

import structlog
from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

logger = structlog.get_logger()

E = TypeVar("E", bound=Enum)

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TaskStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    DELETED = "DELETED"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Theme(str, Enum):
    LIGHT = "LIGHT"
    DARK = "DARK"
    AUTO = "AUTO"


def parse_enum(enum_cls: type[E], raw: Any) -> E | None:  # noqa: ANN401
    """Case-insensitive lookup of an enum member by name. Returns None if unknown."""
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        return None
    try:
        return enum_cls[raw.strip().upper()]
    except KeyError:
        return None


def coerce_enum(enum_cls: type[E], raw: Any, default: E, *, source: str = "input") -> E:  # noqa: ANN401
    """Like parse_enum, but falls back to ``default`` and logs the unknown value."""
    member = parse_enum(enum_cls, raw)
    if member is None:
        logger.warning(
            "enum_value_unrecognized",
            enum=enum_cls.__name__,
            value=raw,
            fallback=default.name,
            source=source,
        )
        return default
    return member


# ---------------------------------------------------------------------------
# Column types
# ---------------------------------------------------------------------------


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class UTCDateTime(TypeDecorator[datetime]):
    """Timezone-aware UTC datetimes on every backend, SQLite included."""

    impl = DateTime
    cache_ok = True

    def __init__(self) -> None:
        super().__init__(timezone=True)

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        return ensure_utc(value)


class LowerCaseEnum(TypeDecorator[Enum]):
    """Store an enum as its lower-case name; unknown stored values read back as ``default``."""

    impl = String
    cache_ok = True

    def __init__(self, enum_cls: type[Enum], default: Enum, length: int = 16) -> None:
        super().__init__(length)
        self.enum_cls = enum_cls
        self.default = default

    def process_bind_param(self, value: Any, dialect: Dialect) -> str | None:  # noqa: ANN401
        if value is None:
            return None
        member = parse_enum(self.enum_cls, value)
        if member is None:
            msg = f"{value!r} is not a valid {self.enum_cls.__name__}"
            raise ValueError(msg)
        return member.name.lower()

    def process_result_value(self, value: str | None, dialect: Dialect) -> Enum | None:
        if value is None:
            return None
        return coerce_enum(self.enum_cls, value, self.default, source="database")
