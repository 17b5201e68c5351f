"""
Domain error kinds.

Services raise these; the global error handler maps each kind to its HTTP
status and a JSON body of the form ``{"detail": ..., "error": ...}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class TaskflowError(Exception):
    """Base class for errors that translate directly into an HTTP response."""

    status_code: int = 400
    kind: str = "invalid"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_content(self) -> dict[str, Any]:
        return {"detail": self.detail, "error": self.kind}


class ValidationFailed(TaskflowError):
    """Request failed field validation. Carries one entry per offending field."""

    status_code = 400
    kind = "validation_failed"

    def __init__(self, errors: list[FieldError]) -> None:
        super().__init__("Validation failed")
        self.errors = errors

    def to_content(self) -> dict[str, Any]:
        content = super().to_content()
        content["errors"] = [{"field": e.field, "message": e.message} for e in self.errors]
        return content


class Invalid(TaskflowError):
    """A business rule rejected the operation (e.g. dependent rows exist)."""

    status_code = 400
    kind = "invalid"


class Unauthorized(TaskflowError):
    status_code = 401
    kind = "unauthorized"


class TokenExpired(TaskflowError):
    status_code = 401
    kind = "token_expired"


class Forbidden(TaskflowError):
    status_code = 403
    kind = "forbidden"


class NotFound(TaskflowError):
    """Row absent, or owned by someone else. The two cases are indistinguishable."""

    status_code = 404
    kind = "not_found"


class Conflict(TaskflowError):
    status_code = 409
    kind = "conflict"


@dataclass(frozen=True, slots=True)
class FieldError:
    """A single field-level validation message."""

    field: str
    message: str


def raise_if_errors(errors: list[FieldError]) -> None:
    """Raise ValidationFailed when a validator produced any field errors."""
    if errors:
        raise ValidationFailed(errors)
