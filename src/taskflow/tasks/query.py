"""Filter and sort translation for the task list endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import case, func, or_
from sqlalchemy.sql.elements import ColumnElement

from taskflow.db.models import Tag, Task
from taskflow.db.types import TaskPriority, TaskStatus

DEFAULT_SORT = "createdAt,desc"

_PRIORITY_RANK = case(
    (Task.priority == TaskPriority.LOW, 0),
    (Task.priority == TaskPriority.MEDIUM, 1),
    else_=2,
)

# wire field name -> sortable SQL expression
SORT_FIELDS: dict[str, Any] = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "dueDate": Task.due_date,
    "title": Task.title,
    "priority": _PRIORITY_RANK,
    "status": Task.status,
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass(frozen=True)
class TaskFilter:
    """
    Combined task list filters. Every provided dimension narrows the result.

    Without an explicit status, DELETED tasks are hidden.
    """

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category_id: int | None = None
    tag_id: int | None = None
    search: str | None = None

    def criteria(self) -> list[ColumnElement[bool]]:
        clauses: list[ColumnElement[bool]] = []
        if self.status is not None:
            clauses.append(Task.status == self.status)
        else:
            clauses.append(Task.status != TaskStatus.DELETED)
        if self.priority is not None:
            clauses.append(Task.priority == self.priority)
        if self.category_id is not None:
            clauses.append(Task.category_id == self.category_id)
        if self.tag_id is not None:
            clauses.append(Task.tags.any(Tag.id == self.tag_id))
        if self.search and self.search.strip():
            pattern = f"%{_escape_like(self.search.strip().lower())}%"
            clauses.append(
                or_(
                    func.lower(Task.title).like(pattern, escape="\\"),
                    func.lower(Task.description).like(pattern, escape="\\"),
                )
            )
        return clauses


def order_by_for(sort: str) -> list[Any]:
    """
    Translate ``field[,asc|desc]`` into ORDER BY clauses.

    Unknown fields fall back to the default sort; callers validate first.
    Ties are broken by id in the same direction so paging is stable.
    """
    field, _, direction = (sort or DEFAULT_SORT).partition(",")
    column = SORT_FIELDS.get(field.strip())
    if column is None:
        column = Task.created_at
        direction = "desc"
    descending = direction.strip().lower() == "desc"

    primary = column.desc() if descending else column.asc()
    if field.strip() == "dueDate":
        primary = primary.nulls_last()
    tie_breaker = Task.id.desc() if descending else Task.id.asc()
    return [primary, tie_breaker]
