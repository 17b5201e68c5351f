"""Task endpoints: CRUD, status transitions, bulk operations, export/import."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.config import get_settings
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.db.types import TaskPriority, TaskStatus, parse_enum
from taskflow.errors import Invalid, raise_if_errors
from taskflow.tasks.dates import utcnow
from taskflow.tasks.query import DEFAULT_SORT, TaskFilter
from taskflow.tasks.schemas import (
    BulkOperationRequest,
    BulkOperationResponse,
    ImportItemError,
    ImportResponse,
    StatusUpdate,
    TaskCreate,
    TaskPage,
    TaskResponse,
    TaskUpdate,
    parse_bulk_operation,
    task_response,
)
from taskflow.tasks.service import (
    bulk_operate,
    create_task,
    delete_task,
    export_tasks,
    get_task,
    import_tasks,
    list_tasks,
    set_status,
    total_pages,
    update_task,
)
from taskflow.tasks.validation import (
    validate_bulk_operation,
    validate_list_query,
    validate_status_update,
    validate_task_create,
    validate_task_update,
)

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("", response_model=TaskPage)
async def list_tasks_endpoint(
    status: str | None = Query(None),
    priority: str | None = Query(None),
    category_id: int | None = Query(None, alias="categoryId"),
    tag_id: int | None = Query(None, alias="tagId"),
    search: str | None = Query(None),
    page: int = Query(0),
    size: int | None = Query(None),
    sort: str = Query(DEFAULT_SORT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskPage:
    """Paginated task list. All given filters are combined."""
    size = size if size is not None else get_settings().task_page_size_default
    raise_if_errors(validate_list_query(status, priority, page, size, sort))

    filters = TaskFilter(
        status=parse_enum(TaskStatus, status),
        priority=parse_enum(TaskPriority, priority),
        category_id=category_id,
        tag_id=tag_id,
        search=search,
    )
    tasks, total = await list_tasks(db, user.id, filters, page=page, size=size, sort=sort)
    now = utcnow()
    return TaskPage(
        content=[task_response(t, now) for t in tasks],
        page=page,
        size=size,
        totalElements=total,
        totalPages=total_pages(total, size),
    )


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task_endpoint(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    raise_if_errors(validate_task_create(body))
    task = await create_task(
        db,
        user.id,
        title=body.title or "",
        description=body.description,
        priority=parse_enum(TaskPriority, body.priority),
        due_date=body.dueDate,
        category_id=body.categoryId,
        tag_ids=body.tagIds,
    )
    await db.commit()
    return task_response(task)


@router.post("/bulk", response_model=BulkOperationResponse)
async def bulk_operation_endpoint(
    body: BulkOperationRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BulkOperationResponse:
    """Apply one operation to many tasks. Tasks the caller does not own are skipped."""
    raise_if_errors(validate_bulk_operation(body))
    operation = parse_bulk_operation(body.operation)
    if operation is None:
        msg = f"Unsupported bulk operation: {body.operation}"
        raise Invalid(msg)
    count = await bulk_operate(
        db,
        user.id,
        operation,
        body.taskIds,
        category_id=body.categoryId,
        status=parse_enum(TaskStatus, body.status),
    )
    await db.commit()
    return BulkOperationResponse(operation=operation.value, count=count)


@router.get("/export")
async def export_tasks_endpoint(
    fmt: str = Query("json", alias="format"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Download all non-deleted tasks as a JSON document."""
    body = await export_tasks(db, user.id, fmt)
    return Response(
        content=body,
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="tasks.json"'},
    )


@router.post("/import", response_model=ImportResponse)
async def import_tasks_endpoint(
    items: list[Any],
    fmt: str = Query("json", alias="format"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ImportResponse:
    """Import a JSON array of tasks. Invalid elements are reported, the rest are created."""
    imported, errors = await import_tasks(db, user.id, items, fmt)
    await db.commit()
    return ImportResponse(
        imported=imported,
        errors=[ImportItemError(index=i, message=m) for i, m in errors],
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task_endpoint(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    task = await get_task(db, user.id, task_id)
    return task_response(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task_endpoint(
    task_id: int,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    raise_if_errors(validate_task_update(body))
    task = await update_task(
        db,
        user.id,
        task_id,
        title=body.title,
        description=body.description,
        status=parse_enum(TaskStatus, body.status),
        priority=parse_enum(TaskPriority, body.priority),
        due_date=body.dueDate,
        category_id=body.categoryId,
        tag_ids=body.tagIds,
    )
    await db.commit()
    return task_response(task)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_status_endpoint(
    task_id: int,
    body: StatusUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> TaskResponse:
    raise_if_errors(validate_status_update(body))
    status = parse_enum(TaskStatus, body.status)
    if status is None:
        msg = f"Unsupported status: {body.status}"
        raise Invalid(msg)
    task = await set_status(db, user.id, task_id, status)
    await db.commit()
    return task_response(task)


@router.delete("/{task_id}", status_code=204)
async def delete_task_endpoint(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Soft delete: the task moves to DELETED and drops out of default listings."""
    await delete_task(db, user.id, task_id)
    await db.commit()
    return Response(status_code=204)
