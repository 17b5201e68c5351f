"""Category endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.auth.dependencies import get_current_user
from taskflow.auth.schemas import MessageResponse
from taskflow.categories.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    category_response,
)
from taskflow.categories.service import (
    create_category,
    delete_category,
    get_category,
    list_categories,
    task_counts_by_category,
    update_category,
)
from taskflow.categories.validation import validate_category_create, validate_category_update
from taskflow.database import get_session
from taskflow.db.models import User
from taskflow.errors import raise_if_errors

router = APIRouter(prefix="/api/categories", tags=["Categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[CategoryResponse]:
    """All of the user's categories, ordered by name, with task counts."""
    categories = await list_categories(db, user.id)
    counts = await task_counts_by_category(db, user.id)
    return [category_response(c, counts.get(c.id)) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category_endpoint(
    category_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CategoryResponse:
    category = await get_category(db, user.id, category_id)
    counts = await task_counts_by_category(db, user.id)
    return category_response(category, counts.get(category.id))


@router.post("", response_model=CategoryResponse)
async def create_category_endpoint(
    body: CategoryCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CategoryResponse:
    raise_if_errors(validate_category_create(body))
    category = await create_category(
        db,
        user.id,
        name=body.name or "",
        color=body.color,
        description=body.description,
    )
    await db.commit()
    return category_response(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category_endpoint(
    category_id: int,
    body: CategoryUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CategoryResponse:
    raise_if_errors(validate_category_update(body))
    category = await update_category(
        db,
        user.id,
        category_id,
        name=body.name,
        color=body.color,
        description=body.description,
    )
    await db.commit()
    counts = await task_counts_by_category(db, user.id)
    return category_response(category, counts.get(category.id))


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category_endpoint(
    category_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    """Delete a category. Fails while any non-deleted task uses it."""
    await delete_category(db, user.id, category_id)
    await db.commit()
    return MessageResponse(message="Category deleted successfully")
