"""
Ownership-scoped data access.

Every lookup is parameterized by ``(id, owner_id)``. A row owned by another
user is indistinguishable from a missing row.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError

from taskflow.errors import NotFound

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql.elements import ColumnElement

    from taskflow.errors import TaskflowError

M = TypeVar("M", bound=Any)


@asynccontextmanager
async def unique_guard(db: AsyncSession, conflict: TaskflowError) -> AsyncIterator[None]:
    """
    Write inside a savepoint and turn a unique-constraint violation into ``conflict``.

    Pending changes must be made inside the block: entering it flushes the
    session before the savepoint is opened.
    """
    try:
        async with db.begin_nested():
            yield
            await db.flush()
    except IntegrityError as exc:
        raise conflict from exc


class OwnedRepository(Generic[M]):
    """Repository for a model with ``id`` and ``user_id`` columns."""

    def __init__(self, db: AsyncSession, model: type[M], label: str | None = None) -> None:
        self.db = db
        self.model = model
        self.label = label or model.__name__

    async def find_for_owner(self, entity_id: int, owner_id: int) -> M | None:
        result = await self.db.execute(
            select(self.model).where(self.model.id == entity_id, self.model.user_id == owner_id)
        )
        return result.scalar_one_or_none()

    async def get_for_owner(self, entity_id: int, owner_id: int) -> M:
        """Like find_for_owner but raises NotFound."""
        entity = await self.find_for_owner(entity_id, owner_id)
        if entity is None:
            msg = f"{self.label} not found with id: {entity_id}"
            raise NotFound(msg)
        return entity

    async def list_for_owner(
        self,
        owner_id: int,
        *criteria: ColumnElement[bool],
        order_by: Sequence[Any] = (),
    ) -> list[M]:
        stmt = select(self.model).where(self.model.user_id == owner_id, *criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_by_ids_for_owner(self, ids: Sequence[int], owner_id: int) -> list[M]:
        """Fetch the subset of ``ids`` that belong to ``owner_id``."""
        if not ids:
            return []
        return await self.list_for_owner(owner_id, self.model.id.in_(list(ids)))

    async def count_for_owner(self, owner_id: int, *criteria: ColumnElement[bool]) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(self.model).where(self.model.user_id == owner_id, *criteria)
        )
        return int(result.scalar_one())

    async def exists_by_name_for_owner(self, name: str, owner_id: int, exclude_id: int | None = None) -> bool:
        stmt = select(self.model.id).where(self.model.user_id == owner_id, self.model.name == name)
        if exclude_id is not None:
            stmt = stmt.where(self.model.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.first() is not None

    async def save(self, entity: M) -> M:
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def delete_for_owner(self, entity_id: int, owner_id: int) -> bool:
        """Hard delete. Returns False if nothing matched."""
        result = await self.db.execute(
            delete(self.model).where(self.model.id == entity_id, self.model.user_id == owner_id)
        )
        await self.db.flush()
        return bool(result.rowcount)

    async def delete_all_for_owner(self, owner_id: int) -> int:
        result = await self.db.execute(delete(self.model).where(self.model.user_id == owner_id))
        await self.db.flush()
        return int(result.rowcount or 0)

    async def update_for_owner(self, entity_id: int, owner_id: int, **values: Any) -> bool:  # noqa: ANN401
        """Bulk UPDATE of one row. Returns False if nothing matched."""
        result = await self.db.execute(
            update(self.model).where(self.model.id == entity_id, self.model.user_id == owner_id).values(**values)
        )
        await self.db.flush()
        return bool(result.rowcount)

    async def update_all_for_owner(
        self,
        owner_id: int,
        *criteria: ColumnElement[bool],
        **values: Any,  # noqa: ANN401
    ) -> int:
        result = await self.db.execute(
            update(self.model).where(self.model.user_id == owner_id, *criteria).values(**values)
        )
        await self.db.flush()
        return int(result.rowcount or 0)
