"""Generic async repository with soft-delete, pagination, and tenant isolation."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository. All queries are filtered by client_id.

    Soft-deletes: for models with a `deleted_at` column, rows with
    `deleted_at IS NOT NULL` are excluded from all standard reads.
    Hard-delete is intentionally never exposed.
    """

    model: type[ModelT]
    sortable_columns: tuple[str, ...] = ("created_at",)

    def __init__(self, session: AsyncSession, client_id: str):
        self._session = session
        self._client_id = client_id

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT filtered by client_id and excluding soft-deleted rows."""
        q = select(self.model).where(self.model.client_id == self._client_id)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _scoped_update(self):
        return update(self.model).where(self.model.client_id == self._client_id)

    @property
    def dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def list(
        self,
        *,
        offset: int = 0,
        limit: int = 20,
        order_by: str = "created_at",
        order: str = "desc",
        filters: dict[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return (items, total_count) with pagination and optional equality filters.

        Sorting by a column outside ``sortable_columns`` falls back to ``created_at``.
        """
        q = self._base_query()

        if filters:
            for col_name, value in filters.items():
                if value is not None and hasattr(self.model, col_name):
                    q = q.where(getattr(self.model, col_name) == value)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        if order_by not in self.sortable_columns:
            order_by = "created_at"
        col = getattr(self.model, order_by)
        q = q.order_by(col.desc() if order == "desc" else col.asc())
        q = q.offset(offset).limit(limit)

        items = (await self._session.execute(q)).scalars().all()
        return list(items), total

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(client_id=self._client_id, **kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        kwargs.pop("id", None)
        kwargs.pop("client_id", None)
        if "updated_at" not in kwargs and hasattr(self.model, "updated_at"):
            kwargs["updated_at"] = datetime.now(timezone.utc)

        await self._session.execute(
            self._scoped_update().where(self.model.id == entity_id).values(**kwargs)
        )
        await self._session.flush()
        instance = await self.get_by_id(entity_id)
        if instance is not None:
            await self._session.refresh(instance)
        return instance

    async def update_if_status(
        self, entity_id: str, allowed_from: Iterable[str], **values: Any,
    ) -> bool:
        """Apply *values* only while the row's status is in *allowed_from*.

        The guard runs inside the UPDATE, so a concurrent writer that already
        moved the row elsewhere makes this a no-op (returns ``False``).
        """
        values.setdefault("updated_at", datetime.now(timezone.utc))
        result = await self._session.execute(
            self._scoped_update()
            .where(self.model.id == entity_id)
            .where(self.model.status.in_(list(allowed_from)))
            .values(**values)
        )
        await self._session.flush()
        return result.rowcount > 0

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            self._scoped_update()
            .where(self.model.id == entity_id)
            .where(self.model.deleted_at.is_(None))
            .values(deleted_at=datetime.now(timezone.utc))
        )
        await self._session.flush()
        return result.rowcount > 0
