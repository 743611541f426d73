"""Pagination helpers for list endpoints."""

import math

from fastapi import Query
from pydantic import BaseModel
from pydantic.alias_generators import to_snake


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=createdAt&order=desc`.

    ``sort`` is accepted in either camelCase (as the API renders fields) or
    snake_case and is stored snake_case, ready for the repository.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=200, description="Items per page"),
        sort: str = Query(default="createdAt", description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = to_snake(sort)
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def list_kwargs(self) -> dict:
        """Keyword arguments for ``BaseRepository.list``."""
        return {
            "offset": self.offset,
            "limit": self.limit,
            "order_by": self.sort,
            "order": self.order,
        }


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def for_page(cls, total: int, params: PaginationParams) -> "PageMeta":
        return cls(
            total=total,
            page=params.page,
            limit=params.limit,
            pages=math.ceil(total / params.limit) if total else 0,
        )
