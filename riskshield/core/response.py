"""Standardized JSON response envelopes.

Every endpoint answers ``{"data": ...}`` (plus ``meta`` for lists); errors
use ``{"error": {...}}`` from :mod:`riskshield.core.exceptions`.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from riskshield.core.pagination import PageMeta, PaginationParams

T = TypeVar("T")


class _Envelope(BaseModel):
    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
    }


class DataResponse(_Envelope, Generic[T]):
    """Single-item response envelope: `{ data: {...} }`"""

    data: T


class ListResponse(_Envelope, Generic[T]):
    """Paginated list response envelope: `{ data: [...], meta: {...} }`"""

    data: list[T]
    meta: PageMeta


def paginated(items: list, total: int, params: PaginationParams) -> dict:
    """Build the body of a :class:`ListResponse` for one page of *items*."""
    return {"data": items, "meta": PageMeta.for_page(total, params)}
