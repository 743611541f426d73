"""Subcontractor CRUD router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.config import settings
from riskshield.core.pagination import PaginationParams
from riskshield.core.response import DataResponse, ListResponse, paginated
from riskshield.db.base import get_db
from riskshield.schemas.subcontractor import SubcontractorCreate, SubcontractorOut, SubcontractorUpdate
from riskshield.services.subcontractor import SubcontractorService

router = APIRouter(prefix="/subcontractors", tags=["Subcontractors"])


def _svc(session: AsyncSession) -> SubcontractorService:
    return SubcontractorService(session, settings.default_client_id)


@router.get("", response_model=ListResponse[SubcontractorOut])
async def list_subcontractors(
    pagination: PaginationParams = Depends(),
    trade: str | None = Query(default=None, description="Only subcontractors of this trade"),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_subcontractors(pagination, trade=trade)
    return paginated([SubcontractorOut.model_validate(s) for s in items], total, pagination)


@router.post("", response_model=DataResponse[SubcontractorOut], status_code=status.HTTP_201_CREATED)
async def create_subcontractor(
    body: SubcontractorCreate,
    session: AsyncSession = Depends(get_db),
):
    subcontractor = await _svc(session).create_subcontractor(body)
    return {"data": SubcontractorOut.model_validate(subcontractor)}


@router.get("/{subcontractor_id}", response_model=DataResponse[SubcontractorOut])
async def get_subcontractor(
    subcontractor_id: str,
    session: AsyncSession = Depends(get_db),
):
    subcontractor = await _svc(session).get_subcontractor(subcontractor_id)
    return {"data": SubcontractorOut.model_validate(subcontractor)}


@router.put("/{subcontractor_id}", response_model=DataResponse[SubcontractorOut])
async def update_subcontractor(
    subcontractor_id: str,
    body: SubcontractorUpdate,
    session: AsyncSession = Depends(get_db),
):
    subcontractor = await _svc(session).update_subcontractor(subcontractor_id, body)
    return {"data": SubcontractorOut.model_validate(subcontractor)}


@router.delete("/{subcontractor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subcontractor(
    subcontractor_id: str,
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_subcontractor(subcontractor_id)
