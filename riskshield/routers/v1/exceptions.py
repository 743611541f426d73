"""Compliance exception lifecycle endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.config import settings
from riskshield.core.response import DataResponse
from riskshield.db.base import get_db
from riskshield.schemas.common import ErrorResponse
from riskshield.schemas.compliance import ComplianceExceptionOut, ExceptionApproval, ExpireResult
from riskshield.services.exception_service import ComplianceExceptionService

router = APIRouter(
    prefix="/exceptions",
    tags=["Exceptions"],
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)


def _svc(session: AsyncSession) -> ComplianceExceptionService:
    return ComplianceExceptionService(session, settings.default_client_id)


@router.post("/expire", response_model=DataResponse[ExpireResult])
async def expire_overdue(session: AsyncSession = Depends(get_db)):
    """Expire active exceptions past their expiry (run by the scheduler)."""
    expired = await _svc(session).expire_overdue()
    return {"data": ExpireResult(expired=expired)}


@router.get("/{exception_id}", response_model=DataResponse[ComplianceExceptionOut])
async def get_exception(exception_id: str, session: AsyncSession = Depends(get_db)):
    exception = await _svc(session).get_exception(exception_id)
    return {"data": ComplianceExceptionOut.model_validate(exception)}


@router.post("/{exception_id}/approve", response_model=DataResponse[ComplianceExceptionOut])
async def approve_exception(
    exception_id: str,
    body: ExceptionApproval,
    session: AsyncSession = Depends(get_db),
):
    exception = await _svc(session).approve(exception_id, body.approved_by_user_id)
    return {"data": ComplianceExceptionOut.model_validate(exception)}


@router.post("/{exception_id}/close", response_model=DataResponse[ComplianceExceptionOut])
async def close_exception(exception_id: str, session: AsyncSession = Depends(get_db)):
    exception = await _svc(session).close(exception_id)
    return {"data": ComplianceExceptionOut.model_validate(exception)}
