"""Verification endpoints — evaluate, process a document, read and override results.

Rule evaluation lives in :mod:`riskshield.services.verification_engine`;
these handlers only parse requests and shape responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from riskshield.core.config import settings
from riskshield.core.exceptions import extraction_error_body
from riskshield.core.response import DataResponse
from riskshield.db.base import get_db
from riskshield.schemas.common import ErrorResponse
from riskshield.schemas.document import (
    EvaluateRequest,
    ManualVerifyRequest,
    ProcessDocumentResponse,
    VerificationOut,
)
from riskshield.schemas.verification import (
    ExtractedPolicyData,
    ExtractionFailure,
    VerificationResult,
)
from riskshield.services.document_verification import DocumentVerificationService
from riskshield.services.verification_engine import verify
from riskshield.services.verification_records import VerificationRecordService

router = APIRouter(
    tags=["Verifications"],
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)


@router.post("/verifications/evaluate", response_model=DataResponse[VerificationResult])
async def evaluate(body: EvaluateRequest):
    """Run the rules against posted data without storing anything."""
    result = verify(
        body.extracted,
        body.requirements,
        project_end_date=body.project_end_date,
        project_state=body.project_state,
        now=body.as_of,
        registered_abn=body.registered_abn,
        review_confidence_threshold=settings.review_confidence_threshold,
        expiry_warning_days=settings.expiry_warning_days,
    )
    return {"data": result}


@router.post(
    "/documents/{document_id}/verification",
    response_model=DataResponse[ProcessDocumentResponse],
)
async def process_document(
    document_id: str,
    body: ExtractedPolicyData,
    session: AsyncSession = Depends(get_db),
):
    """Verify extracted certificate data for a document and apply the outcome."""
    svc = DocumentVerificationService(session, settings.default_client_id)
    processed = await svc.process(document_id, body)
    return {
        "data": ProcessDocumentResponse(
            document_id=processed.document_id,
            verification_id=processed.verification_id,
            verification=processed.result,
            outcome=processed.outcome,
        )
    }


@router.post(
    "/documents/{document_id}/extraction-failure",
    status_code=422,
    response_model=ErrorResponse,
)
async def record_extraction_failure(
    document_id: str,
    body: ExtractionFailure,
    session: AsyncSession = Depends(get_db),
):
    svc = DocumentVerificationService(session, settings.default_client_id)
    error = await svc.record_extraction_failure(document_id, body)
    return JSONResponse(status_code=error.status_code, content=extraction_error_body(error))


@router.get("/documents/{document_id}/verification", response_model=DataResponse[VerificationOut])
async def get_document_verification(
    document_id: str,
    session: AsyncSession = Depends(get_db),
):
    svc = VerificationRecordService(session, settings.default_client_id)
    verification = await svc.get_for_document(document_id)
    return {"data": VerificationOut.model_validate(verification)}


@router.patch("/verifications/{verification_id}", response_model=DataResponse[VerificationOut])
async def manual_verify(
    verification_id: str,
    body: ManualVerifyRequest,
    session: AsyncSession = Depends(get_db),
):
    """Override the engine's status after manual review."""
    svc = VerificationRecordService(session, settings.default_client_id)
    verification = await svc.manual_verify(verification_id, body.status, body.verified_by_user_id)
    return {"data": VerificationOut.model_validate(verification)}
