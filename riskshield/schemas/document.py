"""Request/response schemas for document verification endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from riskshield.schemas.common import CamelModel
from riskshield.schemas.compliance import OutcomeResult
from riskshield.schemas.verification import (
    Check,
    CoverageRequirement,
    Deficiency,
    ExtractedPolicyData,
    VerificationResult,
    VerificationStatus,
)


class EvaluateRequest(CamelModel):
    """Stateless evaluation: everything ``verify`` needs, nothing stored."""

    extracted: ExtractedPolicyData
    requirements: list[CoverageRequirement]
    project_end_date: date | None = None
    project_state: str | None = None
    registered_abn: str | None = None
    as_of: date | None = None


class VerificationOut(CamelModel):
    id: str
    coc_document_id: str
    project_id: str
    status: VerificationStatus
    confidence_score: float | None = None
    checks: list[Check]
    deficiencies: list[Deficiency]
    extracted_data: dict[str, Any] | None = None
    verified_by_user_id: str | None = None
    verified_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ProcessDocumentResponse(CamelModel):
    document_id: str
    verification_id: str
    verification: VerificationResult
    outcome: OutcomeResult


class ManualVerifyRequest(CamelModel):
    status: VerificationStatus
    verified_by_user_id: str
